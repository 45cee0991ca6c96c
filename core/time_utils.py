from datetime import date, datetime, timedelta, timezone


def now_utc() -> datetime:
    """Return a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def today() -> date:
    return date.today()


def hours_from_now(hours: int) -> datetime:
    return now_utc() + timedelta(hours=hours)


def as_utc(dt: datetime) -> datetime:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt
