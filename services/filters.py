"""Client-side list filters shared by the list pages."""

STATUS_ALL = "all"


def matches_search(term: str | None, *fields) -> bool:
    """Case-insensitive substring match of ``term`` against any of ``fields``.

    A blank term matches everything; ``None`` fields never match.
    """
    q = (term or "").strip().lower()
    if not q:
        return True
    return any(q in str(f).lower() for f in fields if f is not None)


def matches_status(status: str | None, wanted: str | None) -> bool:
    if not wanted or wanted == STATUS_ALL:
        return True
    return status == wanted
