from dataclasses import dataclass

from sqlalchemy.orm import Session

from core.context import SessionContext
from core.database import get_db_context
from core.time_utils import today
from models import Appointment, MedicalRecord, Patient
from services import policy
from services.appointment_service import list_appointments
from services.rows import AppointmentRow

RECENT_LIMIT = 5


@dataclass(frozen=True)
class DashboardStats:
    total_patients: int = 0
    total_appointments: int = 0
    today_appointments: int = 0
    total_records: int = 0


def get_stats(ctx: SessionContext, db: Session | None = None) -> DashboardStats:
    """Counts over the rows the caller can see; patient totals are admin-only."""
    if db is None:
        with get_db_context() as _db:
            return get_stats(ctx, db=_db)

    appts = policy.scoped_query(db, ctx, Appointment)
    return DashboardStats(
        total_patients=policy.scoped_query(db, ctx, Patient).count() if ctx.is_admin else 0,
        total_appointments=appts.count(),
        today_appointments=appts.filter(Appointment.appointment_date == today()).count(),
        total_records=policy.scoped_query(db, ctx, MedicalRecord).count(),
    )


def recent_appointments(ctx: SessionContext, db: Session | None = None, limit: int = RECENT_LIMIT) -> list[AppointmentRow]:
    return list_appointments(ctx, db=db, limit=limit)
