import logging
from datetime import date, time

from sqlalchemy.orm import Session, aliased

from core.context import SessionContext
from core.database import get_db_context
from core.exceptions import NotFoundError, ValidationError
from core.time_utils import today
from models import STATUSES, Appointment, Doctor, Patient, Profile
from services import policy
from services.filters import matches_search, matches_status
from services.rows import AppointmentRow, Option
from services.store import commit

LOGGER = logging.getLogger(__name__)

DURATIONS = (15, 30, 45, 60)
DEFAULT_DURATION = 30

# Only scheduled appointments move, and only to a final state.
TRANSITIONS = {
    "scheduled": {"completed", "cancelled"},
}

PatientProfile = aliased(Profile, name="patient_profile")
DoctorProfile = aliased(Profile, name="doctor_profile")


def _joined(db: Session, ctx: SessionContext):
    """Appointments visible to ``ctx`` with patient and doctor display data."""
    return (
        policy.scoped_query(db, ctx, Appointment, PatientProfile.full_name, DoctorProfile.full_name, Doctor.specialization)
        .join(Patient, Appointment.patient_id == Patient.id)
        .join(PatientProfile, Patient.profile_id == PatientProfile.id)
        .join(Doctor, Appointment.doctor_id == Doctor.id)
        .join(DoctorProfile, Doctor.profile_id == DoctorProfile.id)
    )


def _to_row(appt: Appointment, patient_name: str, doctor_name: str, specialization: str) -> AppointmentRow:
    return AppointmentRow(
        id=appt.id,
        patient_id=appt.patient_id,
        doctor_id=appt.doctor_id,
        patient_name=patient_name,
        doctor_name=doctor_name,
        specialization=specialization,
        appointment_date=appt.appointment_date,
        appointment_time=appt.appointment_time,
        duration_minutes=appt.duration_minutes,
        status=appt.status,
        reason=appt.reason,
        notes=appt.notes,
    )


# ------------------------------------------
# Fetch appointments, earliest first
# ------------------------------------------
def list_appointments(ctx: SessionContext, db: Session | None = None, limit: int | None = None) -> list[AppointmentRow]:
    if db is None:
        with get_db_context() as _db:
            return list_appointments(ctx, db=_db, limit=limit)

    q = _joined(db, ctx).order_by(Appointment.appointment_date.asc(), Appointment.appointment_time.asc())
    if limit:
        q = q.limit(limit)
    return [_to_row(*r) for r in q.all()]


def get_appointment(ctx: SessionContext, appointment_id: str, db: Session | None = None) -> AppointmentRow:
    if db is None:
        with get_db_context() as _db:
            return get_appointment(ctx, appointment_id, db=_db)

    found = _joined(db, ctx).filter(Appointment.id == appointment_id).first()
    if not found:
        raise NotFoundError("Appointment not found.")
    return _to_row(*found)


def filter_appointments(rows: list[AppointmentRow], term: str = "", status: str = "all") -> list[AppointmentRow]:
    return [
        r for r in rows
        if matches_search(term, r.patient_name, r.doctor_name, r.reason) and matches_status(r.status, status)
    ]


def completed_appointments(ctx: SessionContext, db: Session | None = None) -> list[Option]:
    """The caller's completed appointments, newest first, for linking a medical record."""
    rows = [r for r in list_appointments(ctx, db=db) if r.status == "completed"]
    rows.sort(key=lambda r: (r.appointment_date, r.appointment_time), reverse=True)
    return [Option(r.id, f"{r.appointment_date:%Y-%m-%d} {r.appointment_time:%H:%M} - {r.patient_name}") for r in rows]


def treated_patients(ctx: SessionContext, db: Session | None = None) -> list[Option]:
    """Distinct patients that appear in the caller's appointments."""
    seen: dict[str, str] = {}
    for r in list_appointments(ctx, db=db):
        seen.setdefault(r.patient_id, r.patient_name)
    return [Option(pid, name) for pid, name in sorted(seen.items(), key=lambda kv: kv[1].lower())]


# ------------------------------------------
# Create an appointment
# ------------------------------------------
def create_appointment(
    ctx: SessionContext,
    *,
    doctor_id: str,
    appointment_date: date,
    appointment_time: time,
    patient_id: str | None = None,
    duration_minutes: int = DEFAULT_DURATION,
    reason: str | None = None,
    notes: str | None = None,
    status: str | None = None,
    db: Session | None = None,
) -> AppointmentRow:
    if db is None:
        with get_db_context() as _db:
            return create_appointment(
                ctx, doctor_id=doctor_id, appointment_date=appointment_date,
                appointment_time=appointment_time, patient_id=patient_id,
                duration_minutes=duration_minutes, reason=reason, notes=notes,
                status=status, db=_db,
            )

    # Patients always book for themselves
    if ctx.is_patient:
        if not ctx.patient_id:
            raise NotFoundError("Your patient record was not found.")
        patient_id = ctx.patient_id

    if not patient_id:
        raise ValidationError("Please select a patient.")
    if not doctor_id:
        raise ValidationError("Please select a doctor.")
    if appointment_date is None or appointment_time is None:
        raise ValidationError("Date and time are required.")
    if appointment_date < today():
        raise ValidationError("Appointments cannot be booked in the past.")

    if duration_minutes is None:
        duration_minutes = DEFAULT_DURATION
    if duration_minutes not in DURATIONS:
        raise ValidationError("Duration must be 15, 30, 45 or 60 minutes.")

    status = status or "scheduled"
    if status not in STATUSES:
        raise ValidationError(f"Unknown appointment status: {status}")

    if not db.query(Patient).filter(Patient.id == patient_id).first():
        raise NotFoundError("Patient not found.")
    if not db.query(Doctor).filter(Doctor.id == doctor_id).first():
        raise NotFoundError("Doctor not found.")

    appt = Appointment(
        patient_id=patient_id,
        doctor_id=doctor_id,
        appointment_date=appointment_date,
        appointment_time=appointment_time,
        duration_minutes=duration_minutes,
        status=status,
        reason=(reason or "").strip() or None,
        notes=(notes or "").strip() or None,
    )
    policy.ensure_can_write(ctx, appt, db=db)

    db.add(appt)
    commit(db, "appointment")
    LOGGER.info("Appointment %s created by %s for %s", appt.id, ctx.email, appointment_date)
    return get_appointment(ctx, appt.id, db=db)


# ------------------------------------------
# Status transitions
# ------------------------------------------
def allowed_transitions(status: str) -> set[str]:
    return TRANSITIONS.get(status, set())


def update_status(ctx: SessionContext, appointment_id: str, new_status: str, db: Session | None = None) -> AppointmentRow:
    if db is None:
        with get_db_context() as _db:
            return update_status(ctx, appointment_id, new_status, db=_db)

    appt = policy.scoped_query(db, ctx, Appointment).filter(Appointment.id == appointment_id).first()
    if not appt:
        raise NotFoundError("Appointment not found.")
    policy.ensure_can_write(ctx, appt, db=db)

    if new_status not in allowed_transitions(appt.status):
        raise ValidationError(f"Cannot change a {appt.status} appointment to {new_status}.")

    appt.status = new_status
    commit(db, "appointment")
    LOGGER.info("Appointment %s marked %s by %s", appt.id, new_status, ctx.email)
    return get_appointment(ctx, appt.id, db=db)
