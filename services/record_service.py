import logging
from datetime import date

from sqlalchemy.orm import Session, aliased

from core.context import SessionContext
from core.database import get_db_context
from core.exceptions import AccessDenied, NotFoundError, ValidationError
from core.time_utils import today
from models import Appointment, Doctor, MedicalRecord, Patient, Profile
from services import policy
from services.filters import matches_search
from services.rows import RecordRow
from services.store import commit

LOGGER = logging.getLogger(__name__)

CLINICAL_FIELDS = ("diagnosis", "symptoms", "treatment", "medications", "lab_results", "notes")

PatientProfile = aliased(Profile, name="patient_profile")
DoctorProfile = aliased(Profile, name="doctor_profile")


def _joined(db: Session, ctx: SessionContext):
    return (
        policy.scoped_query(db, ctx, MedicalRecord, PatientProfile.full_name, DoctorProfile.full_name, Doctor.specialization)
        .join(Patient, MedicalRecord.patient_id == Patient.id)
        .join(PatientProfile, Patient.profile_id == PatientProfile.id)
        .join(Doctor, MedicalRecord.doctor_id == Doctor.id)
        .join(DoctorProfile, Doctor.profile_id == DoctorProfile.id)
    )


def _to_row(rec: MedicalRecord, patient_name: str, doctor_name: str, specialization: str) -> RecordRow:
    return RecordRow(
        id=rec.id,
        patient_id=rec.patient_id,
        doctor_id=rec.doctor_id,
        appointment_id=rec.appointment_id,
        patient_name=patient_name,
        doctor_name=doctor_name,
        specialization=specialization,
        record_date=rec.record_date,
        diagnosis=rec.diagnosis,
        symptoms=rec.symptoms,
        treatment=rec.treatment,
        medications=rec.medications,
        lab_results=rec.lab_results,
        notes=rec.notes,
    )


def list_records(ctx: SessionContext, db: Session | None = None) -> list[RecordRow]:
    """Medical records visible to the caller, most recent first."""
    if db is None:
        with get_db_context() as _db:
            return list_records(ctx, db=_db)

    q = _joined(db, ctx).order_by(MedicalRecord.record_date.desc(), MedicalRecord.created_at.desc())
    return [_to_row(*r) for r in q.all()]


def get_record(ctx: SessionContext, record_id: str, db: Session | None = None) -> RecordRow:
    if db is None:
        with get_db_context() as _db:
            return get_record(ctx, record_id, db=_db)

    found = _joined(db, ctx).filter(MedicalRecord.id == record_id).first()
    if not found:
        raise NotFoundError("Medical record not found.")
    return _to_row(*found)


def filter_records(rows: list[RecordRow], term: str) -> list[RecordRow]:
    return [r for r in rows if matches_search(term, r.patient_name, r.diagnosis, r.symptoms)]


def create_record(
    ctx: SessionContext,
    *,
    patient_id: str,
    appointment_id: str | None = None,
    record_date: date | None = None,
    db: Session | None = None,
    **clinical,
) -> RecordRow:
    """A doctor writes a record for a patient they have treated."""
    if db is None:
        with get_db_context() as _db:
            return create_record(
                ctx, patient_id=patient_id, appointment_id=appointment_id,
                record_date=record_date, db=_db, **clinical,
            )

    if not ctx.is_doctor:
        raise AccessDenied("Only doctors can create medical records.")
    if not ctx.doctor_id:
        raise NotFoundError("Doctor profile not found")

    unknown = set(clinical) - set(CLINICAL_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown record field(s): {', '.join(sorted(unknown))}")
    if not patient_id:
        raise ValidationError("Please select a patient.")

    if appointment_id:
        appt = (
            policy.scoped_query(db, ctx, Appointment)
            .filter(Appointment.id == appointment_id)
            .first()
        )
        if not appt or appt.patient_id != patient_id:
            raise ValidationError("The selected appointment does not belong to this patient.")
        if appt.status != "completed":
            raise ValidationError("Records can only be linked to completed appointments.")

    record = MedicalRecord(
        patient_id=patient_id,
        doctor_id=ctx.doctor_id,
        appointment_id=appointment_id or None,
        record_date=record_date or today(),
        **{k: ((v or "").strip() or None) for k, v in clinical.items()},
    )
    policy.ensure_can_write(ctx, record, db=db)

    db.add(record)
    commit(db, "medical record")
    LOGGER.info("Medical record %s created by %s", record.id, ctx.email)
    return get_record(ctx, record.id, db=db)
