import logging

from sqlalchemy.orm import Session

from core.context import SessionContext
from core.database import get_db_context
from core.exceptions import NotFoundError, ValidationError
from models import Profile
from services import policy
from services.doctor_service import clean_doctor_fields, writable_doctor
from services.patient_service import clean_patient_fields, writable_patient
from services.store import commit

LOGGER = logging.getLogger(__name__)


def get_own_profile(ctx: SessionContext, db: Session | None = None) -> Profile:
    if db is None:
        with get_db_context() as _db:
            return get_own_profile(ctx, db=_db)

    profile = policy.scoped_query(db, ctx, Profile).filter(Profile.id == ctx.profile_id).first()
    if not profile:
        raise NotFoundError("Profile not found.")
    return profile


def _writable_profile(ctx: SessionContext, db: Session) -> Profile:
    profile = db.query(Profile).filter(Profile.id == ctx.profile_id).first()
    if not profile:
        raise NotFoundError("Profile not found.")
    policy.ensure_can_write(ctx, profile, db=db)
    return profile


def _clean_name(full_name: str | None) -> str | None:
    if full_name is None:
        return None
    if not full_name.strip():
        raise ValidationError("Full name cannot be empty.")
    return full_name.strip()


def update_profile(ctx: SessionContext, *, full_name: str | None = None, phone: str | None = None, db: Session | None = None) -> SessionContext:
    """Update the caller's display data; returns the refreshed context.

    The role is never editable here.
    """
    return update_my_details(ctx, full_name=full_name, phone=phone, db=db)


def update_my_details(
    ctx: SessionContext,
    *,
    full_name: str | None = None,
    phone: str | None = None,
    patient_fields: dict | None = None,
    doctor_fields: dict | None = None,
    db: Session | None = None,
) -> SessionContext:
    """Save the dashboard details form in one commit.

    Every field is validated before anything is written, so either the
    profile and the caller's patient/doctor row all change or none do.
    """
    if db is None:
        with get_db_context() as _db:
            return update_my_details(
                ctx, full_name=full_name, phone=phone,
                patient_fields=patient_fields, doctor_fields=doctor_fields, db=_db,
            )

    name = _clean_name(full_name)
    patient_clean = clean_patient_fields(patient_fields) if patient_fields else {}
    doctor_clean = clean_doctor_fields(doctor_fields) if doctor_fields else {}

    profile_values = {}
    if name:
        profile_values["full_name"] = name
    if phone is not None:
        profile_values["phone"] = phone.strip() or None

    profile = _writable_profile(ctx, db)
    targets = [(profile, profile_values)]
    if patient_clean:
        if not ctx.patient_id:
            raise NotFoundError("Your patient record was not found.")
        targets.append((writable_patient(ctx, ctx.patient_id, db), patient_clean))
    if doctor_clean:
        if not ctx.doctor_id:
            raise NotFoundError("Doctor profile not found")
        targets.append((writable_doctor(ctx, ctx.doctor_id, db), doctor_clean))

    for row, values in targets:
        for key, value in values.items():
            setattr(row, key, value)

    commit(db, "your details")
    LOGGER.info("Details updated for %s", ctx.email)
    return ctx.with_profile(profile.full_name)
