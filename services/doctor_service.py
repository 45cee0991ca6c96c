import logging

from sqlalchemy.orm import Session

from core.context import SessionContext
from core.database import get_db_context
from core.exceptions import AccessDenied, NotFoundError, ProvisioningNotSupported, ValidationError
from models import Doctor, Profile
from services import policy
from services.filters import matches_search
from services.rows import DoctorRow, Option
from services.store import commit

LOGGER = logging.getLogger(__name__)

EDITABLE_FIELDS = ("specialization", "license_number", "department", "years_experience", "bio")
REQUIRED_FIELDS = ("specialization", "license_number")


def _to_row(doctor: Doctor, profile: Profile) -> DoctorRow:
    return DoctorRow(
        id=doctor.id,
        profile_id=profile.id,
        full_name=profile.full_name,
        email=profile.email,
        phone=profile.phone,
        specialization=doctor.specialization,
        license_number=doctor.license_number,
        department=doctor.department,
        years_experience=doctor.years_experience,
        bio=doctor.bio,
        created_at=doctor.created_at,
    )


def list_doctors(ctx: SessionContext, db: Session | None = None) -> list[DoctorRow]:
    """Doctor directory, newest first."""
    if db is None:
        with get_db_context() as _db:
            return list_doctors(ctx, db=_db)

    rows = (
        policy.scoped_query(db, ctx, Doctor, Profile)
        .join(Profile, Doctor.profile_id == Profile.id)
        .order_by(Doctor.created_at.desc())
        .all()
    )
    return [_to_row(d, prof) for d, prof in rows]


def get_doctor(ctx: SessionContext, doctor_id: str, db: Session | None = None) -> DoctorRow:
    if db is None:
        with get_db_context() as _db:
            return get_doctor(ctx, doctor_id, db=_db)

    found = (
        policy.scoped_query(db, ctx, Doctor, Profile)
        .join(Profile, Doctor.profile_id == Profile.id)
        .filter(Doctor.id == doctor_id)
        .first()
    )
    if not found:
        raise NotFoundError("Doctor not found.")
    return _to_row(*found)


def filter_doctors(rows: list[DoctorRow], term: str) -> list[DoctorRow]:
    return [r for r in rows if matches_search(term, r.full_name, r.specialization, r.department)]


def doctor_options(ctx: SessionContext, db: Session | None = None) -> list[Option]:
    return [
        Option(r.id, f"Dr. {r.full_name} - {r.specialization}")
        for r in sorted(list_doctors(ctx, db=db), key=lambda r: r.full_name.lower())
    ]


def writable_doctor(ctx: SessionContext, doctor_id: str, db: Session) -> Doctor:
    doctor = db.query(Doctor).filter(Doctor.id == doctor_id).first()
    if not doctor:
        raise NotFoundError("Doctor not found.")
    policy.ensure_can_write(ctx, doctor, db=db)
    return doctor


def clean_doctor_fields(fields: dict) -> dict:
    """Validate an edit of the doctor row before anything is written."""
    unknown = set(fields) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown doctor field(s): {', '.join(sorted(unknown))}")

    clean = {}
    for key, value in fields.items():
        if isinstance(value, str):
            value = value.strip() or None
        if key in REQUIRED_FIELDS and not value:
            raise ValidationError(f"{key.replace('_', ' ').capitalize()} is required.")
        if key == "years_experience" and value is not None:
            try:
                value = int(value)
            except (TypeError, ValueError):
                raise ValidationError("Years of experience must be a whole number.")
            if value < 0:
                raise ValidationError("Years of experience cannot be negative.")
        clean[key] = value
    return clean


def update_doctor(ctx: SessionContext, doctor_id: str, db: Session | None = None, **fields) -> DoctorRow:
    """Doctors edit their own directory entry."""
    if db is None:
        with get_db_context() as _db:
            return update_doctor(ctx, doctor_id, db=_db, **fields)

    clean = clean_doctor_fields(fields)
    doctor = writable_doctor(ctx, doctor_id, db)

    for key, value in clean.items():
        setattr(doctor, key, value)

    commit(db, "doctor")
    LOGGER.info("Doctor %s updated by %s", doctor.id, ctx.email)
    db.refresh(doctor)
    return _to_row(doctor, doctor.profile)


def register_doctor(ctx: SessionContext, **form):
    if not policy.can_provision_directory(ctx):
        raise AccessDenied("Only administrators can add doctors.")
    raise ProvisioningNotSupported(
        "Doctor registration requires proper user creation flow. "
        "Please use the authentication system to create new doctor accounts."
    )
