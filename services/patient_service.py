import logging

from sqlalchemy.orm import Session

from core.context import SessionContext
from core.database import get_db_context
from core.exceptions import AccessDenied, NotFoundError, ProvisioningNotSupported, ValidationError
from models import GENDERS, Patient, Profile
from services import policy
from services.filters import matches_search
from services.rows import Option, PatientRow
from services.store import commit

LOGGER = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "date_of_birth",
    "gender",
    "address",
    "emergency_contact_name",
    "emergency_contact_phone",
    "insurance_info",
)


def _to_row(patient: Patient, profile: Profile) -> PatientRow:
    return PatientRow(
        id=patient.id,
        profile_id=profile.id,
        full_name=profile.full_name,
        email=profile.email,
        phone=profile.phone,
        date_of_birth=patient.date_of_birth,
        gender=patient.gender,
        address=patient.address,
        emergency_contact_name=patient.emergency_contact_name,
        emergency_contact_phone=patient.emergency_contact_phone,
        insurance_info=patient.insurance_info,
        created_at=patient.created_at,
    )


# ------------------------------------------
# Fetch patients visible to the caller
# ------------------------------------------
def list_patients(ctx: SessionContext, db: Session | None = None) -> list[PatientRow]:
    if db is None:
        with get_db_context() as _db:
            return list_patients(ctx, db=_db)

    rows = (
        policy.scoped_query(db, ctx, Patient, Profile)
        .join(Profile, Patient.profile_id == Profile.id)
        .order_by(Patient.created_at.desc())
        .all()
    )
    return [_to_row(p, prof) for p, prof in rows]


def get_patient(ctx: SessionContext, patient_id: str, db: Session | None = None) -> PatientRow:
    if db is None:
        with get_db_context() as _db:
            return get_patient(ctx, patient_id, db=_db)

    found = (
        policy.scoped_query(db, ctx, Patient, Profile)
        .join(Profile, Patient.profile_id == Profile.id)
        .filter(Patient.id == patient_id)
        .first()
    )
    if not found:
        raise NotFoundError("Patient not found.")
    return _to_row(*found)


def filter_patients(rows: list[PatientRow], term: str) -> list[PatientRow]:
    return [r for r in rows if matches_search(term, r.full_name, r.email)]


def patient_options(ctx: SessionContext, db: Session | None = None) -> list[Option]:
    """Patients the caller may pick in a form, labelled by name."""
    return [Option(r.id, r.full_name) for r in sorted(list_patients(ctx, db=db), key=lambda r: r.full_name.lower())]


# ------------------------------------------
# Update the caller's own patient row
# ------------------------------------------
def clean_patient_fields(fields: dict) -> dict:
    """Validate an edit of the patient row; blank strings become None."""
    unknown = set(fields) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown patient field(s): {', '.join(sorted(unknown))}")

    clean = {}
    for key, value in fields.items():
        if isinstance(value, str):
            value = value.strip() or None
        if key == "gender" and value is not None and value not in GENDERS:
            raise ValidationError("Gender must be male, female or other.")
        clean[key] = value
    return clean


def writable_patient(ctx: SessionContext, patient_id: str, db: Session) -> Patient:
    patient = db.query(Patient).filter(Patient.id == patient_id).first()
    if not patient or not policy.can_read(ctx, patient):
        raise NotFoundError("Patient not found.")
    policy.ensure_can_write(ctx, patient, db=db)
    return patient


def update_patient(ctx: SessionContext, patient_id: str, db: Session | None = None, **fields) -> PatientRow:
    if db is None:
        with get_db_context() as _db:
            return update_patient(ctx, patient_id, db=_db, **fields)

    clean = clean_patient_fields(fields)
    patient = writable_patient(ctx, patient_id, db)

    for key, value in clean.items():
        setattr(patient, key, value)

    commit(db, "patient")
    LOGGER.info("Patient %s updated by %s", patient.id, ctx.email)
    db.refresh(patient)
    return _to_row(patient, patient.profile)


# ------------------------------------------
# Directory creation (admin only, not provided)
# ------------------------------------------
def register_patient(ctx: SessionContext, **form):
    if not policy.can_provision_directory(ctx):
        raise AccessDenied("Only administrators can add patients.")
    raise ProvisioningNotSupported(
        "Patient registration requires proper user creation flow. "
        "Please use the authentication system to create new users."
    )
