"""
Row-level access policy.

Every read in the services layer starts from :func:`scoped_query`, which
adds the caller's visibility predicate to the query, and every write goes
through :func:`ensure_can_write`.  Keeping both here means a page cannot
reach a row the policy hides by shaping a different query.

Read visibility::

    table            patient             doctor              admin
    profiles         own                 own                 all
    patients         own row             all                 all
    doctors          all                 all                 all
    appointments     own patient_id      own doctor_id       all
    medical_records  own patient_id      own doctor_id       all
"""
import logging

from sqlalchemy import exists, false, true
from sqlalchemy.orm import Session

from core.context import SessionContext
from core.exceptions import AccessDenied
from models import Appointment, Doctor, MedicalRecord, Patient, Profile

LOGGER = logging.getLogger(__name__)


# ------------------------------------------
# Read predicates
# ------------------------------------------
def _own_or_nothing(column, own_id):
    return column == own_id if own_id else false()


def visibility(ctx: SessionContext, model):
    """SQL predicate selecting the rows of ``model`` that ``ctx`` may read."""
    if ctx.is_admin:
        return true()

    if model is Profile:
        return Profile.user_id == ctx.user_id

    if model is Patient:
        if ctx.is_doctor:
            return true()
        return Patient.profile_id == ctx.profile_id

    if model is Doctor:
        # Public directory
        return true()

    if model in (Appointment, MedicalRecord):
        if ctx.is_doctor:
            return _own_or_nothing(model.doctor_id, ctx.doctor_id)
        if ctx.is_patient:
            return _own_or_nothing(model.patient_id, ctx.patient_id)
        return false()

    raise ValueError(f"No read policy for {model.__name__}")


def scoped_query(db: Session, ctx: SessionContext, model, *entities):
    """``db.query(model, *entities)`` restricted to rows ``ctx`` may read."""
    return db.query(model, *entities).filter(visibility(ctx, model))


def can_read(ctx: SessionContext, row) -> bool:
    if ctx.is_admin:
        return True
    if isinstance(row, Profile):
        return row.user_id == ctx.user_id
    if isinstance(row, Patient):
        return ctx.is_doctor or row.profile_id == ctx.profile_id
    if isinstance(row, Doctor):
        return True
    if isinstance(row, (Appointment, MedicalRecord)):
        if ctx.is_doctor:
            return bool(ctx.doctor_id) and row.doctor_id == ctx.doctor_id
        if ctx.is_patient:
            return bool(ctx.patient_id) and row.patient_id == ctx.patient_id
    return False


# ------------------------------------------
# Write predicates
# ------------------------------------------
def has_treated(db: Session, doctor_id: str, patient_id: str) -> bool:
    """True when the patient has at least one appointment with the doctor."""
    return db.query(
        exists().where(Appointment.doctor_id == doctor_id).where(Appointment.patient_id == patient_id)
    ).scalar()


def can_write(ctx: SessionContext, row, db: Session | None = None) -> bool:
    """Whether ``ctx`` may insert or update ``row`` (already populated with its keys)."""
    if isinstance(row, Profile):
        return row.user_id == ctx.user_id

    if isinstance(row, Patient):
        return ctx.is_patient and row.profile_id == ctx.profile_id

    if isinstance(row, Doctor):
        return ctx.is_doctor and row.profile_id == ctx.profile_id

    if isinstance(row, Appointment):
        if ctx.is_admin:
            return True
        if ctx.is_doctor:
            return bool(ctx.doctor_id) and row.doctor_id == ctx.doctor_id
        if ctx.is_patient:
            return bool(ctx.patient_id) and row.patient_id == ctx.patient_id
        return False

    if isinstance(row, MedicalRecord):
        if not (ctx.is_doctor and ctx.doctor_id and row.doctor_id == ctx.doctor_id):
            return False
        if db is None:
            return False
        return has_treated(db, ctx.doctor_id, row.patient_id)

    return False


def ensure_can_write(ctx: SessionContext, row, db: Session | None = None):
    if not can_write(ctx, row, db=db):
        LOGGER.warning("Write denied: %s (%s) on %r", ctx.email, ctx.role, row)
        raise AccessDenied(f"You are not allowed to modify this {type(row).__name__.lower()}.")


def can_provision_directory(ctx: SessionContext) -> bool:
    """Only admins may create patient/doctor directory entries."""
    return ctx.is_admin
