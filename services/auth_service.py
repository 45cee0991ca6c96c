"""
Identity/session provider: email + password accounts, server-side sessions
and the sign-up hook that creates the caller's profile.
"""
import logging
import re
import secrets

from sqlalchemy.orm import Session

from core.auth import hash_password, verify_password
from core.config import SESSION_TTL_HOURS
from core.context import SessionContext
from core.database import get_db_context
from core.exceptions import AuthenticationError, ValidationError
from core.time_utils import as_utc, hours_from_now, now_utc
from models import AuthSession, Doctor, Patient, Profile, ROLES, User

LOGGER = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def build_context(db: Session, user: User, token: str) -> SessionContext:
    """Resolve identity → profile → own directory rows."""
    profile = db.query(Profile).filter(Profile.user_id == user.id).first()
    if profile is None:
        raise AuthenticationError("No profile exists for this account.")

    patient = db.query(Patient).filter(Patient.profile_id == profile.id).first()
    doctor = db.query(Doctor).filter(Doctor.profile_id == profile.id).first()

    return SessionContext(
        token=token,
        user_id=user.id,
        profile_id=profile.id,
        role=profile.role,
        full_name=profile.full_name,
        email=profile.email,
        patient_id=patient.id if patient else None,
        doctor_id=doctor.id if doctor else None,
    )


def _purge_expired(db: Session):
    purged = db.query(AuthSession).filter(AuthSession.expires_at <= now_utc()).delete(synchronize_session=False)
    if purged:
        LOGGER.info("Purged %d expired session(s)", purged)


def _open_session(db: Session, user: User) -> str:
    _purge_expired(db)
    token = secrets.token_urlsafe(32)
    db.add(AuthSession(token=token, user_id=user.id, created_at=now_utc(), expires_at=hours_from_now(SESSION_TTL_HOURS)))
    db.commit()
    return token


# ------------------------------------------
# Sign up (creates identity + profile + directory row)
# ------------------------------------------
def sign_up(
    email: str,
    password: str,
    full_name: str | None = None,
    role: str = "patient",
    *,
    phone: str | None = None,
    specialization: str | None = None,
    license_number: str | None = None,
    department: str | None = None,
    db: Session | None = None,
) -> User:
    if db is None:
        with get_db_context() as _db:
            return sign_up(
                email, password, full_name, role,
                phone=phone, specialization=specialization,
                license_number=license_number, department=department, db=_db,
            )

    email = _normalize_email(email)
    if not EMAIL_PATTERN.fullmatch(email):
        raise ValidationError("Please enter a valid email address.")
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")

    role = (role or "patient").strip().lower()
    if role not in ROLES:
        raise ValidationError("Invalid role. Expected patient, doctor, or admin.")

    if role == "doctor" and not ((specialization or "").strip() and (license_number or "").strip()):
        raise ValidationError("Doctors must provide a specialization and license number.")

    if db.query(User).filter(User.email == email).first():
        raise ValidationError("An account with this email already exists.")

    user = User(email=email, password_hash=hash_password(password))
    db.add(user)
    db.flush()

    # Sign-up hook: one profile per identity
    profile = Profile(
        user_id=user.id,
        full_name=(full_name or "").strip() or "User",
        email=email,
        phone=(phone or "").strip() or None,
        role=role,
    )
    db.add(profile)
    db.flush()

    if role == "patient":
        db.add(Patient(profile_id=profile.id))
    elif role == "doctor":
        db.add(Doctor(
            profile_id=profile.id,
            specialization=specialization.strip(),
            license_number=license_number.strip(),
            department=(department or "").strip() or None,
        ))

    db.commit()
    db.refresh(user)
    LOGGER.info("Account created for %s (%s)", email, role)
    return user


# ------------------------------------------
# Sign in / restore / sign out
# ------------------------------------------
def sign_in(email: str, password: str, db: Session | None = None) -> SessionContext:
    if db is None:
        with get_db_context() as _db:
            return sign_in(email, password, db=_db)

    email = _normalize_email(email)
    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(password or "", user.password_hash):
        LOGGER.info("Failed sign-in for %s", email)
        raise AuthenticationError("Invalid email or password")

    token = _open_session(db, user)
    LOGGER.info("Signed in %s", email)
    return build_context(db, user, token)


def restore_session(token: str, db: Session | None = None, rotate: bool = False) -> SessionContext:
    """Resolve a live session token.

    With ``rotate`` the token is replaced by a fresh one (same expiry) and
    the old token stops working; used when the token arrived through the URL.
    """
    if db is None:
        with get_db_context() as _db:
            return restore_session(token, db=_db, rotate=rotate)

    auth_session = db.query(AuthSession).filter(AuthSession.token == token).first()
    if auth_session is None:
        raise AuthenticationError("Your session is no longer valid. Please sign in again.")

    if as_utc(auth_session.expires_at) <= now_utc():
        db.delete(auth_session)
        db.commit()
        raise AuthenticationError("Your session has expired. Please sign in again.")

    user = auth_session.user
    if rotate:
        new_token = secrets.token_urlsafe(32)
        db.add(AuthSession(token=new_token, user_id=user.id, created_at=now_utc(), expires_at=auth_session.expires_at))
        db.delete(auth_session)
        db.commit()
        LOGGER.info("Rotated session %s… for %s", token[:6], user.email)
        token = new_token

    return build_context(db, user, token)


def sign_out(token: str, db: Session | None = None) -> bool:
    if db is None:
        with get_db_context() as _db:
            return sign_out(token, db=_db)

    deleted = db.query(AuthSession).filter(AuthSession.token == token).delete()
    db.commit()
    if deleted:
        LOGGER.info("Signed out session %s…", token[:6])
    return bool(deleted)
