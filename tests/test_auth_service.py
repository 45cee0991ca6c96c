from datetime import timedelta

import pytest

from core.auth import hash_password, verify_password
from core.exceptions import AuthenticationError, ValidationError
from core.time_utils import now_utc
from models import AuthSession, Doctor, Patient, Profile, User
from services.auth_service import restore_session, sign_in, sign_out, sign_up

PASSWORD = "secret123"


def test_password_hashing():
    hashed = hash_password(PASSWORD)
    assert hashed != PASSWORD
    assert verify_password(PASSWORD, hashed)
    assert not verify_password("wrong", hashed)
    assert not verify_password(PASSWORD, "plain-text")
    assert not verify_password(PASSWORD, "")


def test_sign_up_defaults_to_patient(db):
    user = sign_up("  Pat@Example.org ", PASSWORD, db=db)
    assert user.email == "pat@example.org"

    profile = db.query(Profile).filter(Profile.user_id == user.id).one()
    assert profile.role == "patient"
    assert profile.full_name == "User"
    assert db.query(Patient).filter(Patient.profile_id == profile.id).count() == 1
    assert db.query(Doctor).count() == 0


def test_sign_up_doctor_creates_directory_row(db):
    user = sign_up("doc@example.org", PASSWORD, "Doc Ock", "doctor",
                   specialization="Neurology", license_number="N-1", db=db)
    doctor = db.query(Doctor).join(Profile).filter(Profile.user_id == user.id).one()
    assert doctor.specialization == "Neurology"
    assert doctor.department is None
    assert db.query(Patient).count() == 0


def test_sign_up_admin_has_no_directory_row(db):
    sign_up("root@example.org", PASSWORD, "Root", "admin", db=db)
    assert db.query(Patient).count() == 0
    assert db.query(Doctor).count() == 0


@pytest.mark.parametrize(
    "email, password, role, extra",
    [
        ("not-an-email", PASSWORD, "patient", {}),
        ("short@example.org", "12345", "patient", {}),
        ("nurse@example.org", PASSWORD, "nurse", {}),
        ("doc@example.org", PASSWORD, "doctor", {"specialization": "Neurology"}),
        ("doc@example.org", PASSWORD, "doctor", {"license_number": "N-1", "specialization": "  "}),
    ],
)
def test_sign_up_validation(db, email, password, role, extra):
    with pytest.raises(ValidationError):
        sign_up(email, password, "Someone", role, db=db, **extra)
    assert db.query(User).count() == 0


def test_duplicate_email_rejected(db):
    sign_up("dup@example.org", PASSWORD, db=db)
    with pytest.raises(ValidationError):
        sign_up("DUP@example.org", PASSWORD, db=db)
    assert db.query(User).count() == 1


def test_sign_in_builds_context(db, world):
    ctx = sign_in("JANE@test.org", "P@ssw0rd1", db=db)
    assert ctx.is_patient
    assert ctx.full_name == "Jane Doe"
    assert ctx.patient_id == world.jane.patient_id
    assert ctx.doctor_id is None
    assert ctx.token != world.jane.token

    assert world.house.is_doctor and world.house.doctor_id
    assert world.admin.is_admin and not (world.admin.patient_id or world.admin.doctor_id)


def test_bad_credentials(db, world):
    with pytest.raises(AuthenticationError, match="Invalid email or password"):
        sign_in("jane@test.org", "wrong-password", db=db)
    with pytest.raises(AuthenticationError, match="Invalid email or password"):
        sign_in("nobody@test.org", "P@ssw0rd1", db=db)


def test_restore_and_sign_out(db, world):
    restored = restore_session(world.jane.token, db=db)
    assert restored == world.jane

    assert sign_out(world.jane.token, db=db)
    assert not sign_out(world.jane.token, db=db)
    with pytest.raises(AuthenticationError):
        restore_session(world.jane.token, db=db)

    # Other sessions are untouched
    assert restore_session(world.john.token, db=db).email == "john@test.org"


def test_expired_session_is_removed(db, world):
    row = db.get(AuthSession, world.jane.token)
    row.expires_at = now_utc() - timedelta(minutes=1)
    db.commit()

    with pytest.raises(AuthenticationError, match="expired"):
        restore_session(world.jane.token, db=db)
    assert db.get(AuthSession, world.jane.token) is None


def test_sign_in_purges_expired_sessions(db, world):
    stale = db.get(AuthSession, world.john.token)
    stale.expires_at = now_utc() - timedelta(hours=1)
    db.commit()

    sign_in("jane@test.org", "P@ssw0rd1", db=db)

    live = {s.token for s in db.query(AuthSession)}
    assert world.john.token not in live
    assert world.jane.token in live


def test_restore_from_url_rotates_token(db, world):
    before = db.get(AuthSession, world.jane.token).expires_at

    rotated = restore_session(world.jane.token, db=db, rotate=True)
    assert rotated.token != world.jane.token
    assert rotated.patient_id == world.jane.patient_id
    assert db.get(AuthSession, rotated.token).expires_at == before

    with pytest.raises(AuthenticationError):
        restore_session(world.jane.token, db=db)
    assert restore_session(rotated.token, db=db).email == "jane@test.org"
