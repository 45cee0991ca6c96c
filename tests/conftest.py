import os

# Must be set before core.config is imported
os.environ["EHR_DATABASE_URL"] = "sqlite://"
os.environ["EHR_SEED_DEMO_DATA"] = "0"

from dataclasses import dataclass
from datetime import time, timedelta

import bcrypt
import pytest

from core import database
from core.context import SessionContext
from core.time_utils import today
from models import Appointment
from services.auth_service import sign_in, sign_up

PASSWORD = "P@ssw0rd1"

_real_gensalt = bcrypt.gensalt


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    monkeypatch.setattr(bcrypt, "gensalt", lambda rounds=4, prefix=b"2b": _real_gensalt(rounds=4, prefix=prefix))


@pytest.fixture
def db():
    database.configure("sqlite://")
    database.create_tables()
    session = database.get_db_session()
    try:
        yield session
    finally:
        session.close()
        database.Base.metadata.drop_all(bind=database.engine)


@dataclass
class World:
    admin: SessionContext
    house: SessionContext
    grey: SessionContext
    jane: SessionContext
    john: SessionContext


@pytest.fixture
def world(db) -> World:
    """An admin, two doctors (House, Grey) and two patients (Jane Doe, John Roe)."""
    sign_up("admin@test.org", PASSWORD, "Ada Admin", "admin", db=db)
    sign_up("house@test.org", PASSWORD, "Gregory House", "doctor",
            specialization="Diagnostics", license_number="LIC-1", department="Internal Medicine", db=db)
    sign_up("grey@test.org", PASSWORD, "Meredith Grey", "doctor",
            specialization="Surgery", license_number="LIC-2", db=db)
    sign_up("jane@test.org", PASSWORD, "Jane Doe", db=db)
    sign_up("john@test.org", PASSWORD, "John Roe", db=db)
    return World(
        admin=sign_in("admin@test.org", PASSWORD, db=db),
        house=sign_in("house@test.org", PASSWORD, db=db),
        grey=sign_in("grey@test.org", PASSWORD, db=db),
        jane=sign_in("jane@test.org", PASSWORD, db=db),
        john=sign_in("john@test.org", PASSWORD, db=db),
    )


@pytest.fixture
def make_appointment(db):
    """Insert directly, bypassing the create-time checks (e.g. past dates)."""

    def _make(patient: SessionContext, doctor: SessionContext, days=1, at=time(10, 0), **extra) -> Appointment:
        appt = Appointment(
            patient_id=patient.patient_id,
            doctor_id=doctor.doctor_id,
            appointment_date=today() + timedelta(days=days),
            appointment_time=at,
            **extra,
        )
        db.add(appt)
        db.commit()
        return appt

    return _make
