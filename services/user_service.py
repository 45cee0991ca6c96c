import logging
from datetime import date, time, timedelta

from sqlalchemy.orm import Session

from core.config import DEMO_PASSWORD
from core.database import get_db_context
from core.time_utils import today
from models import Appointment, Doctor, MedicalRecord, Patient, Profile, User
from services.auth_service import sign_up

LOGGER = logging.getLogger(__name__)

DEMO_ADMIN = "admin@ehr.local"


def _directory_row(db: Session, model, email: str):
    return (
        db.query(model)
        .join(Profile, model.profile_id == Profile.id)
        .filter(Profile.email == email)
        .one()
    )


def ensure_demo_accounts(password: str | None = None, db: Session | None = None) -> bool:
    """
    Creates demo accounts and a little clinical history on a fresh database.
    Returns False when any account already exists.
    """
    if db is None:
        with get_db_context() as _db:
            return ensure_demo_accounts(password, db=_db)

    if db.query(User).first():
        return False

    password = password or DEMO_PASSWORD

    sign_up(DEMO_ADMIN, password, "Ada Admin", "admin", db=db)
    sign_up("house@ehr.local", password, "Gregory House", "doctor",
            specialization="Diagnostic Medicine", license_number="LIC-1001", department="Internal Medicine", db=db)
    sign_up("grey@ehr.local", password, "Meredith Grey", "doctor",
            specialization="General Surgery", license_number="LIC-1002", department="Surgery", db=db)
    sign_up("jane@ehr.local", password, "Jane Doe", "patient", phone="555-0101", db=db)
    sign_up("john@ehr.local", password, "John Roe", "patient", phone="555-0102", db=db)

    house = _directory_row(db, Doctor, "house@ehr.local")
    grey = _directory_row(db, Doctor, "grey@ehr.local")
    jane = _directory_row(db, Patient, "jane@ehr.local")
    john = _directory_row(db, Patient, "john@ehr.local")

    last_week = today() - timedelta(days=7)
    visit = Appointment(patient_id=jane.id, doctor_id=house.id, appointment_date=last_week,
                        appointment_time=time(9, 30), status="completed", reason="Persistent headache")
    db.add_all([
        visit,
        Appointment(patient_id=jane.id, doctor_id=grey.id, appointment_date=today() + timedelta(days=3),
                    appointment_time=time(14, 0), duration_minutes=45, reason="Surgical consult"),
        Appointment(patient_id=john.id, doctor_id=house.id, appointment_date=today(),
                    appointment_time=time(11, 0), reason="Annual check-up"),
    ])
    db.flush()
    db.add(MedicalRecord(patient_id=jane.id, doctor_id=house.id, appointment_id=visit.id,
                         record_date=last_week, symptoms="Headache, light sensitivity",
                         diagnosis="Migraine", treatment="Rest and hydration", medications="Ibuprofen 400mg"))
    db.commit()

    LOGGER.info("Seeded demo accounts (%s and 4 others)", DEMO_ADMIN)
    return True


def create_admin(email: str, password: str, full_name: str | None = None) -> User:
    """Admins cannot sign themselves up from the UI; scripts call this."""
    return sign_up(email, password, full_name, role="admin")
