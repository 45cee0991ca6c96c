from datetime import time, timedelta

import pytest

from core.exceptions import AccessDenied, NotFoundError, ValidationError
from core.time_utils import today
from models import Appointment, MedicalRecord, Patient
from services.appointment_service import (
    allowed_transitions,
    completed_appointments,
    create_appointment,
    filter_appointments,
    list_appointments,
    treated_patients,
    update_status,
)


def _book(ctx, world, db, **extra):
    fields = dict(
        patient_id=world.jane.patient_id,
        doctor_id=world.house.doctor_id,
        appointment_date=today() + timedelta(days=2),
        appointment_time=time(9, 0),
    )
    fields.update(extra)
    return create_appointment(ctx, db=db, **fields)


def test_create_defaults(db, world):
    row = _book(world.admin, world, db, reason="  Check-up  ")
    assert row.status == "scheduled"
    assert row.duration_minutes == 30
    assert row.reason == "Check-up"
    assert row.patient_name == "Jane Doe"
    assert row.doctor_name == "Gregory House"
    assert row.specialization == "Diagnostics"


def test_patient_always_books_for_self(db, world):
    row = _book(world.john, world, db, patient_id=world.jane.patient_id)
    assert row.patient_id == world.john.patient_id


def test_doctor_books_only_as_self(db, world):
    row = _book(world.house, world, db, duration_minutes=45)
    assert row.doctor_id == world.house.doctor_id
    assert row.duration_minutes == 45

    with pytest.raises(AccessDenied):
        _book(world.grey, world, db)


def test_same_day_booking_allowed(db, world):
    row = _book(world.jane, world, db, appointment_date=today())
    assert row.appointment_date == today()


@pytest.mark.parametrize(
    "extra",
    [
        {"appointment_date": today() - timedelta(days=1)},
        {"duration_minutes": 20},
        {"duration_minutes": 0},
        {"doctor_id": ""},
        {"status": "postponed"},
    ],
)
def test_create_rejects_bad_input(db, world, extra):
    with pytest.raises(ValidationError):
        _book(world.admin, world, db, **extra)
    assert db.query(Appointment).count() == 0


def test_create_unknown_doctor(db, world):
    with pytest.raises(NotFoundError):
        _book(world.admin, world, db, doctor_id="missing")


def test_status_transitions(db, world, make_appointment):
    done = make_appointment(world.jane, world.house)
    dropped = make_appointment(world.jane, world.house, days=2)

    assert update_status(world.house, done.id, "completed", db=db).status == "completed"
    assert update_status(world.jane, dropped.id, "cancelled", db=db).status == "cancelled"

    # Final states do not move
    with pytest.raises(ValidationError):
        update_status(world.admin, done.id, "cancelled", db=db)
    with pytest.raises(ValidationError):
        update_status(world.admin, dropped.id, "scheduled", db=db)


def test_no_show_is_not_a_transition(db, world, make_appointment):
    appt = make_appointment(world.jane, world.house)
    assert allowed_transitions("scheduled") == {"completed", "cancelled"}
    assert allowed_transitions("completed") == set()
    with pytest.raises(ValidationError):
        update_status(world.admin, appt.id, "no_show", db=db)


def test_update_missing_appointment(db, world):
    with pytest.raises(NotFoundError):
        update_status(world.admin, "missing", "completed", db=db)


def test_filter_by_name_and_status(db, world, make_appointment):
    make_appointment(world.jane, world.house, reason="Headache")
    make_appointment(world.john, world.grey, status="cancelled", reason="Knee")
    rows = list_appointments(world.admin, db=db)

    jane = filter_appointments(rows, "jane")
    assert [r.patient_name for r in jane] == ["Jane Doe"]

    assert [r.reason for r in filter_appointments(rows, "HEAD")] == ["Headache"]
    assert len(filter_appointments(rows, "", "all")) == 2
    assert [r.patient_name for r in filter_appointments(rows, status="cancelled")] == ["John Roe"]
    assert filter_appointments(rows, "jane", "cancelled") == []


def test_limit(db, world, make_appointment):
    for days in range(1, 8):
        make_appointment(world.jane, world.house, days=days)
    rows = list_appointments(world.jane, db=db, limit=5)
    assert len(rows) == 5
    assert rows[0].appointment_date == today() + timedelta(days=1)


def test_treated_patients_and_completed_appointments(db, world, make_appointment):
    make_appointment(world.john, world.house)
    make_appointment(world.jane, world.house, days=2)
    make_appointment(world.jane, world.house, days=3, status="completed")
    make_appointment(world.john, world.grey, status="completed")

    assert [o.label for o in treated_patients(world.house, db=db)] == ["Jane Doe", "John Roe"]
    assert [o.label for o in treated_patients(world.grey, db=db)] == ["John Roe"]

    completed = completed_appointments(world.house, db=db)
    assert len(completed) == 1
    assert completed[0].label.endswith("Jane Doe")


def test_deleting_patient_cascades(db, world, make_appointment):
    appt = make_appointment(world.jane, world.house, status="completed")
    db.add(MedicalRecord(patient_id=world.jane.patient_id, doctor_id=world.house.doctor_id, appointment_id=appt.id))
    db.commit()

    db.delete(db.get(Patient, world.jane.patient_id))
    db.commit()

    assert db.query(Appointment).count() == 0
    assert db.query(MedicalRecord).count() == 0


def test_missing_duration_defaults(db, world):
    assert _book(world.admin, world, db, duration_minutes=None).duration_minutes == 30
