from dataclasses import replace
from datetime import time

import pytest

from core.exceptions import AccessDenied, NotFoundError
from models import Appointment, Doctor, MedicalRecord, Patient, Profile
from services import policy
from services.appointment_service import list_appointments, update_status
from services.doctor_service import list_doctors, update_doctor
from services.patient_service import list_patients, update_patient
from services.record_service import create_record, list_records


def test_patient_sees_only_own_rows(db, world, make_appointment):
    make_appointment(world.jane, world.house)
    make_appointment(world.john, world.house)
    make_appointment(world.john, world.grey)
    db.add(MedicalRecord(patient_id=world.john.patient_id, doctor_id=world.house.doctor_id, diagnosis="Flu"))
    db.commit()

    appts = list_appointments(world.jane, db=db)
    assert [a.patient_id for a in appts] == [world.jane.patient_id]
    assert list_records(world.jane, db=db) == []

    patients = list_patients(world.jane, db=db)
    assert [p.id for p in patients] == [world.jane.patient_id]

    profiles = policy.scoped_query(db, world.jane, Profile).all()
    assert [p.id for p in profiles] == [world.jane.profile_id]


def test_doctor_reads_every_patient_but_only_own_appointments(db, world, make_appointment):
    make_appointment(world.jane, world.house)
    make_appointment(world.john, world.grey)

    assert {p.full_name for p in list_patients(world.house, db=db)} == {"Jane Doe", "John Roe"}

    appts = list_appointments(world.house, db=db)
    assert len(appts) == 1
    assert appts[0].doctor_id == world.house.doctor_id


def test_doctor_cannot_mutate_another_doctors_appointment(db, world, make_appointment):
    theirs = make_appointment(world.john, world.grey)

    assert not policy.can_write(world.house, theirs, db=db)
    # Not visible, so it reads as missing
    with pytest.raises(NotFoundError):
        update_status(world.house, theirs.id, "completed", db=db)

    db.refresh(theirs)
    assert theirs.status == "scheduled"


def test_doctor_writes_records_only_for_treated_patients(db, world, make_appointment):
    make_appointment(world.jane, world.house)

    with pytest.raises(AccessDenied):
        create_record(world.house, patient_id=world.john.patient_id, diagnosis="Cold", db=db)

    row = create_record(world.house, patient_id=world.jane.patient_id, diagnosis="Migraine", db=db)
    assert row.doctor_id == world.house.doctor_id


def test_patients_and_admins_cannot_create_records(db, world, make_appointment):
    make_appointment(world.jane, world.house)
    for ctx in (world.jane, world.admin):
        with pytest.raises(AccessDenied):
            create_record(ctx, patient_id=world.jane.patient_id, diagnosis="Self-diagnosed", db=db)


def test_admin_sees_all_appointments_in_date_then_time_order(db, world, make_appointment):
    make_appointment(world.john, world.grey, days=2, at=time(9, 0))
    make_appointment(world.jane, world.house, days=1, at=time(15, 0))
    make_appointment(world.jane, world.grey, days=1, at=time(8, 30))
    make_appointment(world.john, world.house, days=3, at=time(7, 0))

    appts = list_appointments(world.admin, db=db)
    keys = [(a.appointment_date, a.appointment_time) for a in appts]
    assert keys == sorted(keys)
    pairs = {(a.patient_name, a.doctor_name) for a in appts}
    assert pairs == {
        ("John Roe", "Meredith Grey"),
        ("Jane Doe", "Gregory House"),
        ("Jane Doe", "Meredith Grey"),
        ("John Roe", "Gregory House"),
    }


def test_doctor_directory_is_public_but_only_owner_edits(db, world):
    assert len(list_doctors(world.jane, db=db)) == 2

    with pytest.raises(AccessDenied):
        update_doctor(world.grey, world.house.doctor_id, bio="Not mine", db=db)

    row = update_doctor(world.house, world.house.doctor_id, bio="Everybody lies", db=db)
    assert row.bio == "Everybody lies"


def test_patient_row_only_editable_by_owner(db, world):
    with pytest.raises(NotFoundError):
        update_patient(world.jane, world.john.patient_id, address="Somewhere", db=db)

    # Doctors can read the row but not change it
    with pytest.raises(AccessDenied):
        update_patient(world.house, world.jane.patient_id, address="Somewhere", db=db)

    row = update_patient(world.jane, world.jane.patient_id, address="221B Baker St", db=db)
    assert row.address == "221B Baker St"


def test_missing_directory_row_sees_nothing(db, world, make_appointment):
    make_appointment(world.jane, world.house)
    orphan = replace(world.jane, patient_id=None)

    assert list_appointments(orphan, db=db) == []
    assert policy.scoped_query(db, replace(world.house, doctor_id=None), Appointment).count() == 0


def test_can_read_matches_scoped_query(db, world, make_appointment):
    mine = make_appointment(world.jane, world.house)
    other = make_appointment(world.john, world.grey)
    for ctx in (world.admin, world.house, world.grey, world.jane, world.john):
        visible = {a.id for a in policy.scoped_query(db, ctx, Appointment)}
        assert visible == {a.id for a in (mine, other) if policy.can_read(ctx, a)}


def test_directory_reads(db, world):
    jane_row = db.get(Patient, world.jane.patient_id)
    house_row = db.get(Doctor, world.house.doctor_id)
    assert policy.can_read(world.house, jane_row)
    assert not policy.can_read(world.john, jane_row)
    assert policy.can_read(world.john, house_row)


def test_unknown_model_has_no_policy(world):
    class Unmapped:
        pass

    with pytest.raises(ValueError):
        policy.visibility(world.jane, Unmapped)
