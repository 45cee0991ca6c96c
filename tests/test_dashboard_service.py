from services.dashboard_service import DashboardStats, get_stats, recent_appointments
from services.record_service import create_record


def _seed(world, make_appointment, db):
    make_appointment(world.jane, world.house, days=0)
    make_appointment(world.jane, world.grey, days=1)
    make_appointment(world.john, world.house, days=2)
    create_record(world.house, patient_id=world.jane.patient_id, diagnosis="Migraine", db=db)


def test_admin_stats(db, world, make_appointment):
    _seed(world, make_appointment, db)
    assert get_stats(world.admin, db=db) == DashboardStats(
        total_patients=2, total_appointments=3, today_appointments=1, total_records=1,
    )


def test_doctor_and_patient_stats_are_scoped(db, world, make_appointment):
    _seed(world, make_appointment, db)
    assert get_stats(world.house, db=db) == DashboardStats(0, 2, 1, 1)
    assert get_stats(world.grey, db=db) == DashboardStats(0, 1, 0, 0)
    assert get_stats(world.jane, db=db) == DashboardStats(0, 2, 1, 1)
    assert get_stats(world.john, db=db) == DashboardStats(0, 1, 0, 0)


def test_empty_dashboard(db, world):
    assert get_stats(world.jane, db=db) == DashboardStats()
    assert recent_appointments(world.jane, db=db) == []


def test_recent_appointments_capped(db, world, make_appointment):
    for days in range(7):
        make_appointment(world.john, world.grey, days=days)
    rows = recent_appointments(world.grey, db=db)
    assert len(rows) == 5
    assert [r.appointment_date for r in rows] == sorted(r.appointment_date for r in rows)
