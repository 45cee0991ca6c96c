import pytest

from core import navigation as nav


def _titles(routes):
    return [r.title for r in routes]


def test_menu_for_role():
    assert _titles(nav.menu_for_role("admin")) == [
        "Dashboard", "Patients", "Doctors", "Appointments", "Medical Records",
    ]
    assert _titles(nav.menu_for_role("doctor")) == ["Dashboard", "Patients", "Appointments", "Medical Records"]
    assert _titles(nav.menu_for_role("patient")) == ["Dashboard", "Appointments", "Medical Records"]
    # No profile yet behaves like a patient
    assert nav.menu_for_role(None) == nav.menu_for_role("patient")


def test_portal_name():
    assert nav.portal_name("admin") == "Admin Portal"
    assert nav.portal_name("doctor") == "Doctor Portal"
    assert nav.portal_name(None) == "Patient Portal"


def test_url_paths_are_unique():
    paths = [nav.url_path(r) for r in nav.ROUTES]
    assert len(set(paths)) == len(paths)
    assert nav.url_path(nav.DASHBOARD) == ""
    assert nav.url_path(nav.MEDICAL_RECORDS) == "medical-records"


@pytest.mark.parametrize(
    "path, signed_in, expected",
    [
        ("/", False, nav.AUTH),
        ("/patients", False, nav.AUTH),
        ("/auth", False, nav.AUTH),
        ("/auth", True, nav.DASHBOARD),
        ("/", True, nav.DASHBOARD),
        ("appointments/", True, nav.APPOINTMENTS),
        ("/medical-records", True, nav.MEDICAL_RECORDS),
        ("/nowhere", True, None),
        ("/nowhere", False, None),
    ],
)
def test_resolve(path, signed_in, expected):
    assert nav.resolve(path, signed_in) is expected
