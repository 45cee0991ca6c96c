import pytest

from services.filters import STATUS_ALL, matches_search, matches_status


@pytest.mark.parametrize(
    "term, fields, expected",
    [
        ("", ("Jane Doe",), True),
        (None, (None,), True),
        ("  ", ("anything",), True),
        ("jane", ("Jane Doe", "jane@test.org"), True),
        ("DOE", ("Jane Doe",), True),
        ("cardio", ("Gregory House", "Cardiology", None), True),
        ("smith", ("Jane Doe", None), False),
        ("x", (None, None), False),
    ],
)
def test_matches_search(term, fields, expected):
    assert matches_search(term, *fields) is expected


def test_matches_status():
    assert matches_status("scheduled", STATUS_ALL)
    assert matches_status("cancelled", None)
    assert matches_status("cancelled", "cancelled")
    assert not matches_status("completed", "cancelled")
