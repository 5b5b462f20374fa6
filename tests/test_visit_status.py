from datetime import date, time

import pytest

from fieldops.models.domain import VisitRecord, VisitStatus, classify_visit


def _visit(checkin: time | None, checkout: time | None) -> VisitRecord:
    return VisitRecord(
        id=1,
        agent_id=7,
        agent_name="Asha Patil",
        agent_region="Maharashtra",
        store_id=100,
        store_name="Store 1",
        purpose=None,
        visit_date=date(2024, 5, 2),
        checkin_time=checkin,
        checkout_time=checkout,
    )


@pytest.mark.parametrize(
    ("checkin", "checkout", "expected"),
    [
        (None, None, VisitStatus.ASSIGNED),
        (time(9, 0), None, VisitStatus.ON_GOING),
        (None, time(11, 0), VisitStatus.CHECKED_OUT),
        (time(9, 0), time(11, 0), VisitStatus.COMPLETED),
    ],
)
def test_classify_visit(checkin, checkout, expected) -> None:
    record = _visit(checkin, checkout)
    assert classify_visit(record) is expected
    assert record.status is expected


def test_status_values_match_display_labels() -> None:
    assert [status.value for status in VisitStatus] == ["Assigned", "On Going", "Checked Out", "Completed"]


def test_zero_coordinates_are_not_a_checkin_location() -> None:
    record = VisitRecord(
        id=2,
        agent_id=7,
        agent_name="Asha Patil",
        agent_region=None,
        store_id=None,
        store_name=None,
        purpose=None,
        visit_date=None,
        checkin_latitude=0.0,
        checkin_longitude=0.0,
    )
    assert not record.has_checkin_location
