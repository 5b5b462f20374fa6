from datetime import date, time

from fieldops.models.domain import VisitRecord, VisitStats
from fieldops.services.visits.aggregation import (
    aggregate,
    completed_visits,
    region_label,
    region_roster,
    status_breakdown,
)


def _visit(
    vid: int,
    name: str,
    region: str | None,
    *,
    agent_id: int | None = 1,
    completed: int | None = 1,
    checkin: time | None = None,
    checkout: time | None = None,
    visit_date: date = date(2024, 5, 2),
) -> VisitRecord:
    return VisitRecord(
        id=vid,
        agent_id=agent_id,
        agent_name=name,
        agent_region=region,
        store_id=vid * 10,
        store_name=f"Store {vid}",
        purpose=None,
        visit_date=visit_date,
        checkin_time=checkin,
        checkout_time=checkout,
        stats=None if completed is None else VisitStats(completed_visit_count=completed),
    )


def test_one_agent_with_completed_and_assigned_visits() -> None:
    visits = [
        _visit(1, "asha patil", "Maharashtra", checkin=time(9), checkout=time(10)),
        _visit(2, "asha patil", "Maharashtra"),
    ]

    rollups = aggregate(visits)

    assert list(rollups) == ["maharashtra"]
    assert rollups["maharashtra"].agent_names == ("Asha Patil",)
    assert rollups["maharashtra"].completed_visit_count == 1
    assert rollups["maharashtra"].agent_count == 1


def test_identity_variants_collapse_into_one_agent_and_region() -> None:
    visits = [
        _visit(1, "Asha  Patil", "Maharashtra", completed=3),
        _visit(2, " asha patil", "MAHARASHTRA ", completed=3),
        _visit(3, "Ravi Kumar", "maharashtra", agent_id=2, completed=2),
    ]

    rollup = aggregate(visits)["maharashtra"]

    assert rollup.agent_names == ("Asha Patil", "Ravi Kumar")
    assert rollup.completed_visit_count == 5


def test_agents_without_completed_visits_are_left_out() -> None:
    visits = [
        _visit(1, "Asha Patil", "Maharashtra", completed=2),
        _visit(2, "Ravi Kumar", "Maharashtra", agent_id=2, completed=0),
        _visit(3, "Meena Rao", "Karnataka", agent_id=3, completed=None),
    ]

    rollups = aggregate(visits)

    assert list(rollups) == ["maharashtra"]
    assert rollups["maharashtra"].agent_names == ("Asha Patil",)


def test_missing_region_falls_into_unassigned_bucket() -> None:
    visits = [_visit(1, "Asha Patil", None), _visit(2, "Ravi Kumar", "  ", agent_id=2)]

    rollups = aggregate(visits)

    assert list(rollups) == ["unassigned"]
    assert rollups["unassigned"].agent_count == 2
    assert region_label("unassigned") == "Unassigned"


def test_aggregate_is_deterministic_and_ordered_by_region() -> None:
    visits = [
        _visit(1, "Ravi Kumar", "Maharashtra", agent_id=2),
        _visit(2, "Meena Rao", "Karnataka", agent_id=3),
        _visit(3, "Asha Patil", "Goa"),
    ]

    first = aggregate(visits)
    second = aggregate(list(reversed(visits)))

    assert list(first) == ["goa", "karnataka", "maharashtra"]
    assert first == second


def test_empty_input_yields_no_rollups() -> None:
    assert aggregate([]) == {}


def test_region_roster_sorted_by_name_with_counts() -> None:
    visits = [
        _visit(1, "ravi kumar", "Maharashtra", agent_id=2, completed=4),
        _visit(2, "Asha Patil", "Maharashtra", agent_id=None, completed=2),
        _visit(3, "Asha Patil", "Maharashtra", agent_id=1, completed=2),
        _visit(4, "Meena Rao", "Karnataka", agent_id=3, completed=5),
    ]

    roster = region_roster(visits, " maharashtra ")

    assert [(item.agent_name, item.agent_id, item.completed_visit_count) for item in roster] == [
        ("Asha Patil", 1, 2),
        ("Ravi Kumar", 2, 4),
    ]
    assert region_roster(visits, "Goa") == []


def test_completed_visits_newest_first() -> None:
    visits = [
        _visit(1, "Asha Patil", "Goa", checkin=time(9), checkout=time(10), visit_date=date(2024, 5, 1)),
        _visit(2, "Asha Patil", "Goa", checkin=time(9), visit_date=date(2024, 5, 3)),
        _visit(3, "Asha Patil", "Goa", checkin=time(14), checkout=time(15), visit_date=date(2024, 5, 2)),
        _visit(4, "Asha Patil", "Goa", checkin=time(8), checkout=time(9), visit_date=date(2024, 5, 2)),
    ]

    assert [visit.id for visit in completed_visits(visits)] == [3, 4, 1]


def test_status_breakdown_counts_every_state() -> None:
    visits = [
        _visit(1, "Asha Patil", "Goa"),
        _visit(2, "Asha Patil", "Goa", checkin=time(9)),
        _visit(3, "Asha Patil", "Goa", checkin=time(9), checkout=time(10)),
        _visit(4, "Asha Patil", "Goa", checkin=time(9), checkout=time(11)),
    ]

    assert status_breakdown(visits) == {"Assigned": 1, "On Going": 1, "Checked Out": 0, "Completed": 2}
