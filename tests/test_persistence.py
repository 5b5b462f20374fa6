from datetime import date
from pathlib import Path

import pytest
from pydantic import ValidationError

from fieldops.persistence.snapshots import SnapshotStore
from fieldops.schemas.navigation import NavigationSnapshot, ReturnSignal


def _snapshot(**overrides) -> NavigationSnapshot:
    values = {
        "region": "maharashtra",
        "agent": "Asha Patil",
        "start_date": date(2024, 5, 1),
        "end_date": date(2024, 5, 2),
        "page": 3,
    }
    values.update(overrides)
    return NavigationSnapshot(**values)


def test_snapshot_store_creates_state_directory(tmp_path: Path) -> None:
    store = SnapshotStore(root=tmp_path)

    assert store.state_root.exists()
    assert store.state_root.is_dir()
    assert store.path.parent == tmp_path.resolve() / "state"


def test_snapshot_store_round_trips_with_wire_names(tmp_path: Path) -> None:
    store = SnapshotStore(root=tmp_path)

    store.save(_snapshot())

    raw = store.path.read_text(encoding="utf-8")
    assert '"returnTo": "employeeDetails"' in raw
    assert '"state": "maharashtra"' in raw
    assert '"currentPage": 3' in raw
    assert store.load() == _snapshot()
    assert not store.path.with_suffix(".tmp").exists()


def test_load_missing_snapshot_returns_none(tmp_path: Path) -> None:
    assert SnapshotStore(root=tmp_path).load() is None


def test_load_corrupt_snapshot_returns_none(tmp_path: Path) -> None:
    store = SnapshotStore(root=tmp_path)
    store.path.write_text("{not json", encoding="utf-8")

    assert store.load() is None


def test_clear_removes_snapshot_and_tolerates_absence(tmp_path: Path) -> None:
    store = SnapshotStore(root=tmp_path)
    store.save(_snapshot())

    store.clear()
    store.clear()

    assert store.load() is None


def test_snapshot_rejects_inverted_range_and_bad_page() -> None:
    with pytest.raises(ValidationError):
        _snapshot(start_date=date(2024, 5, 3))
    with pytest.raises(ValidationError):
        _snapshot(page=0)


def test_snapshot_accepts_wire_aliases() -> None:
    snapshot = NavigationSnapshot.model_validate(
        {"returnTo": "employeeDetails", "state": "goa", "employee": None, "startDate": "2024-05-01", "endDate": "2024-05-01"}
    )

    assert snapshot.region == "goa"
    assert snapshot.page == 1


def test_return_signal_only_matches_agent_details() -> None:
    assert ReturnSignal(returnTo="employeeDetails").is_return
    assert not ReturnSignal(returnTo="somewhereElse").is_return
    assert not ReturnSignal().is_return


def test_return_signal_carries_snapshot_tuple() -> None:
    signal = ReturnSignal.model_validate(
        {"returnTo": "employeeDetails", "state": "goa", "employee": "Asha Patil", "startDate": "2024-05-01", "endDate": "2024-05-02"}
    )

    carried = signal.carried_snapshot()

    assert carried == NavigationSnapshot(
        region="goa", agent="Asha Patil", start_date=date(2024, 5, 1), end_date=date(2024, 5, 2), page=1
    )
    assert ReturnSignal(returnTo="employeeDetails", startDate=date(2024, 5, 1)).carried_snapshot() is None


def test_return_signal_rejects_inverted_range() -> None:
    with pytest.raises(ValidationError):
        ReturnSignal.model_validate({"returnTo": "employeeDetails", "startDate": "2024-05-02", "endDate": "2024-05-01"})
