"""Domain models for agents, live fixes and visits."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from enum import Enum
from typing import Generic, Literal, Optional, TypeVar

T = TypeVar("T")


class VisitStatus(str, Enum):
    ASSIGNED = "Assigned"
    ON_GOING = "On Going"
    CHECKED_OUT = "Checked Out"
    COMPLETED = "Completed"


@dataclass(slots=True, frozen=True)
class AgentLocationFix:
    """Single live-location observation for an agent."""

    agent_id: int
    agent_name: str
    latitude: float
    longitude: float
    observed_date: Optional[date] = None
    observed_time: Optional[time] = None


@dataclass(slots=True, frozen=True)
class VisitStats:
    """Per-agent summary block returned alongside visits for a date range."""

    completed_visit_count: int = 0
    full_days: int = 0
    half_days: int = 0
    absences: int = 0


@dataclass(slots=True, frozen=True)
class VisitRecord:
    """A store visit as delivered by the visit service. Immutable once fetched."""

    id: int
    agent_id: Optional[int]
    agent_name: str
    agent_region: Optional[str]
    store_id: Optional[int]
    store_name: Optional[str]
    purpose: Optional[str]
    visit_date: Optional[date]
    checkin_time: Optional[time] = None
    checkout_time: Optional[time] = None
    checkin_latitude: Optional[float] = None
    checkin_longitude: Optional[float] = None
    city: Optional[str] = None
    state: Optional[str] = None
    stats: Optional[VisitStats] = None

    @property
    def status(self) -> VisitStatus:
        return classify_visit(self)

    @property
    def has_checkin_location(self) -> bool:
        # zero coordinates are treated as missing, matching the upstream payloads
        return bool(self.checkin_latitude) and bool(self.checkin_longitude)


def classify_visit(record: VisitRecord) -> VisitStatus:
    """Derive the visit state from which optional timestamps are present."""

    has_checkin = record.checkin_time is not None
    has_checkout = record.checkout_time is not None
    if has_checkin and has_checkout:
        return VisitStatus.COMPLETED
    if has_checkout:
        return VisitStatus.CHECKED_OUT
    if has_checkin:
        return VisitStatus.ON_GOING
    return VisitStatus.ASSIGNED


@dataclass(slots=True, frozen=True)
class AgentProfile:
    """Employee metadata used for joins and the home-location pin."""

    agent_id: int
    first_name: str
    last_name: str
    region: Optional[str] = None
    city: Optional[str] = None
    address_line: Optional[str] = None
    home_latitude: Optional[float] = None
    home_longitude: Optional[float] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def has_home_location(self) -> bool:
        return bool(self.home_latitude) and bool(self.home_longitude)


@dataclass(slots=True, frozen=True)
class AgentDetail:
    """Visits and stats for one agent over a date range."""

    agent_id: int
    stats: VisitStats
    visits: tuple[VisitRecord, ...] = ()


@dataclass(slots=True, frozen=True)
class RegionRollup:
    """Derived per-region aggregate; never persisted."""

    region: str
    agent_names: tuple[str, ...]
    completed_visit_count: int

    @property
    def agent_count(self) -> int:
        return len(self.agent_names)


@dataclass(slots=True, frozen=True)
class AgentSummary:
    """Roster line for a region drill-down."""

    agent_key: str
    agent_name: str
    agent_id: Optional[int]
    completed_visit_count: int


@dataclass(slots=True, frozen=True)
class FetchScope:
    """Either every agent or only the listed team members."""

    kind: Literal["all", "team"] = "all"
    member_ids: tuple[int, ...] = ()

    @classmethod
    def everyone(cls) -> "FetchScope":
        return cls(kind="all")

    @classmethod
    def team(cls, member_ids) -> "FetchScope":
        return cls(kind="team", member_ids=tuple(int(item) for item in member_ids))


@dataclass(slots=True)
class FetchResult(Generic[T]):
    """Collection returned by network-facing operations plus a failure flag."""

    items: list[T] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None
