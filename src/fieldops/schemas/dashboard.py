"""Pydantic request/response models for dashboard, location and console endpoints."""

from __future__ import annotations

from datetime import date, time
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from ..models.domain import AgentLocationFix, AgentSummary, RegionRollup, VisitRecord, VisitStats
from ..services.visits.aggregation import region_label


class DateRangeRequest(BaseModel):
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def _check_range(self) -> "DateRangeRequest":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class RegionSelection(BaseModel):
    region: str = Field(..., description="Region (state) name; matched case- and whitespace-insensitively.")


class AgentSelection(BaseModel):
    agent_name: Optional[str] = Field(default=None, description="Agent display name from the region roster.")
    agent_id: Optional[int] = Field(default=None, description="Agent id from the live-location list.")

    @model_validator(mode="after")
    def _one_of(self) -> "AgentSelection":
        if (self.agent_name is None) == (self.agent_id is None):
            raise ValueError("Provide exactly one of agent_name or agent_id")
        return self


class PageSelection(BaseModel):
    page: int = Field(..., ge=1)


class RegionRollupModel(BaseModel):
    region: str
    label: str
    agents: List[str]
    agent_count: int
    completed_visit_count: int

    @classmethod
    def from_domain(cls, rollup: RegionRollup) -> "RegionRollupModel":
        return cls(
            region=rollup.region,
            label=region_label(rollup.region),
            agents=list(rollup.agent_names),
            agent_count=rollup.agent_count,
            completed_visit_count=rollup.completed_visit_count,
        )


class AgentSummaryModel(BaseModel):
    agent_key: str
    agent_name: str
    agent_id: Optional[int] = None
    completed_visit_count: int

    @classmethod
    def from_domain(cls, summary: AgentSummary) -> "AgentSummaryModel":
        return cls(
            agent_key=summary.agent_key,
            agent_name=summary.agent_name,
            agent_id=summary.agent_id,
            completed_visit_count=summary.completed_visit_count,
        )


class LocationFixModel(BaseModel):
    agent_id: int
    agent_name: str
    latitude: float
    longitude: float
    observed_date: Optional[date] = None
    observed_time: Optional[time] = None

    @classmethod
    def from_domain(cls, fix: AgentLocationFix) -> "LocationFixModel":
        return cls(
            agent_id=fix.agent_id,
            agent_name=fix.agent_name,
            latitude=fix.latitude,
            longitude=fix.longitude,
            observed_date=fix.observed_date,
            observed_time=fix.observed_time,
        )


class FleetLocationsResponse(BaseModel):
    items: List[LocationFixModel]
    error: Optional[str] = None


class VisitModel(BaseModel):
    id: int
    agent_id: Optional[int] = None
    agent_name: str
    region: Optional[str] = None
    store_id: Optional[int] = None
    store_name: Optional[str] = None
    purpose: Optional[str] = None
    visit_date: Optional[date] = None
    checkin_time: Optional[time] = None
    checkout_time: Optional[time] = None
    checkin_latitude: Optional[float] = None
    checkin_longitude: Optional[float] = None
    status: str

    @classmethod
    def from_domain(cls, visit: VisitRecord) -> "VisitModel":
        return cls(
            id=visit.id,
            agent_id=visit.agent_id,
            agent_name=visit.agent_name,
            region=visit.agent_region,
            store_id=visit.store_id,
            store_name=visit.store_name,
            purpose=visit.purpose,
            visit_date=visit.visit_date,
            checkin_time=visit.checkin_time,
            checkout_time=visit.checkout_time,
            checkin_latitude=visit.checkin_latitude,
            checkin_longitude=visit.checkin_longitude,
            status=visit.status.value,
        )


class VisitStatsModel(BaseModel):
    completedVisitCount: int
    fullDays: int
    halfDays: int
    absences: int

    @classmethod
    def from_domain(cls, stats: VisitStats) -> "VisitStatsModel":
        return cls(
            completedVisitCount=stats.completed_visit_count,
            fullDays=stats.full_days,
            halfDays=stats.half_days,
            absences=stats.absences,
        )


class AgentVisitsResponse(BaseModel):
    agent_id: int
    start_date: date
    end_date: date
    stats: Optional[VisitStatsModel] = None
    visits: List[VisitModel]
    completed_visits: List[VisitModel]
    status_counts: dict[str, int]
    error: Optional[str] = None


class RollupsResponse(BaseModel):
    start_date: date
    end_date: date
    regions: List[RegionRollupModel]
    error: Optional[str] = None


class RegionRosterResponse(BaseModel):
    region: str
    label: str
    agents: List[AgentSummaryModel]
    error: Optional[str] = None


class PopupModel(BaseModel):
    role: str
    title: str
    badge: str
    badge_kind: str
    lines: List[str]
    coordinates: List[float]


class ConsoleResponse(BaseModel):
    view: str
    region: Optional[str] = None
    agent_name: Optional[str] = None
    agent_id: Optional[int] = None
    start_date: date
    end_date: date
    page: int
    controller_state: str
    legend_visible: bool
    rollups: List[RegionRollupModel]
    roster: List[AgentSummaryModel]
    locations: List[LocationFixModel]
    agent_stats: Optional[VisitStatsModel] = None
    completed_visits: List[VisitModel]
    map_error: Optional[str] = None
    fleet_error: Optional[str] = None
    visits_error: Optional[str] = None
    agent_error: Optional[str] = None
    is_loading: bool
    is_map_loading: bool
    scene: dict
