"""Conversion of upstream JSON payloads into domain records."""

from __future__ import annotations

import logging
from datetime import date, datetime, time
from typing import Any, Optional

from ...models.domain import AgentDetail, AgentLocationFix, AgentProfile, VisitRecord, VisitStats
from ..identity import full_name

logger = logging.getLogger(__name__)


def parse_date(value: Any) -> Optional[date]:
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def parse_time(value: Any) -> Optional[time]:
    if isinstance(value, time):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    for fmt in ("%H:%M:%S.%f", "%H:%M:%S", "%H:%M"):
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    return None


def _float_or_none(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _int_or_none(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_stats(payload: Any) -> Optional[VisitStats]:
    if not isinstance(payload, dict):
        return None
    return VisitStats(
        completed_visit_count=_int_or_none(payload.get("completedVisitCount")) or 0,
        full_days=_int_or_none(payload.get("fullDays")) or 0,
        half_days=_int_or_none(payload.get("halfDays")) or 0,
        absences=_int_or_none(payload.get("absences")) or 0,
    )


def parse_location_fix(payload: dict) -> Optional[AgentLocationFix]:
    """Return a fix, or ``None`` when the payload carries no usable coordinates."""

    latitude = _float_or_none(payload.get("latitude"))
    longitude = _float_or_none(payload.get("longitude"))
    agent_id = _int_or_none(payload.get("empId"))
    if not latitude or not longitude or agent_id is None:
        return None
    return AgentLocationFix(
        agent_id=agent_id,
        agent_name=str(payload.get("empName") or "").strip(),
        latitude=latitude,
        longitude=longitude,
        observed_date=parse_date(payload.get("updatedAt")),
        observed_time=parse_time(payload.get("updatedTime")),
    )


def parse_visit(payload: dict) -> VisitRecord:
    name = full_name(payload.get("employeeFirstName"), payload.get("employeeLastName"))
    if not name:
        name = str(payload.get("employeeName") or "").strip()
    return VisitRecord(
        id=int(payload["id"]),
        agent_id=_int_or_none(payload.get("employeeId")),
        agent_name=name,
        agent_region=payload.get("employeeState"),
        store_id=_int_or_none(payload.get("storeId")),
        store_name=payload.get("storeName"),
        purpose=payload.get("purpose"),
        visit_date=parse_date(payload.get("visit_date") or payload.get("visitDate")),
        checkin_time=parse_time(payload.get("checkinTime")),
        checkout_time=parse_time(payload.get("checkoutTime")),
        checkin_latitude=_float_or_none(payload.get("checkinLatitude")),
        checkin_longitude=_float_or_none(payload.get("checkinLongitude")),
        city=payload.get("city"),
        state=payload.get("state"),
        stats=parse_stats(payload.get("statsDto")),
    )


def parse_visits(payload: Any) -> list[VisitRecord]:
    if not isinstance(payload, list):
        return []
    visits: list[VisitRecord] = []
    for row in payload:
        try:
            visits.append(parse_visit(row))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping invalid visit row: {e}")
            continue
    return visits


def parse_profile(payload: dict) -> AgentProfile:
    return AgentProfile(
        agent_id=int(payload["id"]),
        first_name=str(payload.get("firstName") or "").strip(),
        last_name=str(payload.get("lastName") or "").strip(),
        region=payload.get("state"),
        city=payload.get("city"),
        address_line=payload.get("addressLine1"),
        home_latitude=_float_or_none(payload.get("houseLatitude")),
        home_longitude=_float_or_none(payload.get("houseLongitude")),
    )


def parse_agent_detail(agent_id: int, payload: Any) -> AgentDetail:
    if not isinstance(payload, dict):
        return AgentDetail(agent_id=agent_id, stats=VisitStats())
    return AgentDetail(
        agent_id=agent_id,
        stats=parse_stats(payload.get("statsDto")) or VisitStats(),
        visits=tuple(parse_visits(payload.get("visitDto") or [])),
    )
