"""Popup content for each marker role."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time
from typing import Optional

from ...models.domain import AgentLocationFix, AgentProfile, VisitRecord


@dataclass(slots=True, frozen=True)
class PopupContent:
    title: str
    badge: str
    badge_kind: str
    lines: tuple[str, ...] = ()


def format_day(value: Optional[date]) -> str:
    return value.strftime("%b %d, %Y") if value else "Unknown date"


def format_clock(value: Optional[time]) -> str:
    if value is None:
        return "--:--"
    hour = value.hour % 12 or 12
    suffix = "AM" if value.hour < 12 else "PM"
    return f"{hour}:{value.minute:02d} {suffix}"


def live_location_popup(agent_name: str, fix: AgentLocationFix) -> PopupContent:
    return PopupContent(
        title=agent_name,
        badge="Live Location",
        badge_kind="current",
        lines=(
            "Location Updated",
            f"{format_day(fix.observed_date)} at {format_clock(fix.observed_time)}",
        ),
    )


def current_location_popup(agent_name: str, fix: AgentLocationFix) -> PopupContent:
    return PopupContent(
        title=agent_name,
        badge="Current Location",
        badge_kind="current",
        lines=(f"Last seen at {format_clock(fix.observed_time)}",),
    )


def home_location_popup(profile: AgentProfile) -> PopupContent:
    location = ", ".join(part for part in (profile.city, profile.region) if part)
    lines = [profile.address_line or "Address not available"]
    if location:
        lines.append(location)
    return PopupContent(
        title=profile.full_name,
        badge="Home Location",
        badge_kind="home",
        lines=tuple(lines),
    )


def visit_popup(agent_name: str, visit: VisitRecord, number: int) -> PopupContent:
    lines = [
        visit.store_name or "Unknown store",
        f"Check-in Date: {format_day(visit.visit_date)}",
        f"Check-in Time: {format_clock(visit.checkin_time)}",
    ]
    if visit.checkout_time is not None:
        lines.append(f"Check-out: {format_clock(visit.checkout_time)}")
    else:
        lines.append("Not checked out yet")
    if visit.purpose:
        lines.append(visit.purpose)
    location = ", ".join(part for part in (visit.city, visit.state) if part)
    if location:
        lines.append(location)
    return PopupContent(
        title=agent_name,
        badge=f"Visit #{number}",
        badge_kind="visit",
        lines=tuple(lines),
    )
