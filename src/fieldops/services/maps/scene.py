"""Map scene controller: map lifecycle, markers, popups and camera framing."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Awaitable, Callable, Optional, Sequence

from ...config import settings
from ...models.domain import AgentDetail, AgentLocationFix, AgentProfile
from ..geospatial import Camera, bounds_for_points, fit_camera
from ..roster.fetcher import VisitLocationFetcher
from .popups import (
    PopupContent,
    current_location_popup,
    home_location_popup,
    live_location_popup,
    visit_popup,
)

logger = logging.getLogger(__name__)

CURRENT_LOCATION_ROLE = "current-location"
HOME_LOCATION_ROLE = "home-location"

CURRENT_LOCATION_COLOR = "#22C55E"
HOME_LOCATION_COLOR = "#EF4444"
VISIT_COLOR = "#3B82F6"

ClickHandler = Callable[[], Awaitable[Optional[PopupContent]]]


def visit_role(number: int) -> str:
    return f"visit-#{number}"


def agent_role(agent_id: int) -> str:
    return f"agent-{agent_id}"


def fleet_color(index: int) -> str:
    # golden-angle hue spacing keeps neighbouring markers distinguishable
    return f"hsl({(index * 137.508) % 360:.3f}, 70%, 50%)"


class SceneError(Exception):
    """Map operation attempted without a live map, or a bounds fit over zero points."""


class ControllerState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    FLEET_SHOWN = "fleet_shown"
    AGENT_SHOWN = "agent_shown"


class SceneOutcome(str, Enum):
    RENDERED = "rendered"
    NO_DATA = "no_data"
    SUPERSEDED = "superseded"


@dataclass(slots=True)
class Marker:
    role: str
    latitude: float
    longitude: float
    color: str
    popup: Optional[PopupContent] = None
    on_click: Optional[ClickHandler] = None


@dataclass(slots=True, frozen=True)
class OpenPopup:
    role: str
    latitude: float
    longitude: float
    content: PopupContent


class MapInstance:
    """In-process stand-in for the rendering context: style, camera, markers, popup."""

    def __init__(self, style: dict, center: tuple[float, float], zoom: float) -> None:
        self.style = style
        self.camera = Camera(latitude=center[0], longitude=center[1], zoom=zoom, animate=False)
        self.markers: dict[str, Marker] = {}
        self.popup: Optional[OpenPopup] = None
        self.removed = False

    def add_marker(self, marker: Marker) -> None:
        if marker.role in self.markers:
            raise SceneError(f"A marker for role '{marker.role}' is already attached.")
        self.markers[marker.role] = marker

    def clear(self) -> None:
        self.markers.clear()
        self.popup = None

    def open_popup(self, popup: OpenPopup) -> None:
        self.popup = popup

    def close_popup(self) -> None:
        self.popup = None

    def fit(self, camera: Camera) -> None:
        self.camera = camera

    def remove(self) -> None:
        self.clear()
        self.style = {}
        self.removed = True


@dataclass(slots=True)
class AgentScene:
    """Result of a drill-down: what was rendered plus the data behind it."""

    outcome: SceneOutcome
    profile: Optional[AgentProfile] = None
    detail: Optional[AgentDetail] = None
    errors: list[str] = field(default_factory=list)


class MapSceneController:
    """Owns one map instance and keeps its scene consistent across transitions.

    Every render clears the whole scene before adding markers, so a role is
    never attached twice and nothing from an earlier render survives. Each
    render, reset and destroy bumps ``generation``; a drill-down whose
    fetches finish after a newer transition has started is discarded.
    """

    def __init__(
        self,
        fetcher: VisitLocationFetcher,
        *,
        viewport_width: int | None = None,
        viewport_height: int | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.viewport_width = viewport_width or settings.map_viewport_width
        self.viewport_height = viewport_height or settings.map_viewport_height
        self.map: Optional[MapInstance] = None
        self.state = ControllerState.UNINITIALIZED
        self.generation = 0
        self.legend_visible = False
        self._popup_generation = 0

    # lifecycle -------------------------------------------------------------

    def initialize(self, style: dict, center: tuple[float, float] | None = None, zoom: float | None = None) -> MapInstance:
        if self.map is not None:
            self._teardown()
        self.map = MapInstance(
            style=style,
            center=center or settings.map_default_center,
            zoom=settings.map_default_zoom if zoom is None else zoom,
        )
        self.state = ControllerState.READY
        logger.info("Map initialized")
        return self.map

    def reset(self) -> None:
        """Discard the map entirely; callers must ``initialize`` again."""
        self._teardown()
        logger.info("Map reset")

    def destroy(self) -> None:
        self._teardown()

    def _teardown(self) -> None:
        self.generation += 1
        if self.map is not None:
            self.map.remove()
        self.map = None
        self.state = ControllerState.UNINITIALIZED
        self.legend_visible = False

    def _require_map(self) -> MapInstance:
        if self.map is None or self.map.removed:
            raise SceneError("Map is not initialized.")
        return self.map

    @property
    def marker_count(self) -> int:
        return len(self.map.markers) if self.map is not None else 0

    # framing ---------------------------------------------------------------

    def fit_to_points(
        self,
        points: Sequence[tuple[float, float]],
        *,
        padding: int,
        max_zoom: float,
        animate: bool = True,
    ) -> Camera:
        map_instance = self._require_map()
        if not points:
            raise SceneError("Cannot fit bounds to an empty point set.")
        camera = fit_camera(
            bounds_for_points(points),
            self.viewport_width,
            self.viewport_height,
            padding=padding,
            max_zoom=max_zoom,
            animate=animate,
        )
        map_instance.fit(camera)
        return camera

    # fleet -----------------------------------------------------------------

    def render_fleet(self, fixes: Sequence[AgentLocationFix]) -> SceneOutcome:
        """One marker per agent; clicking a marker loads the agent and opens its popup.

        Fixes are expected one per agent, as ``fetch_fleet_locations`` yields
        them. If an agent repeats, its last fix replaces the earlier one, so
        the marker count equals the number of distinct agents.
        """
        map_instance = self._require_map()
        self.generation += 1
        map_instance.clear()
        self.legend_visible = False

        for index, fix in enumerate(fixes):
            role = agent_role(fix.agent_id)
            # a repeated agent keeps only its latest fix
            map_instance.markers.pop(role, None)
            map_instance.add_marker(
                Marker(
                    role=role,
                    latitude=fix.latitude,
                    longitude=fix.longitude,
                    color=fleet_color(index),
                    on_click=self._live_popup_loader(fix),
                )
            )

        if not map_instance.markers:
            self.state = ControllerState.READY
            return SceneOutcome.NO_DATA

        self.fit_to_points(
            [(marker.latitude, marker.longitude) for marker in map_instance.markers.values()],
            padding=settings.fleet_fit_padding,
            max_zoom=settings.fleet_fit_max_zoom,
        )
        self.state = ControllerState.FLEET_SHOWN
        logger.info(f"Rendered fleet scene with {len(map_instance.markers)} markers")
        return SceneOutcome.RENDERED

    def _live_popup_loader(self, fix: AgentLocationFix) -> ClickHandler:
        async def load() -> Optional[PopupContent]:
            result = await self.fetcher.fetch_agent_profile(fix.agent_id)
            if result.failed or not result.items:
                return None
            return live_location_popup(result.items[0].full_name or fix.agent_name, fix)

        return load

    # agent drill-down ------------------------------------------------------

    async def drill_into_agent(
        self,
        agent_id: int,
        start: date,
        end: date,
        fix: Optional[AgentLocationFix] = None,
    ) -> AgentScene:
        """Show the agent's live position, home and visit check-ins in range.

        Profile and visit fetches run concurrently; the scene is rebuilt only
        after both resolve.
        """
        self._require_map()
        self.generation += 1
        generation = self.generation

        profile_result, detail_result = await asyncio.gather(
            self.fetcher.fetch_agent_profile(agent_id),
            self.fetcher.fetch_agent_detail(agent_id, start, end),
        )

        if generation != self.generation or self.map is None:
            logger.debug(f"Discarding superseded drill-down for employee {agent_id}")
            return AgentScene(outcome=SceneOutcome.SUPERSEDED)
        map_instance = self.map

        errors = [result.error for result in (profile_result, detail_result) if result.error]
        profile = profile_result.items[0] if profile_result.items else None
        detail = detail_result.items[0] if detail_result.items else None

        agent_name = (profile.full_name if profile else "") or (fix.agent_name if fix else "") or "Unknown"
        map_instance.clear()

        if fix is not None:
            map_instance.add_marker(
                Marker(
                    role=CURRENT_LOCATION_ROLE,
                    latitude=fix.latitude,
                    longitude=fix.longitude,
                    color=CURRENT_LOCATION_COLOR,
                    popup=current_location_popup(agent_name, fix),
                )
            )
        if profile is not None and profile.has_home_location:
            map_instance.add_marker(
                Marker(
                    role=HOME_LOCATION_ROLE,
                    latitude=profile.home_latitude,
                    longitude=profile.home_longitude,
                    color=HOME_LOCATION_COLOR,
                    popup=home_location_popup(profile),
                )
            )
        visits = detail.visits if detail else ()
        for number, visit in enumerate(visits, start=1):
            if not visit.has_checkin_location:
                continue
            map_instance.add_marker(
                Marker(
                    role=visit_role(number),
                    latitude=visit.checkin_latitude,
                    longitude=visit.checkin_longitude,
                    color=VISIT_COLOR,
                    popup=visit_popup(agent_name, visit, number),
                )
            )

        self.state = ControllerState.AGENT_SHOWN
        if not map_instance.markers:
            self.legend_visible = False
            return AgentScene(outcome=SceneOutcome.NO_DATA, profile=profile, detail=detail, errors=errors)

        self.fit_to_points(
            [(marker.latitude, marker.longitude) for marker in map_instance.markers.values()],
            padding=settings.agent_fit_padding,
            max_zoom=settings.agent_fit_max_zoom,
            animate=False,
        )
        self.legend_visible = True
        logger.info(f"Rendered agent scene for employee {agent_id} with {len(map_instance.markers)} markers")
        return AgentScene(outcome=SceneOutcome.RENDERED, profile=profile, detail=detail, errors=errors)

    # interaction -----------------------------------------------------------

    async def click_marker(self, role: str) -> Optional[OpenPopup]:
        """Open the popup for ``role``, closing any other popup first.

        Returns ``None`` when the popup content could not be loaded or the
        scene changed while it was loading.
        """
        map_instance = self._require_map()
        marker = map_instance.markers.get(role)
        if marker is None:
            raise SceneError(f"No marker attached for role '{role}'.")

        self._popup_generation += 1
        popup_generation = self._popup_generation
        scene_generation = self.generation

        content = marker.popup
        if content is None and marker.on_click is not None:
            content = await marker.on_click()
        if content is None:
            return None
        if (
            popup_generation != self._popup_generation
            or scene_generation != self.generation
            or self.map is not map_instance
        ):
            return None

        map_instance.close_popup()
        popup = OpenPopup(role=role, latitude=marker.latitude, longitude=marker.longitude, content=content)
        map_instance.open_popup(popup)
        return popup

    def close_popup(self) -> None:
        if self.map is not None:
            self.map.close_popup()
