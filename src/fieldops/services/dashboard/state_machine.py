"""View state machine coordinating fetches, rollups and the map scene."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Callable, Dict, List, Optional

import httpx

from ...models.domain import (
    AgentDetail,
    AgentLocationFix,
    AgentProfile,
    AgentSummary,
    FetchScope,
    RegionRollup,
    VisitRecord,
)
from ...persistence.snapshots import SnapshotStore
from ...schemas.navigation import NavigationSnapshot, ReturnSignal
from ..identity import display_name, normalize_key
from ..maps.geotoken import AuthError, GeoTokenProvider
from ..maps.scene import MapSceneController, OpenPopup, SceneError, SceneOutcome
from ..maps.style import load_map_style
from ..roster.fetcher import VisitLocationFetcher
from ..visits.aggregation import aggregate, region_roster

logger = logging.getLogger(__name__)

FLEET_FETCH_FAILED = "Failed to fetch employee locations"
NO_LIVE_LOCATIONS = "No live location data available"
NO_AGENT_LOCATIONS = "No location data available for this employee"
MAP_UNAVAILABLE = "Map unavailable"
AGENT_NOT_FOUND = "Employee not found"


class DashboardView(str, Enum):
    FLEET_OVERVIEW = "fleet_overview"
    REGION_DRILLDOWN = "region_drilldown"
    AGENT_DRILLDOWN = "agent_drilldown"


@dataclass(slots=True)
class ConsoleState:
    start_date: date
    end_date: date
    view: DashboardView = DashboardView.FLEET_OVERVIEW
    region: Optional[str] = None
    agent_name: Optional[str] = None
    agent_id: Optional[int] = None
    page: int = 1
    fixes: List[AgentLocationFix] = field(default_factory=list)
    visits: List[VisitRecord] = field(default_factory=list)
    rollups: Dict[str, RegionRollup] = field(default_factory=dict)
    roster: List[AgentSummary] = field(default_factory=list)
    agent_profile: Optional[AgentProfile] = None
    agent_detail: Optional[AgentDetail] = None
    map_error: Optional[str] = None
    fleet_error: Optional[str] = None
    visits_error: Optional[str] = None
    agent_error: Optional[str] = None
    is_loading: bool = False
    is_map_loading: bool = False


class ViewStateMachine:
    """FleetOverview -> RegionDrilldown(region) -> AgentDrilldown(region, agent).

    A date-range change keeps the current view and re-runs the fetch and
    rollup, refreshing the map when an agent is selected. Back/reset always
    lands on FleetOverview with a freshly initialized map.
    """

    def __init__(
        self,
        fetcher: VisitLocationFetcher,
        controller: MapSceneController,
        token_provider: GeoTokenProvider,
        http_client: httpx.AsyncClient,
        snapshot_store: SnapshotStore,
        *,
        role: str = "ADMIN",
        viewer_employee_id: Optional[int] = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.fetcher = fetcher
        self.controller = controller
        self.token_provider = token_provider
        self.http_client = http_client
        self.snapshot_store = snapshot_store
        self.role = role
        self.viewer_employee_id = viewer_employee_id
        current = today()
        self.state = ConsoleState(start_date=current, end_date=current)
        self._scope: Optional[FetchScope] = None
        self._profiles: Optional[List[AgentProfile]] = None
        self._visits_generation = 0

    # scope & roster --------------------------------------------------------

    async def resolve_scope(self) -> FetchScope:
        if self._scope is not None:
            return self._scope
        if self.role != "MANAGER":
            self._scope = FetchScope.everyone()
        elif self.viewer_employee_id is None:
            logger.warning("Manager viewer has no employee id; using an empty team")
            self._scope = FetchScope.team(())
        else:
            team = await self.fetcher.fetch_team_member_ids(self.viewer_employee_id)
            if team.failed:
                # not cached, so the next transition retries the lookup
                return FetchScope.team(())
            self._scope = FetchScope.team(team.items)
        return self._scope

    async def _ensure_profiles(self) -> List[AgentProfile]:
        if self._profiles is None:
            result = await self.fetcher.fetch_roster()
            if result.failed:
                return []
            self._profiles = result.items
        return self._profiles

    async def resolve_agent_id(self, agent_name: str) -> Optional[int]:
        """Join an agent display name to an id across roster, visits and live fixes."""
        key = normalize_key(agent_name)
        for profile in await self._ensure_profiles():
            if normalize_key(profile.full_name) == key:
                return profile.agent_id
        for visit in self.state.visits:
            if visit.agent_id is not None and normalize_key(visit.agent_name) == key:
                return visit.agent_id
        for fix in self.state.fixes:
            if normalize_key(fix.agent_name) == key:
                return fix.agent_id
        return None

    def _fix_for(self, agent_id: int, agent_name: Optional[str]) -> Optional[AgentLocationFix]:
        for fix in self.state.fixes:
            if fix.agent_id == agent_id:
                return fix
        if agent_name:
            key = normalize_key(agent_name)
            for fix in self.state.fixes:
                if normalize_key(fix.agent_name) == key:
                    return fix
        return None

    # map bootstrap ---------------------------------------------------------

    async def _initialize_map(self, *, refresh_token: bool = False) -> bool:
        try:
            if refresh_token:
                token = await self.token_provider.refresh()
            else:
                token = await self.token_provider.acquire()
            style = await load_map_style(self.http_client, token)
        except AuthError as exc:
            logger.error(f"Map token unavailable: {exc}")
            self.state.map_error = MAP_UNAVAILABLE
            return False
        except ValueError as exc:
            logger.error(f"Error initializing map: {exc}")
            self.state.map_error = MAP_UNAVAILABLE
            return False
        self.controller.initialize(style)
        return True

    # transitions -----------------------------------------------------------

    async def start(self) -> ConsoleState:
        """Session bootstrap: fleet overview for today's range."""
        await self._enter_fleet(refresh_token=False)
        await self.refresh_visits()
        return self.state

    async def reset(self) -> ConsoleState:
        """Back/reset to FleetOverview with a re-fetched token and a fresh map."""
        self.state.view = DashboardView.FLEET_OVERVIEW
        self.state.region = None
        self.state.agent_name = None
        self.state.agent_id = None
        self.state.agent_profile = None
        self.state.agent_detail = None
        self.state.agent_error = None
        self.state.roster = []
        self.state.page = 1
        await self._enter_fleet(refresh_token=True)
        await self.refresh_visits()
        return self.state

    async def _enter_fleet(self, *, refresh_token: bool) -> None:
        self.state.is_map_loading = True
        self.state.map_error = None
        self.state.fleet_error = None
        self.controller.reset()
        try:
            scope = await self.resolve_scope()
            result = await self.fetcher.fetch_fleet_locations(scope)
            self.state.fixes = result.items
            if result.failed:
                self.state.fleet_error = result.error
                self.state.map_error = FLEET_FETCH_FAILED
                return
            if not result.items:
                self.state.map_error = NO_LIVE_LOCATIONS
                return
            if not await self._initialize_map(refresh_token=refresh_token):
                return
            if self.controller.render_fleet(result.items) is SceneOutcome.NO_DATA:
                self.state.map_error = NO_LIVE_LOCATIONS
        except SceneError as exc:
            logger.error(f"Error rendering fleet scene: {exc}")
            self.state.map_error = MAP_UNAVAILABLE
        finally:
            self.state.is_map_loading = False

    async def refresh_visits(self) -> bool:
        """Re-fetch visits for the selected range and recompute every rollup.

        Returns ``False`` when a newer refresh started while this one was in
        flight; its result is dropped so an older range never overwrites a
        newer one.
        """
        self._visits_generation += 1
        generation = self._visits_generation
        self.state.is_loading = True
        try:
            scope = await self.resolve_scope()
            result = await self.fetcher.fetch_visits(self.state.start_date, self.state.end_date, scope)
        finally:
            if generation == self._visits_generation:
                self.state.is_loading = False
        if generation != self._visits_generation:
            logger.debug("Discarding superseded visit refresh")
            return False
        self.state.visits = result.items
        self.state.visits_error = result.error
        self._recompute()
        return True

    def _recompute(self) -> None:
        self.state.rollups = aggregate(self.state.visits)
        if self.state.region is not None:
            self.state.roster = region_roster(self.state.visits, self.state.region)
        else:
            self.state.roster = []

    async def select_region(self, region: str) -> ConsoleState:
        """Filter to one region and build its roster; the map is left untouched."""
        self.state.view = DashboardView.REGION_DRILLDOWN
        self.state.region = normalize_key(region)
        self.state.agent_name = None
        self.state.agent_id = None
        self.state.agent_profile = None
        self.state.agent_detail = None
        self.state.agent_error = None
        self.state.page = 1
        self._recompute()
        return self.state

    async def select_agent(self, agent_name: str) -> ConsoleState:
        agent_id = await self.resolve_agent_id(agent_name)
        if agent_id is None:
            logger.error(f"Employee not found: {agent_name}")
            self.state.agent_error = AGENT_NOT_FOUND
            return self.state
        if self.state.region is None:
            self.state.region = self._region_of(agent_name)
        self.state.view = DashboardView.AGENT_DRILLDOWN
        self.state.agent_name = display_name(agent_name)
        self.state.agent_id = agent_id
        self.state.agent_error = None
        self.state.page = 1
        self._recompute()
        await self._drill()
        return self.state

    async def select_location(self, agent_id: int) -> ConsoleState:
        """Drill into an agent picked from the live-location list."""
        fix = self._fix_for(agent_id, None)
        if fix is None:
            self.state.agent_error = AGENT_NOT_FOUND
            return self.state
        self.state.view = DashboardView.AGENT_DRILLDOWN
        self.state.agent_name = display_name(fix.agent_name)
        self.state.agent_id = agent_id
        self.state.region = self._region_of(fix.agent_name)
        self.state.agent_error = None
        self.state.page = 1
        self._recompute()
        await self._drill()
        return self.state

    def _region_of(self, agent_name: str) -> Optional[str]:
        key = normalize_key(agent_name)
        for visit in self.state.visits:
            if normalize_key(visit.agent_name) == key:
                return normalize_key(visit.agent_region)
        return None

    async def _drill(self) -> None:
        agent_id = self.state.agent_id
        if agent_id is None:
            return
        self.state.map_error = None
        self.state.is_map_loading = True
        try:
            if self.controller.map is None and not await self._initialize_map():
                # map is down; the visit table still loads on its own
                await self._load_detail_without_map(agent_id)
                return
            scene = await self.controller.drill_into_agent(
                agent_id,
                self.state.start_date,
                self.state.end_date,
                fix=self._fix_for(agent_id, self.state.agent_name),
            )
        except SceneError as exc:
            logger.error(f"Error rendering agent scene: {exc}")
            self.state.map_error = MAP_UNAVAILABLE
            await self._load_detail_without_map(agent_id)
            return
        finally:
            self.state.is_map_loading = False

        if scene.outcome is SceneOutcome.SUPERSEDED:
            return
        self.state.agent_profile = scene.profile
        self.state.agent_detail = scene.detail
        self.state.agent_error = scene.errors[0] if scene.errors else None
        if scene.outcome is SceneOutcome.NO_DATA:
            self.state.map_error = NO_AGENT_LOCATIONS

    async def _load_detail_without_map(self, agent_id: int) -> None:
        result = await self.fetcher.fetch_agent_detail(agent_id, self.state.start_date, self.state.end_date)
        self.state.agent_detail = result.items[0] if result.items else None
        self.state.agent_error = result.error

    async def change_date_range(self, start: date, end: date) -> ConsoleState:
        if end < start:
            raise ValueError("End date must not be before start date.")
        self.state.start_date = start
        self.state.end_date = end
        self.state.page = 1
        if not await self.refresh_visits():
            # a later range change owns the view now
            return self.state
        if self.state.view is DashboardView.AGENT_DRILLDOWN:
            await self._drill()
        return self.state

    def set_page(self, page: int) -> ConsoleState:
        if page < 1:
            raise ValueError("Page numbers start at 1.")
        self.state.page = page
        return self.state

    async def click_marker(self, role: str) -> Optional[OpenPopup]:
        return await self.controller.click_marker(role)

    # history boundary ------------------------------------------------------

    def snapshot(self) -> NavigationSnapshot:
        return NavigationSnapshot(
            region=self.state.region,
            agent=self.state.agent_name,
            start_date=self.state.start_date,
            end_date=self.state.end_date,
            page=self.state.page,
        )

    def open_visit(self, visit_id: int) -> NavigationSnapshot:
        """Persist the current view before handing off to the visit-detail view."""
        snapshot = self.snapshot()
        self.snapshot_store.save(snapshot)
        logger.info(f"Saved navigation snapshot before opening visit {visit_id}")
        return snapshot

    async def restore(self, signal: ReturnSignal) -> bool:
        """Rehydrate the {region, agent, range, page} tuple on a return signal.

        The stored snapshot wins; without one, the tuple carried by the
        signal itself is used.
        """
        if not signal.is_return:
            return False
        saved = self.snapshot_store.load()
        if saved is not None:
            self.snapshot_store.clear()
        else:
            saved = signal.carried_snapshot()
        if saved is None:
            return False

        self.state.start_date = saved.start_date
        self.state.end_date = saved.end_date
        self.state.region = normalize_key(saved.region) if saved.region else None
        self.state.agent_name = None
        self.state.agent_id = None
        self.state.agent_profile = None
        self.state.agent_detail = None
        self.state.view = (
            DashboardView.REGION_DRILLDOWN if self.state.region is not None else DashboardView.FLEET_OVERVIEW
        )
        await self.refresh_visits()

        if saved.agent:
            await self.select_agent(saved.agent)
        self.state.page = saved.page
        return True

    def close(self) -> None:
        self.controller.destroy()
