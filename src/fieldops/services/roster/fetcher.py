"""Visit and live-location fetching with partial-failure tolerance."""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Optional

from ...models.domain import AgentDetail, AgentLocationFix, AgentProfile, FetchResult, FetchScope, VisitRecord
from .api_client import FetchError, FieldOpsAPIClient, LocationNotFound
from .parsing import parse_agent_detail, parse_location_fix, parse_profile, parse_visits

logger = logging.getLogger(__name__)


class VisitLocationFetcher:
    """Issues the upstream calls; never raises past its own boundary.

    Every public coroutine returns a :class:`FetchResult`. On failure the
    collection is empty and ``error`` carries a user-facing message.
    """

    def __init__(self, client: FieldOpsAPIClient) -> None:
        self.client = client

    async def fetch_roster(self) -> FetchResult[AgentProfile]:
        try:
            payload = await self.client.get_json("/employee/getAll")
        except FetchError as exc:
            logger.error(f"Error fetching employee info: {exc}")
            return FetchResult(error="Failed to fetch employees")
        profiles: list[AgentProfile] = []
        for row in payload if isinstance(payload, list) else []:
            try:
                profiles.append(parse_profile(row))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping invalid employee row: {e}")
        return FetchResult(items=profiles)

    async def fetch_team_member_ids(self, employee_id: int) -> FetchResult[int]:
        try:
            payload = await self.client.get_json("/employee/team/getbyEmployee", params={"id": employee_id})
        except FetchError as exc:
            logger.error(f"Error fetching team for employee {employee_id}: {exc}")
            return FetchResult(error="Failed to fetch team")
        if not isinstance(payload, list) or not payload:
            return FetchResult()
        officers = payload[0].get("fieldOfficers") or []
        member_ids = [int(officer["id"]) for officer in officers if officer.get("id") is not None]
        return FetchResult(items=member_ids)

    async def _fetch_fix(self, agent_id: int) -> Optional[AgentLocationFix]:
        try:
            payload = await self.client.get_live_location(agent_id)
        except LocationNotFound:
            logger.debug(f"No live location for employee {agent_id}")
            return None
        except FetchError as exc:
            logger.info(f"Live location lookup failed for employee {agent_id}: {exc}")
            return None
        return parse_location_fix(payload)

    async def fetch_fleet_locations(self, scope: FetchScope) -> FetchResult[AgentLocationFix]:
        """Live fixes for the scope, sorted by agent name.

        At most one fix per agent; repeated ids are looked up once. An agent
        without a live fix is dropped from the result; it never fails the
        batch. Only a failure to list the agents themselves sets the error
        flag.
        """
        if scope.kind == "team":
            agent_ids = list(scope.member_ids)
        else:
            roster = await self.fetch_roster()
            if roster.failed:
                return FetchResult(error="Failed to fetch employee locations")
            agent_ids = [profile.agent_id for profile in roster.items]
        agent_ids = list(dict.fromkeys(agent_ids))

        if not agent_ids:
            return FetchResult()

        fixes = await asyncio.gather(*(self._fetch_fix(agent_id) for agent_id in agent_ids))
        locations = list({fix.agent_id: fix for fix in fixes if fix is not None}.values())
        locations.sort(key=lambda fix: (fix.agent_name.casefold(), fix.agent_id))
        logger.info(f"Fetched {len(locations)}/{len(agent_ids)} live locations")
        return FetchResult(items=locations)

    async def fetch_visits(self, start: date, end: date, scope: FetchScope) -> FetchResult[VisitRecord]:
        """Visit records for the inclusive date range, unsorted."""
        params = {"startDate": start.isoformat(), "endDate": end.isoformat()}
        try:
            payload = await self.client.get_json("/report/getCounts", params=params)
        except FetchError as exc:
            logger.error(f"Error fetching visits: {exc}")
            return FetchResult(error="Failed to fetch visits")
        visits = parse_visits(payload)
        if scope.kind == "team":
            members = set(scope.member_ids)
            visits = [visit for visit in visits if visit.agent_id in members]
        return FetchResult(items=visits)

    async def fetch_agent_detail(self, agent_id: int, start: date, end: date) -> FetchResult[AgentDetail]:
        """Visits plus the stats block for one agent; at most one item."""
        params = {"id": agent_id, "start": start.isoformat(), "end": end.isoformat()}
        try:
            payload = await self.client.get_json("/visit/getByDateRangeAndEmployeeStats", params=params)
        except FetchError as exc:
            logger.error(f"Error fetching employee details for {agent_id}: {exc}")
            return FetchResult(error="Failed to fetch employee details")
        return FetchResult(items=[parse_agent_detail(agent_id, payload)])

    async def fetch_agent_profile(self, agent_id: int) -> FetchResult[AgentProfile]:
        try:
            payload = await self.client.get_json("/employee/getById", params={"id": agent_id})
        except FetchError as exc:
            logger.error(f"Error fetching employee {agent_id}: {exc}")
            return FetchResult(error="Failed to fetch employee")
        try:
            return FetchResult(items=[parse_profile(payload)])
        except (KeyError, TypeError, ValueError) as exc:
            logger.error(f"Malformed employee payload for {agent_id}: {exc}")
            return FetchResult(error="Failed to fetch employee")
