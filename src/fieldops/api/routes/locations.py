"""Live location and per-agent visit endpoints."""

from __future__ import annotations

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...schemas.dashboard import AgentVisitsResponse, FleetLocationsResponse, LocationFixModel, VisitModel, VisitStatsModel
from ...services.dashboard.state_machine import ViewStateMachine
from ...services.roster.fetcher import VisitLocationFetcher
from ...services.visits.aggregation import completed_visits, status_breakdown
from ..dependencies import get_console, get_fetcher, resolve_range

router = APIRouter(tags=["locations"])
logger = logging.getLogger(__name__)


@router.get("/locations/fleet", response_model=FleetLocationsResponse, status_code=status.HTTP_200_OK)
async def get_fleet_locations(
    fetcher: VisitLocationFetcher = Depends(get_fetcher),
    console: ViewStateMachine = Depends(get_console),
) -> FleetLocationsResponse:
    try:
        scope = await console.resolve_scope()
        result = await fetcher.fetch_fleet_locations(scope)
    except Exception as exc:
        logger.exception(f"Error fetching fleet locations: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch fleet locations: {exc}",
        ) from exc
    return FleetLocationsResponse(
        items=[LocationFixModel.from_domain(fix) for fix in result.items],
        error=result.error,
    )


@router.get("/agents/{agent_id}/visits", response_model=AgentVisitsResponse, status_code=status.HTTP_200_OK)
async def get_agent_visits(
    agent_id: int,
    start: date | None = Query(default=None),
    end: date | None = Query(default=None),
    fetcher: VisitLocationFetcher = Depends(get_fetcher),
) -> AgentVisitsResponse:
    start_date, end_date = resolve_range(start, end)
    try:
        result = await fetcher.fetch_agent_detail(agent_id, start_date, end_date)
    except Exception as exc:
        logger.exception(f"Error fetching visits for employee {agent_id}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to fetch employee visits: {exc}",
        ) from exc
    detail = result.items[0] if result.items else None
    visits = list(detail.visits) if detail else []
    return AgentVisitsResponse(
        agent_id=agent_id,
        start_date=start_date,
        end_date=end_date,
        stats=VisitStatsModel.from_domain(detail.stats) if detail else None,
        visits=[VisitModel.from_domain(visit) for visit in visits],
        completed_visits=[VisitModel.from_domain(visit) for visit in completed_visits(visits)],
        status_counts=status_breakdown(visits),
        error=result.error,
    )
