"""Regional rollup endpoints."""

from __future__ import annotations

import logging
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...schemas.dashboard import AgentSummaryModel, RegionRollupModel, RegionRosterResponse, RollupsResponse
from ...services.dashboard.state_machine import ViewStateMachine
from ...services.identity import normalize_key
from ...services.roster.fetcher import VisitLocationFetcher
from ...services.visits.aggregation import aggregate, region_label, region_roster
from ..dependencies import get_console, get_fetcher, resolve_range

router = APIRouter(prefix="/dashboard", tags=["dashboard"])
logger = logging.getLogger(__name__)


@router.get("/rollups", response_model=RollupsResponse, status_code=status.HTTP_200_OK)
async def get_rollups(
    start: date | None = Query(default=None, description="Inclusive range start (defaults to today)"),
    end: date | None = Query(default=None, description="Inclusive range end"),
    fetcher: VisitLocationFetcher = Depends(get_fetcher),
    console: ViewStateMachine = Depends(get_console),
) -> RollupsResponse:
    start_date, end_date = resolve_range(start, end)
    try:
        scope = await console.resolve_scope()
        result = await fetcher.fetch_visits(start_date, end_date, scope)
        regions: List[RegionRollupModel] = [
            RegionRollupModel.from_domain(rollup) for rollup in aggregate(result.items).values()
        ]
    except Exception as exc:
        logger.exception(f"Error building region rollups: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to build region rollups: {exc}",
        ) from exc
    return RollupsResponse(start_date=start_date, end_date=end_date, regions=regions, error=result.error)


@router.get("/regions/{region}/agents", response_model=RegionRosterResponse, status_code=status.HTTP_200_OK)
async def get_region_roster(
    region: str,
    start: date | None = Query(default=None),
    end: date | None = Query(default=None),
    fetcher: VisitLocationFetcher = Depends(get_fetcher),
    console: ViewStateMachine = Depends(get_console),
) -> RegionRosterResponse:
    start_date, end_date = resolve_range(start, end)
    region_key = normalize_key(region)
    try:
        scope = await console.resolve_scope()
        result = await fetcher.fetch_visits(start_date, end_date, scope)
        agents = region_roster(result.items, region_key)
    except Exception as exc:
        logger.exception(f"Error building roster for region {region!r}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to build region roster: {exc}",
        ) from exc
    if not agents and not result.failed:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No agents with completed visits in region '{region}'",
        )
    return RegionRosterResponse(
        region=region_key,
        label=region_label(region_key),
        agents=[AgentSummaryModel.from_domain(summary) for summary in agents],
        error=result.error,
    )
