"""Stateful console endpoints driving the view state machine and map scene."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from ...schemas.dashboard import (
    AgentSelection,
    AgentSummaryModel,
    ConsoleResponse,
    DateRangeRequest,
    LocationFixModel,
    PageSelection,
    PopupModel,
    RegionRollupModel,
    RegionSelection,
    VisitModel,
    VisitStatsModel,
)
from ...schemas.navigation import NavigationSnapshot, ReturnSignal
from ...services.dashboard.state_machine import ViewStateMachine
from ...services.export.geojson import scene_to_feature_collection
from ...services.maps.scene import SceneError
from ...services.visits.aggregation import completed_visits
from ..dependencies import get_console

router = APIRouter(prefix="/console", tags=["console"])
logger = logging.getLogger(__name__)


def _render(console: ViewStateMachine) -> ConsoleResponse:
    state = console.state
    detail = state.agent_detail
    return ConsoleResponse(
        view=state.view.value,
        region=state.region,
        agent_name=state.agent_name,
        agent_id=state.agent_id,
        start_date=state.start_date,
        end_date=state.end_date,
        page=state.page,
        controller_state=console.controller.state.value,
        legend_visible=console.controller.legend_visible,
        rollups=[RegionRollupModel.from_domain(rollup) for rollup in state.rollups.values()],
        roster=[AgentSummaryModel.from_domain(summary) for summary in state.roster],
        locations=[LocationFixModel.from_domain(fix) for fix in state.fixes],
        agent_stats=VisitStatsModel.from_domain(detail.stats) if detail else None,
        completed_visits=[VisitModel.from_domain(visit) for visit in completed_visits(detail.visits)] if detail else [],
        map_error=state.map_error,
        fleet_error=state.fleet_error,
        visits_error=state.visits_error,
        agent_error=state.agent_error,
        is_loading=state.is_loading,
        is_map_loading=state.is_map_loading,
        scene=scene_to_feature_collection(console.controller.map),
    )


@router.get("", response_model=ConsoleResponse, status_code=status.HTTP_200_OK)
def get_console_state(console: ViewStateMachine = Depends(get_console)) -> ConsoleResponse:
    return _render(console)


@router.post("/start", response_model=ConsoleResponse, status_code=status.HTTP_200_OK)
async def start_console(console: ViewStateMachine = Depends(get_console)) -> ConsoleResponse:
    try:
        await console.start()
    except Exception as exc:
        logger.exception(f"Error starting console: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to start console: {exc}",
        ) from exc
    return _render(console)


@router.post("/reset", response_model=ConsoleResponse, status_code=status.HTTP_200_OK)
async def reset_console(console: ViewStateMachine = Depends(get_console)) -> ConsoleResponse:
    try:
        await console.reset()
    except Exception as exc:
        logger.exception(f"Error resetting console: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to reset console: {exc}",
        ) from exc
    return _render(console)


@router.post("/region", response_model=ConsoleResponse, status_code=status.HTTP_200_OK)
async def select_region(payload: RegionSelection, console: ViewStateMachine = Depends(get_console)) -> ConsoleResponse:
    try:
        await console.select_region(payload.region)
    except Exception as exc:
        logger.exception(f"Error selecting region {payload.region!r}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to select region: {exc}",
        ) from exc
    return _render(console)


@router.post("/agent", response_model=ConsoleResponse, status_code=status.HTTP_200_OK)
async def select_agent(payload: AgentSelection, console: ViewStateMachine = Depends(get_console)) -> ConsoleResponse:
    try:
        if payload.agent_id is not None:
            await console.select_location(payload.agent_id)
        else:
            await console.select_agent(payload.agent_name)
    except Exception as exc:
        logger.exception(f"Error selecting agent: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to select agent: {exc}",
        ) from exc
    if console.state.agent_error and console.state.agent_id is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=console.state.agent_error)
    return _render(console)


@router.post("/date-range", response_model=ConsoleResponse, status_code=status.HTTP_200_OK)
async def change_date_range(payload: DateRangeRequest, console: ViewStateMachine = Depends(get_console)) -> ConsoleResponse:
    try:
        await console.change_date_range(payload.start_date, payload.end_date)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(f"Error changing date range: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to change date range: {exc}",
        ) from exc
    return _render(console)


@router.post("/page", response_model=ConsoleResponse, status_code=status.HTTP_200_OK)
def set_page(payload: PageSelection, console: ViewStateMachine = Depends(get_console)) -> ConsoleResponse:
    try:
        console.set_page(payload.page)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _render(console)


@router.post("/markers/{role}/click", response_model=PopupModel | None, status_code=status.HTTP_200_OK)
async def click_marker(role: str, console: ViewStateMachine = Depends(get_console)) -> PopupModel | None:
    try:
        popup = await console.click_marker(role)
    except SceneError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except Exception as exc:
        logger.exception(f"Error opening popup for {role}: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to open popup: {exc}",
        ) from exc
    if popup is None:
        return None
    return PopupModel(
        role=popup.role,
        title=popup.content.title,
        badge=popup.content.badge,
        badge_kind=popup.content.badge_kind,
        lines=list(popup.content.lines),
        coordinates=[popup.longitude, popup.latitude],
    )


@router.post("/visits/{visit_id}/open", status_code=status.HTTP_200_OK)
def open_visit(visit_id: int, console: ViewStateMachine = Depends(get_console)) -> dict:
    """Save the current view and hand back the query for the visit-detail page."""
    try:
        snapshot = console.open_visit(visit_id)
    except OSError as exc:
        logger.exception(f"Error saving navigation snapshot: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to save navigation state: {exc}",
        ) from exc
    return {
        "visit_id": visit_id,
        "query": snapshot.model_dump(mode="json", by_alias=True),
    }


@router.post("/return", response_model=ConsoleResponse, status_code=status.HTTP_200_OK)
async def return_to_console(signal: ReturnSignal, console: ViewStateMachine = Depends(get_console)) -> ConsoleResponse:
    try:
        restored = await console.restore(signal)
    except Exception as exc:
        logger.exception(f"Error restoring console state: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to restore console state: {exc}",
        ) from exc
    if not restored:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No saved console state to return to")
    return _render(console)


@router.get("/snapshot", response_model=NavigationSnapshot, response_model_by_alias=True, status_code=status.HTTP_200_OK)
def current_snapshot(console: ViewStateMachine = Depends(get_console)) -> NavigationSnapshot:
    return console.snapshot()
