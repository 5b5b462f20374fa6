"""Shared service wiring for route handlers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Optional

import httpx
from fastapi import HTTPException, Request, status

from ..config import settings
from ..persistence.snapshots import SnapshotStore
from ..services.dashboard.state_machine import ViewStateMachine
from ..services.maps.geotoken import GeoTokenProvider, MapSession
from ..services.maps.scene import MapSceneController
from ..services.roster.api_client import FieldOpsAPIClient
from ..services.roster.fetcher import VisitLocationFetcher


@dataclass(slots=True)
class ConsoleServices:
    http_client: httpx.AsyncClient
    api_client: FieldOpsAPIClient
    fetcher: VisitLocationFetcher
    token_provider: GeoTokenProvider
    console: ViewStateMachine

    async def aclose(self) -> None:
        self.console.close()
        await self.api_client.aclose()
        await self.http_client.aclose()


def build_services(
    *,
    api_transport: httpx.AsyncBaseTransport | None = None,
    map_transport: httpx.AsyncBaseTransport | None = None,
    data_root: Optional[Path] = None,
) -> ConsoleServices:
    http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.api_timeout_seconds, connect=10.0),
        transport=map_transport,
    )
    api_client = FieldOpsAPIClient(transport=api_transport)
    fetcher = VisitLocationFetcher(api_client)
    token_provider = GeoTokenProvider(MapSession(), http_client)
    console = ViewStateMachine(
        fetcher,
        MapSceneController(fetcher),
        token_provider,
        http_client,
        SnapshotStore(root=data_root),
        role=settings.viewer_role,
        viewer_employee_id=settings.viewer_employee_id,
    )
    return ConsoleServices(
        http_client=http_client,
        api_client=api_client,
        fetcher=fetcher,
        token_provider=token_provider,
        console=console,
    )


def get_services(request: Request) -> ConsoleServices:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Console services are not running.")
    return services


def get_fetcher(request: Request) -> VisitLocationFetcher:
    return get_services(request).fetcher


def get_console(request: Request) -> ViewStateMachine:
    return get_services(request).console


def get_token_provider(request: Request) -> GeoTokenProvider:
    return get_services(request).token_provider


def resolve_range(start: Optional[date], end: Optional[date]) -> tuple[date, date]:
    today = date.today()
    start_date = start or today
    end_date = end or max(start_date, today)
    if end_date < start_date:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="end must not be before start")
    return start_date, end_date
