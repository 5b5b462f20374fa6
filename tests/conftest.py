from __future__ import annotations

from datetime import date
from pathlib import Path

import httpx
import pytest

from fieldops.persistence.snapshots import SnapshotStore
from fieldops.services.dashboard.state_machine import ViewStateMachine
from fieldops.services.maps.geotoken import GeoTokenProvider, MapSession
from fieldops.services.maps.scene import MapSceneController
from fieldops.services.roster.api_client import FieldOpsAPIClient
from fieldops.services.roster.fetcher import VisitLocationFetcher

API_BASE = "https://fieldops.test"
TOKEN_URL = "https://auth.maps.test/token"
STYLE_URL = "https://api.olamaps.io/tiles/vector/v1/styles/default-light-standard/style.json"
TODAY = date(2024, 5, 2)


def employee(eid: int, first: str, last: str, state: str = "Maharashtra", house: tuple[float, float] | None = None) -> dict:
    payload = {
        "id": eid,
        "firstName": first,
        "lastName": last,
        "state": state,
        "city": "Pune",
        "addressLine1": f"{eid} MG Road",
    }
    if house:
        payload["houseLatitude"], payload["houseLongitude"] = house
    return payload


def live_fix(eid: int, name: str, lat: float, lon: float) -> dict:
    return {
        "id": eid * 10,
        "empId": eid,
        "empName": name,
        "latitude": lat,
        "longitude": lon,
        "updatedAt": "2024-05-02",
        "updatedTime": "14:05:00",
    }


def visit(
    vid: int,
    eid: int,
    first: str,
    last: str,
    state: str = "Maharashtra",
    *,
    checkin: str | None = None,
    checkout: str | None = None,
    completed: int = 0,
    location: tuple[float, float] | None = None,
    visit_date: str = "2024-05-02",
) -> dict:
    payload = {
        "id": vid,
        "employeeId": eid,
        "employeeFirstName": first,
        "employeeLastName": last,
        "employeeState": state,
        "storeId": vid * 100,
        "storeName": f"Store {vid}",
        "purpose": "Order follow-up",
        "visit_date": visit_date,
        "checkinTime": checkin,
        "checkoutTime": checkout,
        "city": "Pune",
        "state": state,
        "statsDto": {"completedVisitCount": completed, "fullDays": 1, "halfDays": 0, "absences": 0},
    }
    if location:
        payload["checkinLatitude"], payload["checkinLongitude"] = location
    return payload


class FakeFieldOpsAPI:
    """In-memory stand-in for the roster/visit service."""

    def __init__(self) -> None:
        self.employees: dict[int, dict] = {}
        self.live: dict[int, dict] = {}
        self.visits: list[dict] = []
        self.details: dict[int, dict] = {}
        self.teams: dict[int, list[int]] = {}
        self.failing_paths: set[str] = set()
        self.filter_visits_by_date = False
        self.calls: list[tuple[str, dict]] = []

    def add_employee(self, payload: dict, fix: dict | None = None) -> None:
        self.employees[payload["id"]] = payload
        if fix is not None:
            self.live[payload["id"]] = fix

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        params = dict(request.url.params)
        self.calls.append((path, params))
        if path in self.failing_paths:
            return httpx.Response(500, json={"error": "boom"})
        if path == "/employee/getAll":
            return httpx.Response(200, json=list(self.employees.values()))
        if path == "/employee/getById":
            found = self.employees.get(int(params["id"]))
            return httpx.Response(200, json=found) if found else httpx.Response(404)
        if path == "/employee/getLiveLocation":
            fix = self.live.get(int(params["id"]))
            return httpx.Response(200, json=fix) if fix else httpx.Response(404)
        if path == "/employee/team/getbyEmployee":
            members = self.teams.get(int(params["id"]), [])
            return httpx.Response(200, json=[{"id": 1, "fieldOfficers": [{"id": mid} for mid in members]}])
        if path == "/report/getCounts":
            rows = self.visits
            if self.filter_visits_by_date:
                rows = [row for row in rows if params["startDate"] <= row["visit_date"] <= params["endDate"]]
            return httpx.Response(200, json=rows)
        if path == "/visit/getByDateRangeAndEmployeeStats":
            detail = self.details.get(int(params["id"]), {"statsDto": None, "visitDto": []})
            return httpx.Response(200, json=detail)
        return httpx.Response(404)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


class FakeMapService:
    """Credential exchange plus style document."""

    def __init__(self, reject: bool = False) -> None:
        self.reject = reject
        self.token_requests = 0
        self.style_headers: list[str | None] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        if str(request.url) == TOKEN_URL:
            self.token_requests += 1
            if self.reject:
                return httpx.Response(401, json={"error": "invalid_client"})
            return httpx.Response(200, json={"access_token": f"map-token-{self.token_requests}", "expires_in": 1800})
        if str(request.url) == STYLE_URL:
            self.style_headers.append(request.headers.get("Authorization"))
            return httpx.Response(
                200,
                json={
                    "version": 8,
                    "layers": [
                        {"id": "background"},
                        {"id": "poi-vectordata"},
                        {"id": "roads"},
                        {"id": "poi"},
                    ],
                },
            )
        return httpx.Response(404)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def fake_api() -> FakeFieldOpsAPI:
    return FakeFieldOpsAPI()


@pytest.fixture
def fake_maps() -> FakeMapService:
    return FakeMapService()


@pytest.fixture
async def fetcher(fake_api: FakeFieldOpsAPI):
    client = FieldOpsAPIClient(base_url=API_BASE, token="session-token", max_retries=0, transport=fake_api.transport())
    yield VisitLocationFetcher(client)
    await client.aclose()


@pytest.fixture
async def map_http(fake_maps: FakeMapService):
    client = httpx.AsyncClient(transport=fake_maps.transport())
    yield client
    await client.aclose()


@pytest.fixture
def token_provider(map_http: httpx.AsyncClient) -> GeoTokenProvider:
    return GeoTokenProvider(MapSession(), map_http, token_url=TOKEN_URL, client_id="client", client_secret="secret")


@pytest.fixture
def controller(fetcher: VisitLocationFetcher) -> MapSceneController:
    return MapSceneController(fetcher, viewport_width=1024, viewport_height=768)


@pytest.fixture
def console(fetcher, controller, token_provider, map_http, tmp_path: Path) -> ViewStateMachine:
    machine = ViewStateMachine(
        fetcher,
        controller,
        token_provider,
        map_http,
        SnapshotStore(root=tmp_path),
        today=lambda: TODAY,
    )
    yield machine
    machine.close()
