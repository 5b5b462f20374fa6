"""Async HTTP client for the roster and visit service."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping

import httpx

from ...config import settings

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """A data endpoint returned a non-success status or was unreachable."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class LocationNotFound(FetchError):
    """The agent has no recent live fix; a normal empty case, not a failure."""


class FieldOpsAPIClient:
    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        if not self.base_url:
            raise ValueError("Field-sales API base URL is not configured.")
        self.token = token if token is not None else settings.api_token
        self.timeout = timeout if timeout is not None else settings.api_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.api_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.api_backoff_seconds
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            transport=transport,
        )

    def _headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    async def get_json(self, path: str, params: Mapping[str, Any] | None = None) -> Any:
        """GET a JSON document, retrying only transport-level failures."""
        attempt = 0
        while True:
            try:
                response = await self._client.get(path, params=params, headers=self._headers())
                response.raise_for_status()
                return response.json()
            except httpx.HTTPStatusError as exc:
                status_code = exc.response.status_code
                raise FetchError(
                    f"GET {path} failed with status {status_code}", status_code=status_code
                ) from exc
            except (httpx.TimeoutException, httpx.NetworkError) as exc:
                attempt += 1
                if attempt > self.max_retries:
                    raise FetchError(f"GET {path} unreachable after {attempt} attempt(s): {exc}") from exc
                wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                logger.debug(f"GET {path} failed, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries}): {exc}")
                await asyncio.sleep(wait_time)
            except ValueError as exc:
                raise FetchError(f"GET {path} returned a malformed JSON body") from exc
            except httpx.HTTPError as exc:
                raise FetchError(f"GET {path} failed: {exc}") from exc

    async def get_live_location(self, agent_id: int) -> dict | None:
        try:
            payload = await self.get_json("/employee/getLiveLocation", params={"id": agent_id})
        except FetchError as exc:
            if exc.status_code in (400, 404):
                raise LocationNotFound(f"No live location for employee {agent_id}", exc.status_code) from exc
            raise
        if not payload:
            raise LocationNotFound(f"No live location for employee {agent_id}")
        return payload

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "FieldOpsAPIClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
