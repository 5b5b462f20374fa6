"""Bearer credential for the map tiling/styling service."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional

import httpx

from ...config import settings

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """The credential exchange rejected the request or could not be reached."""


@dataclass(slots=True, frozen=True)
class AccessToken:
    value: str
    token_type: str = "Bearer"
    expires_in: Optional[int] = None
    obtained_at: float = 0.0

    @property
    def authorization(self) -> str:
        return f"Bearer {self.value}"


class MapSession:
    """Session-wide holder for the map token; written once per bootstrap or reset."""

    def __init__(self) -> None:
        self.token: Optional[AccessToken] = None

    def clear(self) -> None:
        self.token = None


class GeoTokenProvider:
    def __init__(
        self,
        session: MapSession,
        http_client: httpx.AsyncClient,
        token_url: str | None = None,
        client_id: str | None = None,
        client_secret: str | None = None,
    ) -> None:
        self.session = session
        self.http_client = http_client
        self.token_url = token_url or settings.map_token_url
        self.client_id = client_id if client_id is not None else settings.map_client_id
        self.client_secret = client_secret if client_secret is not None else settings.map_client_secret

    async def acquire(self) -> AccessToken:
        """Return the session token, exchanging client credentials on first use."""
        if self.session.token is not None:
            return self.session.token
        token = await self._exchange()
        self.session.token = token
        return token

    async def refresh(self) -> AccessToken:
        """Drop the cached token and exchange again (explicit reset only)."""
        self.session.clear()
        return await self.acquire()

    async def _exchange(self) -> AccessToken:
        if not self.client_id or not self.client_secret:
            raise AuthError("Map client credentials are not configured.")
        form = {
            "grant_type": "client_credentials",
            "scope": "openid",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        }
        try:
            response = await self.http_client.post(self.token_url, data=form)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            logger.error(f"Error getting access token: status {exc.response.status_code}")
            raise AuthError(f"Credential exchange rejected with status {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            logger.error(f"Error getting access token: {exc}")
            raise AuthError(f"Credential exchange failed: {exc}") from exc
        except ValueError as exc:
            raise AuthError("Credential exchange returned a malformed body") from exc

        value = payload.get("access_token") if isinstance(payload, dict) else None
        if not value:
            raise AuthError("Credential exchange response carried no access_token")
        logger.info("Obtained map access token")
        return AccessToken(
            value=value,
            token_type=payload.get("token_type") or "Bearer",
            expires_in=payload.get("expires_in"),
            obtained_at=time.time(),
        )
