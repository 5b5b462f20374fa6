"""Map style download and filtering."""

from __future__ import annotations

import logging
from typing import Any, Iterable

import httpx

from ...config import settings
from .geotoken import AccessToken, AuthError

logger = logging.getLogger(__name__)


def filter_style_layers(style: dict, excluded: Iterable[str] | None = None) -> dict:
    """Return a copy of the style document without the excluded layer ids."""
    excluded_ids = set(settings.map_excluded_layers if excluded is None else excluded)
    filtered = dict(style)
    filtered["layers"] = [layer for layer in style.get("layers", []) if layer.get("id") not in excluded_ids]
    return filtered


def tile_request_headers(url: str, token: AccessToken, tile_host: str | None = None) -> dict[str, str]:
    """Headers to attach to a tile/style request; only the map host gets the bearer."""
    host = tile_host or settings.map_tile_host
    if url.startswith(host):
        return {"Authorization": token.authorization}
    return {}


async def load_map_style(http_client: httpx.AsyncClient, token: AccessToken, style_url: str | None = None) -> dict[str, Any]:
    url = style_url or settings.map_style_url
    try:
        response = await http_client.get(url, headers=tile_request_headers(url, token))
        response.raise_for_status()
        style = response.json()
    except httpx.HTTPStatusError as exc:
        if exc.response.status_code in (401, 403):
            raise AuthError(f"Map style request rejected with status {exc.response.status_code}") from exc
        raise ValueError(f"Map style request failed with status {exc.response.status_code}") from exc
    except httpx.HTTPError as exc:
        raise ValueError(f"Map style request failed: {exc}") from exc

    if not isinstance(style, dict):
        raise ValueError("Map style document is not a JSON object.")
    filtered = filter_style_layers(style)
    logger.debug(f"Loaded map style with {len(filtered['layers'])} layers")
    return filtered
