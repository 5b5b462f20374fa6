"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...services.maps.geotoken import AuthError, GeoTokenProvider
from ..dependencies import get_token_provider

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/map-token", status_code=status.HTTP_200_OK)
async def health_map_token(provider: GeoTokenProvider = Depends(get_token_provider)) -> dict:
    """Check that the map credential exchange succeeds."""
    try:
        token = await provider.acquire()
    except AuthError as exc:
        return {"service": "map-token", "healthy": False, "error": str(exc)}
    return {"service": "map-token", "healthy": True, "expires_in": token.expires_in}
