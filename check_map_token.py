#!/usr/bin/env python3
"""Script to verify the map credential exchange and style download."""

import asyncio
import sys
from pathlib import Path

project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

import httpx  # noqa: E402

from fieldops.config import settings  # noqa: E402
from fieldops.services.maps.geotoken import AuthError, GeoTokenProvider, MapSession  # noqa: E402
from fieldops.services.maps.style import load_map_style  # noqa: E402


async def run() -> int:
    print("=" * 60)
    print("Map Token Test")
    print("=" * 60)
    print()

    print("1. Checking map configuration...")
    if not settings.map_client_id or not settings.map_client_secret:
        print("   [ERROR] Map client credentials are not configured")
        print("   Please set FIELDOPS_MAP_CLIENT_ID and FIELDOPS_MAP_CLIENT_SECRET in your .env file")
        return 1
    print(f"   [OK] Token URL: {settings.map_token_url}")
    print(f"   [OK] Style URL: {settings.map_style_url}")
    print()

    async with httpx.AsyncClient(timeout=settings.api_timeout_seconds) as client:
        print("2. Exchanging client credentials...")
        provider = GeoTokenProvider(MapSession(), client)
        try:
            token = await provider.acquire()
        except AuthError as e:
            print(f"   [ERROR] {e}")
            return 1
        print(f"   [OK] Token obtained (expires in {token.expires_in}s)")
        print()

        print("3. Downloading map style...")
        try:
            style = await load_map_style(client, token)
        except (AuthError, ValueError) as e:
            print(f"   [ERROR] {e}")
            return 1
        print(f"   [OK] Style loaded with {len(style.get('layers', []))} layers after filtering")
    print()
    print("=" * 60)
    print("[OK] Map service is reachable")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(run()))
