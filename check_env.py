#!/usr/bin/env python3
"""Helper script to check and create the .env file for the console backend."""

import os
import sys
from pathlib import Path

SECRET_KEYS = ("FIELDOPS_API_TOKEN", "FIELDOPS_MAP_CLIENT_SECRET")

TEMPLATE = """# Field-sales API
FIELDOPS_API_BASE_URL=https://api.gajkesaristeels.in
FIELDOPS_API_TOKEN=your-session-token-here

# Viewer (ADMIN sees every agent, MANAGER only their team)
FIELDOPS_VIEWER_ROLE=ADMIN
# FIELDOPS_VIEWER_EMPLOYEE_ID=

# Map tiles and styles
FIELDOPS_MAP_CLIENT_ID=your-client-id-here
FIELDOPS_MAP_CLIENT_SECRET=your-client-secret-here

# API Configuration
FIELDOPS_API_PREFIX=/api
# Comma-separated: http://localhost:3000,http://127.0.0.1:3000
# FIELDOPS_FRONTEND_ALLOWED_ORIGINS=

# Data Paths
FIELDOPS_DATA_ROOT=./data
"""


def _masked(line: str) -> str:
    name, _, value = line.partition("=")
    value = value.strip()
    if name.strip() in SECRET_KEYS and len(value) > 12:
        return f"{name}={value[:6]}...{value[-4:]}"
    return line


def main():
    project_root = Path(__file__).parent
    env_file = project_root / ".env"

    print("=" * 60)
    print("Field Operations Console Environment Checker")
    print("=" * 60)
    print()

    if not env_file.exists():
        print(f"[ERROR] .env file NOT found at: {env_file}")
        env_file.write_text(TEMPLATE, encoding="utf-8")
        print(f"[OK] Created template .env file at: {env_file}")
        print("   Please edit .env and add the API token and map credentials.")
        return 1

    print(f"[OK] Found .env file at: {env_file}")
    print("-" * 60)
    for line in env_file.read_text(encoding="utf-8").splitlines():
        print(_masked(line))
    print("-" * 60)
    print()

    for key in ("FIELDOPS_API_TOKEN", "FIELDOPS_MAP_CLIENT_ID", "FIELDOPS_MAP_CLIENT_SECRET"):
        status = "set in environment" if os.getenv(key) else "not in environment (read from .env)"
        print(f"   {key}: {status}")
    print()

    sys.path.insert(0, str(project_root / "src"))
    from fieldops.config import settings

    problems = []
    if not settings.api_token:
        problems.append("FIELDOPS_API_TOKEN is empty; data endpoints will reject requests")
    if not settings.map_client_id or not settings.map_client_secret:
        problems.append("Map client credentials are empty; the map will show 'Map unavailable'")
    if settings.viewer_role == "MANAGER" and settings.viewer_employee_id is None:
        problems.append("FIELDOPS_VIEWER_EMPLOYEE_ID is required for the MANAGER role")

    print(f"   API base URL: {settings.api_base_url}")
    print(f"   Viewer role:  {settings.viewer_role}")
    print(f"   Data root:    {settings.data_root}")
    print()

    if problems:
        print("=" * 60)
        for problem in problems:
            print(f"[ERROR] {problem}")
        print("=" * 60)
        return 1

    print("=" * 60)
    print("[OK] Configuration looks complete")
    print("=" * 60)
    return 0


if __name__ == "__main__":
    sys.exit(main())
