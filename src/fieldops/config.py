"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="FIELDOPS_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Field Operations Console API"
    api_prefix: str = "/api"
    data_root: Path = Field(default=Path("data"), description="Root directory for durable console state.")

    # Remote field-sales API
    api_base_url: str = Field(
        default="https://api.gajkesaristeels.in",
        description="Base URL of the roster/visit service.",
    )
    api_token: Optional[str] = Field(
        default=None,
        description="Bearer token for the roster/visit service (issued by the login flow).",
    )
    api_timeout_seconds: float = Field(default=30.0, gt=0.0)
    api_max_retries: int = Field(default=2, ge=0)
    api_backoff_seconds: float = Field(default=0.5, ge=0.0)
    viewer_role: Literal["ADMIN", "MANAGER"] = Field(
        default="ADMIN",
        description="Role of the console viewer; managers only see their own team.",
    )
    viewer_employee_id: Optional[int] = Field(
        default=None,
        description="Employee id of the viewer, used to resolve a manager's team.",
    )

    # Map tiling/styling service
    map_token_url: str = Field(
        default="https://account.olamaps.io/realms/olamaps/protocol/openid-connect/token",
        description="Client-credentials endpoint issuing the map bearer token.",
    )
    map_client_id: Optional[str] = None
    map_client_secret: Optional[str] = None
    map_style_url: str = Field(
        default="https://api.olamaps.io/tiles/vector/v1/styles/default-light-standard/style.json",
    )
    map_tile_host: str = Field(
        default="https://api.olamaps.io",
        description="Requests whose URL starts with this prefix carry the map bearer token.",
    )
    map_excluded_layers: tuple[str, ...] = Field(default=("poi-vectordata", "poi"))
    map_default_center: tuple[float, float] = Field(
        default=(20.5937, 78.9629),
        description="Initial camera center as (latitude, longitude).",
    )
    map_default_zoom: float = Field(default=4.0, ge=0.0, le=22.0)
    map_viewport_width: int = Field(default=1024, ge=1)
    map_viewport_height: int = Field(default=768, ge=1)
    fleet_fit_padding: int = Field(default=50, ge=0)
    fleet_fit_max_zoom: float = Field(default=15.0, ge=0.0, le=22.0)
    agent_fit_padding: int = Field(default=100, ge=0)
    agent_fit_max_zoom: float = Field(default=18.0, ge=0.0, le=22.0)

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("data_root", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("api_base_url", "map_tile_host", mode="after")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("frontend_allowed_origins", "map_excluded_layers", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            # Try JSON first
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            # Try comma-separated
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            # Single value
            if value.strip():
                return (value.strip(),)
        # Return empty tuple if value is None or empty
        return tuple()

    @field_validator("map_default_center", mode="before")
    @classmethod
    def _parse_center_from_env(cls, value: Any) -> tuple[float, float]:
        """Parse "lat,lon" or a JSON array into a coordinate pair."""
        if isinstance(value, (tuple, list)):
            items = list(value)
        elif isinstance(value, str):
            try:
                parsed = json.loads(value)
                items = list(parsed) if isinstance(parsed, list) else []
            except (json.JSONDecodeError, TypeError):
                items = [item.strip() for item in value.split(",") if item.strip()]
        else:
            items = []
        if len(items) != 2:
            raise ValueError("map_default_center must contain exactly two numbers (lat, lon).")
        return (float(items[0]), float(items[1]))


settings = Settings()
