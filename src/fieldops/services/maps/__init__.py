"""Map token, style and scene management."""

from .geotoken import AccessToken, AuthError, GeoTokenProvider, MapSession
from .scene import (
    AgentScene,
    ControllerState,
    MapInstance,
    MapSceneController,
    SceneError,
    SceneOutcome,
)
from .style import filter_style_layers, load_map_style, tile_request_headers

__all__ = [
    "AccessToken",
    "AgentScene",
    "AuthError",
    "ControllerState",
    "GeoTokenProvider",
    "MapInstance",
    "MapSceneController",
    "MapSession",
    "SceneError",
    "SceneOutcome",
    "filter_style_layers",
    "load_map_style",
    "tile_request_headers",
]
