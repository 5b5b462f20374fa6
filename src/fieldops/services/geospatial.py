"""Geospatial helper functions for camera framing."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from shapely.geometry import MultiPoint

# Web Mercator is undefined at the poles; clamp like the map renderer does.
MAX_MERCATOR_LATITUDE = 85.051129
TILE_SIZE = 512


@dataclass(slots=True, frozen=True)
class Bounds:
    south: float
    west: float
    north: float
    east: float

    @property
    def is_point(self) -> bool:
        return self.south == self.north and self.west == self.east


@dataclass(slots=True, frozen=True)
class Camera:
    latitude: float
    longitude: float
    zoom: float
    padding: int = 0
    animate: bool = True


def bounds_for_points(points: Sequence[tuple[float, float]]) -> Bounds:
    """Smallest box containing every (lat, lon) point."""

    if not points:
        raise ValueError("Cannot compute bounds for an empty point set.")
    west, south, east, north = MultiPoint([(lon, lat) for lat, lon in points]).bounds
    return Bounds(south=south, west=west, north=north, east=east)


def _project(lat: float, lon: float) -> tuple[float, float]:
    """(lat, lon) to unit-square Web Mercator (x grows east, y grows south)."""

    lat = max(-MAX_MERCATOR_LATITUDE, min(MAX_MERCATOR_LATITUDE, lat))
    x = (lon + 180.0) / 360.0
    phi = math.radians(lat)
    y = (1.0 - math.log(math.tan(phi) + 1.0 / math.cos(phi)) / math.pi) / 2.0
    return x, y


def _unproject(x: float, y: float) -> tuple[float, float]:
    lon = x * 360.0 - 180.0
    lat = math.degrees(math.atan(math.sinh(math.pi * (1.0 - 2.0 * y))))
    return lat, lon


def fit_camera(
    bounds: Bounds,
    width: int,
    height: int,
    *,
    padding: int = 0,
    max_zoom: float = 22.0,
    animate: bool = True,
) -> Camera:
    """Center and zoom at which ``bounds`` fits a width x height viewport inside ``padding``."""

    x_min, y_max = _project(bounds.south, bounds.west)
    x_max, y_min = _project(bounds.north, bounds.east)
    center_lat, center_lon = _unproject((x_min + x_max) / 2.0, (y_min + y_max) / 2.0)

    usable_width = max(width - 2 * padding, 1)
    usable_height = max(height - 2 * padding, 1)
    span_x = x_max - x_min
    span_y = y_max - y_min

    if span_x <= 0 and span_y <= 0:
        zoom = max_zoom
    else:
        scales = []
        if span_x > 0:
            scales.append(usable_width / (span_x * TILE_SIZE))
        if span_y > 0:
            scales.append(usable_height / (span_y * TILE_SIZE))
        zoom = math.log2(min(scales))
    zoom = max(0.0, min(max_zoom, zoom))
    return Camera(latitude=center_lat, longitude=center_lon, zoom=zoom, padding=padding, animate=animate)
