"""GeoJSON export of the live map scene."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Optional

from ..maps.scene import MapInstance, Marker


def _popup_properties(content) -> Optional[Dict[str, Any]]:
    if content is None:
        return None
    return {
        "title": content.title,
        "badge": content.badge,
        "badgeKind": content.badge_kind,
        "lines": list(content.lines),
    }


def marker_to_feature(marker: Marker) -> Dict[str, Any]:
    """Convert a marker to a GeoJSON Point feature (lon, lat order per RFC 7946)."""
    return {
        "type": "Feature",
        "id": marker.role,
        "geometry": {"type": "Point", "coordinates": [marker.longitude, marker.latitude]},
        "properties": {
            "role": marker.role,
            "color": marker.color,
            "popup": _popup_properties(marker.popup),
            "lazyPopup": marker.popup is None and marker.on_click is not None,
        },
    }


def scene_to_feature_collection(map_instance: Optional[MapInstance]) -> Dict[str, Any]:
    """Export markers, the open popup and the camera for the browser client.

    An uninitialized map exports as an empty collection with ``camera`` set
    to ``None``.
    """
    if map_instance is None or map_instance.removed:
        return {"type": "FeatureCollection", "features": [], "camera": None, "popup": None}

    features: List[Dict[str, Any]] = [marker_to_feature(marker) for marker in map_instance.markers.values()]
    popup = map_instance.popup
    return {
        "type": "FeatureCollection",
        "features": features,
        "camera": asdict(map_instance.camera),
        "popup": None
        if popup is None
        else {
            "role": popup.role,
            "coordinates": [popup.longitude, popup.latitude],
            **_popup_properties(popup.content),
        },
    }
