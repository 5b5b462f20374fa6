"""Export helpers."""

from .geojson import marker_to_feature, scene_to_feature_collection

__all__ = [
    "marker_to_feature",
    "scene_to_feature_collection",
]
