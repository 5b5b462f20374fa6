"""Visit aggregation helpers."""

from .aggregation import (
    aggregate,
    completed_visits,
    region_label,
    region_roster,
    status_breakdown,
)

__all__ = [
    "aggregate",
    "region_roster",
    "completed_visits",
    "status_breakdown",
    "region_label",
]
