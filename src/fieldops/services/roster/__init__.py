"""Roster and visit service access."""

from .api_client import FetchError, FieldOpsAPIClient, LocationNotFound
from .fetcher import VisitLocationFetcher

__all__ = [
    "FieldOpsAPIClient",
    "FetchError",
    "LocationNotFound",
    "VisitLocationFetcher",
]
