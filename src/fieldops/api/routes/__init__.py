"""Route group exports."""

from . import console, dashboard, health, locations

__all__ = ["console", "dashboard", "health", "locations"]
