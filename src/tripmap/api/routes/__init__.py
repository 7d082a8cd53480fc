"""Route group exports."""

from . import directory, health, map_view, trips

__all__ = ["directory", "health", "map_view", "trips"]
