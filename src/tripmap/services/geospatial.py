"""Geospatial helper functions."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Sequence

from shapely.geometry import MultiPoint

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True, slots=True)
class Bounds:
    """Axis-aligned viewport given by its south-west and north-east corners."""

    south: float
    west: float
    north: float
    east: float

    def as_leaflet(self) -> list[list[float]]:
        return [[self.south, self.west], [self.north, self.east]]

    def contains(self, lat: float, lon: float) -> bool:
        return self.south <= lat <= self.north and self.west <= lon <= self.east


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def path_length_km(points: Sequence[tuple[float, float]]) -> float:
    """Straight-line length of a path visiting ``points`` in order."""

    return sum(
        haversine_km(lat1, lon1, lat2, lon2)
        for (lat1, lon1), (lat2, lon2) in zip(points, points[1:])
    )


def _to_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def parse_coordinate(lat: Any, lon: Any) -> tuple[float, float] | None:
    """Parse a latitude/longitude pair, returning None unless both parts are valid.

    Accepts numbers or numeric strings. A pair with one side missing, a value
    that is not a finite number, or a value outside the valid range is treated
    as no coordinate at all.
    """

    lat_value = _to_float(lat)
    lon_value = _to_float(lon)
    if lat_value is None or lon_value is None:
        return None
    if not -90.0 <= lat_value <= 90.0 or not -180.0 <= lon_value <= 180.0:
        return None
    return (lat_value, lon_value)


def bounds_of(points: Sequence[tuple[float, float]]) -> Bounds | None:
    """Return the bounding box of (lat, lon) points, or None for an empty sequence."""

    if not points:
        return None
    # shapely works in (x, y) = (lon, lat)
    min_x, min_y, max_x, max_y = MultiPoint([(lon, lat) for lat, lon in points]).bounds
    return Bounds(south=min_y, west=min_x, north=max_y, east=max_x)


def union_bounds(*candidates: Bounds | None) -> Bounds | None:
    """Smallest box containing every non-empty candidate."""

    corners = [
        corner
        for b in candidates
        if b is not None
        for corner in ((b.south, b.west), (b.north, b.east))
    ]
    return bounds_of(corners)
