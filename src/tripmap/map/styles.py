"""Marker and route styles for the two display slots."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True, slots=True)
class RouteStyle:
    slot: str
    color: str
    label: Optional[str] = None
    weight: int = 5
    opacity: float = 0.8
    dash_array: Optional[str] = None
    marker_size: int = 32
    font_size: int = 14


# Single-plan and first comparison plan: solid blue line.
PRIMARY_STYLE = RouteStyle(slot="primary", color="#2563eb")

# Second comparison plan: dashed green line with smaller markers so overlapping
# stops of both plans stay visible.
SECONDARY_STYLE = RouteStyle(
    slot="secondary",
    color="#10b981",
    opacity=0.7,
    dash_array="10, 10",
    marker_size=26,
    font_size=12,
)
