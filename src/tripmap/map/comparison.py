"""Side-by-side rendering of two heuristics' trip plans."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from ..models.domain import ComparisonResult
from ..services.geospatial import union_bounds
from .renderer import RouteRenderer
from .state import MapState
from .styles import PRIMARY_STYLE, SECONDARY_STYLE, RouteStyle

logger = logging.getLogger(__name__)


class ComparisonPresenter:
    def __init__(
        self,
        map_state: MapState,
        renderer: RouteRenderer,
        primary_style: RouteStyle = PRIMARY_STYLE,
        secondary_style: RouteStyle = SECONDARY_STYLE,
    ) -> None:
        self._map = map_state
        self._renderer = renderer
        self.primary_style = primary_style
        self.secondary_style = secondary_style

    def render_comparison(self, result: Optional[ComparisonResult]) -> bool:
        """Draw both plans; return False and leave the map alone if either is missing."""
        if result is None or not result.is_complete:
            logger.error("Comparison is missing plan data; map left unchanged")
            return False

        label_a = result.summary_a.name if result.summary_a and result.summary_a.name else "Nearest Neighbor"
        label_b = result.summary_b.name if result.summary_b and result.summary_b.name else "Simulated Annealing"
        style_a = replace(self.primary_style, label=label_a)
        style_b = replace(self.secondary_style, label=label_b)

        generation = self._map.begin_pass()
        bounds_a = self._renderer.render(result.plan_a.passengers, style_a, generation=generation)
        bounds_b = self._renderer.render(result.plan_b.passengers, style_b, generation=generation)

        combined = union_bounds(bounds_a, bounds_b)
        if combined is not None:
            self._map.fit_view([(combined.south, combined.west), (combined.north, combined.east)])
        else:
            logger.warning("No known coordinates in either plan; viewport unchanged")

        logger.info(f"Comparison drawn: {label_a} ({style_a.color}) vs {label_b} ({style_b.color})")
        return True
