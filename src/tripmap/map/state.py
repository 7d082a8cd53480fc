"""Session map state: the only mutator of markers and route layers."""

from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional, Protocol, Sequence

from ..config import settings
from ..services.geospatial import Bounds, bounds_of
from .styles import RouteStyle

if TYPE_CHECKING:
    import folium

    from ..services.routing.osrm_client import RouteGeometry

logger = logging.getLogger(__name__)


class RoutingClient(Protocol):
    async def route(self, coordinates: Sequence[tuple[float, float]]) -> "RouteGeometry": ...


@dataclass(slots=True)
class MapMarker:
    handle: int
    position: tuple[float, float]
    label: str
    style: RouteStyle
    popup_html: str
    generation: int


@dataclass(slots=True)
class RouteLayer:
    handle: int
    waypoints: list[tuple[float, float]]
    path: list[tuple[float, float]]
    style: RouteStyle
    generation: int
    distance_km: Optional[float] = None
    duration_min: Optional[float] = None


@dataclass(slots=True)
class Viewport:
    bounds: Bounds
    padding: int = 50


@dataclass
class MapState:
    """Markers, route layers and viewport of the session's single map surface.

    Every render pass starts with :meth:`begin_pass`, which releases everything
    drawn so far and advances the generation. Mutators accept the generation a
    caller captured; work belonging to an older pass is dropped.
    """

    routing_client: Optional[RoutingClient] = None
    center: tuple[float, float] = field(default_factory=lambda: settings.default_center)
    zoom: int = field(default_factory=lambda: settings.default_zoom)
    padding: int = field(default_factory=lambda: settings.fit_padding_px)
    route_timeout: float = field(default_factory=lambda: settings.routing_timeout_seconds)
    generation: int = 0
    viewport: Optional[Viewport] = None
    _markers: list[MapMarker] = field(default_factory=list, repr=False)
    _routes: dict[str, RouteLayer] = field(default_factory=dict, repr=False)
    _route_requests: dict[str, int] = field(default_factory=dict, repr=False)
    _handles: itertools.count = field(default_factory=lambda: itertools.count(1), repr=False)

    @property
    def markers(self) -> tuple[MapMarker, ...]:
        return tuple(self._markers)

    @property
    def routes(self) -> tuple[RouteLayer, ...]:
        return tuple(self._routes.values())

    @property
    def marker_count(self) -> int:
        return len(self._markers)

    @property
    def route_count(self) -> int:
        return len(self._routes)

    def is_current(self, generation: Optional[int]) -> bool:
        return generation is None or generation == self.generation

    def clear(self) -> None:
        """Remove every marker and route layer. Safe on an empty map."""
        # Pending route requests are dropped even when nothing is drawn yet.
        self._route_requests.clear()
        if not self._markers and not self._routes:
            return
        self._markers.clear()
        self._routes.clear()
        logger.info("Cleared markers and routes")

    def begin_pass(self) -> int:
        self.clear()
        self.generation += 1
        logger.debug(f"Render pass {self.generation} started")
        return self.generation

    def add_marker(
        self,
        position: tuple[float, float],
        label: str,
        style: RouteStyle,
        popup_html: str = "",
        *,
        generation: Optional[int] = None,
    ) -> Optional[int]:
        if not self.is_current(generation):
            logger.debug(f"Dropping marker '{label}' from stale pass {generation}")
            return None
        marker = MapMarker(
            handle=next(self._handles),
            position=(float(position[0]), float(position[1])),
            label=label,
            style=style,
            popup_html=popup_html,
            generation=self.generation,
        )
        self._markers.append(marker)
        return marker.handle

    def remove_marker(self, handle: int) -> bool:
        for index, marker in enumerate(self._markers):
            if marker.handle == handle:
                del self._markers[index]
                return True
        return False

    async def set_route(
        self,
        positions: Sequence[tuple[float, float]],
        style: RouteStyle,
        *,
        generation: Optional[int] = None,
    ) -> Optional[int]:
        """Draw a street-following route through ``positions`` in ``style.slot``.

        Returns the route handle, or None when nothing was drawn (fewer than two
        positions, routing failure, timeout, stale pass or superseded request).
        """
        if len(positions) < 2:
            return None
        if not self.is_current(generation):
            return None
        if self.routing_client is None:
            logger.warning("No routing service configured; route not drawn")
            return None

        # The previous route of this slot goes away as soon as a new one is requested.
        self._routes.pop(style.slot, None)
        request_token = next(self._handles)
        self._route_requests[style.slot] = request_token
        pass_generation = self.generation
        waypoints = [(float(lat), float(lon)) for lat, lon in positions]

        logger.info(f"Requesting route with {len(waypoints)} points for slot '{style.slot}'")
        try:
            geometry = await asyncio.wait_for(
                self.routing_client.route(waypoints), timeout=self.route_timeout
            )
        except asyncio.TimeoutError:
            logger.warning(f"Route request for slot '{style.slot}' timed out after {self.route_timeout:.1f}s")
            return None
        except (RuntimeError, ValueError, OSError) as exc:
            logger.warning(f"Route request for slot '{style.slot}' failed: {exc}")
            return None

        if pass_generation != self.generation:
            logger.debug(f"Discarding route for stale pass {pass_generation}")
            return None
        if self._route_requests.get(style.slot) != request_token:
            logger.debug(f"Discarding superseded route for slot '{style.slot}'")
            return None

        layer = RouteLayer(
            handle=request_token,
            waypoints=waypoints,
            path=list(geometry.path),
            style=style,
            generation=pass_generation,
            distance_km=geometry.distance_km,
            duration_min=geometry.duration_min,
        )
        self._routes[style.slot] = layer
        logger.info(f"Route drawn for slot '{style.slot}' ({len(layer.path)} path points)")
        return layer.handle

    def fit_view(self, positions: Sequence[tuple[float, float]], padding: Optional[int] = None) -> None:
        bounds = bounds_of(list(positions))
        if bounds is None:
            return
        self.viewport = Viewport(bounds=bounds, padding=self.padding if padding is None else padding)

    def set_view(self, center: tuple[float, float], zoom: int) -> None:
        self.center = (float(center[0]), float(center[1]))
        self.zoom = zoom
        self.viewport = None

    def to_folium(self) -> "folium.Map":
        from .folium_view import build_map

        return build_map(self)

    def to_html(self) -> str:
        return self.to_folium().get_root().render()
