"""Draw one ordered passenger sequence as numbered markers and a route."""

from __future__ import annotations

import asyncio
import html
import logging
from typing import Awaitable, Optional, Protocol, Sequence

from ..config import settings
from ..models.domain import Passenger
from ..services.geospatial import Bounds, bounds_of
from .state import MapState
from .styles import RouteStyle

logger = logging.getLogger(__name__)


class AddressResolver(Protocol):
    async def resolve(self, address: str) -> Optional[tuple[float, float]]: ...


def popup_html(passenger: Passenger, position: int, style: RouteStyle) -> str:
    """Popup body for a stop marker."""
    title = html.escape(passenger.name)
    if style.label:
        title = f"{html.escape(style.label)} #{position}: {title}"
    parts = [
        '<div style="min-width: 200px;">',
        f'<h3 style="margin: 0 0 10px 0; color: {style.color};">{title}</h3>',
        f'<p style="margin: 5px 0;"><strong>Pickup:</strong><br>{html.escape(passenger.pickup_address)}</p>',
        f'<p style="margin: 5px 0;"><strong>Dropoff:</strong><br>{html.escape(passenger.dropoff_address)}</p>',
        f'<p style="margin: 5px 0;"><strong>Stop:</strong> {position}</p>',
    ]
    if passenger.pickup_time is not None:
        parts.append(
            f'<p style="margin: 5px 0;"><strong>Departure:</strong> {passenger.pickup_time.strftime("%H:%M")}</p>'
        )
    parts.append("</div>")
    return "".join(parts)


class RouteRenderer:
    """Render passengers in visiting order onto a :class:`MapState`.

    Passengers without coordinates are geocoded in background tasks; each
    completion adds its own marker if its render pass is still the current one.
    ``render`` must be called from inside a running event loop.
    """

    def __init__(
        self,
        map_state: MapState,
        geocoder: AddressResolver,
        lookup_timeout: float | None = None,
    ) -> None:
        self._map = map_state
        self._geocoder = geocoder
        self.lookup_timeout = lookup_timeout if lookup_timeout is not None else settings.geocode_timeout_seconds
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def render(
        self,
        passengers: Sequence[Passenger],
        style: RouteStyle,
        *,
        generation: int | None = None,
    ) -> Optional[Bounds]:
        """Draw markers for known coordinates and start lookups for the rest.

        Returns the bounds of the coordinates known at call time, or None when
        no passenger could be placed yet.
        """
        if generation is None:
            generation = self._map.generation
        if not self._map.is_current(generation):
            logger.debug(f"Skipping render for stale pass {generation}")
            return None

        route_points: list[tuple[float, float]] = []
        missing: list[tuple[int, Passenger]] = []
        for index, passenger in enumerate(passengers):
            position = index + 1
            coordinate = passenger.coordinate
            if coordinate is None:
                missing.append((position, passenger))
                continue
            self._map.add_marker(
                coordinate,
                str(position),
                style,
                popup_html(passenger, position, style),
                generation=generation,
            )
            route_points.append(coordinate)

        for position, passenger in missing:
            logger.warning(f"No coordinates for {passenger.name}, geocoding pickup address")
            self._spawn(self._geocode_and_mark(passenger, position, style, generation))

        if len(route_points) > 1:
            self._spawn(self._map.set_route(route_points, style, generation=generation))

        logger.info(
            f"Rendered {len(route_points)}/{len(passengers)} stops in slot '{style.slot}' "
            f"({len(missing)} awaiting geocoding)"
        )
        return bounds_of(route_points)

    async def drain(self) -> None:
        """Wait until every background lookup and route request has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    def _spawn(self, coro: Awaitable) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _geocode_and_mark(
        self,
        passenger: Passenger,
        position: int,
        style: RouteStyle,
        generation: int,
    ) -> None:
        try:
            coordinate = await asyncio.wait_for(
                self._geocoder.resolve(passenger.pickup_address), timeout=self.lookup_timeout
            )
        except asyncio.TimeoutError:
            logger.warning(f"Geocoding timed out for {passenger.name} ({passenger.pickup_address})")
            return

        if not self._map.is_current(generation):
            logger.debug(f"Discarding geocode for {passenger.name} from stale pass {generation}")
            return
        if coordinate is None:
            logger.warning(f"Could not geocode {passenger.name} ({passenger.pickup_address}); marker skipped")
            return

        passenger.set_coordinate(*coordinate)
        self._map.add_marker(
            coordinate,
            str(position),
            style,
            popup_html(passenger, position, style),
            generation=generation,
        )
