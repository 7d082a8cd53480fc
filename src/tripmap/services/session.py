"""Per-session wiring of map state, renderers and service clients."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from ..config import settings
from ..map.comparison import ComparisonPresenter
from ..map.renderer import RouteRenderer
from ..map.state import MapState
from .coordinator import OptimizationRequestCoordinator
from .geocoding.nominatim_client import GeocodingResolver
from .optimizer_client import OptimizerClient
from .panel import Notifier, ResultsPanel
from .routing.osrm_client import OSRMClient

logger = logging.getLogger(__name__)


@dataclass
class TripMapSession:
    map_state: MapState
    renderer: RouteRenderer
    presenter: ComparisonPresenter
    coordinator: OptimizationRequestCoordinator
    optimizer: OptimizerClient
    geocoder: GeocodingResolver
    routing: Optional[OSRMClient]
    panel: ResultsPanel = field(default_factory=ResultsPanel)
    notifier: Notifier = field(default_factory=Notifier)

    async def aclose(self) -> None:
        await self.optimizer.aclose()
        await self.geocoder.aclose()
        if self.routing is not None:
            await self.routing.aclose()


def build_session(
    optimizer: Optional[OptimizerClient] = None,
    geocoder: Optional[GeocodingResolver] = None,
    routing: Optional[OSRMClient] = None,
) -> TripMapSession:
    optimizer = optimizer or OptimizerClient()
    geocoder = geocoder or GeocodingResolver()
    if routing is None and settings.osrm_base_url:
        routing = OSRMClient()
    if routing is None:
        logger.warning("OSRM base URL not configured; routes will not be drawn")

    map_state = MapState(routing_client=routing)
    renderer = RouteRenderer(map_state, geocoder)
    presenter = ComparisonPresenter(map_state, renderer)
    panel = ResultsPanel()
    notifier = Notifier()
    coordinator = OptimizationRequestCoordinator(
        optimizer=optimizer,
        map_state=map_state,
        renderer=renderer,
        presenter=presenter,
        panel=panel,
        notifier=notifier,
        geocoder=geocoder,
    )
    return TripMapSession(
        map_state=map_state,
        renderer=renderer,
        presenter=presenter,
        coordinator=coordinator,
        optimizer=optimizer,
        geocoder=geocoder,
        routing=routing,
        panel=panel,
        notifier=notifier,
    )
