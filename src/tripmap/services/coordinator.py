"""Submission of optimization requests and dispatch of their results to the map."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Literal, Optional, Protocol, Sequence

from ..config import settings
from ..map.comparison import ComparisonPresenter
from ..map.renderer import AddressResolver, RouteRenderer
from ..map.state import MapState
from ..map.styles import PRIMARY_STYLE
from ..models.domain import ComparisonOutcome, OptimizationOutcome, SinglePlanOutcome, TripPlan
from .optimizer_client import COMPARE_MODE, HEURISTIC_MODES, MalformedResponseError, OptimizationServiceError
from .panel import Notifier, ResultsPanel
from .summary import comparison_summary, plan_summary

logger = logging.getLogger(__name__)


class Optimizer(Protocol):
    async def optimize(self, vehicle_id: int, passenger_ids: Sequence[int], mode: str) -> OptimizationOutcome: ...


class CoordinatorState(str, Enum):
    IDLE = "idle"
    REQUESTING = "requesting"
    RENDERING = "rendering"


SubmissionStatus = Literal["rendered", "rejected", "failed", "busy"]


@dataclass(slots=True)
class SubmissionResult:
    status: SubmissionStatus
    message: Optional[str] = None
    outcome: Optional[OptimizationOutcome] = None


class OptimizationRequestCoordinator:
    """Drives ``idle -> requesting -> rendering -> idle`` for one operator session."""

    def __init__(
        self,
        optimizer: Optimizer,
        map_state: MapState,
        renderer: RouteRenderer,
        presenter: ComparisonPresenter,
        panel: ResultsPanel,
        notifier: Notifier,
        geocoder: Optional[AddressResolver] = None,
    ) -> None:
        self._optimizer = optimizer
        self._map = map_state
        self._renderer = renderer
        self._presenter = presenter
        self._panel = panel
        self._notifier = notifier
        self._geocoder = geocoder
        self.state = CoordinatorState.IDLE

    def _validate(self, vehicle_id: Optional[int], passenger_ids: Sequence[int], mode: str) -> Optional[str]:
        if not passenger_ids:
            return "Select at least one passenger"
        if vehicle_id is None:
            return "Select a vehicle"
        if mode != COMPARE_MODE and mode not in HEURISTIC_MODES:
            return f"Unknown optimization mode '{mode}'"
        return None

    async def submit(
        self,
        vehicle_id: Optional[int],
        passenger_ids: Sequence[int],
        mode: str = "nearest_neighbor",
    ) -> SubmissionResult:
        if self.state is not CoordinatorState.IDLE:
            message = "An optimization is already in progress"
            self._notifier.warn(message)
            return SubmissionResult(status="busy", message=message)

        problem = self._validate(vehicle_id, passenger_ids, mode)
        if problem:
            self._notifier.warn(problem)
            return SubmissionResult(status="rejected", message=problem)

        self.state = CoordinatorState.REQUESTING
        try:
            loading = "Comparing algorithms..." if mode == COMPARE_MODE else "Optimizing trip..."
            self._panel.show_loading(loading)
            logger.info(
                f"Submitting {mode} request: vehicle {vehicle_id}, {len(passenger_ids)} passengers"
            )
            try:
                outcome = await self._optimizer.optimize(vehicle_id, list(passenger_ids), mode)
            except (OptimizationServiceError, MalformedResponseError) as exc:
                message = str(exc)
                self._notifier.error(message)
                self._panel.hide()
                return SubmissionResult(status="failed", message=message)

            self.state = CoordinatorState.RENDERING
            return self._dispatch(outcome)
        finally:
            self.state = CoordinatorState.IDLE

    def _dispatch(self, outcome: OptimizationOutcome) -> SubmissionResult:
        if outcome.kind == "single":
            return self._show_plan(outcome)
        if outcome.kind == "comparison":
            return self._show_comparison(outcome)
        raise TypeError(f"Unsupported outcome kind {outcome.kind!r}")

    def _show_plan(self, outcome: SinglePlanOutcome) -> SubmissionResult:
        plan: TripPlan = outcome.plan
        self._panel.show(plan_summary(plan))
        generation = self._map.begin_pass()
        if not plan.passengers:
            message = "The optimized trip has no passengers to display"
            self._notifier.warn(message)
            return SubmissionResult(status="rendered", message=message, outcome=outcome)

        bounds = self._renderer.render(plan.passengers, PRIMARY_STYLE, generation=generation)
        if bounds is not None:
            self._map.fit_view([(bounds.south, bounds.west), (bounds.north, bounds.east)])
        else:
            logger.warning("No known coordinates to frame; viewport unchanged")
        return SubmissionResult(status="rendered", outcome=outcome)

    def _show_comparison(self, outcome: ComparisonOutcome) -> SubmissionResult:
        result = outcome.result
        if not self._presenter.render_comparison(result):
            message = "Comparison response is missing plan data"
            self._notifier.error(message)
            self._panel.hide()
            return SubmissionResult(status="failed", message=message, outcome=outcome)
        self._panel.show(comparison_summary(result))
        return SubmissionResult(status="rendered", outcome=outcome)

    async def center_on_address(self, address: str) -> bool:
        if self._geocoder is None:
            self._notifier.warn("No geocoding service configured")
            return False
        coordinate = await self._geocoder.resolve(address)
        if coordinate is None:
            self._notifier.warn(f"Unable to center on '{address}'")
            return False
        self._map.set_view(coordinate, settings.center_zoom)
        logger.info(f"Centered on '{address}'")
        return True
