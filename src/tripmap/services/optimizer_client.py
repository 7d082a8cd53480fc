"""HTTP client for the trip optimization and directory service."""

from __future__ import annotations

import logging
from typing import Any, Sequence

import httpx
from pydantic import ValidationError

from ..config import settings
from ..models.domain import (
    ComparisonOutcome,
    ComparisonResult,
    OptimizationOutcome,
    Passenger,
    SinglePlanOutcome,
    Vehicle,
)
from ..schemas.directory import PassengerModel, VehicleModel
from ..schemas.trips import ComparisonModel, OptimizeServiceRequest, TripPlanModel

logger = logging.getLogger(__name__)

COMPARE_MODE = "compare"
HEURISTIC_MODES = ("nearest_neighbor", "simulated_annealing")


class OptimizationServiceError(RuntimeError):
    """The service answered with an error or could not be reached."""


class MalformedResponseError(ValueError):
    """The service answered with a payload that cannot be turned into a plan."""


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        payload = None
    if isinstance(payload, dict) and payload.get("error"):
        return str(payload["error"])
    text = response.text.strip()
    return text or f"Optimization service returned HTTP {response.status_code}"


class OptimizerClient:
    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = (base_url or settings.optimizer_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.optimizer_timeout_seconds
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout, connect=10.0))
        return self._client

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            response = await self._get_client().request(method, url, timeout=self.timeout, **kwargs)
        except httpx.TimeoutException as exc:
            raise OptimizationServiceError(
                f"Optimization service did not answer within {self.timeout:.0f}s"
            ) from exc
        except httpx.HTTPError as exc:
            raise OptimizationServiceError(f"Optimization service unreachable: {exc}") from exc

        if response.is_error:
            message = _error_message(response)
            logger.warning(f"{method} {url} failed with HTTP {response.status_code}: {message}")
            raise OptimizationServiceError(message)
        try:
            return response.json()
        except ValueError as exc:
            raise MalformedResponseError(f"Optimization service returned invalid JSON: {exc}") from exc

    async def optimize(
        self,
        vehicle_id: int,
        passenger_ids: Sequence[int],
        mode: str,
    ) -> OptimizationOutcome:
        """Run one heuristic or the comparison and return a tagged outcome."""
        if mode == COMPARE_MODE:
            body = OptimizeServiceRequest(vehicle_id=vehicle_id, passenger_ids=list(passenger_ids))
            payload = await self._request(
                "POST",
                "optimiser",
                params={"action": "comparer"},
                json=body.model_dump(by_alias=True, exclude_none=True),
            )
            return ComparisonOutcome(result=self._parse_comparison(payload))

        if mode not in HEURISTIC_MODES:
            raise ValueError(f"Unknown optimization mode '{mode}'")
        body = OptimizeServiceRequest(vehicle_id=vehicle_id, passenger_ids=list(passenger_ids), algorithm=mode)
        payload = await self._request("POST", "optimiser", json=body.model_dump(by_alias=True))
        try:
            plan = TripPlanModel.model_validate(payload).to_domain()
        except (ValidationError, ValueError) as exc:
            raise MalformedResponseError(f"Trip plan response is malformed: {exc}") from exc
        return SinglePlanOutcome(plan=plan, mode=mode)

    @staticmethod
    def _parse_comparison(payload: Any) -> ComparisonResult:
        try:
            result = ComparisonModel.model_validate(payload).to_domain()
        except (ValidationError, ValueError) as exc:
            raise MalformedResponseError(f"Comparison response is malformed: {exc}") from exc
        if result.is_complete and not result.same_passengers():
            raise MalformedResponseError("Compared plans do not cover the same passengers")
        return result

    async def list_passengers(self) -> list[Passenger]:
        payload = await self._request("GET", "utilisateurs")
        try:
            return [PassengerModel.model_validate(item).to_domain() for item in payload]
        except (ValidationError, TypeError) as exc:
            raise MalformedResponseError(f"Passenger list is malformed: {exc}") from exc

    async def list_vehicles(self, available_only: bool = True) -> list[Vehicle]:
        payload = await self._request("GET", "vehicules")
        try:
            vehicles = [VehicleModel.model_validate(item).to_domain() for item in payload]
        except (ValidationError, TypeError) as exc:
            raise MalformedResponseError(f"Vehicle list is malformed: {exc}") from exc
        if available_only:
            vehicles = [v for v in vehicles if v.available]
        return vehicles

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None
