"""HTTP client for interacting with OSRM services."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import httpx

from ...config import settings

logger = logging.getLogger(__name__)


class RoutingServiceError(RuntimeError):
    """Raised when OSRM cannot produce a route for the requested waypoints."""


@dataclass(slots=True)
class RouteGeometry:
    path: list[tuple[float, float]]
    distance_km: float
    duration_min: float


class OSRMClient:
    def __init__(
        self,
        base_url: str | None = None,
        profile: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = (base_url or settings.osrm_base_url or "").rstrip("/")
        if not self.base_url:
            raise ValueError("OSRM base URL is not configured.")
        self.profile = profile or settings.osrm_profile
        self.timeout = timeout if timeout is not None else settings.routing_timeout_seconds
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout, connect=10.0))
        return self._client

    async def route(self, coordinates: Sequence[tuple[float, float]]) -> RouteGeometry:
        """Get the street-following path through ``coordinates`` in the given order.

        The ``route`` endpoint keeps waypoint order as supplied; step-by-step
        instructions are not requested.

        Args:
            coordinates: Sequence of (lat, lon) tuples for the route waypoints

        Returns:
            RouteGeometry with the decoded path and OSRM's distance/duration
        """
        if len(coordinates) < 2:
            raise ValueError("At least two coordinates are required for OSRM route.")

        # OSRM expects "lon,lat;lon,lat;..."
        coordinate_str = ";".join(f"{lon},{lat}" for lat, lon in coordinates)
        params = {
            "overview": "full",
            "geometries": "polyline",
            "steps": "false",
            "alternatives": "false",
        }
        url = f"{self.base_url}/route/v1/{self.profile}/{coordinate_str}"

        try:
            response = await self._get_client().get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as exc:
            raise RoutingServiceError(
                f"OSRM route request timed out after {self.timeout:.1f}s"
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise RoutingServiceError(
                f"OSRM route request failed with HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise RoutingServiceError(f"Failed to connect to OSRM service at {self.base_url}: {exc}") from exc
        except ValueError as exc:
            raise RoutingServiceError(f"OSRM returned an unreadable payload: {exc}") from exc

        if not isinstance(data, dict):
            raise RoutingServiceError("OSRM returned an unexpected payload shape")
        if data.get("code") != "Ok" or not data.get("routes"):
            error_msg = data.get("message", "Unknown OSRM route error")
            raise RoutingServiceError(f"OSRM route request failed: {error_msg}")

        best = data["routes"][0]
        if not isinstance(best, dict):
            raise RoutingServiceError("OSRM returned an unexpected route entry")
        try:
            path = decode_polyline(best.get("geometry") or "")
            distance_km = float(best.get("distance") or 0.0) / 1000.0
            duration_min = float(best.get("duration") or 0.0) / 60.0
        except (IndexError, TypeError, ValueError) as exc:
            raise RoutingServiceError(f"OSRM returned an unreadable route geometry: {exc}") from exc
        if len(path) < 2:
            path = list(coordinates)
        return RouteGeometry(path=path, distance_km=distance_km, duration_min=duration_min)

    async def check_health(self) -> bool:
        """Check OSRM health with a minimal two-point route request."""
        try:
            # Two points in central Paris
            await self.route([(48.8566, 2.3522), (48.8606, 2.3376)])
            return True
        except RoutingServiceError as exc:
            logger.debug(f"OSRM health check failed: {exc}")
            return False

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None


def _read_varint(encoded: str, index: int) -> tuple[int, int]:
    shift = 0
    result = 0
    while True:
        chunk = ord(encoded[index]) - 63
        index += 1
        result |= (chunk & 0x1F) << shift
        shift += 5
        if chunk < 0x20:
            break
    delta = ~(result >> 1) if result & 1 else result >> 1
    return delta, index


def decode_polyline(encoded: str, precision: int = 5) -> list[tuple[float, float]]:
    """Decode an encoded polyline (OSRM's default geometry format) into (lat, lon) pairs."""
    factor = 10 ** precision
    points: list[tuple[float, float]] = []
    index = lat = lon = 0
    while index < len(encoded):
        d_lat, index = _read_varint(encoded, index)
        d_lon, index = _read_varint(encoded, index)
        lat += d_lat
        lon += d_lon
        points.append((lat / factor, lon / factor))
    return points
