"""Async address lookup against a Nominatim-compatible geocoding service."""

from __future__ import annotations

import logging

import httpx

from ...config import settings
from ..geospatial import parse_coordinate

logger = logging.getLogger(__name__)


class GeocodingResolver:
    """Resolve postal addresses to (lat, lon) pairs.

    Failures of any kind (no match, HTTP error, timeout, unreadable payload)
    resolve to ``None`` after a warning is logged. Lookups are never retried.
    Successful lookups are remembered for the lifetime of the resolver.
    """

    def __init__(
        self,
        base_url: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = (base_url or settings.nominatim_base_url).rstrip("/")
        self.user_agent = user_agent or settings.nominatim_user_agent
        self.timeout = timeout if timeout is not None else settings.geocode_timeout_seconds
        self._client = client
        self._owns_client = client is None
        self._cache: dict[str, tuple[float, float]] = {}

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout))
        return self._client

    async def resolve(self, address: str) -> tuple[float, float] | None:
        key = (address or "").strip()
        if not key:
            logger.warning("Skipping geocoding for empty address")
            return None
        if key in self._cache:
            return self._cache[key]

        params = {"format": "json", "q": key, "limit": 1}
        headers = {"User-Agent": self.user_agent}
        try:
            response = await self._get_client().get(
                f"{self.base_url}/search", params=params, headers=headers, timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as exc:
            logger.warning(f"Geocoding timed out for '{key}' after {self.timeout:.1f}s: {exc}")
            return None
        except httpx.HTTPError as exc:
            logger.warning(f"Geocoding request failed for '{key}': {exc}")
            return None
        except ValueError as exc:
            logger.warning(f"Geocoding returned unreadable payload for '{key}': {exc}")
            return None

        if not isinstance(data, list) or not data:
            logger.warning(f"Address not found: '{key}'")
            return None
        first = data[0] if isinstance(data[0], dict) else {}
        coordinate = parse_coordinate(first.get("lat"), first.get("lon"))
        if coordinate is None:
            logger.warning(f"Geocoding match for '{key}' has no usable coordinates")
            return None

        self._cache[key] = coordinate
        logger.info(f"Geocoded '{key}' -> [{coordinate[0]}, {coordinate[1]}]")
        return coordinate

    async def check_health(self) -> bool:
        """Return True if the service answers a trivial lookup."""
        try:
            response = await self._get_client().get(
                f"{self.base_url}/status",
                params={"format": "json"},
                headers={"User-Agent": self.user_agent},
                timeout=5.0,
            )
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None
