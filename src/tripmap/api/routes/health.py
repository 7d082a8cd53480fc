"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...services.session import TripMapSession
from ..dependencies import get_session

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/osrm", status_code=status.HTTP_200_OK)
async def health_osrm(session: TripMapSession = Depends(get_session)) -> dict:
    """Check OSRM service health."""
    if session.routing is None:
        return {"service": "osrm", "healthy": False, "error": "OSRM base URL is not configured."}
    return {"service": "osrm", "healthy": await session.routing.check_health()}


@router.get("/health/geocoder", status_code=status.HTTP_200_OK)
async def health_geocoder(session: TripMapSession = Depends(get_session)) -> dict:
    """Check the geocoding service."""
    return {"service": "geocoder", "healthy": await session.geocoder.check_health()}
