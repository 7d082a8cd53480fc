"""Map document and map state endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import HTMLResponse

from ...schemas.trips import CenterRequest, MapSnapshotModel, MarkerModel, RouteModel
from ...services.session import TripMapSession
from ..dependencies import get_session

router = APIRouter(prefix="/map", tags=["map"])


def snapshot_model(session: TripMapSession) -> MapSnapshotModel:
    state = session.map_state
    return MapSnapshotModel(
        generation=state.generation,
        markers=[
            MarkerModel(
                handle=m.handle,
                label=m.label,
                latitude=m.position[0],
                longitude=m.position[1],
                slot=m.style.slot,
                color=m.style.color,
            )
            for m in state.markers
        ],
        routes=[
            RouteModel(
                handle=r.handle,
                slot=r.style.slot,
                color=r.style.color,
                dash_array=r.style.dash_array,
                waypoint_count=len(r.waypoints),
                point_count=len(r.path),
                distance_km=r.distance_km,
            )
            for r in state.routes
        ],
        viewport=state.viewport.bounds.as_leaflet() if state.viewport else None,
        center=list(state.center),
        zoom=state.zoom,
        pending=session.renderer.pending,
    )


@router.get("", response_class=HTMLResponse)
def map_document(session: TripMapSession = Depends(get_session)) -> HTMLResponse:
    """Current map as a standalone Leaflet page."""
    return HTMLResponse(session.map_state.to_html())


@router.get("/state", response_model=MapSnapshotModel)
async def map_state(wait: bool = False, session: TripMapSession = Depends(get_session)) -> MapSnapshotModel:
    if wait:
        await session.renderer.drain()
    return snapshot_model(session)


@router.post("/center", response_model=MapSnapshotModel)
async def center_on_address(payload: CenterRequest, session: TripMapSession = Depends(get_session)) -> MapSnapshotModel:
    if not await session.coordinator.center_on_address(payload.address):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unable to center on '{payload.address}'",
        )
    return snapshot_model(session)
