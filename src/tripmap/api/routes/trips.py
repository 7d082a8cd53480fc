"""Trip optimization endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from ...schemas.trips import PanelModel, TripRequest, TripResponse
from ...services.session import TripMapSession
from ..dependencies import get_session
from .map_view import snapshot_model

router = APIRouter(prefix="/trips", tags=["trips"])

_STATUS_CODES = {
    "rejected": status.HTTP_400_BAD_REQUEST,
    "busy": status.HTTP_409_CONFLICT,
    "failed": status.HTTP_502_BAD_GATEWAY,
}


def _panel_model(session: TripMapSession) -> PanelModel:
    panel = session.panel
    content = panel.content
    return PanelModel(
        visible=panel.visible,
        title=content.title if content else panel.loading_message,
        metrics=dict(content.metrics) if content else {},
        lines=list(content.lines) if content else [],
    )


@router.post("/optimize", response_model=TripResponse, status_code=status.HTTP_200_OK)
async def optimize(
    payload: TripRequest,
    wait: bool = False,
    session: TripMapSession = Depends(get_session),
) -> TripResponse:
    """Optimize the selection and draw the result.

    With ``wait=true`` the response is sent once background geocoding and
    route requests of the new render pass have finished.
    """
    result = await session.coordinator.submit(payload.vehicle_id, payload.passenger_ids, payload.mode)
    if result.status in _STATUS_CODES:
        raise HTTPException(status_code=_STATUS_CODES[result.status], detail=result.message)
    if wait:
        await session.renderer.drain()
    return TripResponse(
        status=result.status,
        state=session.coordinator.state.value,
        message=result.message,
        panel=_panel_model(session),
        map=snapshot_model(session),
    )
