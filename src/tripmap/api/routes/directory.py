"""Passenger and vehicle listings used to populate the selection inputs."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from ...schemas.directory import PassengerSummaryModel, VehicleSummaryModel
from ...services.optimizer_client import MalformedResponseError, OptimizationServiceError
from ...services.session import TripMapSession
from ..dependencies import get_session

router = APIRouter(prefix="/directory", tags=["directory"])


@router.get("/passengers", response_model=List[PassengerSummaryModel])
async def list_passengers(session: TripMapSession = Depends(get_session)) -> List[PassengerSummaryModel]:
    try:
        passengers = await session.optimizer.list_passengers()
    except (OptimizationServiceError, MalformedResponseError) as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return [
        PassengerSummaryModel(
            id=p.passenger_id,
            name=p.name,
            pickup_address=p.pickup_address,
            has_coordinates=p.coordinate is not None,
        )
        for p in passengers
    ]


@router.get("/vehicles", response_model=List[VehicleSummaryModel])
async def list_vehicles(session: TripMapSession = Depends(get_session)) -> List[VehicleSummaryModel]:
    """Available vehicles only."""
    try:
        vehicles = await session.optimizer.list_vehicles(available_only=True)
    except (OptimizationServiceError, MalformedResponseError) as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return [
        VehicleSummaryModel(
            id=v.vehicle_id,
            plate=v.plate,
            capacity=v.capacity,
            label=f"{v.plate} ({v.capacity} seats)",
        )
        for v in vehicles
    ]
