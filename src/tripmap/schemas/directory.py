"""Wire schemas for the passenger/vehicle directory service."""

from __future__ import annotations

from datetime import time
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.domain import Passenger, Vehicle
from ..services.geospatial import parse_coordinate


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class PassengerModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str = Field(alias="nom")
    pickup_address: str = Field(default="", alias="adresseDepart")
    dropoff_address: str = Field(default="", alias="adresseArrivee")
    pickup_time: Optional[time] = Field(default=None, alias="heureDepart")
    arrival_time: Optional[time] = Field(default=None, alias="heureArrivee")
    group: Optional[str] = Field(default=None, alias="groupe")
    latitude: Any = None
    longitude: Any = None

    @field_validator("pickup_time", "arrival_time", "group", mode="before")
    @classmethod
    def _blank_as_missing(cls, value: Any) -> Any:
        return _blank_to_none(value)

    def to_domain(self) -> Passenger:
        coordinate = parse_coordinate(self.latitude, self.longitude)
        return Passenger(
            passenger_id=self.id,
            name=self.name,
            pickup_address=self.pickup_address or "",
            dropoff_address=self.dropoff_address or "",
            pickup_time=self.pickup_time,
            arrival_time=self.arrival_time,
            group=self.group,
            latitude=coordinate[0] if coordinate else None,
            longitude=coordinate[1] if coordinate else None,
        )


class VehicleModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    driver_id: Optional[int] = Field(default=None, alias="conducteurId")
    plate: str = Field(default="", alias="immatriculation")
    capacity: int = Field(alias="capacite", ge=1)
    available: bool = Field(default=True, alias="disponible")

    def to_domain(self) -> Vehicle:
        return Vehicle(
            vehicle_id=self.id,
            driver_id=self.driver_id,
            plate=self.plate,
            capacity=self.capacity,
            available=self.available,
        )


class PassengerSummaryModel(BaseModel):
    id: int
    name: str
    pickup_address: str
    has_coordinates: bool


class VehicleSummaryModel(BaseModel):
    id: int
    plate: str
    capacity: int
    label: str
