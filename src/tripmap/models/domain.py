"""Domain models for passengers, vehicles and optimized trip plans."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import time
from typing import List, Literal, Optional, Union


@dataclass(slots=True)
class Passenger:
    """A rider to pick up. Coordinates are either both set or both absent."""

    passenger_id: int
    name: str
    pickup_address: str
    dropoff_address: str
    pickup_time: Optional[time] = None
    arrival_time: Optional[time] = None
    group: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    def __post_init__(self) -> None:
        if (self.latitude is None) != (self.longitude is None):
            self.latitude = None
            self.longitude = None

    @property
    def coordinate(self) -> tuple[float, float] | None:
        if self.latitude is None or self.longitude is None:
            return None
        return (self.latitude, self.longitude)

    def set_coordinate(self, latitude: float, longitude: float) -> None:
        self.latitude = latitude
        self.longitude = longitude


@dataclass(slots=True)
class Vehicle:
    vehicle_id: int
    driver_id: Optional[int]
    plate: str
    capacity: int
    available: bool = True

    def __post_init__(self) -> None:
        if self.capacity < 1:
            raise ValueError(f"Vehicle {self.vehicle_id} capacity must be positive, got {self.capacity}.")


@dataclass(slots=True)
class TripPlan:
    """Ordered pickup sequence for one vehicle; index 0 is picked up first."""

    passengers: List[Passenger]
    vehicle: Vehicle
    total_distance_km: float
    total_duration_min: float
    computation_ms: Optional[int] = None

    def __post_init__(self) -> None:
        if len(self.passengers) > self.vehicle.capacity:
            raise ValueError(
                f"Trip carries {len(self.passengers)} passengers but vehicle "
                f"{self.vehicle.vehicle_id} seats {self.vehicle.capacity}."
            )

    @property
    def passenger_count(self) -> int:
        return len(self.passengers)

    @property
    def fill_rate(self) -> float:
        return len(self.passengers) / self.vehicle.capacity

    def passenger_ids(self) -> Counter:
        return Counter(p.passenger_id for p in self.passengers)


@dataclass(slots=True)
class AlgorithmSummary:
    name: str
    distance_km: float
    duration_min: float
    computation_ms: Optional[int] = None


@dataclass(slots=True)
class ComparisonResult:
    """Two heuristics' plans for the same passengers and vehicle."""

    plan_a: Optional[TripPlan]
    plan_b: Optional[TripPlan]
    summary_a: Optional[AlgorithmSummary]
    summary_b: Optional[AlgorithmSummary]
    winner: str
    improvement_pct: float

    @property
    def is_complete(self) -> bool:
        return self.plan_a is not None and self.plan_b is not None

    def same_passengers(self) -> bool:
        if not self.is_complete:
            return False
        return self.plan_a.passenger_ids() == self.plan_b.passenger_ids()


@dataclass(slots=True)
class SinglePlanOutcome:
    plan: TripPlan
    mode: str
    kind: Literal["single"] = field(default="single", init=False)


@dataclass(slots=True)
class ComparisonOutcome:
    result: ComparisonResult
    kind: Literal["comparison"] = field(default="comparison", init=False)


OptimizationOutcome = Union[SinglePlanOutcome, ComparisonOutcome]
