"""Trip optimization request/response schemas."""

from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..models.domain import AlgorithmSummary, ComparisonResult, TripPlan
from .directory import PassengerModel, VehicleModel

TripMode = Literal["nearest_neighbor", "simulated_annealing", "compare"]


class OptimizeServiceRequest(BaseModel):
    """Body sent to the optimization service."""

    model_config = ConfigDict(populate_by_name=True)

    vehicle_id: int = Field(alias="vehiculeId")
    passenger_ids: List[int] = Field(alias="utilisateurIds")
    algorithm: Optional[str] = Field(default=None, alias="algorithme")


class TripPlanModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    passengers: List[PassengerModel] = Field(default_factory=list, alias="utilisateurs")
    vehicle: VehicleModel = Field(alias="vehicule")
    total_distance_km: float = Field(default=0.0, alias="distanceTotale")
    total_duration_min: float = Field(default=0.0, alias="tempsTotalMinutes")
    computation_ms: Optional[int] = Field(default=None, alias="tempsCalculMillis")

    def to_domain(self, computation_ms: Optional[int] = None) -> TripPlan:
        return TripPlan(
            passengers=[p.to_domain() for p in self.passengers],
            vehicle=self.vehicle.to_domain(),
            total_distance_km=self.total_distance_km,
            total_duration_min=self.total_duration_min,
            computation_ms=computation_ms if computation_ms is not None else self.computation_ms,
        )


class AlgorithmResultModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(default="", alias="nom")
    distance_km: float = Field(default=0.0, alias="distanceTotale")
    duration_min: float = Field(default=0.0, alias="tempsTotalMinutes")
    computation_ms: Optional[int] = Field(default=None, alias="tempsCalculMillis")

    def to_domain(self) -> AlgorithmSummary:
        return AlgorithmSummary(
            name=self.name,
            distance_km=self.distance_km,
            duration_min=self.duration_min,
            computation_ms=self.computation_ms,
        )


class ComparisonModel(BaseModel):
    """Compare-mode response. Either plan may be missing in a malformed payload."""

    model_config = ConfigDict(populate_by_name=True)

    nearest_neighbor: Optional[AlgorithmResultModel] = Field(default=None, alias="nearestNeighbor")
    simulated_annealing: Optional[AlgorithmResultModel] = Field(default=None, alias="simulatedAnnealing")
    nearest_neighbor_plan: Optional[TripPlanModel] = Field(default=None, alias="nearestNeighborTrajet")
    simulated_annealing_plan: Optional[TripPlanModel] = Field(default=None, alias="simulatedAnnealingTrajet")
    winner: str = Field(default="", alias="meilleur")
    improvement_pct: float = Field(default=0.0, alias="amelioration")

    def to_domain(self) -> ComparisonResult:
        summary_a = self.nearest_neighbor.to_domain() if self.nearest_neighbor else None
        summary_b = self.simulated_annealing.to_domain() if self.simulated_annealing else None
        plan_a = (
            self.nearest_neighbor_plan.to_domain(summary_a.computation_ms if summary_a else None)
            if self.nearest_neighbor_plan
            else None
        )
        plan_b = (
            self.simulated_annealing_plan.to_domain(summary_b.computation_ms if summary_b else None)
            if self.simulated_annealing_plan
            else None
        )
        return ComparisonResult(
            plan_a=plan_a,
            plan_b=plan_b,
            summary_a=summary_a,
            summary_b=summary_b,
            winner=self.winner,
            improvement_pct=self.improvement_pct,
        )


class TripRequest(BaseModel):
    """Selection submitted by the operator."""

    vehicle_id: Optional[int] = None
    passenger_ids: List[int] = Field(default_factory=list)
    mode: TripMode = "nearest_neighbor"


class CenterRequest(BaseModel):
    address: str


class MarkerModel(BaseModel):
    handle: int
    label: str
    latitude: float
    longitude: float
    slot: str
    color: str


class RouteModel(BaseModel):
    handle: int
    slot: str
    color: str
    dash_array: Optional[str] = None
    waypoint_count: int
    point_count: int
    distance_km: Optional[float] = None


class MapSnapshotModel(BaseModel):
    generation: int
    markers: List[MarkerModel]
    routes: List[RouteModel]
    viewport: Optional[List[List[float]]] = None
    center: List[float]
    zoom: int
    pending: int = 0


class PanelModel(BaseModel):
    visible: bool
    title: Optional[str] = None
    metrics: Dict[str, str] = Field(default_factory=dict)
    lines: List[str] = Field(default_factory=list)


class TripResponse(BaseModel):
    status: str
    state: str
    message: Optional[str] = None
    panel: PanelModel
    map: MapSnapshotModel
