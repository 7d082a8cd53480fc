"""Numeric summaries shown next to the map."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..models.domain import AlgorithmSummary, ComparisonResult, TripPlan
from .geospatial import path_length_km


@dataclass(slots=True)
class PanelContent:
    title: str
    metrics: Dict[str, str] = field(default_factory=dict)
    lines: List[str] = field(default_factory=list)


def format_distance(km: float) -> str:
    return f"{km:.2f} km"


def format_duration(minutes: float) -> str:
    return f"{minutes:.0f} min"


def plan_summary(plan: TripPlan) -> PanelContent:
    """Distance, duration, passenger count, fill rate and visiting order.

    ``straight_line`` is the great-circle length through the stops that have
    coordinates, shown next to the road distance for reference.
    """
    metrics = {
        "distance": format_distance(plan.total_distance_km),
        "duration": format_duration(plan.total_duration_min),
        "passengers": str(plan.passenger_count),
        "fill_rate": f"{plan.fill_rate * 100:.0f}%",
    }
    located = [p.coordinate for p in plan.passengers if p.coordinate is not None]
    if len(located) > 1:
        metrics["straight_line"] = format_distance(path_length_km(located))
    return PanelContent(
        title=f"Trip for {plan.vehicle.plate or f'vehicle {plan.vehicle.vehicle_id}'}",
        metrics=metrics,
        lines=[
            f"{index}. {p.name} - {p.pickup_address}"
            for index, p in enumerate(plan.passengers, start=1)
        ],
    )


def _algorithm_metrics(prefix: str, summary: Optional[AlgorithmSummary]) -> Dict[str, str]:
    if summary is None:
        return {}
    metrics = {
        f"{prefix}_distance": format_distance(summary.distance_km),
        f"{prefix}_duration": format_duration(summary.duration_min),
    }
    if summary.computation_ms is not None:
        metrics[f"{prefix}_computation"] = f"{summary.computation_ms} ms"
    return metrics


def _summary_for(summary: Optional[AlgorithmSummary], plan: Optional[TripPlan], name: str) -> Optional[AlgorithmSummary]:
    if summary is not None:
        return summary
    if plan is None:
        return None
    return AlgorithmSummary(
        name=name,
        distance_km=plan.total_distance_km,
        duration_min=plan.total_duration_min,
        computation_ms=plan.computation_ms,
    )


def comparison_summary(result: ComparisonResult) -> PanelContent:
    """Per-plan distance/duration/latency plus the winner.

    The improvement line only appears when the winner actually improved on
    the other plan.
    """
    summary_a = _summary_for(result.summary_a, result.plan_a, "Nearest Neighbor")
    summary_b = _summary_for(result.summary_b, result.plan_b, "Simulated Annealing")

    metrics: Dict[str, str] = {}
    metrics.update(_algorithm_metrics("a", summary_a))
    metrics.update(_algorithm_metrics("b", summary_b))
    metrics["winner"] = result.winner

    lines = []
    for summary in (summary_a, summary_b):
        if summary is None:
            continue
        line = f"{summary.name}: {format_distance(summary.distance_km)}, {format_duration(summary.duration_min)}"
        if summary.computation_ms is not None:
            line += f", computed in {summary.computation_ms} ms"
        lines.append(line)
    lines.append(f"Best algorithm: {result.winner}")
    if result.improvement_pct > 0:
        metrics["improvement"] = f"{result.improvement_pct:.1f}%"
        lines.append(f"Gain: {result.improvement_pct:.1f}% shorter")

    return PanelContent(title="Algorithm comparison", metrics=metrics, lines=lines)
