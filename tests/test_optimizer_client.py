import asyncio
import json

import httpx
import pytest

from src.tripmap.services.optimizer_client import (
    MalformedResponseError,
    OptimizationServiceError,
    OptimizerClient,
)


def _user(uid: int, lat=48.85, lon=2.35) -> dict:
    return {
        "id": uid,
        "nom": f"User {uid}",
        "adresseDepart": f"{uid} rue de Rivoli, Paris",
        "adresseArrivee": "La Defense, Puteaux",
        "latitude": lat,
        "longitude": lon,
    }


VEHICLE = {"id": 7, "conducteurId": 1, "immatriculation": "AB-123-CD", "capacite": 4, "disponible": True}


def _trip(order) -> dict:
    return {
        "utilisateurs": [_user(uid) for uid in order],
        "vehicule": VEHICLE,
        "distanceTotale": 14.2,
        "tempsTotalMinutes": 35.0,
    }


def _client(handler) -> OptimizerClient:
    return OptimizerClient(
        base_url="https://optimizer.test/covoiturage/api",
        timeout=2.0,
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


def test_heuristic_request_body_and_plan_order():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_trip([2, 3, 1]))

    outcome = asyncio.run(_client(handler).optimize(7, [1, 2, 3], "simulated_annealing"))

    request = seen[0]
    assert request.method == "POST"
    assert request.url.path == "/covoiturage/api/optimiser"
    assert json.loads(request.content) == {
        "vehiculeId": 7,
        "utilisateurIds": [1, 2, 3],
        "algorithme": "simulated_annealing",
    }
    assert outcome.kind == "single"
    assert outcome.mode == "simulated_annealing"
    assert [p.passenger_id for p in outcome.plan.passengers] == [2, 3, 1]


def test_compare_request_uses_action_parameter():
    seen = []
    payload = {
        "nearestNeighbor": {"nom": "Nearest Neighbor", "distanceTotale": 15.0, "tempsTotalMinutes": 36.0, "tempsCalculMillis": 1},
        "simulatedAnnealing": {"nom": "Simulated Annealing", "distanceTotale": 13.5, "tempsTotalMinutes": 33.0, "tempsCalculMillis": 60},
        "nearestNeighborTrajet": _trip([1, 2, 3]),
        "simulatedAnnealingTrajet": _trip([3, 1, 2]),
        "meilleur": "Simulated Annealing",
        "amelioration": 10.0,
    }

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=payload)

    outcome = asyncio.run(_client(handler).optimize(7, [1, 2, 3], "compare"))

    request = seen[0]
    assert request.url.params["action"] == "comparer"
    assert "algorithme" not in json.loads(request.content)
    assert outcome.kind == "comparison"
    assert outcome.result.is_complete
    assert outcome.result.winner == "Simulated Annealing"
    assert outcome.result.plan_b.computation_ms == 60


def test_compare_with_different_passengers_is_malformed():
    payload = {
        "nearestNeighborTrajet": _trip([1, 2, 3]),
        "simulatedAnnealingTrajet": _trip([1, 2]),
        "meilleur": "Nearest Neighbor",
    }
    client = _client(lambda request: httpx.Response(200, json=payload))
    with pytest.raises(MalformedResponseError):
        asyncio.run(client.optimize(7, [1, 2, 3], "compare"))


def test_compare_with_missing_plan_is_returned_incomplete():
    payload = {"nearestNeighborTrajet": _trip([1, 2]), "meilleur": "Nearest Neighbor"}
    client = _client(lambda request: httpx.Response(200, json=payload))

    outcome = asyncio.run(client.optimize(7, [1, 2], "compare"))

    assert outcome.kind == "comparison"
    assert outcome.result.plan_b is None


def test_service_error_text_is_kept_verbatim():
    client = _client(lambda request: httpx.Response(400, json={"error": "Capacite du vehicule depassee"}))
    with pytest.raises(OptimizationServiceError, match="^Capacite du vehicule depassee$"):
        asyncio.run(client.optimize(7, [1, 2, 3, 4, 5], "nearest_neighbor"))


def test_plain_text_error_body_is_used():
    client = _client(lambda request: httpx.Response(500, text="Internal failure"))
    with pytest.raises(OptimizationServiceError, match="Internal failure"):
        asyncio.run(client.optimize(7, [1], "nearest_neighbor"))


def test_unreachable_service_raises_service_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(OptimizationServiceError):
        asyncio.run(_client(handler).optimize(7, [1], "nearest_neighbor"))


def test_plan_without_vehicle_is_malformed():
    client = _client(lambda request: httpx.Response(200, json={"utilisateurs": [_user(1)]}))
    with pytest.raises(MalformedResponseError):
        asyncio.run(client.optimize(7, [1], "nearest_neighbor"))


def test_invalid_json_is_malformed():
    client = _client(lambda request: httpx.Response(200, text="<html>oops</html>"))
    with pytest.raises(MalformedResponseError):
        asyncio.run(client.optimize(7, [1], "nearest_neighbor"))


def test_list_vehicles_filters_unavailable():
    vehicles = [VEHICLE, dict(VEHICLE, id=8, immatriculation="EF-456-GH", disponible=False)]
    client = _client(lambda request: httpx.Response(200, json=vehicles))

    assert [v.vehicle_id for v in asyncio.run(client.list_vehicles())] == [7]
    assert [v.vehicle_id for v in asyncio.run(client.list_vehicles(available_only=False))] == [7, 8]


def test_list_passengers_parses_directory():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[_user(1), _user(2, lat=None, lon=None)])

    passengers = asyncio.run(_client(handler).list_passengers())

    assert seen[0].url.path == "/covoiturage/api/utilisateurs"
    assert [p.coordinate for p in passengers] == [(48.85, 2.35), None]
