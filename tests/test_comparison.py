import asyncio

from src.tripmap.map.comparison import ComparisonPresenter
from src.tripmap.map.renderer import RouteRenderer
from src.tripmap.map.state import MapState
from src.tripmap.map.styles import PRIMARY_STYLE, SECONDARY_STYLE
from src.tripmap.models.domain import AlgorithmSummary, ComparisonResult, Passenger, TripPlan, Vehicle
from src.tripmap.services.routing.osrm_client import RouteGeometry

COORDS = {
    1: (48.85, 2.35),
    2: (48.86, 2.30),
    3: (48.90, 2.40),
}


class DummyRouting:
    def __init__(self):
        self.calls = []

    async def route(self, coordinates):
        self.calls.append(list(coordinates))
        return RouteGeometry(path=list(coordinates), distance_km=2.0, duration_min=6.0)


class DummyGeocoder:
    def __init__(self, results=None, gate=None):
        self.results = results or {}
        self.gate = gate

    async def resolve(self, address):
        if self.gate is not None:
            await self.gate.wait()
        return self.results.get(address)


def _passenger(pid: int, known: bool = True) -> Passenger:
    lat, lon = COORDS[pid] if known else (None, None)
    return Passenger(
        passenger_id=pid,
        name=f"Passenger {pid}",
        pickup_address=f"address {pid}",
        dropoff_address="Gare du Nord, Paris",
        latitude=lat,
        longitude=lon,
    )


def _plan(order, unknown=()) -> TripPlan:
    return TripPlan(
        passengers=[_passenger(pid, known=pid not in unknown) for pid in order],
        vehicle=Vehicle(vehicle_id=5, driver_id=1, plate="AB-123-CD", capacity=4),
        total_distance_km=10.0,
        total_duration_min=25.0,
    )


def _result(plan_a, plan_b) -> ComparisonResult:
    return ComparisonResult(
        plan_a=plan_a,
        plan_b=plan_b,
        summary_a=AlgorithmSummary("Nearest Neighbor", 10.0, 25.0, 3),
        summary_b=AlgorithmSummary("Simulated Annealing", 9.0, 22.0, 80),
        winner="Simulated Annealing",
        improvement_pct=10.0,
    )


def _setup(geocoder=None):
    routing = DummyRouting()
    state = MapState(routing_client=routing)
    renderer = RouteRenderer(state, geocoder or DummyGeocoder(), lookup_timeout=1.0)
    return state, renderer, ComparisonPresenter(state, renderer), routing


def test_both_plans_drawn_with_distinct_styles_and_combined_view():
    state, renderer, presenter, routing = _setup()
    result = _result(_plan([1, 2, 3]), _plan([3, 1, 2]))

    async def scenario():
        drawn = presenter.render_comparison(result)
        await renderer.drain()
        return drawn

    assert asyncio.run(scenario()) is True

    primary = [m for m in state.markers if m.style.slot == PRIMARY_STYLE.slot]
    secondary = [m for m in state.markers if m.style.slot == SECONDARY_STYLE.slot]
    assert len(primary) == 3
    assert len(secondary) == 3
    assert {m.style.color for m in primary} == {PRIMARY_STYLE.color}
    assert {m.style.color for m in secondary} == {SECONDARY_STYLE.color}
    assert [m.position for m in secondary] == [COORDS[3], COORDS[1], COORDS[2]]

    assert state.route_count == 2
    assert {r.style.slot for r in state.routes} == {"primary", "secondary"}
    assert len(routing.calls) == 2
    assert all(state.viewport.bounds.contains(*point) for point in COORDS.values())


def test_popups_carry_algorithm_label():
    state, renderer, presenter, _ = _setup()

    async def scenario():
        presenter.render_comparison(_result(_plan([1, 2]), _plan([2, 1])))
        await renderer.drain()

    asyncio.run(scenario())

    secondary = [m for m in state.markers if m.style.slot == "secondary"]
    assert secondary[0].popup_html.count("Simulated Annealing #1") == 1


def test_missing_plan_leaves_previous_map_untouched():
    state, renderer, presenter, _ = _setup()

    async def scenario():
        presenter.render_comparison(_result(_plan([1, 2]), _plan([2, 1])))
        await renderer.drain()
        before = (state.generation, state.markers, state.routes, state.viewport)
        drawn = presenter.render_comparison(_result(_plan([1, 2]), None))
        await renderer.drain()
        return before, drawn

    before, drawn = asyncio.run(scenario())

    assert drawn is False
    assert (state.generation, state.markers, state.routes, state.viewport) == before


def test_no_result_is_rejected():
    state, _, presenter, _ = _setup()
    assert presenter.render_comparison(None) is False
    assert state.generation == 0


def test_late_geocode_in_second_plan_joins_current_pass():
    async def scenario():
        gate = asyncio.Event()
        geocoder = DummyGeocoder({"address 3": COORDS[3]}, gate=gate)
        state, renderer, presenter, routing = _setup(geocoder)

        presenter.render_comparison(_result(_plan([1, 2, 3]), _plan([2, 3, 1], unknown={3})))
        await asyncio.sleep(0)
        secondary_before = [m.label for m in state.markers if m.style.slot == "secondary"]
        gate.set()
        await renderer.drain()
        return state, routing, secondary_before

    state, routing, secondary_before = asyncio.run(scenario())

    assert secondary_before == ["1", "3"]
    assert [m.label for m in state.markers if m.style.slot == "secondary"] == ["1", "3", "2"]
    assert state.marker_count == 6
    assert state.route_count == 2
    # The secondary route was requested with the two points known at render time.
    assert [COORDS[2], COORDS[1]] in routing.calls
