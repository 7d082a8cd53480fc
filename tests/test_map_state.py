import asyncio

import httpx

from src.tripmap.map.renderer import RouteRenderer
from src.tripmap.map.state import MapState
from src.tripmap.map.styles import PRIMARY_STYLE, SECONDARY_STYLE
from src.tripmap.models.domain import Passenger
from src.tripmap.services.routing.osrm_client import OSRMClient, RouteGeometry, RoutingServiceError


class DummyRouting:
    def __init__(self, fail: bool = False, delay: float = 0.0):
        self.fail = fail
        self.delay = delay
        self.calls = []

    async def route(self, coordinates):
        self.calls.append(list(coordinates))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise RoutingServiceError("OSRM route request failed: NoRoute")
        return RouteGeometry(path=list(coordinates), distance_km=3.2, duration_min=9.0)


POINTS = [(48.85, 2.35), (48.86, 2.34), (48.87, 2.36)]


def test_clear_on_empty_state_is_noop():
    state = MapState()
    state.clear()
    state.clear()
    assert state.marker_count == 0
    assert state.route_count == 0


def test_clear_releases_markers_and_routes():
    state = MapState(routing_client=DummyRouting())
    state.add_marker(POINTS[0], "1", PRIMARY_STYLE)
    asyncio.run(state.set_route(POINTS, PRIMARY_STYLE))
    assert state.marker_count == 1
    assert state.route_count == 1

    state.clear()

    assert state.marker_count == 0
    assert state.route_count == 0


def test_begin_pass_advances_generation_and_rejects_stale_markers():
    state = MapState()
    first = state.begin_pass()
    state.add_marker(POINTS[0], "1", PRIMARY_STYLE, generation=first)
    second = state.begin_pass()

    assert second == first + 1
    assert state.marker_count == 0
    assert state.add_marker(POINTS[1], "1", PRIMARY_STYLE, generation=first) is None
    assert state.add_marker(POINTS[1], "1", PRIMARY_STYLE, generation=second) is not None
    assert state.marker_count == 1


def test_remove_marker_by_handle():
    state = MapState()
    handle = state.add_marker(POINTS[0], "1", PRIMARY_STYLE)
    assert state.remove_marker(handle) is True
    assert state.remove_marker(handle) is False
    assert state.marker_count == 0


def test_set_route_needs_two_points():
    routing = DummyRouting()
    state = MapState(routing_client=routing)
    assert asyncio.run(state.set_route(POINTS[:1], PRIMARY_STYLE)) is None
    assert routing.calls == []
    assert state.route_count == 0


def test_set_route_replaces_same_slot_only():
    state = MapState(routing_client=DummyRouting())

    async def scenario():
        await state.set_route(POINTS, PRIMARY_STYLE)
        await state.set_route(POINTS[:2], PRIMARY_STYLE)
        await state.set_route(POINTS, SECONDARY_STYLE)

    asyncio.run(scenario())

    slots = {route.style.slot: route for route in state.routes}
    assert set(slots) == {"primary", "secondary"}
    assert len(slots["primary"].waypoints) == 2


def test_routing_failure_draws_nothing():
    state = MapState(routing_client=DummyRouting(fail=True))
    assert asyncio.run(state.set_route(POINTS, PRIMARY_STYLE)) is None
    assert state.route_count == 0


def test_route_timeout_treated_as_failure():
    state = MapState(routing_client=DummyRouting(delay=1.0), route_timeout=0.01)
    assert asyncio.run(state.set_route(POINTS, PRIMARY_STYLE)) is None
    assert state.route_count == 0


def test_route_completing_after_new_pass_is_discarded():
    state = MapState(routing_client=DummyRouting(delay=0.01))

    async def scenario():
        generation = state.begin_pass()
        task = asyncio.create_task(state.set_route(POINTS, PRIMARY_STYLE, generation=generation))
        await asyncio.sleep(0)
        state.begin_pass()
        return await task

    assert asyncio.run(scenario()) is None
    assert state.route_count == 0


def test_fit_view_uses_padding_and_ignores_empty():
    state = MapState(padding=50)
    state.fit_view([])
    assert state.viewport is None

    state.fit_view(POINTS)
    assert state.viewport.padding == 50
    assert all(state.viewport.bounds.contains(lat, lon) for lat, lon in POINTS)


def test_set_view_recenters_map():
    state = MapState()
    state.fit_view(POINTS)
    state.set_view((45.76, 4.83), 14)
    assert state.center == (45.76, 4.83)
    assert state.zoom == 14
    assert state.viewport is None


def test_html_contains_markers_and_dashed_secondary_route():
    state = MapState(routing_client=DummyRouting())
    state.add_marker(POINTS[0], "1", PRIMARY_STYLE, "<b>Alice</b>")
    state.add_marker(POINTS[1], "1", SECONDARY_STYLE, "<b>Bob</b>")
    asyncio.run(state.set_route(POINTS, SECONDARY_STYLE))
    state.fit_view(POINTS)

    document = state.to_html()

    assert "openstreetmap.org/copyright" in document
    assert PRIMARY_STYLE.color in document
    assert SECONDARY_STYLE.color in document
    assert "10, 10" in document
    assert "fitBounds" in document


def test_truncated_osrm_geometry_skips_route():
    osrm = OSRMClient(
        base_url="https://osrm.test",
        client=httpx.AsyncClient(
            transport=httpx.MockTransport(
                lambda request: httpx.Response(200, json={"code": "Ok", "routes": [{"geometry": "_"}]})
            )
        ),
    )
    state = MapState(routing_client=osrm)
    passengers = [
        Passenger(passenger_id=i, name=f"P{i}", pickup_address="", dropoff_address="", latitude=lat, longitude=lon)
        for i, (lat, lon) in enumerate(POINTS, start=1)
    ]

    async def scenario():
        renderer = RouteRenderer(state, geocoder=None, lookup_timeout=1.0)
        renderer.render(passengers, PRIMARY_STYLE, generation=state.begin_pass())
        await renderer.drain()

    asyncio.run(scenario())

    assert state.marker_count == 3
    assert state.route_count == 0


def test_clear_on_empty_map_drops_pending_route():
    state = MapState(routing_client=DummyRouting(delay=0.01))

    async def scenario():
        task = asyncio.create_task(state.set_route(POINTS, PRIMARY_STYLE))
        await asyncio.sleep(0)
        state.clear()
        return await task

    assert asyncio.run(scenario()) is None
    assert state.route_count == 0
