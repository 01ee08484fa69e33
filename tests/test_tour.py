"""Tests for tour planning."""

import pytest

from tourroute.pipeline.route_retrieval import RouteRetrievalOrchestrator
from tourroute.pipeline.tour import TO_TOUR_TARGET, TOUR_TARGET, TourPlanner, build_tour_points
from tourroute.tools.routing import RoutingClient

from conftest import RecordingConsumer, midpoint, point


class TestBuildTourPoints:
    """Test tour point lists."""

    def test_tour_loops_back_to_first(self, campus_pois):
        points = build_tour_points(campus_pois)

        assert points == [poi.point for poi in campus_pois] + [campus_pois[0].point]

    def test_single_poi_is_not_closed(self, campus_pois):
        assert build_tour_points(campus_pois[:1]) == [campus_pois[0].point]

    def test_no_pois(self):
        assert build_tour_points([]) == []


@pytest.mark.asyncio
class TestTourPlanner:
    """Test the tour and path-to-tour runs."""

    async def test_tour_without_location(self, service, test_settings, campus_pois):
        tour_consumer = RecordingConsumer()
        path_consumer = RecordingConsumer()
        async with RoutingClient(config=test_settings, transport=service.transport()) as client:
            orchestrator = RouteRetrievalOrchestrator(client)
            planner = TourPlanner(orchestrator, tour_consumer, path_consumer)

            started = planner.update(campus_pois[:2])
            await orchestrator.dispatch_next()

        a, b = campus_pois[0].point, campus_pois[1].point
        assert set(started) == {TOUR_TARGET}
        assert service.segments == [(a, b), (b, a)]
        assert tour_consumer.calls == [("ready", [a, midpoint(a, b), b, b, midpoint(b, a), a])]
        assert path_consumer.calls == []
        # both directions are cached separately
        assert len(client.cache) == 2

    async def test_path_to_closest_poi_is_not_cached(self, service, test_settings, campus_pois):
        location = point(49.2677, -123.2529)
        library = campus_pois[1].point
        tour_consumer = RecordingConsumer()
        path_consumer = RecordingConsumer()
        async with RoutingClient(config=test_settings, transport=service.transport()) as client:
            orchestrator = RouteRetrievalOrchestrator(client)
            planner = TourPlanner(orchestrator, tour_consumer, path_consumer)

            started = planner.update(campus_pois, current_location=location)
            for _ in started:
                await orchestrator.dispatch_next()

            # only the three tour segments are cached
            assert len(client.cache) == 3

            planner.update_user_location(location, campus_pois)
            await orchestrator.dispatch_next()

        assert set(started) == {TOUR_TARGET, TO_TOUR_TARGET}
        assert path_consumer.calls == [
            ("ready", [location, midpoint(location, library), library]),
        ] * 2
        assert service.segments.count((location, library)) == 2
        assert len(tour_consumer.calls[0][1]) == 9

    async def test_single_poi_replaces_tour_with_empty_route(self, service, test_settings, campus_pois):
        service.hold(campus_pois[0].point, campus_pois[1].point)
        tour_consumer = RecordingConsumer()
        async with RoutingClient(config=test_settings, transport=service.transport()) as client:
            orchestrator = RouteRetrievalOrchestrator(client)
            planner = TourPlanner(orchestrator, tour_consumer, RecordingConsumer())

            old = planner.update(campus_pois)[TOUR_TARGET]
            await service.entered.wait()
            planner.update(campus_pois[:1])
            await orchestrator.dispatch_next()
            await orchestrator.dispatch_next()

        assert old.cancelled
        # the cleared tour arrives after the cancelled one
        assert tour_consumer.calls == [("unavailable", None), ("ready", [])]

    async def test_location_without_pois_starts_nothing_for_path(self, service, test_settings):
        path_consumer = RecordingConsumer()
        async with RoutingClient(config=test_settings, transport=service.transport()) as client:
            orchestrator = RouteRetrievalOrchestrator(client)
            planner = TourPlanner(orchestrator, RecordingConsumer(), path_consumer)

            started = planner.update([], current_location=point(49.0, -123.0))
            await orchestrator.dispatch_next()

        assert set(started) == {TOUR_TARGET}
        assert path_consumer.calls == []
        assert service.requests == []

    async def test_tour_without_cache_fetches_every_time(self, service, test_settings, campus_pois):
        tour_consumer = RecordingConsumer()
        async with RoutingClient(config=test_settings, transport=service.transport()) as client:
            orchestrator = RouteRetrievalOrchestrator(client)
            planner = TourPlanner(orchestrator, tour_consumer, RecordingConsumer())

            planner.update(campus_pois[:2], use_cache=False)
            await orchestrator.dispatch_next()
            assert len(client.cache) == 0

            planner.update(campus_pois[:2], use_cache=False)
            await orchestrator.dispatch_next()

        a, b = campus_pois[0].point, campus_pois[1].point
        assert service.segments == [(a, b), (b, a)] * 2
        assert tour_consumer.calls[0] == tour_consumer.calls[1]
