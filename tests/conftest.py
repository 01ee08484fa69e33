"""Shared fixtures: a fake YOURS service and a recording route consumer."""

import asyncio
import json

import httpx
import pytest

from tourroute.config import Settings
from tourroute.models import Point, PointOfInterest


def point(lat: float, lon: float) -> Point:
    return Point(latitude=lat, longitude=lon)


def midpoint(start: Point, end: Point) -> Point:
    return point((start.latitude + end.latitude) / 2, (start.longitude + end.longitude) / 2)


class FakeRoutingService:
    """
    Stands in for the routing service behind an httpx.MockTransport.

    By default every segment answers with a single waypoint halfway between
    its endpoints. Individual segments can be given a custom body, an error
    status, or held until ``release()`` is called.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.bodies: dict[tuple[Point, Point], str] = {}
        self.statuses: dict[tuple[Point, Point], int] = {}
        self.held: set[tuple[Point, Point]] = set()
        self.entered: asyncio.Event | None = None
        self.gate: asyncio.Event | None = None

    @staticmethod
    def endpoints(request: httpx.Request) -> tuple[Point, Point]:
        params = request.url.params
        return (
            point(float(params["flat"]), float(params["flon"])),
            point(float(params["tlat"]), float(params["tlon"])),
        )

    @property
    def segments(self) -> list[tuple[Point, Point]]:
        return [self.endpoints(request) for request in self.requests]

    def hold(self, start: Point, end: Point) -> None:
        self.held.add((start, end))
        self.entered = asyncio.Event()
        self.gate = asyncio.Event()

    def release(self) -> None:
        self.gate.set()

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = self.endpoints(request)

        if key in self.held:
            self.entered.set()
            await self.gate.wait()

        status = self.statuses.get(key, 200)
        if status != 200:
            return httpx.Response(status, text="Service unavailable")

        if key in self.bodies:
            return httpx.Response(200, text=self.bodies[key])

        middle = midpoint(*key)
        return httpx.Response(200, text=json.dumps({
            "type": "LineString",
            "coordinates": f"[{middle.longitude},{middle.latitude}]",
            "properties": {"distance": "0.5", "traveltime": "360"},
        }))

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


class RecordingConsumer:
    """Records every outcome delivered to it."""

    def __init__(self):
        self.calls: list[tuple[str, list[Point] | None]] = []

    def on_route_ready(self, points: list[Point]) -> None:
        self.calls.append(("ready", points))

    def on_route_unavailable(self) -> None:
        self.calls.append(("unavailable", None))


@pytest.fixture
def service() -> FakeRoutingService:
    return FakeRoutingService()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        routing_url="http://routing.test/api/1.0/gosmore.php",
        routing_client_name="tourroute-tests",
        routing_timeout_seconds=5,
    )


@pytest.fixture
def campus_pois() -> list[PointOfInterest]:
    return [
        PointOfInterest(name="Rose Garden", point=point(49.2693, -123.2559)),
        PointOfInterest(name="Library", point=point(49.2676, -123.2527)),
        PointOfInterest(name="Museum", point=point(49.2699, -123.2595)),
    ]
