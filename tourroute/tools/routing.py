"""Walking route segments from the YOURS routing service.

API reference: http://wiki.openstreetmap.org/wiki/YOURS#Routing_API
"""

import json
import logging

import httpx

from tourroute.config import Settings, settings as default_settings
from tourroute.exceptions import GeometryParseError, RoutingError, TransportError
from tourroute.models import EndpointPair, Point, Route
from tourroute.tools.cache import RouteCache
from tourroute.tools.geometry import flatten_coordinates, parse_coordinates


logger = logging.getLogger(__name__)

CLIENT_HEADER = "X-Yours-client"

# Field of the geojson response holding the flattened [lon,lat] groups
GEOMETRY_FIELD = "coordinates"


class RoutingClient:
    """
    Fetches walking routes between two points, optionally through a cache.

    Safe to call concurrently: the cache synchronizes itself and every call
    performs its own request over a shared connection pool.
    """

    def __init__(
        self,
        cache: RouteCache | None = None,
        config: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.cache = cache if cache is not None else RouteCache()
        self.config = config or default_settings

        headers = {}
        if self.config.routing_client_name:
            headers[CLIENT_HEADER] = self.config.routing_client_name

        self._client = httpx.AsyncClient(
            headers=headers,
            timeout=self.config.routing_timeout_seconds,
            transport=transport,
        )

    async def __aenter__(self) -> "RoutingClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Shut down the underlying connection pool."""
        await self._client.aclose()

    #----------------
    # Public API
    #----------------
    async def fetch_segment(self, start: Point, end: Point, use_cache: bool = True) -> Route:
        """
        Get the walking route from ``start`` to ``end``.

        Args:
            start: Start of the segment
            end: End of the segment
            use_cache: Return a cached route if one exists, and cache a freshly
                fetched one

        Returns:
            Route with the waypoints between start and end

        Raises:
            RoutingError: For any failure (transport, status or decoding)
        """
        endpoints = EndpointPair(start=start, end=end)

        if use_cache:
            cached = self.cache.lookup(endpoints)
            if cached is not None:
                logger.debug("Cache hit for %s -> %s", start.as_tuple(), end.as_tuple())
                return cached
            logger.debug("Cache miss for %s -> %s", start.as_tuple(), end.as_tuple())

        try:
            route = await self._fetch_from_service(endpoints)
        except (GeometryParseError, TransportError) as exc:
            logger.warning("Route %s -> %s unavailable: %s", start.as_tuple(), end.as_tuple(), exc)
            raise RoutingError(str(exc)) from exc

        # empty geometry is not worth remembering
        if use_cache and route.waypoints:
            self.cache.store(endpoints, route)

        return route

    #----------------
    # Service access
    #----------------
    def build_params(self, endpoints: EndpointPair) -> dict[str, str | int | float]:
        """Query parameters for one segment request."""
        return {
            "format": self.config.response_format,
            "flat": endpoints.start.latitude,
            "flon": endpoints.start.longitude,
            "tlat": endpoints.end.latitude,
            "tlon": endpoints.end.longitude,
            "v": self.config.travel_mode,
            "fast": self.config.route_type_fast,
            "layer": self.config.layer,
        }

    async def _fetch_from_service(self, endpoints: EndpointPair) -> Route:
        logger.info(
            "Requesting route %s -> %s",
            endpoints.start.as_tuple(),
            endpoints.end.as_tuple(),
        )
        try:
            response = await self._client.get(
                self.config.routing_url,
                params=self.build_params(endpoints),
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise TransportError(f"Routing service error: {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"Routing service unreachable: {exc!r}") from exc

        return self.decode_response(response.text)

    @staticmethod
    def decode_response(body: str) -> Route:
        """
        Decode the service's response body into a Route.

        Raises:
            GeometryParseError: If the body or its geometry field is malformed
        """
        try:
            payload = json.loads(body)
        except ValueError as exc:
            raise GeometryParseError("Routing response is not valid JSON") from exc

        if not isinstance(payload, dict) or GEOMETRY_FIELD not in payload:
            raise GeometryParseError(f"Routing response has no '{GEOMETRY_FIELD}' field")

        text = flatten_coordinates(payload[GEOMETRY_FIELD])
        return Route(waypoints=tuple(parse_coordinates(text)))
