"""Exceptions raised by the routing subsystem."""


class TourRouteError(Exception):
    """Base exception for tour routing errors."""


class GeometryParseError(TourRouteError):
    """Raised when a geometry string contains a malformed number."""


class TransportError(TourRouteError):
    """Raised when the routing service cannot be reached or answers with an error status."""


class RoutingError(TourRouteError):
    """Raised when a route segment could not be fetched, whatever the cause."""
