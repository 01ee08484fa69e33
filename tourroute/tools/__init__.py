"""Tools for fetching and decoding walking routes."""

from .cache import RouteCache
from .geometry import parse_coordinates
from .routing import RoutingClient

__all__ = [
    "RouteCache",
    "RoutingClient",
    "parse_coordinates",
]
