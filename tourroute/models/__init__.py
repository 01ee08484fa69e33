"""Data models for tour routing."""

from .geo import EndpointPair, Point, PointOfInterest, Route

__all__ = [
    "EndpointPair",
    "Point",
    "PointOfInterest",
    "Route",
]
