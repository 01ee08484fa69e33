"""Geospatial utility functions."""

from math import cos, radians
from typing import Sequence

from tourroute.models import Point, PointOfInterest


def distance_value(approx_latitude: float, a: Point, b: Point) -> float:
    """
    Value representing the "line-of-sight" distance between two points.
    
    The surface of the earth is approximated by a plane, which works okay for
    short distances. The value only orders distances; it has a nonlinear
    relationship to the actual distance.
    
    Args:
        approx_latitude: Latitude used to scale longitude differences
        a, b: Points to compare
    
    Returns:
        Squared planar distance in scaled degrees
    """
    lat_adjust = cos(radians(approx_latitude))
    lat_diff = a.latitude - b.latitude
    lon_diff = a.longitude - b.longitude
    
    return lat_diff ** 2 + (lat_adjust * lon_diff) ** 2


def find_closest_poi(reference: Point, pois: Sequence[PointOfInterest]) -> PointOfInterest:
    """
    Find the POI closest to ``reference``.
    
    The latitude of the first POI is the projection baseline for all
    comparisons. Ties go to the POI that comes first.
    
    Raises:
        ValueError: If ``pois`` is empty
    """
    if not pois:
        raise ValueError("At least one point of interest is required")
    
    approx_latitude = pois[0].point.latitude
    
    closest = pois[0]
    min_value = distance_value(approx_latitude, reference, closest.point)
    
    for poi in pois[1:]:
        value = distance_value(approx_latitude, reference, poi.point)
        if value < min_value:
            min_value = value
            closest = poi
    
    return closest
