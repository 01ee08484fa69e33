"""Utility functions for tour routing."""

from .geo import distance_value, find_closest_poi
from .gpx import create_gpx_track, save_gpx_file

__all__ = [
    "create_gpx_track",
    "save_gpx_file",
    "distance_value",
    "find_closest_poi",
]
