"""GPX file generation utilities."""

from pathlib import Path
from typing import Sequence

import gpxpy
import gpxpy.gpx

from tourroute.models import Point, PointOfInterest


def create_gpx_track(
    name: str,
    points: Sequence[Point],
    description: str | None = None,
    stops: Sequence[PointOfInterest] = (),
) -> str:
    """
    Create a GPX track from an assembled route.
    
    Args:
        name: Name of the track
        points: Route points in travel order
        description: Optional track description
        stops: Tour stops to add as waypoints
    
    Returns:
        GPX XML string
    """
    gpx = gpxpy.gpx.GPX()
    gpx.creator = "tourroute"

    # Create track
    gpx_track = gpxpy.gpx.GPXTrack()
    gpx_track.name = name
    gpx_track.description = description
    gpx.tracks.append(gpx_track)
    
    # Create segment
    gpx_segment = gpxpy.gpx.GPXTrackSegment()
    gpx_track.segments.append(gpx_segment)
    
    for point in points:
        gpx_segment.points.append(
            gpxpy.gpx.GPXTrackPoint(latitude=point.latitude, longitude=point.longitude)
        )
    
    for stop in stops:
        waypoint = gpxpy.gpx.GPXWaypoint(
            latitude=stop.point.latitude,
            longitude=stop.point.longitude,
        )
        waypoint.name = stop.name
        waypoint.description = stop.description
        waypoint.type = "POI"
        gpx.waypoints.append(waypoint)
    
    return gpx.to_xml()


def save_gpx_file(gpx_xml: str, path: str | Path) -> Path:
    """Write GPX XML to ``path``, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(gpx_xml, encoding="utf-8")
    return path
