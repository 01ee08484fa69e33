"""Decoder for the flattened geometry text returned by the routing service.

The service embeds the route geometry in a single field as back-to-back
``[lon,lat]`` groups, e.g. ``[-123.25,49.26][-123.24,49.27]``. The text is
scanned character by character; field boundaries are found purely from digit
adjacency, so bracket and comma noise around the numbers is ignored.
"""

from enum import Enum
from typing import Any

from pydantic import ValidationError

from tourroute.exceptions import GeometryParseError
from tourroute.models import Point


DIGITS = frozenset("0123456789")
NUMBER_CHARS = DIGITS | {".", "-"}


class ScanState(str, Enum):
    """Where the scanner is relative to the current coordinate pair."""
    OUTSIDE_NUMBER = "outside_number"
    IN_FIRST_NUMBER = "in_first_number"
    IN_SECOND_NUMBER = "in_second_number"


def _to_float(text: str) -> float:
    try:
        return float(text)
    except ValueError as exc:
        raise GeometryParseError(f"Malformed coordinate value: {text!r}") from exc


def _make_point(longitude: float, latitude: float) -> Point:
    try:
        return Point(latitude=latitude, longitude=longitude)
    except ValidationError as exc:
        raise GeometryParseError(
            f"Coordinate out of range: [{longitude},{latitude}]"
        ) from exc


def parse_coordinates(text: str) -> list[Point]:
    """
    Decode a flattened ``[lon,lat][lon,lat]...`` string into points.

    Args:
        text: Geometry text, possibly empty

    Returns:
        Points in encounter order, as (latitude, longitude)

    Raises:
        GeometryParseError: If a number is malformed, out of range, or a
            pair closes without its longitude
    """
    points: list[Point] = []
    buffer: list[str] = []
    state = ScanState.OUTSIDE_NUMBER
    longitude = 0.0
    previous = ""

    for char in text:
        if char in NUMBER_CHARS:
            buffer.append(char)
            if state is ScanState.OUTSIDE_NUMBER:
                state = ScanState.IN_FIRST_NUMBER
        elif previous in DIGITS:
            value = _to_float("".join(buffer))
            buffer = []
            if char == ",":
                # provisional longitude; a later comma overwrites it
                longitude = value
                state = ScanState.IN_SECOND_NUMBER
            else:
                if state is not ScanState.IN_SECOND_NUMBER:
                    raise GeometryParseError(
                        f"Coordinate pair closed without a longitude near {value!r}"
                    )
                points.append(_make_point(longitude, value))
                state = ScanState.OUTSIDE_NUMBER
        previous = char

    return points


def flatten_coordinates(value: Any) -> str:
    """
    Render a geometry field as flattened ``[lon,lat]`` text.

    Strings are returned unchanged. Some deployments send the coordinates as a
    JSON array instead; those are written out in fixed-point notation so the
    scanner never sees exponents.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if not isinstance(value, (list, tuple)):
        raise GeometryParseError(f"Unsupported geometry value: {type(value).__name__}")

    parts = []
    for pair in value:
        if not isinstance(pair, (list, tuple)) or len(pair) < 2:
            raise GeometryParseError(f"Malformed coordinate pair: {pair!r}")
        try:
            lon, lat = float(pair[0]), float(pair[1])
        except (TypeError, ValueError) as exc:
            raise GeometryParseError(f"Malformed coordinate pair: {pair!r}") from exc
        parts.append(f"[{lon:.10f},{lat:.10f}]")
    return "".join(parts)
