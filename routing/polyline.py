"""
Purpose: Encoded polyline codec.
What it does:
Converts between the compact ASCII polyline format returned by directions
providers (Google Directions overview_polyline, OSRM geometries=polyline) and
an ordered tuple of Coordinates.

Format notes:
- each point is two signed deltas (latitude then longitude) from the previous point
- deltas are scaled by 1e5, zig-zag encoded, split into 5-bit groups (low group first)
- every group is offset by 63 to land in printable ASCII; bit 0x20 means "more groups follow"
"""

from __future__ import annotations

import math
from typing import Iterable, List, Tuple

from routing.models import Coordinate, Route

PRECISION = 1e5

_CHAR_OFFSET = 63
_CONTINUATION_BIT = 0x20
_GROUP_MASK = 0x1F
_MAX_CHAR = 126


class MalformedPolylineError(ValueError):
    """Raised when an encoded polyline violates the codon grammar."""

    def __init__(self, message: str, position: int):
        super().__init__(f"{message} (at offset {position})")
        self.position = position


def _read_delta(encoded: str, index: int) -> Tuple[int, int]:
    """
    Read one codon starting at `index`.
    Returns (signed delta, index of the next unread character).
    """
    result = 0
    shift = 0
    length = len(encoded)
    start = index

    while True:
        if index >= length:
            raise MalformedPolylineError("Polyline ends in the middle of a codon", start)

        value = ord(encoded[index]) - _CHAR_OFFSET
        if value < 0 or value > _MAX_CHAR - _CHAR_OFFSET:
            raise MalformedPolylineError(
                f"Invalid polyline character {encoded[index]!r}", index
            )
        index += 1

        result |= (value & _GROUP_MASK) << shift
        shift += 5
        if value < _CONTINUATION_BIT:
            break

    if result & 1:
        return ~(result >> 1), index
    return result >> 1, index


def decode(encoded: str) -> Route:
    """
    Decode an encoded polyline string into a Route.

    Empty input decodes to an empty Route.
    Raises MalformedPolylineError on non-string input, truncated input or
    characters outside the format alphabet.
    """
    if not isinstance(encoded, str):
        raise MalformedPolylineError(f"Polyline must be a string, got {type(encoded).__name__}", 0)

    points: List[Coordinate] = []
    index = 0
    lat = 0
    lon = 0

    while index < len(encoded):
        delta_lat, index = _read_delta(encoded, index)
        if index >= len(encoded):
            raise MalformedPolylineError("Polyline point has a latitude but no longitude", index)
        delta_lon, index = _read_delta(encoded, index)

        lat += delta_lat
        lon += delta_lon
        points.append(Coordinate(latitude=lat / PRECISION, longitude=lon / PRECISION))

    return tuple(points)


def _round_half_away(value: float) -> int:
    #matches the reference Math.round behaviour for the format, not banker's rounding
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _encode_delta(delta: int) -> str:
    value = ~(delta << 1) if delta < 0 else delta << 1
    chunks = []
    while value >= _CONTINUATION_BIT:
        chunks.append(chr((_CONTINUATION_BIT | (value & _GROUP_MASK)) + _CHAR_OFFSET))
        value >>= 5
    chunks.append(chr(value + _CHAR_OFFSET))
    return "".join(chunks)


def encode(route: Iterable[Coordinate]) -> str:
    """
    Encode coordinates into the polyline format (precision 1e-5 degrees).
    Inverse of decode for coordinates already rounded to 5 decimals.
    """
    output = []
    prev_lat = 0
    prev_lon = 0

    for point in route:
        lat = _round_half_away(point.latitude * PRECISION)
        lon = _round_half_away(point.longitude * PRECISION)
        output.append(_encode_delta(lat - prev_lat))
        output.append(_encode_delta(lon - prev_lon))
        prev_lat, prev_lon = lat, lon

    return "".join(output)
