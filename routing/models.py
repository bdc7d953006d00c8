"""
Purpose: Core value types for the routing domain.
What it does:
Defines the Coordinate value type and the Route alias shared by the polyline codec,
the geo math helpers and the tracking simulation.

Rule: No HTTP calls, no simulation logic. Models only.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Coordinate:
    """
    Immutable geographic coordinate in decimal degrees.
    Created by decoding, location lookups or arithmetic; never mutated in place.
    """
    latitude: float
    longitude: float

    def is_valid(self) -> bool:
        """
        True when both axes are finite numbers inside [-90, 90] / [-180, 180].
        """
        try:
            if not (math.isfinite(self.latitude) and math.isfinite(self.longitude)):
                return False
            return -90.0 <= self.latitude <= 90.0 and -180.0 <= self.longitude <= 180.0
        except TypeError:
            return False

    def as_tuple(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)

    @classmethod
    def from_tuple(cls, lat_lon: Tuple[float, float]) -> Coordinate:
        return cls(latitude=float(lat_lon[0]), longitude=float(lat_lon[1]))


# ordered, read-only sequence of coordinates produced once per directions request
Route = Tuple[Coordinate, ...]
