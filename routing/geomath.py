#Purpose: Pure geographic math for the tracking engine.
#Great-circle distance (haversine), bearing, destination point and the
#degree-space stepping used by the driver movement simulation.
#No side effects apart from drawing jitter from the injected random source.

from __future__ import annotations

import math
import random
from typing import Optional

from routing.models import Coordinate

EARTH_RADIUS_KM = 6371.0

#below this Euclidean distance in degrees the driver is considered arrived
DEFAULT_ARRIVAL_EPSILON_DEGREES = 0.001


def distance_km(a: Coordinate, b: Coordinate) -> float:
    """
    Haversine great-circle distance between two coordinates in kilometres.
    Symmetric and exactly 0.0 for identical coordinates.
    """
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    d_lat = math.radians(b.latitude - a.latitude)
    d_lon = math.radians(b.longitude - a.longitude)

    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    )
    #rounding can push h a hair above 1 for antipodal points
    h = min(1.0, h)
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def degree_distance(a: Coordinate, b: Coordinate) -> float:
    """Euclidean norm of (delta lat, delta lon) in degrees, the shorter way around in longitude."""
    return math.hypot(b.latitude - a.latitude, _lon_delta(a.longitude, b.longitude))


def _lon_delta(from_lon: float, to_lon: float) -> float:
    #signed longitude difference in [-180, 180), crossing the antimeridian when shorter
    return (to_lon - from_lon + 180.0) % 360.0 - 180.0


def bearing_degrees(a: Coordinate, b: Coordinate) -> float:
    """Forward azimuth from a to b in degrees [0, 360)."""
    lat1, lat2 = math.radians(a.latitude), math.radians(b.latitude)
    d_lon = math.radians(b.longitude - a.longitude)
    y = math.sin(d_lon) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(d_lon)
    return (math.degrees(math.atan2(y, x)) + 360.0) % 360.0


def offset_km(origin: Coordinate, distance: float, bearing: float) -> Coordinate:
    """
    Destination point reached by travelling `distance` km from `origin`
    along the initial great-circle `bearing` (degrees clockwise from north).
    """
    angular = distance / EARTH_RADIUS_KM
    theta = math.radians(bearing)
    lat1 = math.radians(origin.latitude)
    lon1 = math.radians(origin.longitude)

    lat2 = math.asin(
        math.sin(lat1) * math.cos(angular)
        + math.cos(lat1) * math.sin(angular) * math.cos(theta)
    )
    lon2 = lon1 + math.atan2(
        math.sin(theta) * math.sin(angular) * math.cos(lat1),
        math.cos(angular) - math.sin(lat1) * math.sin(lat2),
    )
    return _normalized(math.degrees(lat2), math.degrees(lon2))


def step_toward(
        current: Coordinate,
        target: Coordinate,
        step_degrees: float,
        jitter_degrees: float,
        *,
        rng: Optional[random.Random] = None,
        arrival_epsilon_degrees: float = DEFAULT_ARRIVAL_EPSILON_DEGREES,
) -> Coordinate:
    """
    Move `current` toward `target` by `step_degrees` in degree-space.

    Args:
        current: position before the step
        target: position being approached
        step_degrees: length of the step, clamped so it never overshoots the target
        jitter_degrees: each axis gets independent uniform noise in [-jitter, +jitter]
        rng: random source for the jitter (module-level random when omitted)
        arrival_epsilon_degrees: when the remaining distance is below this, the
            target itself is returned and no jitter is applied

    Returns:
        The new Coordinate.
    """
    remaining = degree_distance(current, target)
    if remaining < arrival_epsilon_degrees:
        return target

    rng = rng or random
    fraction = min(1.0, step_degrees / remaining)
    lat = current.latitude + (target.latitude - current.latitude) * fraction
    lon = current.longitude + _lon_delta(current.longitude, target.longitude) * fraction

    if jitter_degrees > 0:
        lat += rng.uniform(-jitter_degrees, jitter_degrees)
        lon += rng.uniform(-jitter_degrees, jitter_degrees)

    return _normalized(lat, lon)


def _normalized(lat: float, lon: float) -> Coordinate:
    #clamp latitude, wrap longitude into [-180, 180]
    lat = max(-90.0, min(90.0, lat))
    if lon < -180.0 or lon > 180.0:
        lon = (lon + 180.0) % 360.0 - 180.0
    return Coordinate(latitude=lat, longitude=lon)
