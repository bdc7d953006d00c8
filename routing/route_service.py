#Purpose: Route computation for downstream use.
#Returns the route geometry needed by map display (polyline -> coordinates).
#Directions are a best-effort enhancement: any provider or decoding failure
#degrades to a straight line between origin and destination instead of an error.

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from routing.geomath import distance_km
from routing.models import Coordinate, Route
from routing.polyline import MalformedPolylineError, decode
from routing.provider import ProviderRoute, RouteProvider, RouteProviderError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteResult:
    """
    Output of compute_route.
    coordinates always has at least one point; is_fallback marks the straight-line case.
    """
    coordinates: Route
    is_fallback: bool
    encoded: Optional[str] = None
    duration_s: Optional[float] = None # provider travel time, None for straight lines

    @property
    def distance_km(self) -> float:
        """Sum of the great-circle lengths of every leg."""
        return sum(
            distance_km(a, b)
            for a, b in zip(self.coordinates, self.coordinates[1:])
        )


def straight_line(origin: Coordinate, destination: Coordinate) -> RouteResult:
    return RouteResult(coordinates=(origin, destination), is_fallback=True)


def compute_route(
        provider: Optional[RouteProvider],
        origin: Coordinate,
        destination: Coordinate,
) -> RouteResult:
    """
    Fetch and decode the provider's route, falling back to a two-point line.

    Args:
        provider: any object with fetch_route(origin, destination) -> ProviderRoute, or None
        origin: start of the route
        destination: end of the route

    Returns:
        RouteResult; never raises RouteProviderError or MalformedPolylineError.
    """
    if provider is None:
        logger.info("No directions provider configured, using straight line")
        return straight_line(origin, destination)

    logger.info(f"Getting directions from {origin} to {destination}")
    try:
        fetched = provider.fetch_route(origin, destination)
    except RouteProviderError as e:
        logger.warning(f"Directions unavailable ({e.status or 'no status'}): {e}. Using straight line.")
        return straight_line(origin, destination)

    if not isinstance(fetched, ProviderRoute):
        logger.warning(f"Provider returned {type(fetched).__name__} instead of a route. Using straight line.")
        return straight_line(origin, destination)

    try:
        points = decode(fetched.encoded)
    except MalformedPolylineError as e:
        logger.warning(f"Provider returned a malformed polyline: {e}. Using straight line.")
        return straight_line(origin, destination)

    #fail closed: an empty geometry is no route at all
    if not points:
        logger.warning("Provider returned an empty route. Using straight line.")
        return straight_line(origin, destination)

    logger.info(f"Route calculated with {len(points)} points")
    return RouteResult(
        coordinates=points,
        is_fallback=False,
        encoded=fetched.encoded,
        duration_s=fetched.duration_s,
    )
