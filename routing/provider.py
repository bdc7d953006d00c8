#Purpose: The directions provider contract.
#A RouteProvider answers "give me the best route from origin to destination" with
#the encoded polyline plus whatever duration/distance the upstream reports,
#or raises RouteProviderError. Concrete HTTP adapters live in osrm_client.py and
#google_directions_client.py; route_service.py owns the straight-line fallback.

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

from routing.models import Coordinate


class RouteProviderError(Exception):
    """
    Upstream directions failure: HTTP error, network failure, non-OK provider
    status, malformed JSON or a response without route geometry.
    """

    def __init__(self, message: str, status: Optional[str] = None):
        super().__init__(message)
        self.status = status #provider status string when the upstream sent one


@dataclass(frozen=True)
class ProviderRoute:
    """
    Normalized provider output.
    encoded is always a non-empty string; duration/distance are None when the upstream omits them.
    """
    encoded: str
    duration_s: Optional[float] = None # in seconds - first leg / whole route travel time
    distance_m: Optional[float] = None # in meters


class RouteProvider(Protocol):
    def fetch_route(self, origin: Coordinate, destination: Coordinate) -> ProviderRoute:
        """Return the best route or raise RouteProviderError."""
        ...


def require_polyline(value, status: Optional[str], provider_name: str) -> str:
    """
    Shared guard for both HTTP adapters: JSON null, numbers or empty strings
    in the geometry field are a missing route, not something to decode.
    """
    if not isinstance(value, str) or not value:
        raise RouteProviderError(f"{provider_name} response has no route geometry", status=status)
    return value


def optional_number(value) -> Optional[float]:
    """float(value) for JSON numbers, None for null/missing/non-numeric values."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)
