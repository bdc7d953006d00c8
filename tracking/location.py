"""
Purpose: Device location input for tracking.
What it does:
Represents a location fix as either a real GPS reading or a degraded fallback
(services disabled, permission denied, timeout, ...), and resolves which
coordinate to use as the pickup / destination with the same priority the app
applies: stored pickup -> real device fix -> city-centre fallback.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from routing.models import Coordinate

logger = logging.getLogger(__name__)

# Quebec City, used when no real fix is available
DEFAULT_LOCATION = Coordinate(latitude=46.8139, longitude=-71.2082)


class LocationSource(str, Enum):
    GPS = "gps"
    STORED = "stored"
    FALLBACK = "fallback"


class FallbackReason(str, Enum):
    SERVICES_DISABLED = "services_disabled"
    PERMISSION_DENIED = "permission_denied"
    TIMEOUT = "timeout"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class LocationFix:
    coordinate: Coordinate
    source: LocationSource = LocationSource.GPS
    fallback_reason: Optional[FallbackReason] = None
    accuracy_m: Optional[float] = None

    @property
    def is_fallback(self) -> bool:
        return self.source == LocationSource.FALLBACK


def gps_fix(latitude: float, longitude: float, accuracy_m: Optional[float] = None) -> LocationFix:
    return LocationFix(
        coordinate=Coordinate(latitude=latitude, longitude=longitude),
        source=LocationSource.GPS,
        accuracy_m=accuracy_m,
    )


def fallback_fix(reason: FallbackReason = FallbackReason.UNKNOWN,
                 coordinate: Coordinate = DEFAULT_LOCATION) -> LocationFix:
    logger.warning(f"Using default location ({reason.value})")
    return LocationFix(coordinate=coordinate, source=LocationSource.FALLBACK, fallback_reason=reason)


def reason_from_error(message: str) -> FallbackReason:
    """Map a location service error message onto a FallbackReason."""
    text = (message or "").lower()
    if "timeout" in text or "timed out" in text:
        return FallbackReason.TIMEOUT
    if "unavailable" in text:
        return FallbackReason.UNAVAILABLE
    if "denied" in text or "permission" in text:
        return FallbackReason.PERMISSION_DENIED
    if "disabled" in text:
        return FallbackReason.SERVICES_DISABLED
    return FallbackReason.UNKNOWN


def resolve_pickup(stored: Optional[Coordinate], device_fix: Optional[LocationFix]) -> LocationFix:
    """
    Pickup coordinate for tracking.

    Priority:
        1. coordinates stored with the booking (user picked or earlier GPS)
        2. the current device fix when it is a real reading
        3. the fallback coordinate, logged as a warning
    """
    if stored is not None and stored.is_valid():
        return LocationFix(coordinate=stored, source=LocationSource.STORED)

    if device_fix is not None and not device_fix.is_fallback and device_fix.coordinate.is_valid():
        return device_fix

    logger.warning("Using fallback pickup coordinates - location permission may be denied")
    if device_fix is not None and device_fix.is_fallback:
        return device_fix
    return fallback_fix(FallbackReason.UNKNOWN)


def resolve_destination(destination: Optional[Coordinate], device_fix: Optional[LocationFix]) -> Coordinate:
    """Booking destination, or wherever the device is when none was given."""
    if destination is not None and destination.is_valid():
        return destination
    if device_fix is not None:
        return device_fix.coordinate
    return DEFAULT_LOCATION
