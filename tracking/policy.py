"""
Purpose: Central configuration for the driver tracking simulation.
What it does:

Stores all tunable thresholds for the simulated driver movement:

TICK_INTERVAL_MS = 3000

START_OFFSET_KM = 2..5

STEP_DEGREES = 0.0008..0.0012 per tick

ARRIVAL_EPSILON_DEGREES = 0.001

Rule: No logic here, just parameters so you can tune without rewriting code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

from routing.eta_service import EtaPolicy


@dataclass(frozen=True)
class TrackingPolicy:
    """
    Central configuration for a TrackingSession.

    Notes:
    - step and jitter are in degrees, not km: 0.001 degrees is roughly 110 m of latitude.
    - jitter_degrees = 0 disables all position noise (deterministic movement for tests).
    """

    # --- Timer ---
    tick_interval_ms: int = 3000

    # --- Synthetic start position ---
    # The driver starts this many km from the origin at a random bearing.
    start_offset_km: Tuple[float, float] = (2.0, 5.0)

    # --- Movement per tick ---
    # 0.0008..0.0012 degrees every 3 s is roughly 30-50 km/h.
    step_degrees: Tuple[float, float] = (0.0008, 0.0012)
    jitter_degrees: float = 0.00005
    arrival_epsilon_degrees: float = 0.001

    # --- ETA ---
    eta: EtaPolicy = field(default_factory=EtaPolicy)

    def validate(self) -> None:
        """
        Basic sanity checks.
        """
        if self.tick_interval_ms <= 0:
            raise ValueError("tick_interval_ms must be > 0")

        low, high = self.start_offset_km
        if low < 0 or low > high:
            raise ValueError("start_offset_km must be an ordered non-negative range")

        low, high = self.step_degrees
        if low <= 0 or low > high:
            raise ValueError("step_degrees must be an ordered positive range")

        if self.jitter_degrees < 0:
            raise ValueError("jitter_degrees must be >= 0")

        if self.arrival_epsilon_degrees <= 0:
            raise ValueError("arrival_epsilon_degrees must be > 0")

        self.eta.validate()


def default_tracking_policy() -> TrackingPolicy:
    """
    Convenience factory for the default policy.
    """
    p = TrackingPolicy()
    p.validate()
    return p
