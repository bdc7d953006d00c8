#Purpose: ETA estimation policy.
#Converts distances into the "arrives in X" minutes shown to the customer:
#initial estimate when tracking starts
#per-tick decay while the driver moves
#display helpers (rounded minutes, M:SS countdown)
#Keeps ETA logic separate from the movement simulation.

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Optional, Tuple

ETA_MODE_DECAY = "decay"
ETA_MODE_DISTANCE = "distance"


@dataclass(frozen=True)
class EtaPolicy:
    """
    ETA tunables.

    Notes:
    - 'decay' mode counts the initial estimate down independently of position,
      so ETA and position can disagree for far targets.
    - 'distance' mode re-derives ETA from the remaining km every tick.
    """

    # --- Initial estimate ---
    minutes_per_km: float = 2.0
    initial_jitter_minutes: Tuple[float, float] = (0.0, 5.0)
    min_minutes: float = 5.0
    max_minutes: float = 25.0

    # --- Per tick ---
    decrement_minutes: Tuple[float, float] = (0.5, 1.5)
    mode: str = ETA_MODE_DECAY

    def validate(self) -> None:
        if self.minutes_per_km <= 0:
            raise ValueError("minutes_per_km must be > 0")
        if not 0 <= self.min_minutes <= self.max_minutes:
            raise ValueError("Need 0 <= min_minutes <= max_minutes")
        for name in ("initial_jitter_minutes", "decrement_minutes"):
            low, high = getattr(self, name)
            if low < 0 or low > high:
                raise ValueError(f"{name} must be an ordered non-negative range")
        if self.mode not in (ETA_MODE_DECAY, ETA_MODE_DISTANCE):
            raise ValueError(f"Unknown ETA mode {self.mode!r}")


def initial_eta_minutes(distance_to_target_km: float, rng: random.Random, policy: EtaPolicy) -> float:
    """
    minutes-per-km estimate plus random slack, clamped to the policy window
    (5..25 minutes by default).
    """
    raw = distance_to_target_km * policy.minutes_per_km + rng.uniform(*policy.initial_jitter_minutes)
    return max(policy.min_minutes, min(policy.max_minutes, raw))


def eta_from_duration_minutes(duration_s: Optional[float]) -> Optional[float]:
    """Provider travel time in minutes, None when the provider gave no duration."""
    if duration_s is None or not math.isfinite(duration_s) or duration_s < 0:
        return None
    return duration_s / 60.0


def decayed_eta_minutes(eta_minutes: float, rng: random.Random, policy: EtaPolicy) -> float:
    """Counts the ETA down by a random amount per tick, floored at 0."""
    return max(0.0, eta_minutes - rng.uniform(*policy.decrement_minutes))


def distance_eta_minutes(eta_minutes: float, remaining_km: float, policy: EtaPolicy) -> float:
    """
    ETA re-derived from the remaining distance.
    Never exceeds the previous estimate so jitter cannot make it climb.
    """
    return max(0.0, min(eta_minutes, remaining_km * policy.minutes_per_km))


def next_eta_minutes(eta_minutes: float, remaining_km: float, rng: random.Random, policy: EtaPolicy) -> float:
    if policy.mode == ETA_MODE_DISTANCE:
        return distance_eta_minutes(eta_minutes, remaining_km, policy)
    return decayed_eta_minutes(eta_minutes, rng, policy)


def display_minutes(eta_minutes: float) -> int:
    """Whole minutes shown on the tracking card (half rounds up)."""
    return int(math.floor(max(0.0, eta_minutes) + 0.5))


def format_countdown(eta_minutes: float) -> str:
    """'M:SS min' countdown string, e.g. 7.5 -> '7:30 min'."""
    total_seconds = int(round(max(0.0, eta_minutes) * 60))
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes}:{seconds:02d} min"
