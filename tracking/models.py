"""
Purpose: Data models for the tracking domain.
What it does:
Defines the session lifecycle states, the snapshot published on every tick and
the observer interface the controller/UI layer implements.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from routing.models import Coordinate


class TrackingState(str, Enum):
    """
    IDLE -> ACTIVE -> ARRIVED | CANCELLED
    ARRIVED and CANCELLED are terminal.
    """
    IDLE = "idle"
    ACTIVE = "active"
    ARRIVED = "arrived"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (TrackingState.ARRIVED, TrackingState.CANCELLED)


@dataclass(frozen=True)
class TrackingSnapshot:
    """
    What the UI needs to redraw the driver marker and the ETA card.
    """
    position: Coordinate
    eta_minutes: float
    state: TrackingState
    tick: int = 0


class TrackingObserver:
    """
    Receives session events synchronously inside tick()/cancel().
    Subclass and override what you need; the defaults do nothing.
    """

    def on_update(self, snapshot: TrackingSnapshot) -> None:
        pass

    def on_arrived(self, snapshot: TrackingSnapshot) -> None:
        pass

    def on_cancelled(self, snapshot: TrackingSnapshot) -> None:
        pass
