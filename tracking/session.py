"""
Purpose: The live tracking simulation for one delivery.
What it does:
- places a simulated driver a few km from the origin
- moves the driver toward the target every tick while counting the ETA down
- publishes a snapshot per tick and a single terminal arrived/cancelled event

A session owns its timer handle. The timer is acquired in start() and released
on arrival, on cancel() and when a `with` block around the session exits, so a
torn-down screen can never leave a timer running.

Rule: tick() and cancel() are the only mutators and are never called concurrently
(single-threaded event loop).
"""

from __future__ import annotations

import logging
import math
import random
from typing import Optional

from routing.eta_service import initial_eta_minutes, next_eta_minutes
from routing.geomath import degree_distance, distance_km, offset_km, step_toward
from routing.models import Coordinate
from tracking.models import TrackingObserver, TrackingSnapshot, TrackingState
from tracking.policy import TrackingPolicy, default_tracking_policy
from tracking.scheduler import Scheduler, TimerHandle

logger = logging.getLogger(__name__)


class InvalidTargetError(ValueError):
    """Raised when start() gets a NaN or out-of-range coordinate."""
    pass


class TrackingSession:
    """
    Stateful, cancellable driver simulation.

    Usage:
        with TrackingSession.start(origin, target, scheduler=AsyncioScheduler(), observer=ui) as session:
            ...  # ticks fire on the loop until arrival

    Create sessions through start(); the constructor leaves the session IDLE
    with no timer.
    """

    def __init__(
            self,
            current_position: Coordinate,
            target_position: Coordinate,
            eta_minutes: float,
            *,
            rng: Optional[random.Random] = None,
            policy: Optional[TrackingPolicy] = None,
            observer: Optional[TrackingObserver] = None,
    ) -> None:
        self.policy = policy or default_tracking_policy()
        self._rng = rng or random.Random()
        self._observer = observer
        self._timer: Optional[TimerHandle] = None

        self._current_position = current_position
        self._target_position = target_position
        self._eta_minutes = max(0.0, eta_minutes)
        self._state = TrackingState.IDLE
        self._ticks = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @classmethod
    def start(
            cls,
            origin: Coordinate,
            target: Coordinate,
            tick_interval_ms: Optional[int] = None,
            *,
            scheduler: Scheduler,
            observer: Optional[TrackingObserver] = None,
            rng: Optional[random.Random] = None,
            policy: Optional[TrackingPolicy] = None,
            eta_minutes: Optional[float] = None,
    ) -> TrackingSession:
        """
        Validate inputs, synthesize the driver start position and arm the timer.

        Args:
            origin: the location the driver starts "a few km away" from
            target: where the driver is heading (the pickup)
            tick_interval_ms: nominal timer interval, policy default (3000) when omitted
            scheduler: owner of the event loop timers
            observer: single receiver of snapshots and terminal events
            rng: seedable random source for offset, step, jitter and ETA
            policy: tunables, default_tracking_policy() when omitted
            eta_minutes: directions-derived starting ETA; the distance estimate is used when None

        Raises:
            InvalidTargetError: origin or target is NaN/out of range
            ValueError: tick_interval_ms <= 0
        """
        policy = policy or default_tracking_policy()
        rng = rng or random.Random()

        #validate everything before a timer exists so nothing can leak
        if not isinstance(target, Coordinate) or not target.is_valid():
            raise InvalidTargetError(f"Invalid tracking target: {target!r}")
        if not isinstance(origin, Coordinate) or not origin.is_valid():
            raise InvalidTargetError(f"Invalid tracking origin: {origin!r}")

        interval_ms = policy.tick_interval_ms if tick_interval_ms is None else tick_interval_ms
        if interval_ms <= 0:
            raise ValueError("tick_interval_ms must be > 0")
        if eta_minutes is not None and not math.isfinite(eta_minutes):
            raise ValueError("eta_minutes must be finite")

        start_km = rng.uniform(*policy.start_offset_km)
        bearing = rng.uniform(0.0, 360.0)
        driver_position = offset_km(origin, start_km, bearing)

        to_target_km = distance_km(driver_position, target)
        if eta_minutes is None:
            eta = initial_eta_minutes(to_target_km, rng, policy.eta)
        else:
            eta = max(0.0, eta_minutes)

        session = cls(
            driver_position,
            target,
            eta,
            rng=rng,
            policy=policy,
            observer=observer,
        )
        session._state = TrackingState.ACTIVE
        session._timer = scheduler.schedule_repeating(interval_ms / 1000.0, session.tick)

        logger.info(
            f"Driver initialized {to_target_km:.1f}km away from target, "
            f"{round(eta)}min ETA (tick every {interval_ms}ms)"
        )
        return session

    def tick(self) -> None:
        """
        One simulation step. Stale ticks (after a terminal state) are ignored.
        """
        if self._state != TrackingState.ACTIVE:
            return

        self._ticks += 1
        remaining = degree_distance(self._current_position, self._target_position)

        if remaining > self.policy.arrival_epsilon_degrees:
            step = self._rng.uniform(*self.policy.step_degrees)
            self._current_position = step_toward(
                self._current_position,
                self._target_position,
                step,
                self.policy.jitter_degrees,
                rng=self._rng,
                arrival_epsilon_degrees=self.policy.arrival_epsilon_degrees,
            )
            remaining_km = distance_km(self._current_position, self._target_position)
            self._eta_minutes = next_eta_minutes(self._eta_minutes, remaining_km, self._rng, self.policy.eta)

            logger.debug(
                f"Driver moving: ETA {round(self._eta_minutes)}min, "
                f"Distance: {remaining:.4f}"
            )
            if self._observer is not None:
                self._observer.on_update(self.snapshot())
            return

        # arrived: state changes before callbacks so a failing observer cannot re-arm anything
        self._eta_minutes = 0.0
        self._state = TrackingState.ARRIVED
        self._release_timer()
        logger.info(f"Driver arrived at target after {self._ticks} ticks")

        if self._observer is not None:
            snapshot = self.snapshot()
            self._observer.on_update(snapshot)
            self._observer.on_arrived(snapshot)

    def cancel(self) -> None:
        """
        Stop tracking. Safe to call any number of times and after arrival;
        on_cancelled fires only on the first call from a non-terminal state.
        """
        self._release_timer()
        if self._state.is_terminal:
            return

        self._state = TrackingState.CANCELLED
        logger.info("Driver tracking stopped")
        if self._observer is not None:
            self._observer.on_cancelled(self.snapshot())

    def _release_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def __enter__(self) -> TrackingSession:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.cancel()

    # ------------------------------------------------------------------
    # Observer
    # ------------------------------------------------------------------

    def set_observer(self, observer: Optional[TrackingObserver]) -> None:
        """Replace the single observer (None detaches)."""
        self._observer = observer

    # ------------------------------------------------------------------
    # Read-only properties
    # ------------------------------------------------------------------

    def snapshot(self) -> TrackingSnapshot:
        return TrackingSnapshot(
            position=self._current_position,
            eta_minutes=self._eta_minutes,
            state=self._state,
            tick=self._ticks,
        )

    @property
    def state(self) -> TrackingState:
        return self._state

    @property
    def current_position(self) -> Coordinate:
        return self._current_position

    @property
    def target_position(self) -> Coordinate:
        return self._target_position

    @property
    def eta_minutes(self) -> float:
        return self._eta_minutes

    @property
    def ticks(self) -> int:
        return self._ticks

    @property
    def has_timer(self) -> bool:
        return self._timer is not None
