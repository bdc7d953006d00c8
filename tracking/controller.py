"""
Purpose: Orchestrator between the UI and tracking sessions (the "glue").
What it does:
Wires "start tracking", "stop tracking" and "screen unmount" to TrackingSession
lifecycle, keeps at most one live session per tracked order, and fans session
events out to any number of listeners. Route geometry for the map is loaded
through compute_route so directions failures never reach the UI.
"""

from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional

from routing.eta_service import eta_from_duration_minutes
from routing.models import Coordinate
from routing.provider import RouteProvider
from routing.route_service import RouteResult, compute_route
from tracking.models import TrackingObserver, TrackingSnapshot
from tracking.policy import TrackingPolicy, default_tracking_policy
from tracking.scheduler import Scheduler
from tracking.session import TrackingSession

logger = logging.getLogger(__name__)


class _OrderFanOut(TrackingObserver):
    """
    The one observer registered on a session; forwards to the controller's
    listeners tagged with the order id.
    """

    def __init__(self, controller: TrackingController, order_id: str):
        self.controller = controller
        self.order_id = order_id

    def on_update(self, snapshot: TrackingSnapshot) -> None:
        for listener in self.controller.listeners_for(self.order_id):
            listener.on_update(snapshot)

    def on_arrived(self, snapshot: TrackingSnapshot) -> None:
        for listener in self.controller._forget(self.order_id):
            listener.on_arrived(snapshot)

    def on_cancelled(self, snapshot: TrackingSnapshot) -> None:
        for listener in self.controller._forget(self.order_id):
            listener.on_cancelled(snapshot)


class TrackingController:
    """
    Thin lifecycle owner for tracking sessions.

    Typical lifecycle:
        controller = TrackingController(AsyncioScheduler(), route_provider=OSRMClient())
        route = controller.load_route(pickup, dropoff)       # map polyline, never raises
        controller.start_tracking("o_000001", pickup, pickup_target, listener=card)
        ...
        controller.teardown()                                # screen unmount
    """

    def __init__(
            self,
            scheduler: Scheduler,
            route_provider: Optional[RouteProvider] = None,
            policy: Optional[TrackingPolicy] = None,
            rng: Optional[random.Random] = None,
    ) -> None:
        self.scheduler = scheduler
        self.route_provider = route_provider
        self.policy = policy or default_tracking_policy()
        self._rng = rng or random.Random()

        self._sessions: Dict[str, TrackingSession] = {}
        self._listeners: Dict[str, List[TrackingObserver]] = {}
        self._global_listeners: List[TrackingObserver] = []

    # ------------------------------------------------------------------
    # Routes
    # ------------------------------------------------------------------

    def load_route(self, origin: Coordinate, destination: Coordinate) -> RouteResult:
        """Route geometry for display; straight line when directions fail."""
        return compute_route(self.route_provider, origin, destination)

    # ------------------------------------------------------------------
    # Session control
    # ------------------------------------------------------------------

    def start_tracking(
            self,
            order_id: str,
            origin: Coordinate,
            target: Coordinate,
            listener: Optional[TrackingObserver] = None,
            tick_interval_ms: Optional[int] = None,
            route: Optional[RouteResult] = None,
    ) -> TrackingSession:
        """
        Start (or restart) tracking for an order.
        A previous session for the same order is cancelled once the new one is running.
        When `route` came from a directions provider, its travel time seeds the ETA.

        Raises:
            InvalidTargetError: propagated from TrackingSession.start; any running
            session for the order is left untouched
        """
        eta_minutes = eta_from_duration_minutes(route.duration_s) if route is not None else None

        session = TrackingSession.start(
            origin,
            target,
            tick_interval_ms,
            scheduler=self.scheduler,
            observer=_OrderFanOut(self, order_id),
            rng=self._rng,
            policy=self.policy,
            eta_minutes=eta_minutes,
        )
        #the replaced session is cancelled only after the new one validated and armed
        self.stop_tracking(order_id)
        self._sessions[order_id] = session
        if listener is not None:
            self._listeners.setdefault(order_id, []).append(listener)
        logger.info(f"Starting driver tracking for order {order_id}")
        return session

    def stop_tracking(self, order_id: str) -> bool:
        """
        Cancel the order's session. Returns False when nothing was being tracked.
        """
        session = self._sessions.get(order_id)
        if session is None:
            return False
        session.cancel()
        self._forget(order_id)
        return True

    def teardown(self) -> None:
        """
        Owner context is going away: cancel every session, even ACTIVE ones.
        """
        for order_id in list(self._sessions):
            self.stop_tracking(order_id)
        self._listeners.clear()

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, listener: TrackingObserver, order_id: Optional[str] = None) -> None:
        """Listen to one order, or to every order when order_id is None."""
        if order_id is None:
            self._global_listeners.append(listener)
        else:
            self._listeners.setdefault(order_id, []).append(listener)

    def listeners_for(self, order_id: str) -> List[TrackingObserver]:
        return list(self._listeners.get(order_id, [])) + list(self._global_listeners)

    # ------------------------------------------------------------------
    # Read-only
    # ------------------------------------------------------------------

    def session_for(self, order_id: str) -> Optional[TrackingSession]:
        return self._sessions.get(order_id)

    @property
    def active_order_ids(self) -> List[str]:
        return list(self._sessions)

    def _forget(self, order_id: str) -> List[TrackingObserver]:
        """
        Drop a terminal session and its order listeners.
        Returns the listeners that still need the terminal event.
        """
        listeners = self.listeners_for(order_id)
        self._sessions.pop(order_id, None)
        self._listeners.pop(order_id, None)
        return listeners
