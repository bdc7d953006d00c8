"""
Tracking domain package.

Public API:
- Models: TrackingState, TrackingSnapshot, TrackingObserver
- Configuration: TrackingPolicy, default_tracking_policy
- Session lifecycle: TrackingSession, InvalidTargetError, TrackingController
- Timers: AsyncioScheduler
- Location: LocationFix, resolve_pickup, resolve_destination
"""
from .models import TrackingState, TrackingSnapshot, TrackingObserver
from .policy import TrackingPolicy, default_tracking_policy
from .scheduler import AsyncioScheduler
from .session import TrackingSession, InvalidTargetError
from .controller import TrackingController
from .location import LocationFix, resolve_pickup, resolve_destination

__all__ = ["TrackingState",
           "TrackingSnapshot",
             "TrackingObserver",
               "TrackingPolicy",
               "default_tracking_policy",
               "AsyncioScheduler",
               "TrackingSession",
               "InvalidTargetError",
               "TrackingController",
               "LocationFix",
               "resolve_pickup",
               "resolve_destination",
               ]
