import random
from typing import Callable, List

import pytest

from routing.models import Coordinate
from tracking.models import TrackingObserver, TrackingSnapshot
from tracking.policy import TrackingPolicy


class FakeTimer:
    def __init__(self, interval_s: float, callback: Callable[[], None]):
        self.interval_s = interval_s
        self.callback = callback
        self.cancelled = False
        self.cancel_calls = 0

    def cancel(self) -> None:
        self.cancel_calls += 1
        self.cancelled = True


class ManualScheduler:
    """
    Test double for AsyncioScheduler: nothing fires until the test calls fire().
    """
    def __init__(self):
        self.timers: List[FakeTimer] = []

    def schedule_repeating(self, interval_s, callback):
        timer = FakeTimer(interval_s, callback)
        self.timers.append(timer)
        return timer

    @property
    def live_timers(self) -> List[FakeTimer]:
        return [timer for timer in self.timers if not timer.cancelled]

    def fire(self, times: int = 1) -> None:
        for _ in range(times):
            for timer in self.live_timers:
                timer.callback()


class RecordingObserver(TrackingObserver):
    def __init__(self):
        self.updates: List[TrackingSnapshot] = []
        self.arrived: List[TrackingSnapshot] = []
        self.cancelled: List[TrackingSnapshot] = []

    def on_update(self, snapshot):
        self.updates.append(snapshot)

    def on_arrived(self, snapshot):
        self.arrived.append(snapshot)

    def on_cancelled(self, snapshot):
        self.cancelled.append(snapshot)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def observer():
    return RecordingObserver()


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def still_policy():
    # no position noise so movement is deterministic for a given seed
    return TrackingPolicy(jitter_degrees=0.0)


@pytest.fixture
def quebec_origin():
    return Coordinate(46.8139, -71.2082)


@pytest.fixture
def quebec_target():
    return Coordinate(46.8000, -71.2000)
