import asyncio
import random

import pytest

from routing.models import Coordinate
from tracking.models import TrackingObserver, TrackingState
from tracking.policy import TrackingPolicy
from tracking.scheduler import AsyncioScheduler
from tracking.session import TrackingSession


def test_repeating_timer_fires_until_cancelled():
    async def scenario():
        fired = []
        scheduler = AsyncioScheduler()

        def callback():
            fired.append(asyncio.get_running_loop().time())
            if len(fired) == 3:
                timer.cancel()

        timer = scheduler.schedule_repeating(0.01, callback)
        await asyncio.sleep(0.2)
        return fired, timer

    fired, timer = asyncio.run(scenario())

    assert len(fired) == 3
    assert timer.cancelled


def test_cancel_is_idempotent_and_immediate():
    async def scenario():
        fired = []
        timer = AsyncioScheduler().schedule_repeating(0.01, lambda: fired.append(1))
        timer.cancel()
        timer.cancel()
        await asyncio.sleep(0.05)
        return fired

    assert asyncio.run(scenario()) == []


def test_rejects_non_positive_interval():
    async def scenario():
        with pytest.raises(ValueError):
            AsyncioScheduler().schedule_repeating(0, lambda: None)

    asyncio.run(scenario())


def test_session_arrives_on_a_real_event_loop():
    class ArrivalWaiter(TrackingObserver):
        def __init__(self, event):
            self.event = event
            self.updates = 0

        def on_update(self, snapshot):
            self.updates += 1

        def on_arrived(self, snapshot):
            self.event.set()

    async def scenario():
        arrived = asyncio.Event()
        waiter = ArrivalWaiter(arrived)
        session = TrackingSession.start(
            Coordinate(46.8139, -71.2082),
            Coordinate(46.8000, -71.2000),
            1,
            scheduler=AsyncioScheduler(),
            observer=waiter,
            rng=random.Random(8),
            policy=TrackingPolicy(jitter_degrees=0.0),
        )
        with session:
            await asyncio.wait_for(arrived.wait(), timeout=10)
        return session, waiter

    session, waiter = asyncio.run(scenario())

    assert session.state == TrackingState.ARRIVED
    assert session.eta_minutes == 0
    assert waiter.updates == session.ticks
    assert not session.has_timer
