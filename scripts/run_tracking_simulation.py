import asyncio
import csv
import logging
import os
import random
import time
from typing import Dict, List, Optional

from routing.models import Coordinate
from routing.osrm_client import OSRMClient
from tracking.controller import TrackingController
from tracking.models import TrackingObserver, TrackingSnapshot
from tracking.policy import TrackingPolicy
from tracking.scheduler import AsyncioScheduler

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)


class ResultCollector(TrackingObserver):
    """Records the terminal outcome of every tracked order."""

    def __init__(self, expected: int, done: asyncio.Event):
        self.expected = expected
        self.done = done
        self.results: Dict[str, dict] = {}

    def start(self, order_id: str, initial_eta: float, route_points: int, route_fallback: bool):
        self.results[order_id] = {
            "order_id": order_id,
            "ticks": 0,
            "final_state": "active",
            "initial_eta": round(initial_eta, 1),
            "route_points": route_points,
            "route_fallback": route_fallback,
        }

    def for_order(self, order_id: str) -> TrackingObserver:
        collector = self

        class _OrderListener(TrackingObserver):
            def on_update(self, snapshot: TrackingSnapshot) -> None:
                collector.results[order_id]["ticks"] = snapshot.tick

            def on_arrived(self, snapshot: TrackingSnapshot) -> None:
                collector.finish(order_id, snapshot)

            def on_cancelled(self, snapshot: TrackingSnapshot) -> None:
                collector.finish(order_id, snapshot)

        return _OrderListener()

    def finish(self, order_id: str, snapshot: TrackingSnapshot):
        row = self.results[order_id]
        row["ticks"] = snapshot.tick
        row["final_state"] = snapshot.state.value
        finished = sum(1 for r in self.results.values() if r["final_state"] != "active")
        if finished >= self.expected:
            self.done.set()


def load_trips(filepath="mock_trips.csv", limit=20) -> List[dict]:
    trips = []
    base_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    absolute_path = os.path.join(base_dir, filepath)

    with open(absolute_path, 'r') as file:
        reader = csv.DictReader(file)
        for row in reader:
            if len(trips) >= limit: break
            trips.append({
                "order_id": row["order_id"],
                "pickup": Coordinate(float(row["pickup_lat"]), float(row["pickup_lon"])),
                "dropoff": Coordinate(float(row["dropoff_lat"]), float(row["dropoff_lon"])),
            })
    return trips


def build_route_provider() -> Optional[OSRMClient]:
    try:
        return OSRMClient(timeout=5)
    except ValueError as e:
        print(f"[WARN] {e} Routes will be straight lines.")
        return None


async def run_simulation(tick_interval_ms=20, limit=20, deadline_s=120.0, seed=None):
    print("=== STARTING DRIVER TRACKING SIMULATION ===")

    # 1. Load Data
    trips = load_trips("mock_trips.csv", limit=limit)
    print(f"Loaded {len(trips)} trips.\n")
    if not trips:
        return []

    # 2. Configure System
    done = asyncio.Event()
    collector = ResultCollector(expected=len(trips), done=done)
    controller = TrackingController(
        AsyncioScheduler(),
        route_provider=build_route_provider(),
        policy=TrackingPolicy(tick_interval_ms=tick_interval_ms),
        rng=random.Random(seed),
    )

    # 3. Start every session. The route request is blocking I/O so it goes to a worker
    #    thread; all session mutation stays on the loop.
    loop = asyncio.get_running_loop()
    start_time = time.time()
    for trip in trips:
        route = await loop.run_in_executor(None, controller.load_route, trip["pickup"], trip["dropoff"])
        session = controller.start_tracking(
            trip["order_id"],
            trip["pickup"], # driver spawns a few km from the pickup
            trip["pickup"],
            listener=collector.for_order(trip["order_id"]),
        )
        collector.start(trip["order_id"], session.eta_minutes, len(route.coordinates), route.is_fallback)

    # 4. Wait for arrivals, then tear everything down like a closing screen would
    try:
        await asyncio.wait_for(done.wait(), timeout=deadline_s)
    except asyncio.TimeoutError:
        print(f"[TIMEOUT] Not every driver arrived within {deadline_s}s, cancelling the rest.")
    finally:
        controller.teardown()

    # 5. Write results next to the repo root
    base_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    output_path = os.path.join(base_dir, "tracking_results.csv")
    rows = list(collector.results.values())
    with open(output_path, "w", newline='') as file:
        writer = csv.DictWriter(file, fieldnames=["order_id", "ticks", "final_state", "initial_eta", "route_points", "route_fallback"])
        writer.writeheader()
        writer.writerows(rows)

    arrived = sum(1 for r in rows if r["final_state"] == "arrived")
    print("\n=== SIMULATION COMPLETE ===")
    print(f"Drivers arrived: {arrived} / {len(rows)} in {time.time() - start_time:.2f}s")
    print(f"Results written to '{output_path}'.")
    return rows

if __name__ == "__main__":
    asyncio.run(run_simulation())
