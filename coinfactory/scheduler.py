"""Fixed-cadence tick scheduling for a frame-driven host loop."""
from __future__ import annotations

from typing import Optional

from config import TICK_INTERVAL_MS
from coinfactory.simulation import run_tick
from coinfactory.state import SimulationState


class TickClock:
    """Decides, once per rendered frame, whether a tick is due.

    A tick is due when strictly more than ``interval_ms`` has passed since
    the last one. Missed intervals are coalesced into a single tick rather
    than replayed, so a stalled host never runs a burst of catch-up ticks.
    """

    def __init__(self, interval_ms: float = TICK_INTERVAL_MS) -> None:
        self.interval_ms = interval_ms
        self.last_tick_ms: Optional[float] = None

    def due(self, timestamp_ms: float) -> bool:
        if self.last_tick_ms is None:
            self.last_tick_ms = timestamp_ms
            return False
        if timestamp_ms - self.last_tick_ms > self.interval_ms:
            self.last_tick_ms = timestamp_ms
            return True
        return False

    def advance(self, state: SimulationState, timestamp_ms: float) -> bool:
        """Run one tick if due. Returns the tick's state-changed flag."""
        if not self.due(timestamp_ms):
            return False
        return run_tick(state)
