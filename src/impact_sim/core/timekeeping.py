"""Frame timing helpers for the host loop."""
from __future__ import annotations

import time
from dataclasses import dataclass, field


@dataclass
class FrameTimer:
    """High resolution timer based on :func:`time.perf_counter`."""

    last_time: float = field(default_factory=time.perf_counter)
    max_dt: float = 0.25

    def tick(self) -> float:
        now = time.perf_counter()
        dt = now - self.last_time
        self.last_time = now
        # A stalled window (drag, breakpoint) must not fling bodies around.
        return min(max(dt, 0.0), self.max_dt)


@dataclass
class CadenceTimer:
    """Reports when a slow periodic job is due.

    The first call to :meth:`due` always fires so that the job starts
    immediately.
    """

    interval: float
    last_fired: float | None = None

    def due(self, now: float) -> bool:
        if self.last_fired is None or now - self.last_fired >= self.interval:
            self.last_fired = now
            return True
        return False

    def clear(self) -> None:
        self.last_fired = None


__all__ = ["CadenceTimer", "FrameTimer"]
