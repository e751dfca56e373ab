"""
Simulation clocks.

Breakout is driven by ``FrameClock``: one variable, clamped delta per frame
callback. Snake is driven by ``FixedIntervalTimer``: a fixed period selected
by difficulty, advanced by whatever frame loop hosts it.
"""

from __future__ import annotations
import time
from typing import Optional


def monotonic_ms() -> float:
    """Monotonic wall clock in milliseconds"""
    return time.monotonic() * 1000.0


class ManualClock:
    """Settable millisecond clock; callable like ``monotonic_ms``"""

    def __init__(self, start_ms: float = 0.0):
        self.now_ms = float(start_ms)

    def __call__(self) -> float:
        return self.now_ms

    def advance(self, ms: float) -> float:
        self.now_ms += ms
        return self.now_ms


class FrameClock:
    """Converts frame timestamps (seconds) into a bounded tick delta"""

    def __init__(self, max_step: float = 0.033):
        self.max_step = max_step
        self._last: Optional[float] = None

    def reset(self):
        """Forget the last timestamp so the next tick yields dt = 0"""
        self._last = None

    def tick(self, now_s: float) -> float:
        if self._last is None:
            self._last = now_s
            return 0.0
        dt = min(self.max_step, now_s - self._last)
        self._last = now_s
        return max(0.0, dt)


class FixedIntervalTimer:
    """Fixed-period tick source.

    ``advance`` accumulates elapsed time and returns how many whole periods
    fell due; the remainder carries into the next call.
    """

    def __init__(self, period_ms: float):
        if period_ms <= 0:
            raise ValueError(f"period_ms must be positive, got {period_ms}")
        self.period_ms = float(period_ms)
        self.running = False
        self._acc = 0.0

    def start(self):
        self.running = True
        self._acc = 0.0

    def stop(self):
        self.running = False
        self._acc = 0.0

    def rearm(self, period_ms: float):
        """Change the period and restart from a clean accumulator"""
        if period_ms <= 0:
            raise ValueError(f"period_ms must be positive, got {period_ms}")
        self.period_ms = float(period_ms)
        self.start()

    def advance(self, elapsed_ms: float) -> int:
        if not self.running or elapsed_ms <= 0:
            return 0
        self._acc += elapsed_ms
        due = int(self._acc // self.period_ms)
        self._acc -= due * self.period_ms
        return due
