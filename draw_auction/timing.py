"""Elapsed-time helpers and clocks.

A clock exposes `now()` (unix seconds) and `tick()` (scheduling tick, i.e.
block number). The auction never reads wall time directly.
"""

SECONDS_PER_BLOCK = 12


def elapsed(start: int, end: int) -> int:
    """Seconds from start to end, never negative."""
    return end - start if end > start else 0


class ManualClock:
    """Clock advanced by hand. One tick per `seconds_per_tick` seconds."""

    def __init__(self, start: int = 0, seconds_per_tick: int = SECONDS_PER_BLOCK):
        self._start = start
        self._now = start
        self.seconds_per_tick = seconds_per_tick

    def now(self) -> int:
        return self._now

    def tick(self) -> int:
        return (self._now - self._start) // self.seconds_per_tick

    def advance(self, seconds: int):
        if seconds < 0:
            raise ValueError("Clock cannot move backwards")
        self._now += seconds

    def set(self, timestamp: int):
        if timestamp < self._now:
            raise ValueError("Clock cannot move backwards")
        self._now = timestamp
