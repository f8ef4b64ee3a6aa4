"""Monotonic time sources used to schedule node activity."""

from __future__ import annotations

import time

_MILLIS_MASK = 0xFFFFFFFF


class Clock:
    """Monotonic clock counting from the first time it is read."""

    def __init__(self) -> None:
        self._origin_ns: int | None = None

    def micros(self) -> int:
        """Microseconds since the first reading."""
        now = time.monotonic_ns()
        if self._origin_ns is None:
            self._origin_ns = now
        return (now - self._origin_ns) // 1000

    def millis(self) -> int:
        """Milliseconds since the first reading, wrapped to 32 bits."""
        return (self.micros() // 1000) & _MILLIS_MASK


class ManualClock:
    """Clock that only moves when told to; useful for simulation and tests."""

    def __init__(self, start_us: int = 0) -> None:
        if start_us < 0:
            raise ValueError("start time must not be negative")
        self._now_us = start_us

    def micros(self) -> int:
        """Current time in microseconds."""
        return self._now_us

    def millis(self) -> int:
        """Current time in milliseconds, wrapped to 32 bits."""
        return (self._now_us // 1000) & _MILLIS_MASK

    def advance(self, us: int) -> None:
        """Move the clock forward by ``us`` microseconds."""
        if us < 0:
            raise ValueError("a monotonic clock cannot go backwards")
        self._now_us += us