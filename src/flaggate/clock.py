"""
Clock interface for evaluation timing
"""

import time
from typing import Protocol


class Clock(Protocol):
    """Clock interface used to time evaluations"""

    def monotonic_ms(self) -> float:
        """Get a monotonic reading in milliseconds"""
        ...


class SystemClock:
    """System clock implementation"""

    def monotonic_ms(self) -> float:
        return time.perf_counter() * 1000.0


class DeterministicClock:
    """Deterministic clock for testing"""

    def __init__(self, start_ms: float = 0.0):
        self._elapsed_ms = start_ms

    def monotonic_ms(self) -> float:
        return self._elapsed_ms

    def advance(self, milliseconds: float) -> None:
        self._elapsed_ms += milliseconds


# Global clock instance (can be injected for testing)
_default_clock: Clock = SystemClock()


def get_clock() -> Clock:
    """Get the global clock instance"""
    return _default_clock


def set_clock(clock: Clock) -> None:
    """Set the global clock instance"""
    global _default_clock
    _default_clock = clock
