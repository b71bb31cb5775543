"""
Clock (external collaborator): current wall-clock time in whole epoch seconds.
"""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    def current_time(self) -> int:
        ...


class SystemClock:
    def current_time(self) -> int:
        return int(time.time())


class FixedClock:
    """Settable clock for tests and scripted scenarios."""

    def __init__(self, now: int) -> None:
        self.now = now

    def current_time(self) -> int:
        return self.now

    def advance(self, seconds: int) -> int:
        self.now += seconds
        return self.now


__all__ = ["Clock", "FixedClock", "SystemClock"]
