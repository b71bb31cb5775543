"""
Domain time utilities (pure).

Centralized epoch-timestamp validation and time-of-day helpers.

All times in this domain are whole seconds since the Unix epoch, held in a
signed 64-bit range. Behavior and error messages must remain consistent across
the domain model.
"""

from __future__ import annotations

from .errors import InvalidTimeWindow

I64_MIN: int = -(2**63)
I64_MAX: int = 2**63 - 1

SECONDS_PER_DAY: int = 86_400
MINUTES_PER_DAY: int = 1_440


def require_epoch_seconds(name: str, value: int) -> int:
    """
    Enforces that a timestamp is an integer number of epoch seconds.

    Invariants:
    - Timestamps must be plain ints (bool is rejected).
    - Timestamps must fit the signed 64-bit range.
    """

    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidTimeWindow(f"{name} must be an integer number of epoch seconds")
    if value < I64_MIN or value > I64_MAX:
        raise InvalidTimeWindow(f"{name} is outside the signed 64-bit range")
    return value


def minute_of_day(now: int) -> int:
    """
    Minute of the UTC day for an epoch timestamp, in [0, 1440).

    Python's modulo is floored, so pre-epoch timestamps still land inside the day.
    """

    return (now % SECONDS_PER_DAY) // 60
