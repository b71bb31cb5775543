"""
Domain: Unsigned 64-bit amount arithmetic (pure).

Token amounts, caps, prices and native balances are all unsigned 64-bit values.
Python ints are unbounded, so the range is enforced explicitly here and every
accounting computation goes through the checked helpers.
"""

from __future__ import annotations

from .errors import ArithmeticOverflow, InvalidAmount

U64_MAX: int = 2**64 - 1


def require_u64(name: str, value: int) -> int:
    """Validate that `value` is an int in [0, 2**64 - 1]."""

    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmount(f"{name} must be an integer")
    if value < 0 or value > U64_MAX:
        raise InvalidAmount(f"{name} must be in [0, {U64_MAX}]")
    return value


def checked_add(a: int, b: int) -> int:
    result = a + b
    if result > U64_MAX:
        raise ArithmeticOverflow()
    return result


def checked_mul(a: int, b: int) -> int:
    result = a * b
    if result > U64_MAX:
        raise ArithmeticOverflow()
    return result
