"""
Domain: Transfer policies.

Contract rules implemented here:
- A PolicyConfig is defined per governed asset and owned by a single identity.
- Four gates are independently toggleable; a disabled gate always passes and
  enabled gates are AND-combined.
- Trading window: minutes of the UTC day in [0, 1440). open < close is a same-day
  window, open > close wraps midnight, open == close is always closed.
- Bounds are inclusive: min_transfer_amount <= amount <= max_transfer_amount.
- Allow-list markers are presence-only, keyed by (asset, wallet).

No cross-field invariant (e.g. min <= max) is enforced when a policy is written.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from .amounts import require_u64
from .errors import (
    BelowMinTransfer,
    ExceedsMaxTransfer,
    InvalidMinute,
    PolicyViolation,
    TradingClosed,
)
from .time import MINUTES_PER_DAY, minute_of_day


def require_minute(name: str, value: Optional[int]) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidMinute(f"{name} must be an integer minute of day")
    if value < 0 or value >= MINUTES_PER_DAY:
        raise InvalidMinute(f"{name} must be in [0, {MINUTES_PER_DAY})")
    return value


def is_within_trading_window(open_minute: int, close_minute: int, current_minute: int) -> bool:
    """
    Window test on minutes of the day.

    >>> is_within_trading_window(540, 1020, 600)
    True
    >>> is_within_trading_window(1320, 360, 200)
    True
    >>> is_within_trading_window(600, 600, 600)
    False
    """

    if open_minute < close_minute:
        return open_minute <= current_minute < close_minute
    if open_minute > close_minute:
        return current_minute >= open_minute or current_minute < close_minute
    # Degenerate equal bounds: never open.
    return False


@dataclass(frozen=True, slots=True)
class PolicyConfig:
    """Transfer-policy configuration for one governed asset."""

    owner: str
    asset: str
    gating_asset: str
    whitelist_enabled: bool = False
    trading_time_enabled: bool = False
    max_transfer_enabled: bool = False
    nft_gated: bool = False
    open_minute: Optional[int] = None
    close_minute: Optional[int] = None
    max_transfer_amount: int = 0
    min_transfer_amount: int = 0

    @staticmethod
    def register(
        *,
        owner: str,
        asset: str,
        gating_asset: str,
        open_minute: Optional[int],
        close_minute: Optional[int],
        max_transfer_amount: int,
        min_transfer_amount: int,
    ) -> "PolicyConfig":
        """New policy with every gate disabled."""

        require_minute("open_minute", open_minute)
        require_minute("close_minute", close_minute)
        require_u64("max_transfer_amount", max_transfer_amount)
        require_u64("min_transfer_amount", min_transfer_amount)

        return PolicyConfig(
            owner=owner,
            asset=asset,
            gating_asset=gating_asset,
            open_minute=open_minute,
            close_minute=close_minute,
            max_transfer_amount=max_transfer_amount,
            min_transfer_amount=min_transfer_amount,
        )

    def is_owned_by(self, caller: str) -> bool:
        return self.owner == caller

    def with_flags(
        self,
        *,
        whitelist_enabled: bool,
        trading_time_enabled: bool,
        max_transfer_enabled: bool,
        nft_gated: bool,
    ) -> "PolicyConfig":
        return replace(
            self,
            whitelist_enabled=whitelist_enabled,
            trading_time_enabled=trading_time_enabled,
            max_transfer_enabled=max_transfer_enabled,
            nft_gated=nft_gated,
        )

    def check_trading_window(self, now: int) -> None:
        """Raise TradingClosed if the window is configured and `now` falls outside it."""

        if self.open_minute is None or self.close_minute is None:
            return
        if not is_within_trading_window(self.open_minute, self.close_minute, minute_of_day(now)):
            raise TradingClosed()

    def check_bounds(self, amount: int) -> None:
        if amount > self.max_transfer_amount:
            raise ExceedsMaxTransfer()
        if amount < self.min_transfer_amount:
            raise BelowMinTransfer()


@dataclass(frozen=True, slots=True)
class AllowListMarker:
    """Presence-only allow-list entry. Existence is the entire payload."""

    asset: str
    wallet: str


@dataclass(frozen=True, slots=True)
class TransferRequest:
    """A proposed movement of `amount` units of `asset` out of `wallet`."""

    asset: str
    wallet: str
    amount: int


@dataclass(frozen=True, slots=True)
class PolicyResult:
    """
    Outcome of a policy evaluation.

    allowed is TRUE iff violation is None. Only the first failing gate is reported.
    """

    violation: Optional[PolicyViolation] = None

    @property
    def allowed(self) -> bool:
        return self.violation is None

    def raise_for_violation(self) -> None:
        if self.violation is not None:
            raise self.violation

    @staticmethod
    def passed() -> "PolicyResult":
        return PolicyResult(violation=None)

    @staticmethod
    def failed(violation: PolicyViolation) -> "PolicyResult":
        return PolicyResult(violation=violation)


__all__ = [
    "AllowListMarker",
    "PolicyConfig",
    "PolicyResult",
    "TransferRequest",
    "is_within_trading_window",
    "require_minute",
]
