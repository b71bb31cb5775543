"""
Domain: Token sales.

Contract rules implemented here:
- A sale is defined per governed asset; there is at most one SaleConfig per asset.
- Creation invariants (checked once, at creation):
  soft_cap <= hard_cap, hard_cap > 0, start_time < end_time, end_time > now.
- Lifetime invariant: total_raised <= hard_cap, and total_raised only increases.
- The sale window is inclusive at both ends: start_time <= now <= end_time.

This module contains only pure domain entities/value objects: no I/O, no ledger,
no frameworks. All timestamps must be passed explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

from .amounts import checked_add, checked_mul, require_u64
from .errors import (
    AmountCannotBeZero,
    HardCapReached,
    InvalidCapRange,
    InvalidTimeWindow,
    SaleNotActive,
    TimeInPast,
    ZeroCap,
)
from .time import require_epoch_seconds

_VAULT_ACCOUNT_PREFIX: str = "ico_vault_account"
_VAULT_AUTHORITY_PREFIX: str = "ico_vault_authority"


def vault_account_for(asset: str) -> str:
    """Escrow token account holding the inventory for `asset`'s sale."""

    return f"{_VAULT_ACCOUNT_PREFIX}:{asset}"


def vault_authority_for(asset: str) -> str:
    """Delegated signing authority allowed to move tokens out of the vault."""

    return f"{_VAULT_AUTHORITY_PREFIX}:{asset}"


class SalePhase(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    ENDED = "ended"


def validate_sale_terms(
    *,
    soft_cap: int,
    hard_cap: int,
    start_time: int,
    end_time: int,
    price_per_unit: int,
    now: int,
) -> None:
    """
    Check the creation invariants, in the order the errors are reported.

    Raises:
        InvalidCapRange, ZeroCap, InvalidTimeWindow, TimeInPast, InvalidAmount
    """

    require_u64("soft_cap", soft_cap)
    require_u64("hard_cap", hard_cap)
    require_u64("price_per_unit", price_per_unit)
    require_epoch_seconds("start_time", start_time)
    require_epoch_seconds("end_time", end_time)
    require_epoch_seconds("now", now)

    if soft_cap > hard_cap:
        raise InvalidCapRange()
    if hard_cap == 0:
        raise ZeroCap()
    if start_time >= end_time:
        raise InvalidTimeWindow()
    if end_time <= now:
        raise TimeInPast()


@dataclass(frozen=True, slots=True)
class SaleConfig:
    """
    Persistent configuration and running total of one asset's sale.

    Immutable: accepting a purchase returns a new instance with the updated
    total_raised; the stored record is only replaced once the exchange settled.
    """

    creator: str
    asset: str
    soft_cap: int
    hard_cap: int
    start_time: int
    end_time: int
    vault_reference: str
    price_per_unit: int
    total_raised: int = 0

    @staticmethod
    def open(
        *,
        creator: str,
        asset: str,
        soft_cap: int,
        hard_cap: int,
        start_time: int,
        end_time: int,
        price_per_unit: int,
        now: int,
    ) -> "SaleConfig":
        """Validate the creation invariants and build a fresh sale with nothing raised."""

        validate_sale_terms(
            soft_cap=soft_cap,
            hard_cap=hard_cap,
            start_time=start_time,
            end_time=end_time,
            price_per_unit=price_per_unit,
            now=now,
        )
        return SaleConfig(
            creator=creator,
            asset=asset,
            soft_cap=soft_cap,
            hard_cap=hard_cap,
            start_time=start_time,
            end_time=end_time,
            vault_reference=vault_account_for(asset),
            price_per_unit=price_per_unit,
            total_raised=0,
        )

    def is_active(self, now: int) -> bool:
        return self.start_time <= now <= self.end_time

    def phase(self, now: int) -> SalePhase:
        if now < self.start_time:
            return SalePhase.PENDING
        if now > self.end_time:
            return SalePhase.ENDED
        return SalePhase.ACTIVE

    @property
    def soft_cap_reached(self) -> bool:
        return self.total_raised >= self.soft_cap

    @property
    def remaining_capacity(self) -> int:
        return self.hard_cap - self.total_raised

    def quote_purchase(self, amount: int, now: int) -> "PurchaseQuote":
        """
        Run the pure purchase checks and compute the settlement figures.

        Order matters and mirrors the settlement sequence:
        0. amount type/range  1. window  2. non-zero amount  3. cost overflow
        4. total overflow  5. hard cap.

        A malformed amount (negative, above u64, not an int) reports
        InvalidAmount even outside the sale window.

        Raises:
            InvalidAmount, SaleNotActive, AmountCannotBeZero, ArithmeticOverflow,
            HardCapReached
        """

        require_u64("amount", amount)

        if not self.is_active(now):
            raise SaleNotActive()

        # Zero-unit purchases would settle nothing.
        if amount == 0:
            raise AmountCannotBeZero()

        total_cost = checked_mul(amount, self.price_per_unit)
        new_total = checked_add(self.total_raised, amount)

        if new_total > self.hard_cap:
            raise HardCapReached()

        return PurchaseQuote(amount=amount, total_cost=total_cost, new_total_raised=new_total)

    def with_total_raised(self, new_total: int) -> "SaleConfig":
        """Return a copy carrying the new running total (never decreasing, never above cap)."""

        if new_total < self.total_raised:
            raise ValueError("total_raised can only increase")
        if new_total > self.hard_cap:
            raise HardCapReached()
        return replace(self, total_raised=new_total)


@dataclass(frozen=True, slots=True)
class PurchaseQuote:
    """Settlement figures for an accepted (not yet executed) purchase."""

    amount: int
    total_cost: int
    new_total_raised: int


@dataclass(frozen=True, slots=True)
class VaultRecord:
    """
    Write-once record of the inventory deposited into escrow at sale creation.

    The live balance is owned by the asset ledger; this only records the deposit.
    """

    asset: str
    creator: str
    amount: int

    def __post_init__(self) -> None:
        require_u64("amount", self.amount)
        if self.amount == 0:
            raise AmountCannotBeZero()


@dataclass(frozen=True, slots=True)
class PurchaseReceipt:
    """Outcome of a settled purchase."""

    asset: str
    buyer: str
    creator: str
    amount: int
    total_cost: int
    total_raised: int
    purchased_at: int


__all__ = [
    "SaleConfig",
    "SalePhase",
    "PurchaseQuote",
    "PurchaseReceipt",
    "VaultRecord",
    "validate_sale_terms",
    "vault_account_for",
    "vault_authority_for",
]
