"""
Tests for `services/sale_service.py`.

Covers contract rules:
- create_sale escrows the deposit and stores SaleConfig + VaultRecord; one sale per asset.
- Purchase settles payment and delivery together; total_raised is committed last.
- The hard-cap scenario (600 ok, 500 rejected, 400 ok) leaves totals exact.
- Failed purchases change nothing: balances, vault and total_raised are untouched.
- The stored record is authoritative; a stale SaleConfig cannot oversell.
- Concurrent purchases are serialized; together they never pass the hard cap.
"""

from __future__ import annotations

import threading
import time
from dataclasses import replace

import pytest

from domain.errors import (
    AmountCannotBeZero,
    ArithmeticOverflow,
    HardCapReached,
    InsufficientBalance,
    InsufficientFunds,
    InsufficientInventory,
    InvalidCapRange,
    SaleAlreadyExists,
    SaleNotActive,
    SaleNotFound,
    TimeInPast,
    Unauthorized,
)
from domain.amounts import U64_MAX
from domain.sale import SaleConfig, vault_account_for, vault_authority_for
from services.platform import Platform
from tests.conftest import ASSET, BUYER, CREATOR, DAY_START


def _snapshot(platform: Platform) -> tuple[int, int, int, int, int]:
    sale = platform.sales.get_sale(ASSET)
    return (
        sale.total_raised,
        platform.ledger.native_balance(BUYER),
        platform.ledger.native_balance(CREATOR),
        platform.ledger.asset_balance(BUYER, ASSET),
        platform.sales.vault_balance(sale),
    )


def test_create_sale_escrows_deposit(platform: Platform, open_sale: SaleConfig) -> None:
    """Verify the deposit moves creator -> vault and both records are stored."""

    assert platform.ledger.asset_balance(CREATOR, ASSET) == 0
    assert platform.ledger.asset_balance(vault_account_for(ASSET), ASSET) == 1_000
    assert platform.ledger.delegate_of(vault_account_for(ASSET), ASSET) == vault_authority_for(ASSET)

    assert platform.sales.get_sale(ASSET) == open_sale
    vault = platform.sales.get_vault(ASSET)
    assert (vault.creator, vault.amount) == (CREATOR, 1_000)


def test_create_sale_rejects_second_sale_for_asset(platform: Platform, open_sale: SaleConfig) -> None:
    platform.ledger.mint_to(CREATOR, ASSET, 10)

    with pytest.raises(SaleAlreadyExists):
        platform.sales.create_sale(
            creator=CREATOR,
            asset=ASSET,
            soft_cap=0,
            hard_cap=10,
            start_time=DAY_START,
            end_time=DAY_START + 10,
            price_per_unit=1,
            deposit_amount=10,
            now=DAY_START,
        )
    assert platform.ledger.asset_balance(CREATOR, ASSET) == 10


@pytest.mark.parametrize(
    "overrides, error",
    [
        ({"soft_cap": 2_000}, InvalidCapRange),
        ({"end_time": DAY_START}, TimeInPast),
        ({"deposit_amount": 0}, AmountCannotBeZero),
        ({"deposit_amount": 5_000}, InsufficientBalance),
    ],
)
def test_create_sale_failures_leave_no_trace(platform: Platform, overrides: dict, error: type) -> None:
    """Verify a rejected creation stores nothing and moves no tokens."""

    platform.ledger.mint_to(CREATOR, ASSET, 1_000)
    terms = dict(
        creator=CREATOR,
        asset=ASSET,
        soft_cap=0,
        hard_cap=1_000,
        start_time=DAY_START - 10,
        end_time=DAY_START + 10,
        price_per_unit=1,
        deposit_amount=1_000,
        now=DAY_START,
    )
    terms.update(overrides)

    with pytest.raises(error):
        platform.sales.create_sale(**terms)

    with pytest.raises(SaleNotFound):
        platform.sales.get_sale(ASSET)
    with pytest.raises(SaleNotFound):
        platform.sales.get_vault(ASSET)
    assert platform.ledger.asset_balance(CREATOR, ASSET) == 1_000


def test_purchase_settles_payment_and_delivery(platform: Platform, open_sale: SaleConfig) -> None:
    receipt = platform.sales.purchase(open_sale, BUYER, 600, now=DAY_START + 10)

    assert receipt.total_cost == 6_000
    assert receipt.total_raised == 600
    assert receipt.creator == CREATOR
    assert _snapshot(platform) == (600, 94_000, 6_000, 600, 400)


def test_hard_cap_scenario(platform: Platform, open_sale: SaleConfig) -> None:
    """hard_cap=1000, price=10: 600 succeeds, 500 fails HardCapReached, 400 reaches the cap."""

    platform.sales.purchase(open_sale, BUYER, 600)

    with pytest.raises(HardCapReached):
        platform.sales.purchase(open_sale, BUYER, 500)
    assert platform.sales.get_sale(ASSET).total_raised == 600

    receipt = platform.sales.purchase(open_sale, BUYER, 400)
    assert receipt.total_raised == 1_000

    with pytest.raises(HardCapReached):
        platform.sales.purchase(open_sale, BUYER, 1)
    assert _snapshot(platform) == (1_000, 90_000, 10_000, 1_000, 0)


def test_stale_sale_instance_cannot_oversell(platform: Platform, open_sale: SaleConfig) -> None:
    """Verify the running total is re-read from storage, not taken from the caller's copy."""

    platform.sales.purchase(open_sale, BUYER, 900)

    with pytest.raises(HardCapReached):
        platform.sales.purchase(open_sale, BUYER, 200)
    assert platform.sales.get_sale(ASSET).total_raised == 900


@pytest.mark.parametrize("offset", [-1, 3_601])
def test_purchase_outside_window_is_not_active(
    platform: Platform, open_sale: SaleConfig, offset: int
) -> None:
    """Verify SaleNotActive outside [start, end] even when cap and balances would also fail."""

    before = _snapshot(platform)

    with pytest.raises(SaleNotActive):
        platform.sales.purchase(open_sale, BUYER, 5_000, now=DAY_START + offset)
    assert _snapshot(platform) == before


def test_purchase_window_edges_are_inclusive(platform: Platform, open_sale: SaleConfig) -> None:
    platform.sales.purchase(open_sale, BUYER, 1, now=DAY_START)
    platform.sales.purchase(open_sale, BUYER, 1, now=DAY_START + 3_600)

    assert platform.sales.get_sale(ASSET).total_raised == 2


def test_purchase_uses_clock_when_now_omitted(platform: Platform, open_sale: SaleConfig, clock) -> None:
    clock.advance(7_200)

    with pytest.raises(SaleNotActive):
        platform.sales.purchase_by_asset(ASSET, BUYER, 1)


def test_purchase_zero_amount_rejected(platform: Platform, open_sale: SaleConfig) -> None:
    with pytest.raises(AmountCannotBeZero):
        platform.sales.purchase(open_sale, BUYER, 0)


def test_purchase_cost_overflow(platform: Platform) -> None:
    """Verify amount * price past u64 fails ArithmeticOverflow and nothing moves."""

    platform.ledger.mint_to(CREATOR, ASSET, 10)
    sale = platform.sales.create_sale(
        creator=CREATOR,
        asset=ASSET,
        soft_cap=0,
        hard_cap=U64_MAX,
        start_time=DAY_START,
        end_time=DAY_START + 10,
        price_per_unit=U64_MAX,
        deposit_amount=10,
        now=DAY_START,
    )

    with pytest.raises(ArithmeticOverflow):
        platform.sales.purchase(sale, BUYER, 2)
    assert platform.sales.get_sale(ASSET).total_raised == 0


def test_purchase_insufficient_inventory(platform: Platform) -> None:
    platform.ledger.mint_to(CREATOR, ASSET, 50)
    platform.ledger.fund_native(BUYER, 1_000)
    sale = platform.sales.create_sale(
        creator=CREATOR,
        asset=ASSET,
        soft_cap=0,
        hard_cap=1_000,
        start_time=DAY_START,
        end_time=DAY_START + 10,
        price_per_unit=1,
        deposit_amount=50,
        now=DAY_START,
    )

    with pytest.raises(InsufficientInventory):
        platform.sales.purchase(sale, BUYER, 51)
    assert platform.ledger.native_balance(BUYER) == 1_000


def test_purchase_insufficient_funds(platform: Platform, open_sale: SaleConfig) -> None:
    platform.ledger.fund_native("poor-wallet", 9)

    with pytest.raises(InsufficientFunds):
        platform.sales.purchase(open_sale, "poor-wallet", 1)
    assert platform.ledger.native_balance("poor-wallet") == 9
    assert platform.sales.get_sale(ASSET).total_raised == 0


def test_purchase_rolls_back_payment_when_delivery_fails(
    platform: Platform, open_sale: SaleConfig, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Verify a failing token delivery discards the payment and leaves total_raised unchanged."""

    before = _snapshot(platform)

    def refuse(*args, **kwargs):
        raise Unauthorized("vault authority rejected")

    monkeypatch.setattr(platform.ledger, "asset_transfer", refuse)

    with pytest.raises(Unauthorized):
        platform.sales.purchase(open_sale, BUYER, 100)
    assert _snapshot(platform) == before


def test_purchase_rejects_creator_mismatch(platform: Platform, open_sale: SaleConfig) -> None:
    """Verify payment cannot be redirected by passing a SaleConfig with a different creator."""

    forged = replace(open_sale, creator="attacker")

    with pytest.raises(Unauthorized):
        platform.sales.purchase(forged, BUYER, 10)
    assert platform.ledger.native_balance("attacker") == 0


def test_purchase_unknown_sale(platform: Platform) -> None:
    with pytest.raises(SaleNotFound):
        platform.sales.purchase_by_asset("missing", BUYER, 1)


def test_total_raised_monotonic_over_purchase_sequence(platform: Platform, open_sale: SaleConfig) -> None:
    """Verify total_raised never decreases and never exceeds hard_cap across mixed outcomes."""

    previous = 0
    for amount in [100, 0, 450, 700, 300, 200, 150, 1]:
        try:
            platform.sales.purchase(open_sale, BUYER, amount)
        except (HardCapReached, AmountCannotBeZero):
            pass
        total = platform.sales.get_sale(ASSET).total_raised
        assert previous <= total <= open_sale.hard_cap
        previous = total

    assert previous == 1_000


def test_concurrent_purchases_cannot_pass_hard_cap(platform: Platform, monkeypatch: pytest.MonkeyPatch) -> None:
    """Two threads buying 600 each against hard_cap=1000: exactly one settles, totals stay exact."""

    platform.ledger.mint_to(CREATOR, ASSET, 2_000)
    platform.ledger.fund_native(BUYER, 100_000)
    platform.sales.create_sale(
        creator=CREATOR,
        asset=ASSET,
        soft_cap=0,
        hard_cap=1_000,
        start_time=DAY_START,
        end_time=DAY_START + 3_600,
        price_per_unit=10,
        deposit_amount=2_000,
        now=DAY_START,
    )

    native_balance = platform.ledger.native_balance

    def slow_native_balance(wallet: str) -> int:
        time.sleep(0.1)
        return native_balance(wallet)

    monkeypatch.setattr(platform.ledger, "native_balance", slow_native_balance)

    outcomes: list[str] = []

    def buy() -> None:
        try:
            platform.sales.purchase_by_asset(ASSET, BUYER, 600)
            outcomes.append("settled")
        except HardCapReached:
            outcomes.append("capped")

    threads = [threading.Thread(target=buy) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)

    assert sorted(outcomes) == ["capped", "settled"]
    assert platform.sales.get_sale(ASSET).total_raised == 600
    assert platform.ledger.asset_balance(BUYER, ASSET) == 600
    assert platform.ledger.asset_balance(vault_account_for(ASSET), ASSET) == 1_400
    assert native_balance(CREATOR) == 6_000
