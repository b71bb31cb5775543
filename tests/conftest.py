"""
Pytest configuration and shared fixtures.

This file adds the project root to the Python path so that tests can import
from the domain, repositories and services packages, and provides an in-memory
platform wired to a fixed clock.
"""

import sys
from pathlib import Path

import pytest

# Add the project root to the Python path
# so tests can import domain, repositories, etc.
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from repositories.clock import FixedClock  # noqa: E402
from services.platform import Platform, build_platform  # noqa: E402

# 2026-01-01T00:00:00Z, a UTC midnight.
DAY_START = 1_767_225_600

CREATOR = "creator-wallet"
BUYER = "buyer-wallet"
ASSET = "token-mint"


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(DAY_START)


@pytest.fixture
def platform(clock: FixedClock) -> Platform:
    return build_platform(clock=clock)


@pytest.fixture
def open_sale(platform: Platform):
    """A sale with hard_cap=1000, price=10, a fully stocked vault and a funded buyer."""

    platform.ledger.mint_to(CREATOR, ASSET, 1_000)
    platform.ledger.fund_native(BUYER, 100_000)
    return platform.sales.create_sale(
        creator=CREATOR,
        asset=ASSET,
        soft_cap=500,
        hard_cap=1_000,
        start_time=DAY_START,
        end_time=DAY_START + 3_600,
        price_per_unit=10,
        deposit_amount=1_000,
        now=DAY_START,
    )
