"""
Run a token-sale scenario end to end on the in-memory stack.

Creates a sale, funds a buyer, replays a list of purchases and prints the
outcome of each one along with the sale's running total.

Example:
    python scripts/run_sale_scenario.py --hard-cap 1000 --price 10 --purchases 600 500 400
"""

import argparse
import logging
import sys
from pathlib import Path

# Add parent directory to path so we can import from services
sys.path.insert(0, str(Path(__file__).parent.parent))

from domain.errors import TokenPlatformError
from repositories.client import LOG_LEVEL
from repositories.clock import FixedClock
from services.platform import build_platform

CREATOR = "demo-creator"
BUYER = "demo-buyer"
ASSET = "demo-token"


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Replay purchases against an in-memory token sale.")
    parser.add_argument("--soft-cap", type=int, default=0)
    parser.add_argument("--hard-cap", type=int, default=1000)
    parser.add_argument("--price", type=int, default=10, help="Native units per token unit")
    parser.add_argument("--deposit", type=int, default=None, help="Vault inventory (default: hard cap)")
    parser.add_argument("--buyer-funds", type=int, default=1_000_000)
    parser.add_argument("--start", type=int, default=1_767_225_600, help="Sale start (epoch seconds)")
    parser.add_argument("--duration", type=int, default=86_400, help="Sale length in seconds")
    parser.add_argument("--purchases", type=int, nargs="+", default=[600, 500, 400])
    return parser.parse_args()


def run_scenario(args: argparse.Namespace) -> int:
    """Returns the number of rejected purchases."""

    clock = FixedClock(args.start)
    platform = build_platform(clock=clock)

    deposit = args.deposit if args.deposit is not None else args.hard_cap
    platform.ledger.mint_to(CREATOR, ASSET, deposit)
    platform.ledger.fund_native(BUYER, args.buyer_funds)

    sale = platform.sales.create_sale(
        creator=CREATOR,
        asset=ASSET,
        soft_cap=args.soft_cap,
        hard_cap=args.hard_cap,
        start_time=args.start,
        end_time=args.start + args.duration,
        price_per_unit=args.price,
        deposit_amount=deposit,
    )

    print("=" * 60)
    print(f"SALE: {sale.asset}  hard_cap={sale.hard_cap}  price={sale.price_per_unit}")
    print("=" * 60)

    rejected = 0
    for amount in args.purchases:
        try:
            receipt = platform.sales.purchase(sale, BUYER, amount)
            print(f"[SUCCESS] bought {receipt.amount} for {receipt.total_cost}  "
                  f"total_raised={receipt.total_raised}")
        except TokenPlatformError as e:
            rejected += 1
            print(f"[REJECTED] {amount}: {e.code} ({e.message})")

    final = platform.sales.get_sale(ASSET)
    print("=" * 60)
    print(f"Total raised:      {final.total_raised} / {final.hard_cap}")
    print(f"Soft cap reached:  {final.soft_cap_reached}")
    print(f"Vault balance:     {platform.sales.vault_balance(final)}")
    print(f"Buyer native left: {platform.ledger.native_balance(BUYER)}")
    print("=" * 60)
    return rejected


if __name__ == "__main__":
    logging.basicConfig(level=LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")
    run_scenario(parse_args())
