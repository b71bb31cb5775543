"""
Sale service: token-sale settlement engine.

Handles:
- Sale creation with inventory deposited into an escrow vault
- Purchases: native payment buyer -> creator, tokens vault -> buyer
- All-or-nothing settlement: both transfers and the accounting update commit
  together or not at all

Ordering guarantee for purchases: every check runs before any effect, and
total_raised is written last, only after both transfers succeeded. A failure at
any point discards the whole unit (ledger and record store roll back together).
"""

from __future__ import annotations

import logging
from typing import Optional

from domain.amounts import require_u64
from domain.errors import (
    AmountCannotBeZero,
    InsufficientFunds,
    InsufficientInventory,
    SaleAlreadyExists,
    SaleNotFound,
    TokenPlatformError,
    Unauthorized,
)
from domain.sale import PurchaseReceipt, SaleConfig, VaultRecord, vault_authority_for
from repositories.clock import Clock
from repositories.ledger import AssetLedger
from repositories.sale_repository import SaleRepository

logger = logging.getLogger(__name__)


class SaleEngine:
    def __init__(self, sales: SaleRepository, ledger: AssetLedger, clock: Clock) -> None:
        self._sales = sales
        self._ledger = ledger
        self._clock = clock

    def _now(self, now: Optional[int]) -> int:
        return self._clock.current_time() if now is None else now

    def get_sale(self, asset: str) -> SaleConfig:
        sale = self._sales.get_sale(asset)
        if sale is None:
            raise SaleNotFound(f"No sale exists for asset {asset}")
        return sale

    def get_vault(self, asset: str) -> VaultRecord:
        vault = self._sales.get_vault(asset)
        if vault is None:
            raise SaleNotFound(f"No vault exists for asset {asset}")
        return vault

    def vault_balance(self, sale: SaleConfig) -> int:
        return self._ledger.asset_balance(sale.vault_reference, sale.asset)

    def create_sale(
        self,
        *,
        creator: str,
        asset: str,
        soft_cap: int,
        hard_cap: int,
        start_time: int,
        end_time: int,
        price_per_unit: int,
        deposit_amount: int,
        now: Optional[int] = None,
    ) -> SaleConfig:
        """
        Open a sale for `asset` and escrow `deposit_amount` units of it.

        Process:
        1. Validate caps, time window and price (SaleConfig.open)
        2. Validate the deposit is a non-zero amount
        3. Atomically: reject a second sale for the same asset, open the vault,
           move the deposit creator -> vault, write VaultRecord and SaleConfig

        Raises:
            InvalidCapRange, ZeroCap, InvalidTimeWindow, TimeInPast,
            AmountCannotBeZero, InvalidAmount, SaleAlreadyExists,
            InsufficientBalance (creator lacks the deposit)
        """

        current = self._now(now)

        sale = SaleConfig.open(
            creator=creator,
            asset=asset,
            soft_cap=soft_cap,
            hard_cap=hard_cap,
            start_time=start_time,
            end_time=end_time,
            price_per_unit=price_per_unit,
            now=current,
        )

        require_u64("deposit_amount", deposit_amount)
        if deposit_amount == 0:
            raise AmountCannotBeZero("Deposit amount cannot be zero")

        vault = VaultRecord(asset=asset, creator=creator, amount=deposit_amount)

        with self._ledger.atomic(), self._sales.atomic():
            if self._sales.get_sale(asset) is not None:
                raise SaleAlreadyExists(f"A sale already exists for asset {asset}")

            self._ledger.open_escrow(sale.vault_reference, asset, vault_authority_for(asset))
            self._ledger.asset_transfer(
                creator,
                asset,
                sale.vault_reference,
                creator,
                deposit_amount,
            )
            # Vault before sale: a partial flush may orphan a vault row but
            # never leaves a sale without its vault record.
            self._sales.save_vault(vault)
            self._sales.save_sale(sale)

        logger.info(
            "Sale created for %s by %s: hard_cap=%d price=%d deposit=%d window=[%d, %d]",
            asset,
            creator,
            hard_cap,
            price_per_unit,
            deposit_amount,
            start_time,
            end_time,
        )
        return sale

    def purchase(
        self,
        sale: SaleConfig,
        buyer: str,
        amount: int,
        now: Optional[int] = None,
    ) -> PurchaseReceipt:
        """
        Buy `amount` units from `sale` at its fixed price.

        Checks (first failure wins, nothing mutated), run under the same lock
        as the settlement:
        0. amount is an unsigned 64-bit int                 -> InvalidAmount
        1. start_time <= now <= end_time                    -> SaleNotActive
        2. amount > 0                                       -> AmountCannotBeZero
        3. amount * price_per_unit fits u64                 -> ArithmeticOverflow
        4. total_raised + amount fits u64                   -> ArithmeticOverflow
        5. total_raised + amount <= hard_cap                -> HardCapReached
        6. vault holds at least `amount`                    -> InsufficientInventory
        7. buyer holds at least the total cost              -> InsufficientFunds

        Then, as one unit: pay the creator, deliver tokens from the vault under
        its delegated authority, and commit the new total_raised.

        The stored record is authoritative: `sale` identifies the sale, but the
        running total is re-read so a stale instance cannot oversell.
        """

        current = self._now(now)

        try:
            # Checks run under the same lock as the settlement.
            with self._ledger.atomic(), self._sales.atomic():
                stored = self.get_sale(sale.asset)
                if stored.creator != sale.creator:
                    raise Unauthorized("Creator mismatch")

                quote = stored.quote_purchase(amount, current)

                if self.vault_balance(stored) < quote.amount:
                    raise InsufficientInventory()
                if self._ledger.native_balance(buyer) < quote.total_cost:
                    raise InsufficientFunds()

                self._ledger.native_transfer(buyer, stored.creator, quote.total_cost)
                self._ledger.asset_transfer(
                    stored.vault_reference,
                    stored.asset,
                    buyer,
                    vault_authority_for(stored.asset),
                    quote.amount,
                )
                self._sales.save_sale(stored.with_total_raised(quote.new_total_raised))

        except TokenPlatformError as e:
            logger.warning(
                "Purchase rejected for %s by %s (amount=%s): %s",
                sale.asset,
                buyer,
                amount,
                e.code,
            )
            raise

        logger.info(
            "Purchase successful: %d tokens for %d lamports (asset=%s, buyer=%s)",
            quote.amount,
            quote.total_cost,
            stored.asset,
            buyer,
        )

        return PurchaseReceipt(
            asset=stored.asset,
            buyer=buyer,
            creator=stored.creator,
            amount=quote.amount,
            total_cost=quote.total_cost,
            total_raised=quote.new_total_raised,
            purchased_at=current,
        )

    def purchase_by_asset(
        self,
        asset: str,
        buyer: str,
        amount: int,
        now: Optional[int] = None,
    ) -> PurchaseReceipt:
        return self.purchase(self.get_sale(asset), buyer, amount, now)


__all__ = ["SaleEngine"]
