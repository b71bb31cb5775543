"""
Policy service: transfer-hook evaluation and owner administration.

PolicyEvaluator is the pre-transfer check every governed movement must pass.
It never writes anything. Gates run in a fixed order and the first failure is
reported:

1. Holding gate    (nft_gated)             -> MissingRequiredHolding
2. Trading window  (trading_time_enabled)  -> TradingClosed
3. Bounds          (max_transfer_enabled)  -> ExceedsMaxTransfer / BelowMinTransfer
4. Allow-list      (whitelist_enabled)     -> NotWhitelisted

PolicyAdmin groups the owner-only operations: registering a policy, toggling
gates, and granting/revoking allow-list markers.
"""

from __future__ import annotations

import logging
from typing import Optional

from domain.errors import (
    AccountMissing,
    MarkerAlreadyExists,
    MarkerNotFound,
    MissingRequiredHolding,
    NotWhitelisted,
    PolicyAlreadyExists,
    PolicyNotFound,
    PolicyViolation,
    Unauthorized,
)
from domain.policy import AllowListMarker, PolicyConfig, PolicyResult, TransferRequest
from repositories.clock import Clock
from repositories.holdings import HoldingStore
from repositories.policy_repository import PolicyRepository

logger = logging.getLogger(__name__)


class PolicyEvaluator:
    def __init__(self, policies: PolicyRepository, holdings: HoldingStore, clock: Clock) -> None:
        self._policies = policies
        self._holdings = holdings
        self._clock = clock

    def _check_holding(self, config: PolicyConfig, wallet: str) -> None:
        try:
            balance = self._holdings.holding_balance(wallet, config.gating_asset)
        except AccountMissing:
            raise MissingRequiredHolding() from None
        if balance == 0:
            raise MissingRequiredHolding()

    def evaluate(self, config: PolicyConfig, request: TransferRequest, now: int) -> PolicyResult:
        """
        Decide whether `request` may proceed under `config` at time `now`.

        Disabled gates pass vacuously; enabled gates are AND-combined.
        """

        if request.asset != config.asset:
            raise ValueError(
                f"Transfer of {request.asset} cannot be evaluated against the policy for {config.asset}"
            )

        try:
            if config.nft_gated:
                self._check_holding(config, request.wallet)

            if config.trading_time_enabled:
                config.check_trading_window(now)

            if config.max_transfer_enabled:
                config.check_bounds(request.amount)

            if config.whitelist_enabled and not self._policies.has_marker(request.asset, request.wallet):
                raise NotWhitelisted()

        except PolicyViolation as violation:
            return PolicyResult.failed(violation)

        return PolicyResult.passed()

    def check_transfer(
        self,
        asset: str,
        wallet: str,
        amount: int,
        now: Optional[int] = None,
    ) -> PolicyResult:
        """Load the asset's policy and evaluate a transfer against it."""

        config = self._policies.get_policy(asset)
        if config is None:
            raise PolicyNotFound(f"No transfer policy exists for asset {asset}")

        current = self._clock.current_time() if now is None else now
        result = self.evaluate(config, TransferRequest(asset=asset, wallet=wallet, amount=amount), current)

        if not result.allowed:
            logger.info(
                "Transfer blocked for %s from %s (amount=%d): %s",
                asset,
                wallet,
                amount,
                result.violation.code,
            )
        return result


class PolicyAdmin:
    def __init__(self, policies: PolicyRepository) -> None:
        self._policies = policies

    def get_policy(self, asset: str) -> PolicyConfig:
        config = self._policies.get_policy(asset)
        if config is None:
            raise PolicyNotFound(f"No transfer policy exists for asset {asset}")
        return config

    def _require_owner(self, caller: str, asset: str) -> PolicyConfig:
        config = self.get_policy(asset)
        if not config.is_owned_by(caller):
            logger.warning("Unauthorized policy change on %s attempted by %s", asset, caller)
            raise Unauthorized()
        return config

    def initialize_policy(
        self,
        *,
        owner: str,
        asset: str,
        gating_asset: str,
        open_minute: Optional[int] = None,
        close_minute: Optional[int] = None,
        max_transfer_amount: int = 0,
        min_transfer_amount: int = 0,
    ) -> PolicyConfig:
        """Register the transfer policy for `asset` with every gate disabled."""

        config = PolicyConfig.register(
            owner=owner,
            asset=asset,
            gating_asset=gating_asset,
            open_minute=open_minute,
            close_minute=close_minute,
            max_transfer_amount=max_transfer_amount,
            min_transfer_amount=min_transfer_amount,
        )

        with self._policies.atomic():
            if self._policies.get_policy(asset) is not None:
                raise PolicyAlreadyExists(f"A transfer policy already exists for asset {asset}")
            self._policies.save_policy(config)

        logger.info("Transfer policy registered for %s by %s", asset, owner)
        return config

    def update_flags(
        self,
        caller: str,
        asset: str,
        *,
        whitelist_enabled: bool,
        trading_time_enabled: bool,
        max_transfer_enabled: bool,
        nft_gated: bool,
    ) -> PolicyConfig:
        with self._policies.atomic():
            config = self._require_owner(caller, asset)
            updated = config.with_flags(
                whitelist_enabled=whitelist_enabled,
                trading_time_enabled=trading_time_enabled,
                max_transfer_enabled=max_transfer_enabled,
                nft_gated=nft_gated,
            )
            self._policies.save_policy(updated)
        logger.info(
            "Policy flags for %s: whitelist=%s trading_time=%s max_transfer=%s nft_gated=%s",
            asset,
            whitelist_enabled,
            trading_time_enabled,
            max_transfer_enabled,
            nft_gated,
        )
        return updated

    def grant(self, caller: str, asset: str, wallet: str) -> AllowListMarker:
        marker = AllowListMarker(asset=asset, wallet=wallet)

        with self._policies.atomic():
            self._require_owner(caller, asset)
            if self._policies.has_marker(asset, wallet):
                raise MarkerAlreadyExists(f"{wallet} is already allow-listed for {asset}")
            self._policies.add_marker(marker)

        logger.info("Allow-listed %s for %s", wallet, asset)
        return marker

    def revoke(self, caller: str, asset: str, wallet: str) -> None:
        with self._policies.atomic():
            self._require_owner(caller, asset)
            if not self._policies.remove_marker(asset, wallet):
                raise MarkerNotFound(f"{wallet} is not allow-listed for {asset}")
        logger.info("Removed %s from the allow-list for %s", wallet, asset)


__all__ = ["PolicyAdmin", "PolicyEvaluator"]
