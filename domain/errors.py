"""
Domain: Error taxonomy.

Every failure a sale or policy operation can report is a subclass of
TokenPlatformError. Each concrete error carries a stable `code` (surfaced to
API callers) and a default human-readable message.

Kinds:
- ValidationError: bad creation input
- StateError: operation not allowed in the record's current state
- NotFoundError: referenced record does not exist
- AccountingError: checked u64 arithmetic overflowed
- AuthorizationError: caller identity does not match the stored owner/creator
- PolicyViolation: a transfer-policy gate failed
- ResourceError: an external balance or account is insufficient or missing

All errors are fatal to the enclosing operation.
"""

from __future__ import annotations

from typing import Optional


class TokenPlatformError(Exception):
    """Base class for all sale and transfer-policy errors."""

    code: str = "PLATFORM_ERROR"
    default_message: str = "Operation failed"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


# ============================================================================
# Kinds
# ============================================================================

class ValidationError(TokenPlatformError):
    code = "VALIDATION_ERROR"


class StateError(TokenPlatformError):
    code = "STATE_ERROR"


class NotFoundError(TokenPlatformError):
    code = "NOT_FOUND"


class AccountingError(TokenPlatformError):
    code = "ACCOUNTING_ERROR"


class AuthorizationError(TokenPlatformError):
    code = "AUTHORIZATION_ERROR"


class PolicyViolation(TokenPlatformError):
    code = "POLICY_VIOLATION"


class ResourceError(TokenPlatformError):
    code = "RESOURCE_ERROR"


# ============================================================================
# Validation
# ============================================================================

class InvalidCapRange(ValidationError):
    code = "INVALID_CAP_RANGE"
    default_message = "Soft cap cannot exceed hard cap"


class ZeroCap(ValidationError):
    code = "ZERO_CAP"
    default_message = "Hard cap cannot be zero"


class InvalidTimeWindow(ValidationError):
    code = "INVALID_TIME_WINDOW"
    default_message = "Start time must be before end time"


class TimeInPast(ValidationError):
    code = "TIME_IN_PAST"
    default_message = "End time cannot be in the past"


class AmountCannotBeZero(ValidationError):
    code = "AMOUNT_CANNOT_BE_ZERO"
    default_message = "Amount cannot be zero"


class InvalidAmount(ValidationError):
    code = "INVALID_AMOUNT"
    default_message = "Amount must be an unsigned 64-bit integer"


class InvalidMinute(ValidationError):
    code = "INVALID_MINUTE"
    default_message = "Minute of day must be in [0, 1440)"


# ============================================================================
# State
# ============================================================================

class SaleNotActive(StateError):
    code = "SALE_NOT_ACTIVE"
    default_message = "Sale is not active"


class HardCapReached(StateError):
    code = "HARD_CAP_REACHED"
    default_message = "Sale hard cap reached"


class SaleAlreadyExists(StateError):
    code = "SALE_ALREADY_EXISTS"
    default_message = "A sale already exists for this asset"


class PolicyAlreadyExists(StateError):
    code = "POLICY_ALREADY_EXISTS"
    default_message = "A transfer policy already exists for this asset"


class MarkerAlreadyExists(StateError):
    code = "MARKER_ALREADY_EXISTS"
    default_message = "Wallet is already on the allow-list"


# ============================================================================
# Not found
# ============================================================================

class SaleNotFound(NotFoundError):
    code = "SALE_NOT_FOUND"
    default_message = "No sale exists for this asset"


class PolicyNotFound(NotFoundError):
    code = "POLICY_NOT_FOUND"
    default_message = "No transfer policy exists for this asset"


class MarkerNotFound(NotFoundError):
    code = "MARKER_NOT_FOUND"
    default_message = "Wallet is not on the allow-list"


# ============================================================================
# Accounting / authorization
# ============================================================================

class ArithmeticOverflow(AccountingError):
    code = "ARITHMETIC_OVERFLOW"
    default_message = "Overflow"


class Unauthorized(AuthorizationError):
    code = "UNAUTHORIZED"
    default_message = "Unauthorized action"


# ============================================================================
# Policy violations
# ============================================================================

class MissingRequiredHolding(PolicyViolation):
    code = "MISSING_REQUIRED_HOLDING"
    default_message = "Sender does not hold the required gating asset"


class TradingClosed(PolicyViolation):
    code = "TRADING_CLOSED"
    default_message = "Trading is currently closed for this token"


class ExceedsMaxTransfer(PolicyViolation):
    code = "EXCEEDS_MAX_TRANSFER"
    default_message = "Transfer amount exceeds maximum limit"


class BelowMinTransfer(PolicyViolation):
    code = "BELOW_MIN_TRANSFER"
    default_message = "Transfer amount is below minimum limit"


class NotWhitelisted(PolicyViolation):
    code = "NOT_WHITELISTED"
    default_message = "Sender is not whitelisted"


# ============================================================================
# Resources
# ============================================================================

class InsufficientInventory(ResourceError):
    code = "INSUFFICIENT_INVENTORY"
    default_message = "Not enough tokens to sell"


class InsufficientFunds(ResourceError):
    code = "INSUFFICIENT_FUNDS"
    default_message = "Not enough native balance to buy tokens"


class InsufficientBalance(ResourceError):
    code = "INSUFFICIENT_BALANCE"
    default_message = "Insufficient balance for transfer"


class AccountMissing(ResourceError):
    code = "ACCOUNT_MISSING"
    default_message = "Account does not exist"


__all__ = [
    "TokenPlatformError",
    "ValidationError",
    "StateError",
    "NotFoundError",
    "AccountingError",
    "AuthorizationError",
    "PolicyViolation",
    "ResourceError",
    "InvalidCapRange",
    "ZeroCap",
    "InvalidTimeWindow",
    "TimeInPast",
    "AmountCannotBeZero",
    "InvalidAmount",
    "InvalidMinute",
    "SaleNotActive",
    "HardCapReached",
    "SaleAlreadyExists",
    "PolicyAlreadyExists",
    "MarkerAlreadyExists",
    "SaleNotFound",
    "PolicyNotFound",
    "MarkerNotFound",
    "ArithmeticOverflow",
    "Unauthorized",
    "MissingRequiredHolding",
    "TradingClosed",
    "ExceedsMaxTransfer",
    "BelowMinTransfer",
    "NotWhitelisted",
    "InsufficientInventory",
    "InsufficientFunds",
    "InsufficientBalance",
    "AccountMissing",
]
