"""
API Request and Response Models.

Pydantic models for validating API requests and serializing responses.
Unsigned amounts are bounded to the 64-bit range; minutes to [0, 1440).
"""

from typing import Optional

from pydantic import BaseModel, Field

from domain.amounts import U64_MAX
from domain.time import I64_MAX, I64_MIN, MINUTES_PER_DAY


# ============================================================================
# Sale Models
# ============================================================================

class CreateSaleRequest(BaseModel):
    """Request to open a token sale."""
    creator: str = Field(..., min_length=1, description="Identity of the asset creator")
    asset: str = Field(..., min_length=1, description="Asset (mint) being sold")
    soft_cap: int = Field(..., ge=0, le=U64_MAX)
    hard_cap: int = Field(..., ge=0, le=U64_MAX)
    start_time: int = Field(..., ge=I64_MIN, le=I64_MAX, description="Epoch seconds, inclusive")
    end_time: int = Field(..., ge=I64_MIN, le=I64_MAX, description="Epoch seconds, inclusive")
    price_per_unit: int = Field(..., ge=0, le=U64_MAX, description="Native units per token unit")
    deposit_amount: int = Field(..., ge=0, le=U64_MAX, description="Inventory escrowed in the vault")

    class Config:
        json_schema_extra = {
            "example": {
                "creator": "creator-wallet",
                "asset": "token-mint",
                "soft_cap": 500,
                "hard_cap": 1000,
                "start_time": 1767225600,
                "end_time": 1769904000,
                "price_per_unit": 10,
                "deposit_amount": 1000,
            }
        }


class SaleResponse(BaseModel):
    """Sale configuration, running total and derived status."""
    creator: str
    asset: str
    soft_cap: int
    hard_cap: int
    start_time: int
    end_time: int
    vault_reference: str
    price_per_unit: int
    total_raised: int
    phase: str  # "pending", "active" or "ended"
    soft_cap_reached: bool
    remaining_capacity: int
    vault_balance: int


class PurchaseRequest(BaseModel):
    """Request to buy tokens from a sale."""
    buyer: str = Field(..., min_length=1)
    amount: int = Field(..., ge=0, le=U64_MAX, description="Token units to buy")

    class Config:
        json_schema_extra = {
            "example": {
                "buyer": "buyer-wallet",
                "amount": 600
            }
        }


class PurchaseResponse(BaseModel):
    """Receipt for a settled purchase."""
    asset: str
    buyer: str
    creator: str
    amount: int
    total_cost: int
    total_raised: int
    purchased_at: int
    message: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "asset": "token-mint",
                "buyer": "buyer-wallet",
                "creator": "creator-wallet",
                "amount": 600,
                "total_cost": 6000,
                "total_raised": 600,
                "purchased_at": 1767229200,
                "message": "Purchase successful: 600 tokens for 6000 lamports"
            }
        }


# ============================================================================
# Policy Models
# ============================================================================

class CreatePolicyRequest(BaseModel):
    """Request to register the transfer policy of an asset (all gates start disabled)."""
    owner: str = Field(..., min_length=1)
    asset: str = Field(..., min_length=1)
    gating_asset: str = Field(..., min_length=1, description="Asset a sender must hold when nft_gated")
    open_minute: Optional[int] = Field(None, ge=0, lt=MINUTES_PER_DAY)
    close_minute: Optional[int] = Field(None, ge=0, lt=MINUTES_PER_DAY)
    max_transfer_amount: int = Field(0, ge=0, le=U64_MAX)
    min_transfer_amount: int = Field(0, ge=0, le=U64_MAX)

    class Config:
        json_schema_extra = {
            "example": {
                "owner": "owner-wallet",
                "asset": "token-mint",
                "gating_asset": "membership-nft-mint",
                "open_minute": 540,
                "close_minute": 1020,
                "max_transfer_amount": 500000000000,
                "min_transfer_amount": 1000000
            }
        }


class PolicyResponse(BaseModel):
    owner: str
    asset: str
    gating_asset: str
    whitelist_enabled: bool
    trading_time_enabled: bool
    max_transfer_enabled: bool
    nft_gated: bool
    open_minute: Optional[int] = None
    close_minute: Optional[int] = None
    max_transfer_amount: int
    min_transfer_amount: int


class UpdateFlagsRequest(BaseModel):
    """Owner-only toggle of the four gates."""
    caller: str = Field(..., min_length=1)
    whitelist_enabled: bool
    trading_time_enabled: bool
    max_transfer_enabled: bool
    nft_gated: bool


class WhitelistRequest(BaseModel):
    """Owner-only allow-list grant."""
    caller: str = Field(..., min_length=1)
    wallet: str = Field(..., min_length=1)


class WhitelistResponse(BaseModel):
    asset: str
    wallet: str
    whitelisted: bool


class TransferCheckRequest(BaseModel):
    """Pre-transfer policy check for a governed asset."""
    asset: str = Field(..., min_length=1)
    wallet: str = Field(..., min_length=1, description="Owner of the source account")
    amount: int = Field(..., ge=0, le=U64_MAX)
    now: Optional[int] = Field(None, ge=I64_MIN, le=I64_MAX, description="Override the clock (epoch seconds)")


class TransferCheckResponse(BaseModel):
    allowed: bool
    code: Optional[str] = None
    message: Optional[str] = None


# ============================================================================
# Ledger Models (development funding helpers)
# ============================================================================

class FundNativeRequest(BaseModel):
    wallet: str = Field(..., min_length=1)
    amount: int = Field(..., ge=0, le=U64_MAX)


class MintRequest(BaseModel):
    account: str = Field(..., min_length=1)
    asset: str = Field(..., min_length=1)
    amount: int = Field(..., ge=0, le=U64_MAX)


class HoldingRequest(BaseModel):
    wallet: str = Field(..., min_length=1)
    gating_asset: str = Field(..., min_length=1)
    amount: int = Field(..., ge=0, le=U64_MAX)


class BalanceResponse(BaseModel):
    account: str
    asset: Optional[str] = None  # None for native balances
    balance: int


# ============================================================================
# Error Models
# ============================================================================

class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    """Standard error response."""
    detail: ErrorDetail

    class Config:
        json_schema_extra = {
            "example": {
                "detail": {
                    "code": "HARD_CAP_REACHED",
                    "message": "Sale hard cap reached"
                }
            }
        }
