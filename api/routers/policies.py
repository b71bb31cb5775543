"""
Policies API Endpoints.

Endpoints for registering transfer policies, toggling their gates, managing
allow-lists and running the pre-transfer check.
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import get_platform
from api.errors import to_http_exception
from api.models import (
    CreatePolicyRequest,
    PolicyResponse,
    TransferCheckRequest,
    TransferCheckResponse,
    UpdateFlagsRequest,
    WhitelistRequest,
    WhitelistResponse,
)
from domain.errors import TokenPlatformError
from domain.policy import PolicyConfig
from services.platform import Platform

router = APIRouter()


def _policy_response(config: PolicyConfig) -> PolicyResponse:
    return PolicyResponse(
        owner=config.owner,
        asset=config.asset,
        gating_asset=config.gating_asset,
        whitelist_enabled=config.whitelist_enabled,
        trading_time_enabled=config.trading_time_enabled,
        max_transfer_enabled=config.max_transfer_enabled,
        nft_gated=config.nft_gated,
        open_minute=config.open_minute,
        close_minute=config.close_minute,
        max_transfer_amount=config.max_transfer_amount,
        min_transfer_amount=config.min_transfer_amount,
    )


@router.post(
    "/policies",
    response_model=PolicyResponse,
    status_code=201,
    summary="Register Transfer Policy",
    description="Register the transfer policy of an asset. Every gate starts disabled."
)
def create_policy(request: CreatePolicyRequest, platform: Platform = Depends(get_platform)):
    try:
        config = platform.policy_admin.initialize_policy(
            owner=request.owner,
            asset=request.asset,
            gating_asset=request.gating_asset,
            open_minute=request.open_minute,
            close_minute=request.close_minute,
            max_transfer_amount=request.max_transfer_amount,
            min_transfer_amount=request.min_transfer_amount,
        )
        return _policy_response(config)

    except TokenPlatformError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to register policy: {str(e)}"
        )


@router.get(
    "/policies/{asset}",
    response_model=PolicyResponse,
    summary="Get Transfer Policy"
)
def get_policy(asset: str, platform: Platform = Depends(get_platform)):
    try:
        return _policy_response(platform.policy_admin.get_policy(asset))

    except TokenPlatformError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch policy: {str(e)}"
        )


@router.put(
    "/policies/{asset}/flags",
    response_model=PolicyResponse,
    summary="Update Policy Gates",
    description="Owner-only. Enables or disables each of the four gates."
)
def update_flags(asset: str, request: UpdateFlagsRequest, platform: Platform = Depends(get_platform)):
    try:
        config = platform.policy_admin.update_flags(
            request.caller,
            asset,
            whitelist_enabled=request.whitelist_enabled,
            trading_time_enabled=request.trading_time_enabled,
            max_transfer_enabled=request.max_transfer_enabled,
            nft_gated=request.nft_gated,
        )
        return _policy_response(config)

    except TokenPlatformError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to update policy flags: {str(e)}"
        )


@router.post(
    "/policies/{asset}/whitelist",
    response_model=WhitelistResponse,
    status_code=201,
    summary="Allow-list Wallet",
    description="Owner-only. Grants a wallet permission to transfer the asset."
)
def add_to_whitelist(asset: str, request: WhitelistRequest, platform: Platform = Depends(get_platform)):
    try:
        marker = platform.policy_admin.grant(request.caller, asset, request.wallet)
        return WhitelistResponse(asset=marker.asset, wallet=marker.wallet, whitelisted=True)

    except TokenPlatformError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to allow-list wallet: {str(e)}"
        )


@router.delete(
    "/policies/{asset}/whitelist/{wallet}",
    response_model=WhitelistResponse,
    summary="Revoke Allow-list Entry",
    description="Owner-only. Removes a wallet from the allow-list."
)
def remove_from_whitelist(
    asset: str,
    wallet: str,
    caller: str = Query(..., min_length=1, description="Identity requesting the change"),
    platform: Platform = Depends(get_platform),
):
    try:
        platform.policy_admin.revoke(caller, asset, wallet)
        return WhitelistResponse(asset=asset, wallet=wallet, whitelisted=False)

    except TokenPlatformError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to revoke allow-list entry: {str(e)}"
        )


@router.post(
    "/transfers/check",
    response_model=TransferCheckResponse,
    summary="Check Transfer",
    description="Evaluate a proposed transfer against the asset's policy. Never changes state."
)
def check_transfer(request: TransferCheckRequest, platform: Platform = Depends(get_platform)):
    """
    Run the transfer hook for a proposed transfer.

    A blocked transfer is a normal response with `allowed: false` and the code of
    the first failing gate (`MISSING_REQUIRED_HOLDING`, `TRADING_CLOSED`,
    `EXCEEDS_MAX_TRANSFER`, `BELOW_MIN_TRANSFER` or `NOT_WHITELISTED`).
    """
    try:
        result = platform.policy_evaluator.check_transfer(
            request.asset,
            request.wallet,
            request.amount,
            now=request.now,
        )
        if result.allowed:
            return TransferCheckResponse(allowed=True)
        return TransferCheckResponse(
            allowed=False,
            code=result.violation.code,
            message=result.violation.message,
        )

    except TokenPlatformError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to evaluate transfer: {str(e)}"
        )
