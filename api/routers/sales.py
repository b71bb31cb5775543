"""
Sales API Endpoints.

Endpoints for opening token sales, inspecting them and buying from them.
"""

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_platform
from api.errors import to_http_exception
from api.models import CreateSaleRequest, PurchaseRequest, PurchaseResponse, SaleResponse
from domain.errors import TokenPlatformError
from domain.sale import SaleConfig
from services.platform import Platform

router = APIRouter()


def _sale_response(platform: Platform, sale: SaleConfig) -> SaleResponse:
    now = platform.clock.current_time()
    return SaleResponse(
        creator=sale.creator,
        asset=sale.asset,
        soft_cap=sale.soft_cap,
        hard_cap=sale.hard_cap,
        start_time=sale.start_time,
        end_time=sale.end_time,
        vault_reference=sale.vault_reference,
        price_per_unit=sale.price_per_unit,
        total_raised=sale.total_raised,
        phase=sale.phase(now).value,
        soft_cap_reached=sale.soft_cap_reached,
        remaining_capacity=sale.remaining_capacity,
        vault_balance=platform.sales.vault_balance(sale),
    )


@router.post(
    "/sales",
    response_model=SaleResponse,
    status_code=201,
    summary="Create Sale",
    description="Open a token sale and escrow its inventory in the sale vault."
)
def create_sale(request: CreateSaleRequest, platform: Platform = Depends(get_platform)):
    """
    Open a token sale for an asset.

    **Validation:**
    - `soft_cap` must not exceed `hard_cap`, and `hard_cap` must be non-zero
    - `start_time` must be before `end_time`, and `end_time` must be in the future
    - `deposit_amount` must be non-zero; it moves from the creator to the vault

    Only one sale may exist per asset.
    """
    try:
        sale = platform.sales.create_sale(
            creator=request.creator,
            asset=request.asset,
            soft_cap=request.soft_cap,
            hard_cap=request.hard_cap,
            start_time=request.start_time,
            end_time=request.end_time,
            price_per_unit=request.price_per_unit,
            deposit_amount=request.deposit_amount,
        )
        return _sale_response(platform, sale)

    except TokenPlatformError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to create sale: {str(e)}"
        )


@router.get(
    "/sales/{asset}",
    response_model=SaleResponse,
    summary="Get Sale",
    description="Sale configuration, total raised and current phase."
)
def get_sale(asset: str, platform: Platform = Depends(get_platform)):
    try:
        return _sale_response(platform, platform.sales.get_sale(asset))

    except TokenPlatformError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch sale: {str(e)}"
        )


@router.post(
    "/sales/{asset}/purchases",
    response_model=PurchaseResponse,
    summary="Purchase Tokens",
    description="Pay the creator in native units and receive tokens from the sale vault."
)
def purchase_tokens(asset: str, request: PurchaseRequest, platform: Platform = Depends(get_platform)):
    """
    Buy tokens from an active sale.

    **Settlement (all-or-nothing):**
    1. Payment of `amount * price_per_unit` moves buyer -> creator
    2. `amount` tokens move vault -> buyer
    3. `total_raised` is updated only after both transfers succeed

    **Rejections:**
    - Outside the sale window: `SALE_NOT_ACTIVE`
    - Would exceed the hard cap: `HARD_CAP_REACHED`
    - Vault or buyer short of balance: `INSUFFICIENT_INVENTORY` / `INSUFFICIENT_FUNDS`
    """
    try:
        receipt = platform.sales.purchase_by_asset(asset, request.buyer, request.amount)

        return PurchaseResponse(
            asset=receipt.asset,
            buyer=receipt.buyer,
            creator=receipt.creator,
            amount=receipt.amount,
            total_cost=receipt.total_cost,
            total_raised=receipt.total_raised,
            purchased_at=receipt.purchased_at,
            message=f"Purchase successful: {receipt.amount} tokens for {receipt.total_cost} lamports",
        )

    except TokenPlatformError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to execute purchase: {str(e)}"
        )
