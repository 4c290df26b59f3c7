"""Swap API routes - rates, trade creation, status, address validation."""

import logging
from decimal import Decimal

from fastapi import APIRouter, Query, status

from swap_service.application.swaps.commands import CreateTradeCommand
from swap_service.application.swaps.queries import (
    GetRatesQuery,
    GetTradeStatusQuery,
    ValidateAddressQuery,
)
from swap_service.domain.swaps.value_objects import RateType
from swap_service.presentation.api.dependencies import (
    CreateTradeHandlerDep,
    GetRatesHandlerDep,
    GetTradeStatusHandlerDep,
    Owner,
    ValidateAddressHandlerDep,
)
from swap_service.presentation.api.v1.schemas import (
    AddressValidationResponse,
    CreateTradeRequest,
    ErrorResponse,
    QuoteResponse,
    RatesResponse,
    TradeResponse,
    ValidateAddressRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/swap", tags=["Swap"])


# ============================================================================
# RATES
# ============================================================================


@router.get(
    "/rates",
    response_model=RatesResponse,
    summary="Get swap rates",
    description="""
    Query every provider for the pair and return quotes sorted by output
    amount (best first). Each quote carries a `quote_token` valid until
    `expires_at`.

    **Returns**:
    - 200: Quotes
    - 404: No provider offers a route (NoRoute)
    - 502: Aggregator unavailable
    """,
    responses={
        404: {"model": ErrorResponse, "description": "No route"},
        502: {"model": ErrorResponse, "description": "Aggregator unavailable"},
    },
)
async def get_rates(
    handler: GetRatesHandlerDep,
    from_asset: str = Query(..., alias="from", min_length=1, description="Source ticker"),
    to_asset: str = Query(..., alias="to", min_length=1, description="Destination ticker"),
    amount: Decimal = Query(..., gt=0, description="Amount of source asset"),
    network_from: str = Query(..., min_length=1),
    network_to: str = Query(..., min_length=1),
    rate_type: RateType = Query(default=RateType.FLOATING),
) -> RatesResponse:
    quotes = await handler.handle(
        GetRatesQuery(
            from_asset=from_asset,
            to_asset=to_asset,
            amount=amount,
            network_from=network_from,
            network_to=network_to,
            rate_type=rate_type,
        )
    )
    return RatesResponse(quotes=[QuoteResponse.from_dto(q) for q in quotes])


# ============================================================================
# CREATE TRADE
# ============================================================================


@router.post(
    "/create",
    response_model=TradeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create swap trade from quote",
    description="""
    Bind a quote to a new trade.

    **Flow**:
    1. Validate destination address (quote stays usable on failure)
    2. Consume quote (exactly once)
    3. Create upstream trade
    4. Persist trade in `created` status

    **Returns**:
    - 201: Trade created, `deposit_address` set
    - 400: Invalid destination address
    - 404: Unknown quote token
    - 409: Quote already used
    - 410: Quote expired
    - 422: Upstream rejected the trade
    - 502: Aggregator unavailable
    - 503: Address validation unavailable / trade not recorded
    """,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid address"},
        404: {"model": ErrorResponse, "description": "Quote not found"},
        409: {"model": ErrorResponse, "description": "Quote already used"},
        410: {"model": ErrorResponse, "description": "Quote expired"},
        422: {"model": ErrorResponse, "description": "Upstream rejected"},
        502: {"model": ErrorResponse, "description": "Aggregator unavailable"},
        503: {"model": ErrorResponse, "description": "Validation or persistence unavailable"},
    },
)
async def create_trade(
    request: CreateTradeRequest,
    owner: Owner,
    handler: CreateTradeHandlerDep,
) -> TradeResponse:
    logger.info(
        "api.create_trade.started",
        extra={"quote_token": request.quote_token, "owner": owner},
    )

    trade_dto = await handler.handle(
        CreateTradeCommand(
            quote_token=request.quote_token,
            address=request.address,
            refund_address=request.refund_address,
            owner=owner,
            address_extra_id=request.address_extra_id,
            refund_extra_id=request.refund_extra_id,
        )
    )

    logger.info(
        "api.create_trade.success",
        extra={"trade_id": trade_dto.trade_id, "status": trade_dto.status},
    )
    return TradeResponse.from_dto(trade_dto)


# ============================================================================
# VALIDATE ADDRESS
# ============================================================================


@router.post(
    "/validate",
    response_model=AddressValidationResponse,
    summary="Validate address for asset/network",
    responses={
        503: {"model": ErrorResponse, "description": "Validation unavailable"},
    },
)
async def validate_address(
    request: ValidateAddressRequest,
    handler: ValidateAddressHandlerDep,
) -> AddressValidationResponse:
    result = await handler.handle(
        ValidateAddressQuery(
            address=request.address,
            asset=request.asset,
            network=request.network,
        )
    )
    return AddressValidationResponse(valid=result.valid, reason=result.reason)


# ============================================================================
# TRADE STATUS
# ============================================================================


@router.get(
    "/{trade_id}",
    response_model=TradeResponse,
    summary="Get trade status",
    description="""
    Current view of a trade. Non-terminal trades not checked within the
    refresh threshold are re-polled upstream before responding.

    `is_stale=true` means the refreshed status could not be stored and the
    last recorded status is returned.
    """,
    responses={
        404: {"model": ErrorResponse, "description": "Trade not found"},
        502: {"model": ErrorResponse, "description": "Aggregator unavailable"},
    },
)
async def get_trade_status(
    trade_id: str,
    handler: GetTradeStatusHandlerDep,
) -> TradeResponse:
    trade_dto = await handler.handle(GetTradeStatusQuery(trade_id=trade_id))
    return TradeResponse.from_dto(trade_dto)
