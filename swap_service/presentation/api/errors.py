"""Error mapping: domain exceptions → HTTP responses.

Body format для всіх помилок:
    {"error": "<ErrorKind>", "message": "...", "details": {...}}
"""

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from swap_service.config import get_logger
from swap_service.domain.swaps.exceptions import (
    InvalidAddress,
    NoRoute,
    QuoteAlreadyUsed,
    QuoteExpired,
    QuoteNotFound,
    SwapError,
    TradeNotFound,
    TradePersistenceFailed,
    TradeStoreUnavailable,
    UpstreamRejected,
    UpstreamUnavailable,
    ValidationUnavailable,
)

logger = get_logger(__name__)

# Порядок не важливий: lookup по точному type, потім по MRO
SWAP_ERROR_STATUS: dict[type[SwapError], int] = {
    InvalidAddress: status.HTTP_400_BAD_REQUEST,
    QuoteExpired: status.HTTP_410_GONE,
    QuoteNotFound: status.HTTP_404_NOT_FOUND,
    QuoteAlreadyUsed: status.HTTP_409_CONFLICT,
    TradeNotFound: status.HTTP_404_NOT_FOUND,
    NoRoute: status.HTTP_404_NOT_FOUND,
    UpstreamRejected: status.HTTP_422_UNPROCESSABLE_ENTITY,
    UpstreamUnavailable: status.HTTP_502_BAD_GATEWAY,
    ValidationUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
    TradePersistenceFailed: status.HTTP_503_SERVICE_UNAVAILABLE,
    TradeStoreUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(exc: SwapError) -> int:
    """HTTP status для swap error (unknown subclass → 500)."""
    for cls in type(exc).__mro__:
        if cls in SWAP_ERROR_STATUS:
            return SWAP_ERROR_STATUS[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _error_body(error: str, message: str, details: dict | list | None = None) -> dict:
    return {"error": error, "message": message, "details": details or {}}


def _jsonable(context: dict) -> dict:
    return {
        key: value if value is None or isinstance(value, (str, int, float, bool)) else str(value)
        for key, value in context.items()
    }


async def swap_error_handler(request: Request, exc: SwapError) -> JSONResponse:
    """Handle swap domain errors."""
    status_code = status_for(exc)
    details = _jsonable(exc.context)
    reason = getattr(exc, "reason", None)
    if reason:
        details["reason"] = reason

    log = logger.warning if status_code >= 500 else logger.info
    log(
        "api.swap_error",
        path=request.url.path,
        error_type=type(exc).__name__,
        status_code=status_code,
        error=exc.message,
    )

    return JSONResponse(
        status_code=status_code,
        content=_error_body(type(exc).__name__, exc.message, details),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle Pydantic validation errors.

    Returns:
        JSONResponse з 422 status code + error details.
    """
    logger.warning(
        "api.validation_error",
        path=request.url.path,
        errors=exc.errors(),
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=_error_body(
            "ValidationError",
            "Request validation failed",
            [
                {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
                for err in exc.errors()
            ],
        ),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(
        "api.unhandled_exception",
        path=request.url.path,
        error=str(exc),
        error_type=type(exc).__name__,
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(
            "InternalServerError",
            "An unexpected error occurred. Please try again later.",
        ),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SwapError, swap_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
