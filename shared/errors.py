"""
Typed error taxonomy shared by every service.

Services raise MarketplaceError subclasses; the handlers registered by
register_exception_handlers() turn them (and FastAPI's own HTTP and
validation errors) into the JSON envelope {"error": ..., "code": ...}.
"""
from enum import Enum
from typing import Optional

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

logger = structlog.get_logger(__name__)


class ErrorCode(str, Enum):
    UNAUTHORIZED = "unauthorized"
    IDENTITY_NOT_FOUND = "identity_not_found"
    FORBIDDEN = "forbidden"
    VALIDATION_ERROR = "validation_error"
    INSUFFICIENT_STOCK = "insufficient_stock"
    STOCK_CONFLICT = "stock_conflict"
    NOT_FOUND = "not_found"
    INVALID_STATUS_TRANSITION = "invalid_status_transition"
    CONFLICT = "conflict"
    RATE_LIMITED = "rate_limited"
    PERSISTENCE_ERROR = "persistence_error"
    INTERNAL_ERROR = "internal_error"


class MarketplaceError(Exception):
    """Base exception for all marketplace errors."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_payload(self) -> dict:
        return {"error": self.message, "code": self.code.value}


class AuthenticationError(MarketplaceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = ErrorCode.UNAUTHORIZED

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class IdentityNotFoundError(MarketplaceError):
    status_code = status.HTTP_404_NOT_FOUND
    code = ErrorCode.IDENTITY_NOT_FOUND

    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class PermissionDeniedError(MarketplaceError):
    status_code = status.HTTP_403_FORBIDDEN
    code = ErrorCode.FORBIDDEN


class ValidationFailedError(MarketplaceError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = ErrorCode.VALIDATION_ERROR


class InsufficientStockError(MarketplaceError):
    """Raised before any write when a requested quantity exceeds stock."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = ErrorCode.INSUFFICIENT_STOCK

    def __init__(self, product_name: Optional[str], available: int):
        self.product_name = product_name
        self.available = available
        super().__init__(
            f"Insufficient stock for {product_name or 'product'}. Only {available} available."
        )


class StockConflictError(MarketplaceError):
    """Raised when the conditional decrement loses a race with another order."""

    status_code = status.HTTP_409_CONFLICT
    code = ErrorCode.STOCK_CONFLICT

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(
            f"Insufficient stock for product {product_id}: stock changed while placing the order"
        )


class NotFoundError(MarketplaceError):
    status_code = status.HTTP_404_NOT_FOUND
    code = ErrorCode.NOT_FOUND


class ConflictError(MarketplaceError):
    status_code = status.HTTP_409_CONFLICT
    code = ErrorCode.CONFLICT


class InvalidStatusTransitionError(MarketplaceError):
    status_code = status.HTTP_409_CONFLICT
    code = ErrorCode.INVALID_STATUS_TRANSITION

    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot change order status from '{current}' to '{requested}'")


class PersistenceError(MarketplaceError):
    """Wraps a store failure; keeps the store's message and code when available."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = ErrorCode.PERSISTENCE_ERROR

    def __init__(self, message: str, details: Optional[str] = None, store_code: Optional[str] = None):
        self.details = details
        self.store_code = store_code
        super().__init__(message)

    def to_payload(self) -> dict:
        payload = super().to_payload()
        if self.details:
            payload["details"] = self.details
        if self.store_code:
            payload["store_code"] = self.store_code
        return payload


class NotificationError(MarketplaceError):
    """Delivery failure of a best-effort notification. Never reaches a client."""


_HTTP_CODES = {
    400: ErrorCode.VALIDATION_ERROR,
    401: ErrorCode.UNAUTHORIZED,
    403: ErrorCode.FORBIDDEN,
    404: ErrorCode.NOT_FOUND,
    409: ErrorCode.CONFLICT,
    429: ErrorCode.RATE_LIMITED,
}


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if any(err.get("type") == "missing" for err in errors):
        return "Missing required fields"
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return f"Invalid value for {location}: {message}" if location else message


async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    if exc.status_code >= 500:
        logger.error("request.failed", path=request.url.path, error=exc.message, code=exc.code.value)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def http_exception_handler(request: Request, exc: HTTPException):
    code = _HTTP_CODES.get(exc.status_code, ErrorCode.INTERNAL_ERROR)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail), "code": code.value},
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": _describe_validation_error(exc), "code": ErrorCode.VALIDATION_ERROR.value},
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("request.unhandled_error", path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error", "code": ErrorCode.INTERNAL_ERROR.value},
    )


def register_exception_handlers(app: FastAPI):
    app.add_exception_handler(MarketplaceError, marketplace_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
