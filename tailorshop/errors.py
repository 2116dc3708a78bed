"""
Error taxonomy. Every error is recoverable at the request level: the handler
reports the message and nothing is persisted.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ShopError(Exception):
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(ShopError):
    """Malformed or missing field, bad enum value."""
    status_code = 400


class NotFoundError(ShopError):
    """Entity absent or owned by another shop. The two cases are reported identically."""
    status_code = 404


class ConflictError(ShopError):
    """Uniqueness violation: phone, username, item name, order number, shop code."""
    status_code = 409


class StateError(ShopError):
    """Operation not allowed in the order's current state."""
    status_code = 409


class NoPendingApprovalError(StateError):
    def __init__(self, message: str = "Order has no pending approval"):
        super().__init__(message)


class InvalidValueError(StateError):
    status_code = 400


class AuthError(ShopError):
    status_code = 401


async def shop_error_handler(request: Request, exc: ShopError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Server error"})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ShopError, shop_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
