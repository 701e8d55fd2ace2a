"""
Error taxonomy and JSON error responses.

Every error leaves the API as ``{"error": "<message>"}``; request validation
failures also carry ``details`` with one entry per offending field.

    400  validation, bad upload, bad contract address
    401  missing/invalid token, nonce or signature mismatch
    403  mutation of someone else's record
    404  missing entity or route
    409  uniqueness violation
    502  contract call reverted or ABI mismatch
    503  blockchain not configured or node unreachable
    500  anything else (logged, generic message)
"""

import logging
from typing import Any, Dict, List

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class BlockchainError(Exception):
    """Base for on-chain read failures; ``public_message`` is safe to return."""

    status_code: int = status.HTTP_502_BAD_GATEWAY
    public_message: str = "Failed to fetch on-chain data"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.public_message)


class BlockchainNotConfigured(BlockchainError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    public_message = "Blockchain features are not configured"


class BlockchainUnavailable(BlockchainError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    public_message = "Blockchain node unavailable"


class InvalidContractAddress(BlockchainError):
    status_code = status.HTTP_400_BAD_REQUEST
    public_message = "Invalid contract address"


class ContractCallFailed(BlockchainError):
    status_code = status.HTTP_502_BAD_GATEWAY
    public_message = "Failed to fetch on-chain data"


def error_body(message: str, **extra: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {"error": message}
    body.update(extra)
    return body


def _validation_details(exc: RequestValidationError) -> List[Dict[str, str]]:
    details = []
    for err in exc.errors():
        # loc looks like ("body", "title") or ("query", "limit")
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        message = str(err.get("msg", "Invalid value"))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        details.append({"field": ".".join(loc), "message": message})
    return details


ROUTE_NOT_FOUND = "Route not found"


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = str(exc.detail)
    # the router raises a bare 404 (detail is the status phrase) when no route matches
    if exc.status_code == status.HTTP_404_NOT_FOUND and message == "Not Found":
        message = ROUTE_NOT_FOUND
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(message),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Validation error", details=_validation_details(exc)),
    )


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content=error_body("Duplicate entry"),
    )


async def blockchain_error_handler(request: Request, exc: BlockchainError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.public_message),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Internal server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(BlockchainError, blockchain_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
