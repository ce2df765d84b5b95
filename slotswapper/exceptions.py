"""
Domain exceptions and their HTTP rendering.

Every business failure raised by a service is a SlotSwapperException. The
handlers registered in main.py turn them into ``{"message": ..., "error": ...}``
bodies with the matching status code.
"""

import logging
from typing import Any, Optional

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class SlotSwapperException(Exception):
    """Base exception carrying a user-facing message and a machine code."""

    def __init__(
        self,
        message: str,
        code: str = "SLOTSWAPPER_ERROR",
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        result = {"message": self.message, "error": self.code}
        if self.details:
            result["details"] = self.details
        return result


class UnauthenticatedError(SlotSwapperException):
    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message=message, code="UNAUTHENTICATED", status_code=401)


class NotFoundError(SlotSwapperException):
    """Raised when a referenced event, swap request or notification is absent."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message=message, code="NOT_FOUND", status_code=404, details=details)


class ForbiddenError(SlotSwapperException):
    """Raised when the caller lacks the required relationship to a record."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message=message, code="FORBIDDEN", status_code=403, details=details)


class InvalidStateError(SlotSwapperException):
    """Raised when a precondition about a record's current status is violated."""

    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
        code: str = "INVALID_STATE",
    ):
        super().__init__(message=message, code=code, status_code=400, details=details)


class SelfSwapNotAllowedError(InvalidStateError):
    def __init__(self, details: Optional[dict[str, Any]] = None):
        super().__init__(
            message="Cannot swap with your own slot",
            details=details,
            code="SELF_SWAP_NOT_ALLOWED",
        )


class DuplicateRequestError(SlotSwapperException):
    """Raised when a pending swap request already covers the same pair of slots."""

    def __init__(self, details: Optional[dict[str, Any]] = None):
        super().__init__(
            message="Swap request already exists for these slots",
            code="DUPLICATE_REQUEST",
            status_code=409,
            details=details,
        )


class AlreadyProcessedError(SlotSwapperException):
    """Raised when a swap request has left PENDING before the call got to it."""

    def __init__(self, message: str = "Swap request already processed", details: Optional[dict[str, Any]] = None):
        super().__init__(message=message, code="ALREADY_PROCESSED", status_code=400, details=details)


class ValidationError(SlotSwapperException):
    """Raised on malformed input, distinct from InvalidStateError."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message=message, code="VALIDATION_ERROR", status_code=422, details=details)


class ConflictError(SlotSwapperException):
    def __init__(self, message: str):
        super().__init__(message=message, code="CONFLICT", status_code=409)


class StorageFailure(SlotSwapperException):
    """Unexpected persistence failure. The message never leaks driver detail."""

    def __init__(self):
        super().__init__(message="Server error", code="STORAGE_FAILURE", status_code=500)


async def slotswapper_exception_handler(request: Request, exc: SlotSwapperException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"❌ {request.method} {request.url.path} - {exc.code}")
    else:
        logger.info(f"ℹ️ {request.method} {request.url.path} - {exc.code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())
