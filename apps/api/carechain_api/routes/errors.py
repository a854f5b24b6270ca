"""Translate service errors into HTTP responses."""

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

from carechain_api.errors import (
    AuthorizationError,
    CareChainError,
    ChainForkError,
    InvalidStateError,
    NotFoundError,
    StorageError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Most specific first
STATUS_BY_ERROR = [
    (AuthorizationError, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ChainForkError, status.HTTP_409_CONFLICT),
    (StorageError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (InvalidStateError, status.HTTP_400_BAD_REQUEST),
]


def status_for(exc: CareChainError) -> int:
    """HTTP status code for a service error."""
    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def carechain_error_handler(request: Request, exc: CareChainError) -> JSONResponse:
    """Exception handler registered for CareChainError."""
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(f"Request failed: {exc}", extra={"path": request.url.path})
    return JSONResponse(status_code=status_code, content={"detail": exc.message})
