"""Translation of the domain error taxonomy into HTTP responses."""

from __future__ import annotations

import structlog
from rest_framework import status
from rest_framework.response import Response

from modules.core.exceptions import (
    AuthorizationError,
    ConflictError,
    DomainError,
    InvalidRequest,
    NotFound,
)

logger = structlog.get_logger(__name__)

_STATUS_BY_ERROR = (
    (NotFound, status.HTTP_404_NOT_FOUND),
    (InvalidRequest, status.HTTP_400_BAD_REQUEST),
    (ConflictError, status.HTTP_409_CONFLICT),
    (AuthorizationError, status.HTTP_403_FORBIDDEN),
)


def domain_error_response(exc: DomainError) -> Response:
    """Build the response for a domain error raised by a service."""
    for error_class, http_status in _STATUS_BY_ERROR:
        if isinstance(exc, error_class):
            break
    else:
        http_status = status.HTTP_400_BAD_REQUEST

    logger.info(
        "api.domain_error",
        error=exc.__class__.__name__,
        detail=str(exc),
        status_code=http_status,
    )
    return Response(
        {"detail": str(exc), "code": exc.__class__.__name__},
        status=http_status,
    )
