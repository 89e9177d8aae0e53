import structlog
from django.db import DatabaseError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from ..domain.errors import (
    ConflictError,
    InvalidArgumentError,
    InvalidStateError,
    NotFoundError,
    SchedulingError,
    UnauthorizedError,
)

logger = structlog.get_logger()

STATUS_BY_ERROR = {
    UnauthorizedError: status.HTTP_401_UNAUTHORIZED,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InvalidArgumentError: status.HTTP_400_BAD_REQUEST,
    InvalidStateError: status.HTTP_409_CONFLICT,
    ConflictError: status.HTTP_409_CONFLICT,
}


def exception_handler(exc, context):
    """DRF exception handler that also understands scheduling and database errors."""
    request = context.get("request")
    path = request.path if request is not None else None

    if isinstance(exc, SchedulingError):
        status_code = STATUS_BY_ERROR.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
        logger.warning(
            "scheduling_error",
            path=path,
            error=type(exc).__name__,
            detail=str(exc),
            status=status_code,
        )
        body = {"detail": str(exc), "code": exc.code}
        if exc.retryable:
            body["retryable"] = True
        return Response(body, status=status_code)

    if isinstance(exc, DatabaseError):
        logger.error("database_unavailable", path=path, exc_info=exc)
        return Response(
            {"detail": "Storage is temporarily unavailable, please try again", "code": "UNAVAILABLE"},
            status=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    return drf_exception_handler(exc, context)
