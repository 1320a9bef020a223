"""Reusable error primitives for API exception handling."""

from __future__ import annotations

from fastapi import HTTPException, status
from fastapi.responses import JSONResponse

from ..exceptions import (
    AuthError,
    BatchFailed,
    BatchPartialFailure,
    Conflict,
    IntegrityViolation,
    NotFound,
    PreconditionFailed,
    SlotEngineError,
    StorageError,
    ValidationError,
)
from ..slots.slots_schemas import BatchReportResponse


_STATUS_BY_ERROR: tuple[tuple[type[SlotEngineError], int], ...] = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (AuthError, status.HTTP_401_UNAUTHORIZED),
    (NotFound, status.HTTP_404_NOT_FOUND),
    (PreconditionFailed, status.HTTP_409_CONFLICT),
    (Conflict, status.HTTP_409_CONFLICT),
    (IntegrityViolation, status.HTTP_409_CONFLICT),
    (BatchPartialFailure, status.HTTP_207_MULTI_STATUS),
    (BatchFailed, status.HTTP_409_CONFLICT),
    (StorageError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


def status_for(exc: SlotEngineError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def http_error(exc: SlotEngineError) -> HTTPException:
    """Return an :class:`HTTPException` carrying the specific rejection reason."""

    return HTTPException(
        status_code=status_for(exc),
        detail={
            "status": "error",
            "failure_reason": exc.code,
            "details": str(exc),
        },
    )


def batch_failure_response(exc: BatchPartialFailure | BatchFailed) -> JSONResponse:
    """Return the per-item report: 207 when some items committed, 409 when none did."""

    body = BatchReportResponse.from_domain(exc.report).model_dump(mode="json")
    return JSONResponse(status_code=status_for(exc), content=body)


__all__ = ["batch_failure_response", "http_error", "status_for"]
