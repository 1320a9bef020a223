"""Domain level exceptions and helpers for the slot engine."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator

from sqlalchemy import exc as sa_exc

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .slots.slots_batch import BatchReport

__all__ = [
    "SlotEngineError",
    "ValidationError",
    "PreconditionFailed",
    "Conflict",
    "NotFound",
    "AuthError",
    "StorageError",
    "BatchPartialFailure",
    "BatchFailed",
    "IntegrityViolation",
    "handle_sqlalchemy_errors",
]


class SlotEngineError(Exception):
    """Base class for slot engine errors."""

    code = "engine_error"


class ValidationError(SlotEngineError):
    """Raised when an operation receives malformed input."""

    code = "validation_error"


class PreconditionFailed(SlotEngineError):
    """Raised when an event is not legal from the slot's current state."""

    code = "precondition_failed"

    def __init__(
        self,
        message: str,
        *,
        slot_id: int | None = None,
        event: str | None = None,
        slot_status: str | None = None,
        draft_status: str | None = None,
    ) -> None:
        super().__init__(message)
        self.slot_id = slot_id
        self.event = event
        self.slot_status = slot_status
        self.draft_status = draft_status


class Conflict(SlotEngineError):
    """Raised when a conditional write lost the race for the version token."""

    code = "conflict"

    def __init__(self, message: str, *, slot_id: int | None = None) -> None:
        super().__init__(message)
        self.slot_id = slot_id


class NotFound(SlotEngineError):
    """Raised when a slot id is unknown."""

    code = "not_found"


class AuthError(SlotEngineError):
    """Raised when the reconciler trigger is called with a bad or missing key."""

    code = "unauthorized"


class StorageError(SlotEngineError):
    """Raised for transient persistence faults (I/O errors, timeouts)."""

    code = "storage_error"


class IntegrityViolation(SlotEngineError):
    """Raised when the database rejects a write on a constraint; never retried."""

    code = "integrity_error"


class BatchPartialFailure(SlotEngineError):
    """Raised when some items of a batch failed while others succeeded."""

    code = "batch_partial_failure"

    def __init__(self, report: "BatchReport") -> None:
        super().__init__(
            f"{report.operation}: {report.failed} of {report.total} items failed"
        )
        self.report = report


class BatchFailed(SlotEngineError):
    """Raised when no item of a batch succeeded."""

    code = "batch_failed"

    def __init__(self, report: "BatchReport") -> None:
        super().__init__(f"{report.operation}: all {report.failed} attempted items failed")
        self.report = report


@dataclass(slots=True)
class _EntityContext:
    """Internal helper describing the entity for error messages."""

    entity: str | None = None

    def format(self, message: str) -> str:
        if self.entity:
            return f"{self.entity}: {message}"
        return message


def _translate_sqlalchemy_error(exc: Exception, *, context: _EntityContext) -> SlotEngineError:
    if isinstance(exc, sa_exc.IntegrityError):
        return IntegrityViolation(context.format(f"integrity constraint violated: {exc.orig}"))
    if isinstance(exc, sa_exc.OperationalError):
        return StorageError(context.format(f"database unavailable or timed out: {exc.orig}"))
    if isinstance(exc, sa_exc.TimeoutError):
        return StorageError(context.format("connection pool timed out"))
    return StorageError(context.format("database operation failed"))


@contextmanager
def handle_sqlalchemy_errors(*, entity: str | None = None) -> Iterator[None]:
    """Translate SQLAlchemy errors into :class:`StorageError` or :class:`IntegrityViolation`."""

    context = _EntityContext(entity)
    try:
        yield
    except (sa_exc.DBAPIError, sa_exc.TimeoutError) as exc:
        raise _translate_sqlalchemy_error(exc, context=context) from exc
