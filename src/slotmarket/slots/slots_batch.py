"""Per-item outcomes for batched slot operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Protocol

import structlog

from ..exceptions import BatchFailed, BatchPartialFailure, SlotEngineError, ValidationError
from .slots_models import Slot


logger = structlog.get_logger(__name__)


class CancellationToken(Protocol):
    """Anything exposing ``is_set()``, e.g. :class:`threading.Event`."""

    def is_set(self) -> bool: ...


class BatchOutcomeStatus(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    SKIPPED = "skipped"


@dataclass(frozen=True, slots=True)
class BatchOutcome:
    slot_id: int
    status: BatchOutcomeStatus
    slot: Slot | None = None
    failure_reason: str | None = None
    details: str | None = None

    @classmethod
    def success(cls, slot: Slot) -> "BatchOutcome":
        return cls(slot_id=slot.id, status=BatchOutcomeStatus.SUCCESS, slot=slot)

    @classmethod
    def failure(cls, slot_id: int, error: SlotEngineError) -> "BatchOutcome":
        return cls(
            slot_id=slot_id,
            status=BatchOutcomeStatus.FAILURE,
            failure_reason=error.code,
            details=str(error),
        )

    @classmethod
    def crashed(cls, slot_id: int, error: Exception) -> "BatchOutcome":
        return cls(
            slot_id=slot_id,
            status=BatchOutcomeStatus.FAILURE,
            failure_reason="internal_error",
            details=str(error),
        )

    @classmethod
    def skipped(cls, slot_id: int) -> "BatchOutcome":
        return cls(
            slot_id=slot_id,
            status=BatchOutcomeStatus.SKIPPED,
            failure_reason="cancelled",
        )


@dataclass(slots=True)
class BatchReport:
    operation: str
    outcomes: list[BatchOutcome] = field(default_factory=list)
    cancelled: bool = False

    @property
    def total(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return self._count(BatchOutcomeStatus.SUCCESS)

    @property
    def failed(self) -> int:
        return self._count(BatchOutcomeStatus.FAILURE)

    @property
    def skipped(self) -> int:
        return self._count(BatchOutcomeStatus.SKIPPED)

    @property
    def has_failures(self) -> bool:
        return self.failed > 0

    def outcome_for(self, slot_id: int) -> BatchOutcome:
        for outcome in self.outcomes:
            if outcome.slot_id == slot_id:
                return outcome
        raise KeyError(slot_id)

    def raise_for_failures(self) -> None:
        """Raise when any item failed.

        :class:`BatchFailed` when nothing succeeded, :class:`BatchPartialFailure`
        when at least one item committed.
        """
        if not self.has_failures:
            return
        if self.succeeded == 0:
            raise BatchFailed(self)
        raise BatchPartialFailure(self)

    def _count(self, status: BatchOutcomeStatus) -> int:
        return sum(1 for outcome in self.outcomes if outcome.status is status)


def validate_slot_ids(slot_ids: Iterable[int]) -> list[int]:
    """Return ids as a list, rejecting empty, non-positive or duplicate entries."""

    ids = list(slot_ids)
    if not ids:
        raise ValidationError("no slot ids provided")
    seen: set[int] = set()
    for slot_id in ids:
        if isinstance(slot_id, bool) or not isinstance(slot_id, int) or slot_id <= 0:
            raise ValidationError(f"invalid slot id: {slot_id!r}")
        if slot_id in seen:
            raise ValidationError(f"duplicate slot id: {slot_id}")
        seen.add(slot_id)
    return ids


def run_batch(
    operation: str,
    slot_ids: Iterable[int],
    action: Callable[[int], Slot],
    *,
    cancellation: CancellationToken | None = None,
) -> BatchReport:
    """Apply ``action`` to each id independently, in order.

    A failing item never stops the batch, whatever it raises. Cancellation is
    observed between items only: committed items stay committed and the rest
    are reported as skipped without being attempted.
    """

    ids = validate_slot_ids(slot_ids)
    report = BatchReport(operation=operation)
    for index, slot_id in enumerate(ids):
        if cancellation is not None and cancellation.is_set():
            report.cancelled = True
            report.outcomes.extend(BatchOutcome.skipped(remaining) for remaining in ids[index:])
            logger.info(
                "slot.batch.cancelled",
                operation=operation,
                processed=index,
                skipped=len(ids) - index,
            )
            break
        try:
            slot = action(slot_id)
        except SlotEngineError as exc:
            logger.info(
                "slot.batch.item_failed",
                operation=operation,
                slot_id=slot_id,
                failure_reason=exc.code,
                details=str(exc),
            )
            report.outcomes.append(BatchOutcome.failure(slot_id, exc))
        except Exception as exc:
            logger.exception("slot.batch.item_crashed", operation=operation, slot_id=slot_id)
            report.outcomes.append(BatchOutcome.crashed(slot_id, exc))
        else:
            report.outcomes.append(BatchOutcome.success(slot))

    logger.info(
        "slot.batch.completed",
        operation=operation,
        total=report.total,
        succeeded=report.succeeded,
        failed=report.failed,
        skipped=report.skipped,
    )
    return report


__all__ = [
    "BatchOutcome",
    "BatchOutcomeStatus",
    "BatchReport",
    "CancellationToken",
    "run_batch",
    "validate_slot_ids",
]
