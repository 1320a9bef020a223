"""Time based expiry of live listings."""

from __future__ import annotations

import hmac
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

import structlog

from ..exceptions import AuthError, PreconditionFailed, SlotEngineError
from ..slots.slots_events import ExpireListing
from ..slots.slots_guard import SlotStore, TransitionGuard
from ..slots.slots_models import SlotStatus


logger = structlog.get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class ReconcileFailure:
    slot_id: int
    failure_reason: str
    details: str


@dataclass(slots=True)
class ReconcileReport:
    processed: int = 0
    updated: int = 0
    failures: list[ReconcileFailure] = field(default_factory=list)


def authorize_trigger(expected_key: str | None, provided_key: str | None) -> None:
    """Raise :class:`AuthError` unless ``provided_key`` matches the configured secret."""

    if not expected_key:
        return
    if provided_key is None or not hmac.compare_digest(
        provided_key.encode("utf-8"), expected_key.encode("utf-8")
    ):
        raise AuthError("reconciler trigger key mismatch")


@dataclass(slots=True)
class SlotReconciler:
    """Expire live listings whose end time has passed.

    Safe to run concurrently with itself and with admin calls: each expiry goes
    through the transition guard, which re-checks ``now > end_time`` on a fresh
    read before writing.
    """

    store: SlotStore
    guard: TransitionGuard
    clock: Callable[[], datetime] = _utcnow

    def preview(self, *, now: datetime | None = None) -> list[int]:
        """Return ids of live slots that a run at ``now`` would expire."""
        current = now or self.clock()
        return [
            slot.id
            for slot in self.store.list_slots(status=SlotStatus.LIVE)
            if slot.is_expired(current)
        ]

    def run(self, *, now: datetime | None = None) -> ReconcileReport:
        current = now or self.clock()
        live_slots = self.store.list_slots(status=SlotStatus.LIVE)
        report = ReconcileReport()
        logger.info("reconciler.run.start", live_slots=len(live_slots))

        for slot in live_slots:
            report.processed += 1
            if not slot.is_expired(current):
                continue
            try:
                self.guard.apply(slot.id, ExpireListing(), now=current)
            except PreconditionFailed as exc:
                logger.info("reconciler.slot.already_cleared", slot_id=slot.id, details=str(exc))
                continue
            except SlotEngineError as exc:
                logger.warning(
                    "reconciler.slot.failed",
                    slot_id=slot.id,
                    failure_reason=exc.code,
                    details=str(exc),
                )
                report.failures.append(ReconcileFailure(slot.id, exc.code, str(exc)))
                continue
            except Exception as exc:
                logger.exception("reconciler.slot.crashed", slot_id=slot.id)
                report.failures.append(ReconcileFailure(slot.id, "internal_error", str(exc)))
                continue
            report.updated += 1

        logger.info(
            "reconciler.run.completed",
            processed=report.processed,
            updated=report.updated,
            failed=len(report.failures),
        )
        return report


__all__ = [
    "ReconcileFailure",
    "ReconcileReport",
    "SlotReconciler",
    "authorize_trigger",
]
