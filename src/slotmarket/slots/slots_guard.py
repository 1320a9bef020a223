"""Compare-and-swap discipline for slot transitions."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable, Hashable, Protocol, Sequence, TypeVar

import structlog

from ..exceptions import Conflict, StorageError
from .slots_events import SlotEvent
from .slots_models import Slot, SlotStatus
from .slots_state_machine import apply_event


logger = structlog.get_logger(__name__)

T = TypeVar("T")


class SlotStore(Protocol):
    """Persistence operations the guard relies on."""

    def get_slot(self, slot_id: int) -> Slot: ...

    def list_slots(self, *, status: SlotStatus | None = None, search: str | None = None) -> Sequence[Slot]: ...

    def compare_and_swap(self, slot: Slot, *, expected_version: int, now: datetime | None = None) -> Slot: ...

    def count_by_status(self) -> dict[str, int]: ...

    def change_token(self) -> Hashable: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class RetryPolicy:
    """Bounded retry settings for the guard."""

    cas_max_attempts: int = 3
    storage_retry_attempts: int = 3
    storage_backoff_seconds: float = 0.1

    def __post_init__(self) -> None:
        self.cas_max_attempts = max(1, int(self.cas_max_attempts))
        self.storage_retry_attempts = max(1, int(self.storage_retry_attempts))
        self.storage_backoff_seconds = max(0.0, float(self.storage_backoff_seconds))


@dataclass(slots=True)
class TransitionGuard:
    """Make a state machine decision durable at most once per precondition.

    Each attempt reads the slot, computes the transition from that snapshot and
    writes it back conditioned on the snapshot's version. A stale version means
    another caller committed in between; the cycle is repeated against the fresh
    record so the precondition is re-evaluated, and :class:`Conflict` is raised
    once ``cas_max_attempts`` is exhausted. :class:`StorageError` on a single
    read or write is retried with exponential backoff. Rejections are never
    retried.
    """

    store: SlotStore
    listing_duration: timedelta = timedelta(days=30)
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    clock: Callable[[], datetime] = _utcnow
    sleep: Callable[[float], None] = time.sleep
    commit_listeners: list[Callable[[Slot], None]] = field(default_factory=list)

    def add_commit_listener(self, listener: Callable[[Slot], None]) -> None:
        self.commit_listeners.append(listener)

    def apply(self, slot_id: int, event: SlotEvent, *, now: datetime | None = None) -> Slot:
        """Apply ``event`` to slot ``slot_id`` and return the committed slot."""

        attempts = self.retry_policy.cas_max_attempts
        for attempt in range(1, attempts + 1):
            current = self._with_storage_retry(lambda: self.store.get_slot(slot_id), slot_id=slot_id)
            moment = now or self.clock()
            updated = apply_event(
                current,
                event,
                now=moment,
                listing_duration=self.listing_duration,
            )
            try:
                committed = self._with_storage_retry(
                    lambda: self.store.compare_and_swap(
                        updated, expected_version=current.version, now=moment
                    ),
                    slot_id=slot_id,
                )
            except Conflict:
                logger.info(
                    "slot.transition.conflict",
                    slot_id=slot_id,
                    transition=event.name,
                    attempt=attempt,
                    expected_version=current.version,
                )
                continue

            logger.info(
                "slot.transition.committed",
                slot_id=slot_id,
                transition=event.name,
                slot_status=committed.slot_status.value,
                draft_status=committed.draft_status.value,
                version=committed.version,
            )
            self._notify(committed)
            return committed

        logger.warning(
            "slot.transition.conflict_exhausted",
            slot_id=slot_id,
            transition=event.name,
            attempts=attempts,
        )
        raise Conflict(
            f"slot {slot_id}: {event.name} lost {attempts} concurrent update races",
            slot_id=slot_id,
        )

    def _with_storage_retry(self, operation: Callable[[], T], *, slot_id: int) -> T:
        policy = self.retry_policy
        for attempt in range(1, policy.storage_retry_attempts + 1):
            try:
                return operation()
            except StorageError as exc:
                if attempt >= policy.storage_retry_attempts:
                    raise
                delay = policy.storage_backoff_seconds * (2 ** (attempt - 1))
                logger.warning(
                    "slot.storage.retry",
                    slot_id=slot_id,
                    attempt=attempt,
                    delay_seconds=delay,
                    error=str(exc),
                )
                self.sleep(delay)
        raise StorageError(f"slot {slot_id}: storage retries exhausted")  # pragma: no cover

    def _notify(self, slot: Slot) -> None:
        for listener in self.commit_listeners:
            listener(slot)


__all__ = ["RetryPolicy", "SlotStore", "TransitionGuard"]
