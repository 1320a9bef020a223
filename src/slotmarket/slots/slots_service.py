"""Administrative slot operations built on the transition guard."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Sequence

from ..exceptions import ValidationError
from .slots_batch import BatchReport, CancellationToken, run_batch
from .slots_cache import SlotListCache
from .slots_events import (
    ApproveDraft,
    ClearMaintenance,
    MarkReadyToPublish,
    RejectDraft,
    RemoveProduct,
    ReviseDraft,
    SetMaintenance,
    SlotEvent,
    SubmitDraft,
)
from .slots_guard import SlotStore, TransitionGuard
from .slots_models import ListingSubmission, Slot, SlotStats, SlotStatus
from .slots_state_machine import is_transition_allowed


ADMIN_ACTIONS: dict[str, SlotEvent] = {
    "approve": ApproveDraft(),
    "reject": RejectDraft(),
    "set_maintenance": SetMaintenance(),
    "clear_maintenance": ClearMaintenance(),
    "remove_product": RemoveProduct(),
}


def _validate_slot_id(slot_id: int) -> int:
    if isinstance(slot_id, bool) or not isinstance(slot_id, int) or slot_id <= 0:
        raise ValidationError(f"invalid slot id: {slot_id!r}")
    return slot_id


@dataclass(slots=True)
class SlotAdminService:
    """Single and batched slot operations for reviewers.

    Every mutation goes through :meth:`TransitionGuard.apply` for the addressed
    slot only. Single calls return the resulting slot or raise the typed
    rejection; batch calls return a :class:`BatchReport`.
    """

    store: SlotStore
    guard: TransitionGuard
    cache: SlotListCache | None = None

    def __post_init__(self) -> None:
        if self.cache is not None:
            self.guard.add_commit_listener(self.cache.invalidate)

    # reads

    def list_slots(
        self,
        *,
        status: SlotStatus | None = None,
        search: str | None = None,
    ) -> Sequence[Slot]:
        if self.cache is None:
            return self.store.list_slots(status=status, search=search or None)
        key = (status, (search or "").strip().lower())
        # Token is read before the rows so a write in between forces a refetch.
        token = self.store.change_token()
        cached = self.cache.get(key, token=token)
        if cached is not None:
            return cached
        slots = self.store.list_slots(status=status, search=search or None)
        self.cache.set(key, slots, token=token)
        return slots

    def get_slot(self, slot_id: int) -> Slot:
        return self.store.get_slot(_validate_slot_id(slot_id))

    def slot_stats(self) -> SlotStats:
        counts = self.store.count_by_status()
        empty = counts.get(SlotStatus.EMPTY.value, 0)
        live = counts.get(SlotStatus.LIVE.value, 0)
        maintenance = counts.get(SlotStatus.MAINTENANCE.value, 0)
        return SlotStats(
            total=empty + live + maintenance,
            empty=empty,
            live=live,
            maintenance=maintenance,
            awaiting_review=counts.get("awaiting_review", 0),
        )

    def available_actions(self, slot: Slot, *, now: datetime | None = None) -> list[str]:
        """Return admin actions whose preconditions hold for ``slot`` right now."""
        moment = now or self.guard.clock()
        return [
            action
            for action, event in ADMIN_ACTIONS.items()
            if is_transition_allowed(
                slot, event, now=moment, listing_duration=self.guard.listing_duration
            )
        ]

    # submissions

    def submit_draft(self, slot_id: int, submission: ListingSubmission) -> Slot:
        return self._apply(slot_id, SubmitDraft(submission=submission))

    def revise_draft(self, slot_id: int, submission: ListingSubmission) -> Slot:
        return self._apply(slot_id, ReviseDraft(submission=submission))

    def mark_ready_to_publish(self, slot_id: int) -> Slot:
        return self._apply(slot_id, MarkReadyToPublish())

    # single admin operations

    def approve_draft(self, slot_id: int) -> Slot:
        return self._apply(slot_id, ApproveDraft())

    def reject_draft(self, slot_id: int) -> Slot:
        return self._apply(slot_id, RejectDraft())

    def set_maintenance(self, slot_id: int) -> Slot:
        return self._apply(slot_id, SetMaintenance())

    def clear_maintenance(self, slot_id: int) -> Slot:
        return self._apply(slot_id, ClearMaintenance())

    def remove_product(self, slot_id: int) -> Slot:
        return self._apply(slot_id, RemoveProduct())

    # batch admin operations

    def approve_drafts(
        self, slot_ids: Iterable[int], *, cancellation: CancellationToken | None = None
    ) -> BatchReport:
        return self.run_batch_action("approve", slot_ids, cancellation=cancellation)

    def reject_drafts(
        self, slot_ids: Iterable[int], *, cancellation: CancellationToken | None = None
    ) -> BatchReport:
        return self.run_batch_action("reject", slot_ids, cancellation=cancellation)

    def set_maintenance_many(
        self, slot_ids: Iterable[int], *, cancellation: CancellationToken | None = None
    ) -> BatchReport:
        return self.run_batch_action("set_maintenance", slot_ids, cancellation=cancellation)

    def clear_maintenance_many(
        self, slot_ids: Iterable[int], *, cancellation: CancellationToken | None = None
    ) -> BatchReport:
        return self.run_batch_action("clear_maintenance", slot_ids, cancellation=cancellation)

    def remove_products(
        self, slot_ids: Iterable[int], *, cancellation: CancellationToken | None = None
    ) -> BatchReport:
        return self.run_batch_action("remove_product", slot_ids, cancellation=cancellation)

    def run_batch_action(
        self,
        action: str,
        slot_ids: Iterable[int],
        *,
        cancellation: CancellationToken | None = None,
    ) -> BatchReport:
        event = ADMIN_ACTIONS.get(action)
        if event is None:
            raise ValidationError(f"unknown batch operation: {action}")
        return run_batch(
            action,
            slot_ids,
            lambda slot_id: self.guard.apply(slot_id, event),
            cancellation=cancellation,
        )

    def _apply(self, slot_id: int, event: SlotEvent) -> Slot:
        return self.guard.apply(_validate_slot_id(slot_id), event)


__all__ = ["ADMIN_ACTIONS", "SlotAdminService"]
