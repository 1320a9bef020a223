"""Pure transition rules for slots.

``apply_event`` maps a slot snapshot and an event to the next snapshot. It
performs no I/O: the caller supplies the clock reading and the listing
duration, and the input slot is never modified. An event that is not legal
from the current state raises :class:`PreconditionFailed`.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta
from typing import Callable

from ..exceptions import PreconditionFailed, ValidationError
from .slots_events import (
    ApproveDraft,
    ClearMaintenance,
    ExpireListing,
    MarkReadyToPublish,
    RejectDraft,
    RemoveProduct,
    ReviseDraft,
    SetMaintenance,
    SlotEvent,
    SubmitDraft,
)
from .slots_models import DraftRecord, DraftStatus, LiveRecord, Slot, SlotStatus, ensure_slot_invariants


_Handler = Callable[[Slot, SlotEvent, datetime, timedelta], Slot]


def _reject(slot: Slot, event: SlotEvent, reason: str) -> PreconditionFailed:
    return PreconditionFailed(
        f"slot {slot.id}: cannot {event.name}, {reason}",
        slot_id=slot.id,
        event=event.name,
        slot_status=slot.slot_status.value,
        draft_status=slot.draft_status.value,
    )


def _submit_draft(slot: Slot, event: SubmitDraft, now: datetime, _: timedelta) -> Slot:
    if slot.draft_status not in (DraftStatus.NONE, DraftStatus.REJECTED):
        raise _reject(slot, event, f"a draft is already {slot.draft_status.value}")
    return replace(
        slot,
        draft_status=DraftStatus.DRAFTING,
        draft=DraftRecord.from_submission(event.submission, submitted_at=now),
    )


def _revise_draft(slot: Slot, event: ReviseDraft, now: datetime, _: timedelta) -> Slot:
    if slot.draft_status is not DraftStatus.DRAFTING:
        raise _reject(slot, event, f"draft is {slot.draft_status.value}, not drafting")
    return replace(slot, draft=DraftRecord.from_submission(event.submission, submitted_at=now))


def _mark_ready(slot: Slot, event: MarkReadyToPublish, now: datetime, _: timedelta) -> Slot:
    if slot.draft_status is not DraftStatus.DRAFTING:
        raise _reject(slot, event, f"draft is {slot.draft_status.value}, not drafting")
    return replace(slot, draft_status=DraftStatus.READY_TO_PUBLISH)


def _approve_draft(slot: Slot, event: ApproveDraft, now: datetime, duration: timedelta) -> Slot:
    if slot.draft_status is not DraftStatus.READY_TO_PUBLISH or slot.draft is None:
        raise _reject(slot, event, f"draft is {slot.draft_status.value}, not ready_to_publish")
    # A live listing is only replaced after removal or expiry.
    if slot.slot_status is not SlotStatus.EMPTY:
        raise _reject(slot, event, f"slot is {slot.slot_status.value}, not empty")
    live = LiveRecord.from_draft(slot.draft, start_time=now, end_time=now + duration)
    return replace(
        slot,
        slot_status=SlotStatus.LIVE,
        live=live,
        draft_status=DraftStatus.NONE,
        draft=None,
    )


def _reject_draft(slot: Slot, event: RejectDraft, now: datetime, _: timedelta) -> Slot:
    if slot.draft_status is not DraftStatus.READY_TO_PUBLISH:
        raise _reject(slot, event, f"draft is {slot.draft_status.value}, not ready_to_publish")
    return replace(slot, draft_status=DraftStatus.REJECTED)


def _set_maintenance(slot: Slot, event: SetMaintenance, now: datetime, _: timedelta) -> Slot:
    if slot.slot_status is not SlotStatus.EMPTY:
        raise _reject(slot, event, f"slot is {slot.slot_status.value}, not empty")
    return replace(slot, slot_status=SlotStatus.MAINTENANCE)


def _clear_maintenance(slot: Slot, event: ClearMaintenance, now: datetime, _: timedelta) -> Slot:
    if slot.slot_status is not SlotStatus.MAINTENANCE:
        raise _reject(slot, event, f"slot is {slot.slot_status.value}, not in maintenance")
    return replace(slot, slot_status=SlotStatus.EMPTY)


def _remove_product(slot: Slot, event: RemoveProduct, now: datetime, _: timedelta) -> Slot:
    if slot.slot_status is not SlotStatus.LIVE:
        raise _reject(slot, event, f"slot is {slot.slot_status.value}, not live")
    return replace(slot, slot_status=SlotStatus.EMPTY, live=None)


def _expire_listing(slot: Slot, event: ExpireListing, now: datetime, _: timedelta) -> Slot:
    if slot.slot_status is not SlotStatus.LIVE:
        raise _reject(slot, event, f"slot is {slot.slot_status.value}, not live")
    if not slot.is_expired(now):
        raise _reject(slot, event, "listing has not ended yet")
    return replace(slot, slot_status=SlotStatus.EMPTY, live=None)


_HANDLERS: dict[type[SlotEvent], _Handler] = {
    SubmitDraft: _submit_draft,
    ReviseDraft: _revise_draft,
    MarkReadyToPublish: _mark_ready,
    ApproveDraft: _approve_draft,
    RejectDraft: _reject_draft,
    SetMaintenance: _set_maintenance,
    ClearMaintenance: _clear_maintenance,
    RemoveProduct: _remove_product,
    ExpireListing: _expire_listing,
}


def apply_event(
    slot: Slot,
    event: SlotEvent,
    *,
    now: datetime,
    listing_duration: timedelta,
) -> Slot:
    """Return the slot resulting from ``event`` or raise :class:`PreconditionFailed`."""

    handler = _HANDLERS.get(type(event))
    if handler is None:
        raise ValidationError(f"unsupported slot event: {type(event).__name__}")
    if listing_duration <= timedelta(0):
        raise ValidationError("listing_duration must be positive")
    result = handler(slot, event, now, listing_duration)
    ensure_slot_invariants(result)
    return result


def is_transition_allowed(slot: Slot, event: SlotEvent, *, now: datetime, listing_duration: timedelta) -> bool:
    """Return whether ``event`` would be accepted for ``slot`` at ``now``."""

    try:
        apply_event(slot, event, now=now, listing_duration=listing_duration)
    except PreconditionFailed:
        return False
    return True


__all__ = ["apply_event", "is_transition_allowed"]
