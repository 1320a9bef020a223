"""Events accepted by the slot state machine."""

from __future__ import annotations

from dataclasses import dataclass

from .slots_models import ListingSubmission


@dataclass(frozen=True, slots=True)
class SlotEvent:
    """Base class; ``name`` is used in logs and rejection messages."""

    name = "event"


@dataclass(frozen=True, slots=True)
class SubmitDraft(SlotEvent):
    submission: ListingSubmission
    name = "submit_draft"


@dataclass(frozen=True, slots=True)
class ReviseDraft(SlotEvent):
    submission: ListingSubmission
    name = "revise_draft"


@dataclass(frozen=True, slots=True)
class MarkReadyToPublish(SlotEvent):
    name = "mark_ready_to_publish"


@dataclass(frozen=True, slots=True)
class ApproveDraft(SlotEvent):
    name = "approve_draft"


@dataclass(frozen=True, slots=True)
class RejectDraft(SlotEvent):
    name = "reject_draft"


@dataclass(frozen=True, slots=True)
class SetMaintenance(SlotEvent):
    name = "set_maintenance"


@dataclass(frozen=True, slots=True)
class ClearMaintenance(SlotEvent):
    name = "clear_maintenance"


@dataclass(frozen=True, slots=True)
class RemoveProduct(SlotEvent):
    name = "remove_product"


@dataclass(frozen=True, slots=True)
class ExpireListing(SlotEvent):
    """Issued only by the reconciler."""

    name = "expire_listing"


__all__ = [
    "SlotEvent",
    "SubmitDraft",
    "ReviseDraft",
    "MarkReadyToPublish",
    "ApproveDraft",
    "RejectDraft",
    "SetMaintenance",
    "ClearMaintenance",
    "RemoveProduct",
    "ExpireListing",
]
