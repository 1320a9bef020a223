"""Slot domain dataclasses and invariants."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Sequence

from ..exceptions import ValidationError


class SlotStatus(str, Enum):
    EMPTY = "empty"
    LIVE = "live"
    MAINTENANCE = "maintenance"


class DraftStatus(str, Enum):
    NONE = "none"
    DRAFTING = "drafting"
    READY_TO_PUBLISH = "ready_to_publish"
    REJECTED = "rejected"


_CURRENCY_RE = re.compile(r"^[A-Z]{3}$")


@dataclass(frozen=True, slots=True)
class ListingSubmission:
    """Seller supplied listing content, validated before it becomes a draft."""

    name_en: str
    name_fr: str
    price_minor: int
    currency: str
    seller_contact: str
    image_urls: tuple[str, ...] = ()

    @classmethod
    def build(
        cls,
        *,
        name_en: str,
        name_fr: str,
        price_minor: int,
        currency: str,
        seller_contact: str,
        image_urls: Sequence[str] = (),
    ) -> "ListingSubmission":
        """Normalize and validate raw fields."""

        name_en = (name_en or "").strip()
        name_fr = (name_fr or "").strip()
        seller_contact = (seller_contact or "").strip()
        currency = (currency or "").strip().upper()

        if not name_en:
            raise ValidationError("name_en must not be empty")
        if not seller_contact:
            raise ValidationError("seller_contact must not be empty")
        if isinstance(price_minor, bool) or not isinstance(price_minor, int):
            raise ValidationError("price_minor must be an integer amount of minor units")
        if price_minor < 0:
            raise ValidationError("price_minor must not be negative")
        if not _CURRENCY_RE.match(currency):
            raise ValidationError(f"currency '{currency}' is not an ISO-4217 code")
        if isinstance(image_urls, str):
            raise ValidationError("image_urls must be a list of URLs")
        urls = tuple(str(url).strip() for url in image_urls)
        if any(not url for url in urls):
            raise ValidationError("image_urls must not contain empty entries")

        return cls(
            name_en=name_en,
            name_fr=name_fr,
            price_minor=price_minor,
            currency=currency,
            seller_contact=seller_contact,
            image_urls=urls,
        )


@dataclass(frozen=True, slots=True)
class DraftRecord:
    name_en: str
    name_fr: str
    price_minor: int
    currency: str
    seller_contact: str
    image_urls: tuple[str, ...]
    submitted_at: datetime

    @classmethod
    def from_submission(cls, submission: ListingSubmission, *, submitted_at: datetime) -> "DraftRecord":
        return cls(
            name_en=submission.name_en,
            name_fr=submission.name_fr,
            price_minor=submission.price_minor,
            currency=submission.currency,
            seller_contact=submission.seller_contact,
            image_urls=submission.image_urls,
            submitted_at=submitted_at,
        )


@dataclass(frozen=True, slots=True)
class LiveRecord:
    name_en: str
    name_fr: str
    price_minor: int
    currency: str
    seller_contact: str
    image_urls: tuple[str, ...]
    start_time: datetime
    end_time: datetime

    @classmethod
    def from_draft(cls, draft: DraftRecord, *, start_time: datetime, end_time: datetime) -> "LiveRecord":
        return cls(
            name_en=draft.name_en,
            name_fr=draft.name_fr,
            price_minor=draft.price_minor,
            currency=draft.currency,
            seller_contact=draft.seller_contact,
            image_urls=draft.image_urls,
            start_time=start_time,
            end_time=end_time,
        )


@dataclass(frozen=True, slots=True)
class Slot:
    id: int
    slot_status: SlotStatus = SlotStatus.EMPTY
    draft_status: DraftStatus = DraftStatus.NONE
    draft: DraftRecord | None = None
    live: LiveRecord | None = None
    version: int = 1
    updated_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        """Return True when the live listing ended strictly before ``now``."""
        return (
            self.slot_status is SlotStatus.LIVE
            and self.live is not None
            and now > self.live.end_time
        )


@dataclass(frozen=True, slots=True)
class SlotStats:
    total: int
    empty: int
    live: int
    maintenance: int
    awaiting_review: int


def ensure_slot_invariants(slot: Slot) -> None:
    """Raise :class:`ValidationError` when ``slot`` is not a valid resting state."""

    if slot.id <= 0:
        raise ValidationError(f"slot id must be positive, got {slot.id}")
    if not isinstance(slot.slot_status, SlotStatus):
        raise ValidationError(f"slot {slot.id}: unknown slot_status {slot.slot_status!r}")
    if not isinstance(slot.draft_status, DraftStatus):
        raise ValidationError(f"slot {slot.id}: unknown draft_status {slot.draft_status!r}")

    if slot.slot_status is SlotStatus.LIVE and slot.live is None:
        raise ValidationError(f"slot {slot.id}: live slot without a live listing")
    if slot.slot_status is not SlotStatus.LIVE and slot.live is not None:
        raise ValidationError(
            f"slot {slot.id}: live listing present while slot is {slot.slot_status.value}"
        )
    if slot.live is not None and slot.live.start_time > slot.live.end_time:
        raise ValidationError(f"slot {slot.id}: live listing ends before it starts")

    if slot.draft_status is DraftStatus.NONE and slot.draft is not None:
        raise ValidationError(f"slot {slot.id}: draft data present without a draft status")
    if (
        slot.draft_status in (DraftStatus.DRAFTING, DraftStatus.READY_TO_PUBLISH)
        and slot.draft is None
    ):
        raise ValidationError(
            f"slot {slot.id}: draft status {slot.draft_status.value} requires draft data"
        )


__all__ = [
    "SlotStatus",
    "DraftStatus",
    "ListingSubmission",
    "DraftRecord",
    "LiveRecord",
    "Slot",
    "SlotStats",
    "ensure_slot_invariants",
]
