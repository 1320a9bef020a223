"""Pydantic schemas for slot admin API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from .slots_batch import BatchOutcome, BatchReport
from .slots_models import DraftRecord, ListingSubmission, LiveRecord, Slot, SlotStats


class DraftPayload(BaseModel):
    name_en: str
    name_fr: str
    price_minor: int
    currency: str
    seller_contact: str
    image_urls: list[str]
    submitted_at: datetime

    @classmethod
    def from_domain(cls, draft: DraftRecord) -> "DraftPayload":
        return cls(
            name_en=draft.name_en,
            name_fr=draft.name_fr,
            price_minor=draft.price_minor,
            currency=draft.currency,
            seller_contact=draft.seller_contact,
            image_urls=list(draft.image_urls),
            submitted_at=draft.submitted_at,
        )


class LivePayload(BaseModel):
    name_en: str
    name_fr: str
    price_minor: int
    currency: str
    seller_contact: str
    image_urls: list[str]
    start_time: datetime
    end_time: datetime

    @classmethod
    def from_domain(cls, live: LiveRecord) -> "LivePayload":
        return cls(
            name_en=live.name_en,
            name_fr=live.name_fr,
            price_minor=live.price_minor,
            currency=live.currency,
            seller_contact=live.seller_contact,
            image_urls=list(live.image_urls),
            start_time=live.start_time,
            end_time=live.end_time,
        )


class SlotResponse(BaseModel):
    slot_id: int
    slot_status: str
    draft_status: str
    draft: DraftPayload | None = None
    live: LivePayload | None = None
    version: int
    updated_at: datetime | None = None

    @classmethod
    def from_domain(cls, slot: Slot) -> "SlotResponse":
        return cls(
            slot_id=slot.id,
            slot_status=slot.slot_status.value,
            draft_status=slot.draft_status.value,
            draft=DraftPayload.from_domain(slot.draft) if slot.draft else None,
            live=LivePayload.from_domain(slot.live) if slot.live else None,
            version=slot.version,
            updated_at=slot.updated_at,
        )


class SlotDetailsResponse(SlotResponse):
    available_actions: list[str] = Field(default_factory=list)


class SlotStatsResponse(BaseModel):
    total: int
    empty: int
    live: int
    maintenance: int
    awaiting_review: int

    @classmethod
    def from_domain(cls, stats: SlotStats) -> "SlotStatsResponse":
        return cls(
            total=stats.total,
            empty=stats.empty,
            live=stats.live,
            maintenance=stats.maintenance,
            awaiting_review=stats.awaiting_review,
        )


class DraftSubmissionRequest(BaseModel):
    name_en: str = Field(..., min_length=1, max_length=256)
    name_fr: str = Field(default="", max_length=256)
    price_minor: int = Field(..., ge=0)
    currency: str = Field(..., min_length=3, max_length=3)
    seller_contact: str = Field(..., min_length=1, max_length=64)
    image_urls: list[str] = Field(default_factory=list)

    def to_domain(self) -> ListingSubmission:
        return ListingSubmission.build(
            name_en=self.name_en,
            name_fr=self.name_fr,
            price_minor=self.price_minor,
            currency=self.currency,
            seller_contact=self.seller_contact,
            image_urls=self.image_urls,
        )


class BatchRequest(BaseModel):
    slot_ids: list[int] = Field(..., min_length=1)


class BatchOutcomePayload(BaseModel):
    slot_id: int
    status: str
    slot: SlotResponse | None = None
    failure_reason: str | None = None
    details: str | None = None

    @classmethod
    def from_domain(cls, outcome: BatchOutcome) -> "BatchOutcomePayload":
        return cls(
            slot_id=outcome.slot_id,
            status=outcome.status.value,
            slot=SlotResponse.from_domain(outcome.slot) if outcome.slot else None,
            failure_reason=outcome.failure_reason,
            details=outcome.details,
        )


class BatchReportResponse(BaseModel):
    operation: str
    total: int
    succeeded: int
    failed: int
    skipped: int
    cancelled: bool
    outcomes: list[BatchOutcomePayload]

    @classmethod
    def from_domain(cls, report: BatchReport) -> "BatchReportResponse":
        return cls(
            operation=report.operation,
            total=report.total,
            succeeded=report.succeeded,
            failed=report.failed,
            skipped=report.skipped,
            cancelled=report.cancelled,
            outcomes=[BatchOutcomePayload.from_domain(outcome) for outcome in report.outcomes],
        )
