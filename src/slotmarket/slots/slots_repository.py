"""Slot repository backed by SQLAlchemy."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from datetime import datetime, timezone
from typing import Any

import sqlalchemy as sa
from sqlalchemy.orm import Session

from ..db.db_models import SlotModel
from ..exceptions import Conflict, NotFound, handle_sqlalchemy_errors
from .slots_models import (
    DraftRecord,
    DraftStatus,
    LiveRecord,
    Slot,
    SlotStatus,
    ensure_slot_invariants,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes even for timezone-aware columns.
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


_DRAFT_COLUMNS = (
    "draft_name_en",
    "draft_name_fr",
    "draft_price",
    "draft_currency",
    "draft_seller_contact",
    "draft_image_urls",
    "draft_updated_at",
)
_LIVE_COLUMNS = (
    "live_name_en",
    "live_name_fr",
    "live_price",
    "live_currency",
    "live_seller_contact",
    "live_image_urls",
    "live_start_time",
    "live_end_time",
)


class SlotRepository:
    """Keyed slot table with a version-token conditional update."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def list_slots(
        self,
        *,
        status: SlotStatus | None = None,
        search: str | None = None,
    ) -> Sequence[Slot]:
        stmt = sa.select(SlotModel).order_by(SlotModel.id)
        if status is not None:
            stmt = stmt.where(SlotModel.slot_status == status.value)
        if search:
            pattern = f"%{search.lower()}%"
            stmt = stmt.where(
                sa.or_(
                    sa.func.lower(SlotModel.live_name_en).like(pattern),
                    sa.func.lower(SlotModel.live_name_fr).like(pattern),
                    sa.func.lower(SlotModel.draft_name_en).like(pattern),
                    sa.func.lower(SlotModel.draft_name_fr).like(pattern),
                )
            )
        with handle_sqlalchemy_errors(entity="slot"):
            with self._session_factory() as session:
                rows = session.execute(stmt).scalars().all()
                return [self._to_domain(row) for row in rows]

    def get_slot(self, slot_id: int) -> Slot:
        with handle_sqlalchemy_errors(entity="slot"):
            with self._session_factory() as session:
                row = session.get(SlotModel, slot_id)
                if row is None:
                    raise NotFound(f"slot '{slot_id}' not found")
                return self._to_domain(row)

    def count_by_status(self) -> dict[str, int]:
        """Return slot counts keyed by status plus drafts awaiting review."""
        status_stmt = sa.select(SlotModel.slot_status, sa.func.count()).group_by(SlotModel.slot_status)
        review_stmt = sa.select(sa.func.count()).where(
            SlotModel.draft_status == DraftStatus.READY_TO_PUBLISH.value
        )
        with handle_sqlalchemy_errors(entity="slot"):
            with self._session_factory() as session:
                counts = {status: count for status, count in session.execute(status_stmt).all()}
                counts["awaiting_review"] = session.execute(review_stmt).scalar_one()
                return counts

    def change_token(self) -> tuple[int, int]:
        """Return ``(row count, sum of versions)``; moves on every committed write.

        Every conditional write bumps one version by one, from any process, so
        a cached read taken under an equal token is still current.
        """
        stmt = sa.select(
            sa.func.count(),
            sa.func.coalesce(sa.func.sum(SlotModel.version), 0),
        ).select_from(SlotModel)
        with handle_sqlalchemy_errors(entity="slot"):
            with self._session_factory() as session:
                count, versions = session.execute(stmt).one()
                return int(count), int(versions)

    def compare_and_swap(
        self,
        slot: Slot,
        *,
        expected_version: int,
        now: datetime | None = None,
    ) -> Slot:
        """Persist ``slot`` only if the stored version still equals ``expected_version``.

        The whole record is written in a single ``UPDATE ... WHERE version = ?``
        so ``draft_*`` and ``live_*`` columns are replaced together. Raises
        :class:`Conflict` when another writer got there first.
        """
        ensure_slot_invariants(slot)
        written_at = now or _utcnow()
        values = self._to_columns(slot)
        values["version"] = expected_version + 1
        values["updated_at"] = written_at

        stmt = (
            sa.update(SlotModel)
            .where(SlotModel.id == slot.id, SlotModel.version == expected_version)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        with handle_sqlalchemy_errors(entity="slot"):
            with self._session_factory() as session:
                result = session.execute(stmt)
                if result.rowcount != 1:
                    session.rollback()
                    exists = session.execute(
                        sa.select(SlotModel.id).where(SlotModel.id == slot.id)
                    ).scalar_one_or_none()
                    if exists is None:
                        raise NotFound(f"slot '{slot.id}' not found")
                    raise Conflict(
                        f"slot {slot.id}: version {expected_version} is stale",
                        slot_id=slot.id,
                    )
                session.commit()
                row = session.get(SlotModel, slot.id)
                return self._to_domain(row)

    @staticmethod
    def _to_columns(slot: Slot) -> dict[str, Any]:
        values: dict[str, Any] = {
            "slot_status": slot.slot_status.value,
            "draft_status": slot.draft_status.value,
        }
        values.update({column: None for column in _DRAFT_COLUMNS})
        values.update({column: None for column in _LIVE_COLUMNS})

        if slot.draft is not None:
            draft = slot.draft
            values.update(
                draft_name_en=draft.name_en,
                draft_name_fr=draft.name_fr,
                draft_price=draft.price_minor,
                draft_currency=draft.currency,
                draft_seller_contact=draft.seller_contact,
                draft_image_urls=list(draft.image_urls),
                draft_updated_at=draft.submitted_at,
            )
        if slot.live is not None:
            live = slot.live
            values.update(
                live_name_en=live.name_en,
                live_name_fr=live.name_fr,
                live_price=live.price_minor,
                live_currency=live.currency,
                live_seller_contact=live.seller_contact,
                live_image_urls=list(live.image_urls),
                live_start_time=live.start_time,
                live_end_time=live.end_time,
            )
        return values

    @staticmethod
    def _to_domain(model: SlotModel) -> Slot:
        draft = None
        if model.draft_updated_at is not None:
            draft = DraftRecord(
                name_en=model.draft_name_en or "",
                name_fr=model.draft_name_fr or "",
                price_minor=model.draft_price or 0,
                currency=model.draft_currency or "",
                seller_contact=model.draft_seller_contact or "",
                image_urls=tuple(model.draft_image_urls or ()),
                submitted_at=_as_utc(model.draft_updated_at),
            )
        live = None
        if model.live_start_time is not None and model.live_end_time is not None:
            live = LiveRecord(
                name_en=model.live_name_en or "",
                name_fr=model.live_name_fr or "",
                price_minor=model.live_price or 0,
                currency=model.live_currency or "",
                seller_contact=model.live_seller_contact or "",
                image_urls=tuple(model.live_image_urls or ()),
                start_time=_as_utc(model.live_start_time),
                end_time=_as_utc(model.live_end_time),
            )
        return Slot(
            id=model.id,
            slot_status=SlotStatus(model.slot_status),
            draft_status=DraftStatus(model.draft_status),
            draft=draft,
            live=live,
            version=model.version,
            updated_at=_as_utc(model.updated_at),
        )


__all__ = ["SlotRepository"]
