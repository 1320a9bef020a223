"""SQLAlchemy ORM models."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON, BigInteger, CheckConstraint, DateTime, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base declarative class."""


class SlotModel(Base):
    __tablename__ = "slot"
    __table_args__ = (
        CheckConstraint(
            "slot_status IN ('empty', 'live', 'maintenance')",
            name="ck_slot_slot_status",
        ),
        CheckConstraint(
            "draft_status IN ('none', 'drafting', 'ready_to_publish', 'rejected')",
            name="ck_slot_draft_status",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    slot_status: Mapped[str] = mapped_column(String(16), nullable=False, default="empty", index=True)
    draft_status: Mapped[str] = mapped_column(String(32), nullable=False, default="none")

    draft_name_en: Mapped[str | None] = mapped_column(String(256))
    draft_name_fr: Mapped[str | None] = mapped_column(String(256))
    draft_price: Mapped[int | None] = mapped_column(BigInteger)
    draft_currency: Mapped[str | None] = mapped_column(String(3))
    draft_seller_contact: Mapped[str | None] = mapped_column(String(64))
    draft_image_urls: Mapped[list[str] | None] = mapped_column(JSON)
    draft_updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    live_name_en: Mapped[str | None] = mapped_column(String(256))
    live_name_fr: Mapped[str | None] = mapped_column(String(256))
    live_price: Mapped[int | None] = mapped_column(BigInteger)
    live_currency: Mapped[str | None] = mapped_column(String(3))
    live_seller_contact: Mapped[str | None] = mapped_column(String(64))
    live_image_urls: Mapped[list[str] | None] = mapped_column(JSON)
    live_start_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    live_end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
