"""Database initialization helpers."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .db_models import Base, SlotModel

DEFAULT_SLOT_COUNT = 25


def init_db(
    engine: Engine,
    session_factory: sessionmaker[Session],
    *,
    slot_count: int = DEFAULT_SLOT_COUNT,
) -> None:
    """Create tables and seed the fixed slot pool if the table is empty."""
    Base.metadata.create_all(engine)

    with session_factory() as session:
        _seed_slots(session, slot_count)
        session.commit()


def _seed_slots(session: Session, slot_count: int) -> None:
    if session.query(SlotModel).count():
        return
    now = datetime.now(timezone.utc)
    for slot_id in range(1, slot_count + 1):
        session.add(
            SlotModel(
                id=slot_id,
                slot_status="empty",
                draft_status="none",
                version=1,
                created_at=now,
                updated_at=now,
            )
        )
