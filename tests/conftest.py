from __future__ import annotations

import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:  # pragma: no cover - test helper
    sys.path.append(str(ROOT))

from src.slotmarket.db.db_init import init_db
from src.slotmarket.slots.slots_guard import RetryPolicy, TransitionGuard
from src.slotmarket.slots.slots_repository import SlotRepository
from tests.helpers.slot_factories import LISTING_DURATION, NOW


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    factory = sessionmaker(bind=engine, expire_on_commit=False)
    init_db(engine, factory)
    yield factory
    engine.dispose()


@pytest.fixture
def repo(session_factory) -> SlotRepository:
    return SlotRepository(session_factory)


@pytest.fixture
def guard(repo) -> TransitionGuard:
    return TransitionGuard(
        store=repo,
        listing_duration=LISTING_DURATION,
        retry_policy=RetryPolicy(storage_backoff_seconds=0),
        clock=lambda: NOW,
        sleep=lambda _: None,
    )
