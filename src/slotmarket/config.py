"""Application configuration builder."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from .db.db_init import DEFAULT_SLOT_COUNT, init_db


@dataclass(slots=True)
class RetrySettings:
    cas_max_attempts: int
    storage_retry_attempts: int
    storage_backoff_seconds: float


@dataclass(slots=True)
class AppConfig:
    database_url: str
    engine: Engine
    session_factory: sessionmaker[Session]
    slot_count: int
    listing_duration: timedelta
    reconciler_api_key: str | None
    storage_timeout_seconds: float
    retry: RetrySettings
    cache_ttl_seconds: int


def _engine_options(database_url: str, timeout_seconds: float) -> dict[str, Any]:
    """Return ``create_engine`` kwargs bounding each persistence call."""
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite":
        return {"connect_args": {"timeout": timeout_seconds, "check_same_thread": False}}
    if url.get_backend_name() == "postgresql":
        statement_ms = int(timeout_seconds * 1000)
        return {
            "pool_timeout": timeout_seconds,
            "connect_args": {"options": f"-c statement_timeout={statement_ms}"},
        }
    return {"pool_timeout": timeout_seconds}


def build_engine(database_url: str, *, timeout_seconds: float) -> Engine:
    return create_engine(database_url, future=True, **_engine_options(database_url, timeout_seconds))


def load_config() -> AppConfig:
    """Load configuration from environment (SQLite by default)."""
    database_url = os.getenv("DATABASE_URL", "sqlite:///slotmarket.db")
    storage_timeout_seconds = float(os.getenv("STORAGE_TIMEOUT_SECONDS", 5))
    engine = build_engine(database_url, timeout_seconds=storage_timeout_seconds)
    session_factory: sessionmaker[Session] = sessionmaker(bind=engine, expire_on_commit=False)

    slot_count = int(os.getenv("SLOT_COUNT", DEFAULT_SLOT_COUNT))
    listing_duration = timedelta(days=float(os.getenv("LISTING_DURATION_DAYS", 30)))
    reconciler_api_key = os.getenv("RECONCILER_API_KEY") or None
    retry = RetrySettings(
        cas_max_attempts=int(os.getenv("CAS_MAX_ATTEMPTS", 3)),
        storage_retry_attempts=int(os.getenv("STORAGE_RETRY_ATTEMPTS", 3)),
        storage_backoff_seconds=float(os.getenv("STORAGE_BACKOFF_SECONDS", 0.1)),
    )
    cache_ttl_seconds = int(os.getenv("SLOT_CACHE_TTL_SECONDS", 30))

    init_db(engine, session_factory, slot_count=slot_count)

    return AppConfig(
        database_url=database_url,
        engine=engine,
        session_factory=session_factory,
        slot_count=slot_count,
        listing_duration=listing_duration,
        reconciler_api_key=reconciler_api_key,
        storage_timeout_seconds=storage_timeout_seconds,
        retry=retry,
        cache_ttl_seconds=cache_ttl_seconds,
    )
