"""Dependency wiring helpers."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import FastAPI

from .config import AppConfig
from .reconciler.reconciler_api import router as reconciler_router
from .reconciler.reconciler_service import SlotReconciler
from .slots.slots_api import router as slots_router
from .slots.slots_cache import SlotListCache
from .slots.slots_guard import RetryPolicy, TransitionGuard
from .slots.slots_repository import SlotRepository
from .slots.slots_service import SlotAdminService


@dataclass(slots=True)
class EngineServices:
    repository: SlotRepository
    guard: TransitionGuard
    slot_service: SlotAdminService
    reconciler: SlotReconciler


def build_services(config: AppConfig) -> EngineServices:
    """Assemble repository, guard, admin service and reconciler from config."""
    repository = SlotRepository(config.session_factory)
    guard = TransitionGuard(
        store=repository,
        listing_duration=config.listing_duration,
        retry_policy=RetryPolicy(
            cas_max_attempts=config.retry.cas_max_attempts,
            storage_retry_attempts=config.retry.storage_retry_attempts,
            storage_backoff_seconds=config.retry.storage_backoff_seconds,
        ),
    )
    slot_service = SlotAdminService(
        store=repository,
        guard=guard,
        cache=SlotListCache(ttl_seconds=config.cache_ttl_seconds),
    )
    reconciler = SlotReconciler(store=repository, guard=guard)
    return EngineServices(
        repository=repository,
        guard=guard,
        slot_service=slot_service,
        reconciler=reconciler,
    )


def include_routers(app: FastAPI, config: AppConfig) -> None:
    """Mount module routers and attach services."""
    services = build_services(config)

    app.state.config = config
    app.state.slot_repo = services.repository
    app.state.slot_service = services.slot_service
    app.state.reconciler = services.reconciler
    app.state.reconciler_api_key = config.reconciler_api_key

    app.include_router(slots_router)
    app.include_router(reconciler_router)
