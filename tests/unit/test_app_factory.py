"""End-to-end wiring of ``create_app`` against a throwaway SQLite file."""

from __future__ import annotations

from typing import Iterable, Tuple

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.slotmarket.config import load_config
from src.slotmarket.main import create_app

pytestmark = pytest.mark.unit


@pytest.fixture
def app_env(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'slots.db'}")
    monkeypatch.setenv("SLOT_COUNT", "5")
    monkeypatch.setenv("LISTING_DURATION_DAYS", "14")
    monkeypatch.setenv("RECONCILER_API_KEY", "cron-secret")
    monkeypatch.setenv("SLOT_CACHE_TTL_SECONDS", "0")


def _collect_route_signatures(app: FastAPI) -> set[Tuple[str, str]]:
    signatures: set[Tuple[str, str]] = set()
    for route in app.routes:
        methods: Iterable[str] = getattr(route, "methods", []) or []
        for method in methods:
            signatures.add((route.path, method.upper()))
    return signatures


def test_load_config_reads_environment(app_env) -> None:
    config = load_config()

    assert config.slot_count == 5
    assert config.listing_duration.days == 14
    assert config.reconciler_api_key == "cron-secret"
    assert config.retry.cas_max_attempts == 3
    assert config.cache_ttl_seconds == 0


def test_create_app_exposes_expected_routes(app_env) -> None:
    app = create_app()

    signatures = _collect_route_signatures(app)

    expected = {
        ("/api/slots/", "GET"),
        ("/api/slots/stats", "GET"),
        ("/api/slots/{slot_id}", "GET"),
        ("/api/slots/{slot_id}/draft", "PUT"),
        ("/api/slots/{slot_id}/approve", "POST"),
        ("/api/slots/batch/{operation}", "POST"),
        ("/api/reconcile", "GET"),
        ("/api/reconcile", "POST"),
    }
    for signature in expected:
        assert signature in signatures


def test_listing_flow_through_http(app_env) -> None:
    client = TestClient(create_app())

    submitted = client.put(
        "/api/slots/2/draft",
        json={
            "name_en": "Camera",
            "price_minor": 8900,
            "currency": "USD",
            "seller_contact": "555-0101",
        },
    )
    ready = client.post("/api/slots/2/draft/ready")
    approved = client.post("/api/slots/2/approve")
    stats = client.get("/api/slots/stats")
    reconciled = client.post("/api/reconcile", params={"apiKey": "cron-secret"})

    assert submitted.status_code == 200
    assert ready.status_code == 200
    assert approved.status_code == 200
    assert approved.json()["version"] == 4
    assert stats.json()["live"] == 1
    assert stats.json()["total"] == 5
    assert reconciled.json() == {"success": True, "processed": 1, "updated": 0}
