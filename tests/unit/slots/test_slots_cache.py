from __future__ import annotations

from datetime import timedelta

import pytest

from src.slotmarket.slots.slots_cache import SlotListCache
from tests.helpers.slot_factories import NOW, empty_slot

pytestmark = pytest.mark.unit


class MutableClock:
    def __init__(self) -> None:
        self.now = NOW

    def __call__(self):
        return self.now


def test_entries_expire_after_ttl() -> None:
    clock = MutableClock()
    cache = SlotListCache(ttl_seconds=30, clock=clock)
    cache.set("all", [empty_slot(1)], token=(25, 25))

    clock.now = NOW + timedelta(seconds=30)
    assert cache.get("all", token=(25, 25)) == (empty_slot(1),)

    clock.now = NOW + timedelta(seconds=31)
    assert cache.get("all", token=(25, 25)) is None


def test_changed_store_token_drops_entry() -> None:
    cache = SlotListCache(ttl_seconds=30, clock=MutableClock())
    cache.set("all", [empty_slot(1)], token=(25, 25))

    assert cache.get("all", token=(25, 26)) is None
    assert cache.get("all", token=(25, 25)) is None


def test_invalidate_clears_every_key() -> None:
    cache = SlotListCache(ttl_seconds=30, clock=MutableClock())
    cache.set("a", [empty_slot(1)], token=1)
    cache.set("b", [empty_slot(2)], token=1)

    cache.invalidate(empty_slot(1))

    assert cache.get("a", token=1) is None
    assert cache.get("b", token=1) is None


def test_zero_ttl_disables_caching() -> None:
    cache = SlotListCache(ttl_seconds=0, clock=MutableClock())
    cache.set("a", [empty_slot(1)], token=1)

    assert cache.get("a", token=1) is None
