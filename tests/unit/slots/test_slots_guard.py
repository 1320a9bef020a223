"""Compare-and-swap behaviour of the transition guard under interleaved writers."""

from __future__ import annotations

from dataclasses import replace
from datetime import timedelta

import pytest

from src.slotmarket.exceptions import Conflict, IntegrityViolation, PreconditionFailed, StorageError
from src.slotmarket.slots.slots_events import ApproveDraft, RemoveProduct, SubmitDraft
from src.slotmarket.slots.slots_guard import RetryPolicy, TransitionGuard
from src.slotmarket.slots.slots_models import DraftStatus, SlotStatus
from tests.helpers.memory_store import InMemorySlotStore
from tests.helpers.slot_factories import (
    LISTING_DURATION,
    NOW,
    empty_slot,
    live_slot,
    make_submission,
    ready_slot,
)

pytestmark = pytest.mark.unit


def build_guard(store: InMemorySlotStore, **policy) -> tuple[TransitionGuard, list[float]]:
    sleeps: list[float] = []
    guard = TransitionGuard(
        store=store,
        listing_duration=LISTING_DURATION,
        retry_policy=RetryPolicy(**policy),
        clock=lambda: NOW,
        sleep=sleeps.append,
    )
    return guard, sleeps


def test_apply_commits_and_bumps_version() -> None:
    store = InMemorySlotStore([ready_slot(1)])
    guard, _ = build_guard(store)

    committed = guard.apply(1, ApproveDraft())

    assert committed.slot_status is SlotStatus.LIVE
    assert committed.version == 2
    assert store.slots[1] == committed


def test_apply_against_sqlite_repository(guard: TransitionGuard, repo) -> None:
    committed = guard.apply(6, SubmitDraft(make_submission("Bench")))

    assert committed.draft_status is DraftStatus.DRAFTING
    assert repo.get_slot(6).draft.name_en == "Bench"
    assert repo.get_slot(6).version == 2


def test_concurrent_approvals_publish_exactly_once() -> None:
    store = InMemorySlotStore([ready_slot(1)])
    guard, _ = build_guard(store)
    rival_results = []
    store.before_swap.append(lambda _: rival_results.append(guard.apply(1, ApproveDraft())))

    with pytest.raises(PreconditionFailed):
        guard.apply(1, ApproveDraft())

    assert len(rival_results) == 1
    assert store.slots[1].slot_status is SlotStatus.LIVE
    assert store.slots[1].version == 2


def test_conflict_retry_reevaluates_and_keeps_rival_change() -> None:
    store = InMemorySlotStore([live_slot(1)])
    guard, _ = build_guard(store)
    store.before_swap.append(lambda _: guard.apply(1, SubmitDraft(make_submission("Rival draft"))))

    committed = guard.apply(1, RemoveProduct())

    assert committed.slot_status is SlotStatus.EMPTY
    assert committed.live is None
    assert committed.draft_status is DraftStatus.DRAFTING
    assert committed.draft.name_en == "Rival draft"
    assert committed.version == 3


def test_conflict_exhaustion_raises_conflict() -> None:
    store = InMemorySlotStore([empty_slot(1)])
    guard, _ = build_guard(store, cas_max_attempts=2)

    def bump(_slot) -> None:
        current = store.slots[1]
        store.slots[1] = replace(current, version=current.version + 1)

    store.before_swap.extend([bump, bump])

    with pytest.raises(Conflict) as excinfo:
        guard.apply(1, SubmitDraft(make_submission()))

    assert excinfo.value.slot_id == 1
    assert store.swap_calls == 2
    assert store.slots[1].draft_status is DraftStatus.NONE


def test_precondition_failure_is_not_retried() -> None:
    store = InMemorySlotStore([empty_slot(1)])
    guard, _ = build_guard(store)

    with pytest.raises(PreconditionFailed):
        guard.apply(1, RemoveProduct())

    assert store.swap_calls == 0


def test_transient_read_failures_are_retried_with_backoff() -> None:
    store = InMemorySlotStore([ready_slot(1)])
    store.get_failures = 2
    guard, sleeps = build_guard(store, storage_retry_attempts=3, storage_backoff_seconds=0.1)

    committed = guard.apply(1, ApproveDraft())

    assert committed.slot_status is SlotStatus.LIVE
    assert sleeps == pytest.approx([0.1, 0.2])


def test_persistent_write_failure_raises_storage_error() -> None:
    store = InMemorySlotStore([ready_slot(1)])
    store.swap_failures = 3
    guard, sleeps = build_guard(store, storage_retry_attempts=3, storage_backoff_seconds=0.5)

    with pytest.raises(StorageError):
        guard.apply(1, ApproveDraft())

    assert sleeps == pytest.approx([0.5, 1.0])
    assert store.slots[1].draft_status is DraftStatus.READY_TO_PUBLISH


def test_commit_listeners_run_only_after_commit() -> None:
    store = InMemorySlotStore([ready_slot(1), empty_slot(2)])
    guard, _ = build_guard(store)
    seen = []
    guard.add_commit_listener(seen.append)

    guard.apply(1, ApproveDraft())
    with pytest.raises(PreconditionFailed):
        guard.apply(2, ApproveDraft())

    assert [slot.id for slot in seen] == [1]


def test_explicit_now_overrides_clock() -> None:
    store = InMemorySlotStore([ready_slot(1)])
    guard, _ = build_guard(store)
    later = NOW + timedelta(days=2)

    committed = guard.apply(1, ApproveDraft(), now=later)

    assert committed.live.start_time == later
    assert committed.updated_at == later


def test_retry_policy_clamps_to_sane_bounds() -> None:
    policy = RetryPolicy(cas_max_attempts=0, storage_retry_attempts=-2, storage_backoff_seconds=-1)

    assert policy.cas_max_attempts == 1
    assert policy.storage_retry_attempts == 1
    assert policy.storage_backoff_seconds == 0.0


def test_integrity_violation_is_not_retried() -> None:
    store = InMemorySlotStore([ready_slot(1)])
    guard, sleeps = build_guard(store, storage_retry_attempts=3, storage_backoff_seconds=0.1)

    def reject_write(_slot) -> None:
        raise IntegrityViolation("slot: integrity constraint violated")

    store.before_swap.append(reject_write)

    with pytest.raises(IntegrityViolation):
        guard.apply(1, ApproveDraft())

    assert store.swap_calls == 1
    assert sleeps == []
