from __future__ import annotations

import pytest

from src.slotmarket.exceptions import (
    BatchFailed,
    BatchPartialFailure,
    PreconditionFailed,
    StorageError,
    ValidationError,
)
from src.slotmarket.slots.slots_batch import (
    BatchOutcomeStatus,
    BatchReport,
    run_batch,
    validate_slot_ids,
)
from tests.helpers.slot_factories import empty_slot

pytestmark = pytest.mark.unit


class CountdownToken:
    """Reports cancellation once ``remaining`` checks have passed."""

    def __init__(self, remaining: int) -> None:
        self.remaining = remaining

    def is_set(self) -> bool:
        if self.remaining <= 0:
            return True
        self.remaining -= 1
        return False


def flaky_action(slot_id: int):
    if slot_id == 2:
        raise PreconditionFailed("slot 2: cannot approve_draft, draft is none")
    if slot_id == 4:
        raise StorageError("slot: database unavailable")
    return empty_slot(slot_id)


def test_failures_do_not_stop_the_batch() -> None:
    report = run_batch("approve", [1, 2, 3, 4], flaky_action)

    assert report.total == 4
    assert report.succeeded == 2
    assert report.failed == 2
    assert report.outcome_for(2).failure_reason == "precondition_failed"
    assert report.outcome_for(4).failure_reason == "storage_error"
    assert report.outcome_for(3).slot.id == 3


def test_unexpected_error_on_one_item_does_not_abort_batch() -> None:
    attempted = []

    def driver_fault(slot_id: int):
        attempted.append(slot_id)
        if slot_id == 2:
            raise RuntimeError("unexpected driver error")
        return empty_slot(slot_id)

    report = run_batch("approve", [1, 2, 3], driver_fault)

    assert attempted == [1, 2, 3]
    assert report.outcome_for(1).status is BatchOutcomeStatus.SUCCESS
    assert report.outcome_for(3).status is BatchOutcomeStatus.SUCCESS
    crashed = report.outcome_for(2)
    assert crashed.status is BatchOutcomeStatus.FAILURE
    assert crashed.failure_reason == "internal_error"
    assert crashed.details == "unexpected driver error"


def test_cancellation_is_checked_between_items() -> None:
    report = run_batch("set_maintenance", [1, 2, 3, 4], flaky_action, cancellation=CountdownToken(2))

    assert report.cancelled is True
    assert [outcome.status for outcome in report.outcomes] == [
        BatchOutcomeStatus.SUCCESS,
        BatchOutcomeStatus.FAILURE,
        BatchOutcomeStatus.SKIPPED,
        BatchOutcomeStatus.SKIPPED,
    ]
    assert report.outcome_for(3).failure_reason == "cancelled"


def test_raise_for_failures_carries_report() -> None:
    report = run_batch("approve", [1, 2], flaky_action)

    with pytest.raises(BatchPartialFailure) as excinfo:
        report.raise_for_failures()

    assert excinfo.value.report is report
    assert "1 of 2 items failed" in str(excinfo.value)


def test_raise_for_failures_when_nothing_committed() -> None:
    report = run_batch("approve", [2, 4], flaky_action)

    with pytest.raises(BatchFailed) as excinfo:
        report.raise_for_failures()

    assert excinfo.value.report is report
    assert excinfo.value.code == "batch_failed"


def test_raise_for_failures_is_silent_for_clean_batch() -> None:
    report = run_batch("approve", [1, 3], flaky_action)

    report.raise_for_failures()
    assert not report.has_failures


def test_outcome_for_unknown_id_raises_key_error() -> None:
    with pytest.raises(KeyError):
        BatchReport(operation="approve").outcome_for(1)


@pytest.mark.parametrize(
    ("ids", "message"),
    [
        ([], "no slot ids"),
        ([1, 0], "invalid"),
        ([1, False], "invalid"),
        ([3, 3], "duplicate"),
    ],
)
def test_validate_slot_ids_rejects_bad_input(ids, message) -> None:
    with pytest.raises(ValidationError, match=message):
        validate_slot_ids(ids)


def test_validate_slot_ids_accepts_generators() -> None:
    assert validate_slot_ids(slot_id for slot_id in (5, 1)) == [5, 1]
