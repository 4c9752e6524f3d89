from __future__ import annotations

import pytest

from acai_order.errors import ApiUnavailableError, OrderValidationError, SubmissionInProgressError
from acai_order.models import StepId, StepStatus
from acai_order.submission import (
    NETWORK_BANNER,
    SubmissionState,
    SubmissionTracker,
    infer_field_errors,
    resolve_submission,
)


def test_second_submission_while_in_flight_is_refused():
    tracker = SubmissionTracker()
    tracker.begin()
    with pytest.raises(SubmissionInProgressError):
        tracker.begin()
    assert tracker.in_flight


def test_finishing_without_request_is_an_error(confirmation):
    tracker = SubmissionTracker()
    with pytest.raises(RuntimeError):
        tracker.succeed(confirmation)


def test_success_discards_draft(wizard, complete_through, confirmation):
    complete_through(wizard)
    tracker = SubmissionTracker()
    tracker.begin()
    outcome = resolve_submission(wizard, tracker, confirmation=confirmation)
    assert outcome.state is SubmissionState.SUCCEEDED
    assert outcome.confirmation == confirmation
    assert tracker.state is SubmissionState.SUCCEEDED
    assert wizard.active_step is StepId.DATE
    assert wizard.draft.contact.email == ""


def test_network_failure_is_retryable_and_keeps_state(wizard, complete_through):
    complete_through(wizard)
    tracker = SubmissionTracker()
    tracker.begin()
    outcome = resolve_submission(wizard, tracker, error=ApiUnavailableError("timed out"))
    assert outcome.state is SubmissionState.FAILED
    assert outcome.banner == NETWORK_BANNER
    assert outcome.retryable
    assert outcome.reopened_step is None
    assert wizard.can_submit()
    assert not tracker.in_flight
    tracker.begin()


def test_validation_failure_reopens_owning_step(wizard, complete_through):
    complete_through(wizard)
    tracker = SubmissionTracker()
    tracker.begin()
    error = OrderValidationError(
        "Pickup time is no longer available",
        {"pickup_time": ["is fully booked"], "phone": ["is invalid"]},
    )
    outcome = resolve_submission(wizard, tracker, error=error)

    assert outcome.banner == "Pickup time is no longer available"
    assert not outcome.retryable
    assert outcome.reopened_step is StepId.TIME
    assert tracker.last_outcome == outcome
    assert wizard.active_step is StepId.TIME
    assert wizard.status(StepId.CONTACT) is StepStatus.PENDING
    assert wizard.field_errors["pickup_time"] == "is fully booked"
    assert wizard.draft.contact.name == "Ana Cruz"


def test_validation_failure_without_fields(wizard, complete_through):
    complete_through(wizard)
    tracker = SubmissionTracker()
    tracker.begin()
    outcome = resolve_submission(wizard, tracker, error=OrderValidationError("Ordering is closed"))
    assert outcome.banner == "Ordering is closed"
    assert outcome.reopened_step is None
    assert wizard.is_complete()


def test_resolve_requires_a_result(wizard):
    tracker = SubmissionTracker()
    tracker.begin()
    with pytest.raises(ValueError):
        resolve_submission(wizard, tracker)


def test_slot_message_without_fields_reopens_time_step(wizard, complete_through):
    complete_through(wizard)
    tracker = SubmissionTracker()
    tracker.begin()
    error = OrderValidationError("This time slot is fully booked")
    outcome = resolve_submission(wizard, tracker, error=error)
    assert outcome.banner == "This time slot is fully booked"
    assert outcome.reopened_step is StepId.TIME
    assert wizard.active_step is StepId.TIME
    assert wizard.field_errors == {"pickup_time": "This time slot is fully booked"}
    assert wizard.draft.slot is not None


@pytest.mark.parametrize(
    "message, expected",
    [
        ("Selected slot is no longer available", {"pickup_time": ["Selected slot is no longer available"]}),
        ("Pickup TIME must be in the future", {"pickup_time": ["Pickup TIME must be in the future"]}),
        ("Pickup date is closed", {"pickup_date": ["Pickup date is closed"]}),
        ("Ordering is closed", {}),
        ("Timeout while saving", {}),
    ],
)
def test_infer_field_errors(message, expected):
    assert infer_field_errors(message) == expected
