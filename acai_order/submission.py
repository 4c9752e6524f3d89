"""Tracking of the single in-flight create-order request and its outcomes."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum

from acai_order.errors import ApiError, OrderValidationError, SubmissionInProgressError
from acai_order.models import OrderConfirmation, StepId
from acai_order.wizard import WizardController

logger = logging.getLogger(__name__)

NETWORK_BANNER = "Could not reach the store. Check your connection and press Ctrl+S to retry."
VALIDATION_BANNER = "Please review your order and try again."

# Used when a rejection carries only a message. Checked in order.
_MESSAGE_FIELDS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\b(slots?|time|times)\b", re.IGNORECASE), "pickup_time"),
    (re.compile(r"\b(date|dates|day)\b", re.IGNORECASE), "pickup_date"),
]


class SubmissionState(str, Enum):
    IDLE = "idle"
    IN_FLIGHT = "in_flight"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class SubmissionOutcome:
    state: SubmissionState
    confirmation: OrderConfirmation | None = None
    banner: str | None = None
    field_errors: dict[str, list[str]] = field(default_factory=dict)
    reopened_step: StepId | None = None
    retryable: bool = False


def infer_field_errors(message: str) -> dict[str, list[str]]:
    """Attribute a bare rejection message to the pickup field it talks about."""
    for pattern, field_name in _MESSAGE_FIELDS:
        if pattern.search(message):
            return {field_name: [message]}
    return {}


class SubmissionTracker:
    """Guards against duplicate submissions while a request is in flight."""

    def __init__(self) -> None:
        self.state = SubmissionState.IDLE
        self.last_outcome: SubmissionOutcome | None = None

    @property
    def in_flight(self) -> bool:
        return self.state is SubmissionState.IN_FLIGHT

    def begin(self) -> None:
        if self.in_flight:
            raise SubmissionInProgressError("An order is already being submitted")
        self.state = SubmissionState.IN_FLIGHT
        self.last_outcome = None

    def _finish(self, outcome: SubmissionOutcome) -> SubmissionOutcome:
        if not self.in_flight:
            raise RuntimeError("No submission in flight")
        self.state = outcome.state
        self.last_outcome = outcome
        return outcome

    def succeed(self, confirmation: OrderConfirmation) -> SubmissionOutcome:
        return self._finish(SubmissionOutcome(state=SubmissionState.SUCCEEDED, confirmation=confirmation))

    def fail(self, error: ApiError) -> SubmissionOutcome:
        if isinstance(error, OrderValidationError):
            outcome = SubmissionOutcome(
                state=SubmissionState.FAILED,
                banner=error.message or VALIDATION_BANNER,
                field_errors=error.field_errors or infer_field_errors(error.message),
                retryable=False,
            )
        else:
            outcome = SubmissionOutcome(state=SubmissionState.FAILED, banner=NETWORK_BANNER, retryable=True)
        return self._finish(outcome)


def resolve_submission(
    wizard: WizardController,
    tracker: SubmissionTracker,
    confirmation: OrderConfirmation | None = None,
    error: ApiError | None = None,
) -> SubmissionOutcome:
    """Apply a finished request to the tracker and the wizard.

    Must run on the UI thread: it mutates the draft.
    """
    if confirmation is not None:
        outcome = tracker.succeed(confirmation)
        logger.info("order placed order_number=%s", confirmation.order_number)
        wizard.reset()
        return outcome

    if error is None:
        raise ValueError("Either a confirmation or an error is required")

    outcome = tracker.fail(error)
    logger.warning("order submission failed: %s", error)
    if not outcome.field_errors:
        return outcome

    reopened = wizard.reopen_for_fields(list(outcome.field_errors))
    wizard.field_errors = {name: "; ".join(messages) for name, messages in outcome.field_errors.items() if messages}
    final = SubmissionOutcome(
        state=outcome.state,
        banner=outcome.banner,
        field_errors=outcome.field_errors,
        reopened_step=reopened,
        retryable=outcome.retryable,
    )
    tracker.last_outcome = final
    return final
