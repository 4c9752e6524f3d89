"""Exceptions raised by the order flow and its collaborators."""

from __future__ import annotations

from acai_order.models import StepId


class OrderFlowError(Exception):
    """Base class for order wizard errors."""


class StepLockedError(OrderFlowError):
    """A value was set for a step that is not the active one."""

    def __init__(self, step: StepId, active: StepId | None) -> None:
        active_name = active.value if active is not None else "none"
        super().__init__(f"Step {step.value!r} is not editable (active step: {active_name})")
        self.step = step
        self.active = active


class SubmissionInProgressError(OrderFlowError):
    """A second submission was attempted while one is still in flight."""


class ApiError(OrderFlowError):
    """Base class for backend API failures."""


class ApiUnavailableError(ApiError):
    """Network or server failure. Resubmitting may succeed."""

    retryable = True


class OrderValidationError(ApiError):
    """The backend rejected the order with field-level errors."""

    retryable = False

    def __init__(self, message: str, field_errors: dict[str, list[str]] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.field_errors = dict(field_errors or {})
