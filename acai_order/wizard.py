"""Step controller for the acai cake order wizard.

Step state is never stored. A step is complete when it has been confirmed
and its values are still valid. The active step is the first incomplete one
in ``STEP_ORDER``, and every step after it is pending. Reopening a step drops
the confirmation of that step and of everything after it; the entered
values stay in the draft until the user confirms or changes them.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from typing import Callable

from acai_order.availability import AvailabilityGate
from acai_order.constant import MAX_QUANTITY, MIN_PHONE_DIGITS, PLACARD_TEXT_MAX_LENGTH
from acai_order.errors import StepLockedError
from acai_order.models import STEP_ORDER, Catalog, OrderDraft, StepId, StepStatus, TimeSlot
from acai_order.pricing import PriceLine, order_total, price_lines

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Backend field names mapped to the step that owns them.
FIELD_STEPS: dict[str, StepId] = {
    "pickup_date": StepId.DATE,
    "pickup_time": StepId.TIME,
    "crust_option_id": StepId.CRUST,
    "quantity": StepId.QUANTITY,
    "add_on_name": StepId.EXTRAS,
    "placard_option_id": StepId.EXTRAS,
    "placard_text": StepId.EXTRAS,
    "name": StepId.CONTACT,
    "email": StepId.CONTACT,
    "phone": StepId.CONTACT,
}

Clock = Callable[[], datetime]
Listener = Callable[[], None]


class WizardController:
    """Owns one OrderDraft and derives step progression from it."""

    def __init__(self, catalog: Catalog, gate: AvailabilityGate, clock: Clock = datetime.now) -> None:
        self.catalog = catalog
        self.gate = gate
        self.clock = clock
        self.draft = OrderDraft()
        self.field_errors: dict[str, str] = {}
        self._confirmed: set[StepId] = set()
        self._listeners: list[Listener] = []
        self._apply_defaults()

    # Subscription

    def subscribe(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    # Step state

    @property
    def active_step(self) -> StepId | None:
        for step in STEP_ORDER:
            if not self._is_complete(step):
                return step
        return None

    def status(self, step: StepId) -> StepStatus:
        active = self.active_step
        if step == active:
            return StepStatus.ACTIVE
        if active is None or STEP_ORDER.index(step) < STEP_ORDER.index(active):
            return StepStatus.COMPLETE
        return StepStatus.PENDING

    def can_access(self, step: StepId) -> bool:
        return self.status(step) is not StepStatus.PENDING

    def is_complete(self) -> bool:
        return self.active_step is None

    def can_submit(self) -> bool:
        return self.is_complete() and not self.step_errors(StepId.CONTACT)

    def _is_complete(self, step: StepId) -> bool:
        return step in self._confirmed and not self.step_errors(step)

    def _require_active(self, step: StepId) -> None:
        active = self.active_step
        if step != active:
            raise StepLockedError(step, active)

    def _confirm(self, step: StepId) -> bool:
        errors = self.step_errors(step)
        if errors:
            self.field_errors = errors
            logger.debug("step %s rejected: %s", step.value, errors)
            return False
        self.field_errors = {}
        self._confirmed.add(step)
        for later in STEP_ORDER[STEP_ORDER.index(step) + 1 :]:
            self._confirmed.discard(later)
        logger.debug("step %s confirmed, active=%s", step.value, self.active_step)
        return True

    def confirm_active(self) -> bool:
        """Confirm the active step with its current values ("Continue")."""
        step = self.active_step
        if step is None:
            return False
        ok = self._confirm(step)
        self._notify()
        return ok

    def reopen(self, step: StepId) -> None:
        """Make a completed step active again; later steps go back to pending."""
        status = self.status(step)
        if status is StepStatus.ACTIVE:
            return
        if status is StepStatus.PENDING:
            raise StepLockedError(step, self.active_step)
        index = STEP_ORDER.index(step)
        for later in STEP_ORDER[index:]:
            self._confirmed.discard(later)
        self.field_errors = {}
        logger.debug("step %s reopened", step.value)
        self._notify()

    def reopen_for_fields(self, field_names: list[str]) -> StepId | None:
        """Reopen the earliest step owning any of the given backend fields."""
        steps = [FIELD_STEPS[name] for name in field_names if name in FIELD_STEPS]
        if not steps:
            return None
        target = min(steps, key=STEP_ORDER.index)
        if self.status(target) is StepStatus.COMPLETE:
            self.reopen(target)
        return target

    # Validation

    def step_errors(self, step: StepId) -> dict[str, str]:
        draft = self.draft
        errors: dict[str, str] = {}
        if step is StepId.DATE:
            if draft.pickup_date is None:
                errors["pickup_date"] = "Choose a pickup date."
            else:
                day = self.gate.slots_for(draft.pickup_date, self.clock())
                if day.notice is not None:
                    errors["pickup_date"] = day.notice
        elif step is StepId.TIME:
            if draft.slot is None:
                errors["pickup_time"] = "Choose a pickup time."
            elif draft.pickup_date is None or not self.gate.is_selectable(draft.pickup_date, draft.slot, self.clock()):
                errors["pickup_time"] = "That pickup time is no longer available."
        elif step is StepId.CRUST:
            if self.catalog.crust(draft.crust_id) is None:
                errors["crust_option_id"] = "Choose a crust."
        elif step is StepId.QUANTITY:
            if not (1 <= draft.quantity <= MAX_QUANTITY):
                errors["quantity"] = f"Quantity must be between 1 and {MAX_QUANTITY}."
        elif step is StepId.EXTRAS:
            if draft.add_on_id is not None and self.catalog.add_on(draft.add_on_id) is None:
                errors["add_on_name"] = "Choose an add-on."
            if draft.placard_id is not None:
                placard = self.catalog.placard(draft.placard_id)
                text = draft.placard_text.strip()
                if placard is None:
                    errors["placard_option_id"] = "Choose a placard."
                elif placard.is_custom and not text:
                    errors["placard_text"] = "Enter your custom message."
                elif len(text) > PLACARD_TEXT_MAX_LENGTH:
                    errors["placard_text"] = f"Placard text is limited to {PLACARD_TEXT_MAX_LENGTH} characters."
        elif step is StepId.CONTACT:
            contact = draft.contact
            if not contact.name.strip():
                errors["name"] = "Name is required."
            email = contact.email.strip()
            if not email:
                errors["email"] = "Email is required."
            elif not EMAIL_RE.match(email):
                errors["email"] = "Enter a valid email address."
            digits = sum(ch.isdigit() for ch in contact.phone)
            if not contact.phone.strip():
                errors["phone"] = "Phone is required."
            elif digits < MIN_PHONE_DIGITS:
                errors["phone"] = "Enter a valid phone number."
        return errors

    # Selections

    def select_date(self, pickup_date: date) -> bool:
        self._require_active(StepId.DATE)
        self.draft.pickup_date = pickup_date
        ok = self._confirm(StepId.DATE)
        self._notify()
        return ok

    def select_slot(self, slot: TimeSlot) -> bool:
        self._require_active(StepId.TIME)
        self.draft.slot = slot
        ok = self._confirm(StepId.TIME)
        self._notify()
        return ok

    def select_crust(self, option_id: str) -> bool:
        self._require_active(StepId.CRUST)
        if self.catalog.crust(option_id) is None:
            raise ValueError(f"Unknown crust option: {option_id!r}")
        self.draft.crust_id = option_id
        ok = self._confirm(StepId.CRUST)
        self._notify()
        return ok

    def set_quantity(self, quantity: int) -> None:
        self._require_active(StepId.QUANTITY)
        self.draft.quantity = max(1, min(MAX_QUANTITY, int(quantity)))
        self.field_errors = {}
        self._notify()

    def change_quantity(self, delta: int) -> None:
        self.set_quantity(self.draft.quantity + delta)

    def set_add_on(self, option_id: str) -> None:
        self._require_active(StepId.EXTRAS)
        if self.catalog.add_on(option_id) is None:
            raise ValueError(f"Unknown add-on option: {option_id!r}")
        self.draft.add_on_id = option_id
        self._notify()

    def set_placard(self, option_id: str, text: str = "") -> None:
        self._require_active(StepId.EXTRAS)
        placard = self.catalog.placard(option_id)
        if placard is None:
            raise ValueError(f"Unknown placard option: {option_id!r}")
        self.draft.placard_id = option_id
        self.draft.placard_text = text.strip() or ("" if placard.is_custom else placard.label)
        self.field_errors = {}
        self._notify()

    def clear_placard(self) -> None:
        self._require_active(StepId.EXTRAS)
        self.draft.placard_id = None
        self.draft.placard_text = ""
        self.field_errors = {}
        self._notify()

    def set_contact(self, name: str | None = None, email: str | None = None, phone: str | None = None) -> None:
        self._require_active(StepId.CONTACT)
        contact = self.draft.contact
        if name is not None:
            contact.name = name
        if email is not None:
            contact.email = email
        if phone is not None:
            contact.phone = phone
        self._notify()

    def set_notes(self, notes: str) -> None:
        self._require_active(StepId.CONTACT)
        self.draft.notes = notes
        self._notify()

    # Derived views

    def total_cents(self) -> int:
        return order_total(self.draft, self.catalog)

    def price_lines(self) -> list[PriceLine]:
        return price_lines(self.draft, self.catalog)

    def summary(self, step: StepId) -> str:
        draft = self.draft
        if step is StepId.DATE:
            d = draft.pickup_date
            return f"{d:%a, %b} {d.day}" if d is not None else ""
        if step is StepId.TIME:
            return draft.slot.label if draft.slot is not None else ""
        if step is StepId.CRUST:
            crust = self.catalog.crust(draft.crust_id)
            return crust.label if crust is not None else ""
        if step is StepId.QUANTITY:
            return f"{draft.quantity} cake{'s' if draft.quantity != 1 else ''}"
        if step is StepId.EXTRAS:
            parts: list[str] = []
            add_on = self.catalog.add_on(draft.add_on_id)
            if add_on is not None and add_on.price_cents:
                parts.append(add_on.label)
            placard = self.catalog.placard(draft.placard_id)
            if placard is not None:
                parts.append(f"Placard: {draft.placard_text or placard.label}")
            return ", ".join(parts) or "None"
        if step is StepId.CONTACT:
            return draft.contact.name.strip()
        return ""

    def build_order_request(self) -> dict[str, object]:
        """Payload for the create-order request."""
        if not self.can_submit():
            raise ValueError("Cannot build an order request before every step is complete")
        draft = self.draft
        assert draft.pickup_date is not None and draft.slot is not None
        payload: dict[str, object] = {
            "pickup_date": draft.pickup_date.isoformat(),
            "pickup_time": draft.slot.value,
            "crust_option_id": draft.crust_id,
            "quantity": draft.quantity,
            "name": draft.contact.name.strip(),
            "email": draft.contact.email.strip(),
            "phone": draft.contact.phone.strip(),
            "include_placard": draft.placard_id is not None,
        }
        add_on = self.catalog.add_on(draft.add_on_id)
        if add_on is not None and add_on != self.catalog.default_add_on():
            payload["add_on_name"] = add_on.label
        if draft.placard_id is not None:
            payload["placard_option_id"] = draft.placard_id
            payload["placard_text"] = draft.placard_text.strip()
        if draft.notes.strip():
            payload["notes"] = draft.notes.strip()
        return payload

    def reset(self) -> None:
        """Discard the draft and start over at the first step."""
        self.draft = OrderDraft()
        self.field_errors = {}
        self._confirmed.clear()
        self._apply_defaults()
        self._notify()

    def _apply_defaults(self) -> None:
        if self.catalog.crusts:
            self.draft.crust_id = self.catalog.crusts[0].option_id
        default_add_on = self.catalog.default_add_on()
        if default_add_on is not None:
            self.draft.add_on_id = default_add_on.option_id
