from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time
from typing import Callable

import pytest

from acai_order.availability import AvailabilityGate, AvailabilitySnapshot
from acai_order.data import DEFAULT_CATALOG
from acai_order.models import STEP_ORDER, Catalog, OrderConfirmation, StepId, TimeSlot
from acai_order.wizard import WizardController

# Monday 10:00; the earliest selectable slot is Tuesday 10:00.
NOW = datetime(2026, 3, 2, 10, 0)
PICKUP_DATE = date(2026, 3, 4)
PICKUP_SLOT = TimeSlot(time(10, 0), time(10, 30))


def fixed_clock() -> datetime:
    return NOW


@pytest.fixture
def catalog() -> Catalog:
    return DEFAULT_CATALOG


@pytest.fixture
def paid_placard_catalog() -> Catalog:
    placards = tuple(replace(p, price_cents=500) for p in DEFAULT_CATALOG.placards)
    return replace(DEFAULT_CATALOG, placards=placards)


@pytest.fixture
def gate(catalog: Catalog) -> AvailabilityGate:
    return AvailabilityGate(catalog, AvailabilitySnapshot())


@pytest.fixture
def wizard(catalog: Catalog, gate: AvailabilityGate) -> WizardController:
    return WizardController(catalog, gate, clock=fixed_clock)


def _fill_step(wizard: WizardController, step: StepId) -> None:
    if step is StepId.DATE:
        assert wizard.select_date(PICKUP_DATE)
    elif step is StepId.TIME:
        assert wizard.select_slot(PICKUP_SLOT)
    elif step is StepId.CRUST:
        assert wizard.select_crust("classic")
    elif step is StepId.CONTACT:
        wizard.set_contact(name="Ana Cruz", email="ana@example.com", phone="671-555-0100")
        assert wizard.confirm_active()
    else:
        assert wizard.confirm_active()


@pytest.fixture
def complete_through() -> Callable[[WizardController, StepId], WizardController]:
    """Confirm every step up to and including ``last`` with valid values."""

    def _complete(wizard: WizardController, last: StepId = StepId.CONTACT) -> WizardController:
        for step in STEP_ORDER[: STEP_ORDER.index(last) + 1]:
            _fill_step(wizard, step)
        return wizard

    return _complete


@pytest.fixture
def confirmation() -> OrderConfirmation:
    return OrderConfirmation(
        order_id="42",
        order_number="AC-0042",
        status="pending",
        formatted_total="$62.00",
        pickup_date="2026-03-04",
        pickup_time="10:00-10:30",
    )
