"""Domain models for acai-order."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from enum import Enum


class StepId(str, Enum):
    """Wizard steps in their fixed order."""

    DATE = "date"
    TIME = "time"
    CRUST = "crust"
    QUANTITY = "quantity"
    EXTRAS = "extras"
    CONTACT = "contact"


STEP_ORDER: tuple[StepId, ...] = tuple(StepId)


class StepStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETE = "complete"


def format_clock(value: time) -> str:
    """Render a time as 12-hour clock text, e.g. ``9:00 AM``."""
    hour12 = value.hour % 12 or 12
    period = "PM" if value.hour >= 12 else "AM"
    return f"{hour12}:{value.minute:02d} {period}"


@dataclass(frozen=True, order=True)
class TimeSlot:
    """A fixed pickup slot inside a day's pickup window."""

    start: time
    end: time

    @property
    def value(self) -> str:
        """Backend slot value, e.g. ``09:00-09:30``."""
        return f"{self.start:%H:%M}-{self.end:%H:%M}"

    @property
    def label(self) -> str:
        return f"{format_clock(self.start)} - {format_clock(self.end)}"


@dataclass(frozen=True)
class CrustOption:
    """The main cake option; its price is added once per cake."""

    option_id: str
    label: str
    price_cents: int
    description: str = ""


@dataclass(frozen=True)
class AddOnOption:
    """A topping add-on; its price is added once per cake."""

    option_id: str
    label: str
    price_cents: int


@dataclass(frozen=True)
class PlacardOption:
    """A message placard; its price is a flat charge per order."""

    option_id: str
    label: str
    price_cents: int
    is_custom: bool = False


@dataclass(frozen=True)
class PickupWindow:
    """Weekly pickup hours. ``weekday`` follows ``date.weekday()``."""

    weekday: int
    start: time
    end: time
    active: bool = True


@dataclass(frozen=True)
class BlockedSlot:
    """A closed stretch of time on one date."""

    blocked_date: date
    start: time
    end: time
    reason: str = ""


@dataclass(frozen=True)
class Catalog:
    """Product settings and option sets for one ordering session."""

    name: str
    description: str
    base_price_cents: int
    pickup_location: str
    pickup_phone: str
    pickup_instructions: str
    lead_time_hours: int
    max_per_slot: int
    active: bool
    placard_enabled: bool
    crusts: tuple[CrustOption, ...]
    add_ons: tuple[AddOnOption, ...]
    placards: tuple[PlacardOption, ...]
    pickup_windows: tuple[PickupWindow, ...]
    blocked_slots: tuple[BlockedSlot, ...] = ()

    @property
    def ordering_enabled(self) -> bool:
        return self.active and any(window.active for window in self.pickup_windows) and bool(self.crusts)

    def crust(self, option_id: str | None) -> CrustOption | None:
        return next((opt for opt in self.crusts if opt.option_id == option_id), None)

    def add_on(self, option_id: str | None) -> AddOnOption | None:
        return next((opt for opt in self.add_ons if opt.option_id == option_id), None)

    def placard(self, option_id: str | None) -> PlacardOption | None:
        if not self.placard_enabled:
            return None
        return next((opt for opt in self.placards if opt.option_id == option_id), None)

    def default_add_on(self) -> AddOnOption | None:
        """The free add-on when one exists, else the first listed."""
        if not self.add_ons:
            return None
        return next((opt for opt in self.add_ons if opt.price_cents == 0), self.add_ons[0])


@dataclass
class ContactInfo:
    name: str = ""
    email: str = ""
    phone: str = ""


@dataclass
class OrderDraft:
    """The in-progress, unsubmitted selections for one order."""

    pickup_date: date | None = None
    slot: TimeSlot | None = None
    crust_id: str | None = None
    quantity: int = 1
    add_on_id: str | None = None
    placard_id: str | None = None
    placard_text: str = ""
    contact: ContactInfo = field(default_factory=ContactInfo)
    notes: str = ""


@dataclass(frozen=True)
class OrderConfirmation:
    """What the backend returns for a placed order."""

    order_id: str
    order_number: str
    status: str
    formatted_total: str
    pickup_date: str
    pickup_time: str
