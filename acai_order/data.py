"""Static catalog data and step metadata."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta

from acai_order.constant import (
    ADD_ON_OPTIONS,
    CRUST_OPTIONS,
    PICKUP_WINDOWS,
    PLACARD_OPTIONS,
    PRODUCT_SETTINGS,
    SLOT_MINUTES,
)
from acai_order.models import (
    AddOnOption,
    Catalog,
    CrustOption,
    PickupWindow,
    PlacardOption,
    StepId,
    TimeSlot,
)

STEP_TITLES: dict[StepId, str] = {
    StepId.DATE: "Pickup Date",
    StepId.TIME: "Pickup Time",
    StepId.CRUST: "Choose Crust",
    StepId.QUANTITY: "Quantity",
    StepId.EXTRAS: "Add-ons & Placard",
    StepId.CONTACT: "Contact Info",
}

OPTIONAL_STEPS: frozenset[StepId] = frozenset({StepId.EXTRAS})


def parse_hhmm(value: str) -> time:
    """Parse ``HH:MM`` (or ``HH:MM:SS``) into a time."""
    raw = value.strip()
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(raw, fmt).time()
        except ValueError:
            continue
    raise ValueError(f"Invalid time of day: {value!r}")


def parse_slot_value(value: str) -> TimeSlot:
    """Parse a backend slot value like ``09:00-09:30``."""
    start, sep, end = value.partition("-")
    if not sep:
        raise ValueError(f"Invalid slot value: {value!r}")
    return TimeSlot(parse_hhmm(start), parse_hhmm(end))


def slots_between(start: time, end: time, minutes: int = SLOT_MINUTES) -> list[TimeSlot]:
    """Split a window into consecutive fixed-length slots that fit entirely inside it."""
    if minutes <= 0:
        raise ValueError("slot length must be positive")
    anchor = date(2000, 1, 1)
    cursor = datetime.combine(anchor, start)
    limit = datetime.combine(anchor, end)
    step = timedelta(minutes=minutes)
    slots: list[TimeSlot] = []
    while cursor + step <= limit:
        slots.append(TimeSlot(cursor.time(), (cursor + step).time()))
        cursor += step
    return slots


def _build_default_catalog() -> Catalog:
    settings = PRODUCT_SETTINGS
    placard_default_cents = int(settings.get("placard_price_cents") or 0)
    return Catalog(
        name=str(settings["name"]),
        description=str(settings["description"]),
        base_price_cents=int(settings["base_price_cents"]),
        pickup_location=str(settings["pickup_location"]),
        pickup_phone=str(settings["pickup_phone"]),
        pickup_instructions=str(settings["pickup_instructions"]),
        lead_time_hours=int(settings["advance_hours"]),
        max_per_slot=int(settings["max_per_slot"]),
        active=bool(settings["active"]),
        placard_enabled=bool(settings["placard_enabled"]),
        crusts=tuple(
            CrustOption(
                option_id=option_id,
                label=str(meta["label"]),
                price_cents=int(meta["price_cents"]),
                description=str(meta.get("description", "")),
            )
            for option_id, meta in CRUST_OPTIONS.items()
        ),
        add_ons=tuple(
            AddOnOption(option_id=option_id, label=str(meta["label"]), price_cents=int(meta["price_cents"]))
            for option_id, meta in ADD_ON_OPTIONS.items()
        ),
        placards=tuple(
            PlacardOption(
                option_id=option_id,
                label=str(meta["label"]),
                price_cents=int(meta["price_cents"]) or placard_default_cents,
                is_custom=bool(meta["custom"]),
            )
            for option_id, meta in PLACARD_OPTIONS.items()
        ),
        pickup_windows=tuple(
            PickupWindow(
                weekday=int(window["weekday"]),
                start=parse_hhmm(str(window["start"])),
                end=parse_hhmm(str(window["end"])),
                active=bool(window["active"]),
            )
            for window in PICKUP_WINDOWS
        ),
    )


DEFAULT_CATALOG: Catalog = _build_default_catalog()
