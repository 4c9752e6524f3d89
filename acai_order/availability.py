"""Pickup date/time availability: lead time, pickup windows, blocks and capacity."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Iterable, Mapping

from acai_order.constant import SLOT_MINUTES
from acai_order.data import slots_between
from acai_order.models import Catalog, PickupWindow, TimeSlot

NO_WINDOW_NOTICE = "No pickup times on this day."
NO_SLOTS_NOTICE = "No time slots available for this date."


def lead_time_notice(hours: int) -> str:
    return f"Advance notice required: orders must be placed at least {hours} hours before pickup."


class SlotReason(str, Enum):
    AVAILABLE = "available"
    TOO_SOON = "too_soon"
    BLOCKED = "blocked"
    FULL = "full"


@dataclass(frozen=True)
class SlotOption:
    slot: TimeSlot
    selectable: bool
    reason: SlotReason
    remaining: int


@dataclass(frozen=True)
class DayAvailability:
    """All slots of one day plus the notice shown when none can be picked."""

    pickup_date: date
    slots: tuple[SlotOption, ...]
    notice: str | None

    @property
    def selectable_slots(self) -> list[TimeSlot]:
        return [option.slot for option in self.slots if option.selectable]


@dataclass(frozen=True)
class DateOption:
    pickup_date: date
    selectable_count: int

    @property
    def available(self) -> bool:
        return self.selectable_count > 0


class AvailabilitySnapshot:
    """Remaining seats per (date, slot value) as last reported by the backend."""

    def __init__(
        self,
        remaining: Mapping[tuple[date, str], int] | None = None,
        closed_dates: Iterable[date] = (),
    ) -> None:
        self._remaining = dict(remaining or {})
        self._closed_dates = frozenset(closed_dates)

    def remaining(self, pickup_date: date, slot: TimeSlot, default: int) -> int:
        if pickup_date in self._closed_dates:
            return 0
        return self._remaining.get((pickup_date, slot.value), default)


class AvailabilityGate:
    """Decides which date/time combinations may be selected."""

    def __init__(
        self,
        catalog: Catalog,
        snapshot: AvailabilitySnapshot | None = None,
        slot_minutes: int = SLOT_MINUTES,
    ) -> None:
        self.catalog = catalog
        self.snapshot = snapshot or AvailabilitySnapshot()
        self.slot_minutes = slot_minutes

    @property
    def lead_time(self) -> timedelta:
        return timedelta(hours=self.catalog.lead_time_hours)

    def window_for(self, pickup_date: date) -> PickupWindow | None:
        weekday = pickup_date.weekday()
        return next(
            (w for w in self.catalog.pickup_windows if w.active and w.weekday == weekday),
            None,
        )

    def day_slots(self, pickup_date: date) -> list[TimeSlot]:
        window = self.window_for(pickup_date)
        if window is None:
            return []
        return slots_between(window.start, window.end, self.slot_minutes)

    def is_blocked(self, pickup_date: date, slot: TimeSlot) -> bool:
        for block in self.catalog.blocked_slots:
            if block.blocked_date != pickup_date:
                continue
            if block.start < slot.end and slot.start < block.end:
                return True
        return False

    def slot_option(self, pickup_date: date, slot: TimeSlot, now: datetime) -> SlotOption:
        remaining = self.snapshot.remaining(pickup_date, slot, self.catalog.max_per_slot)
        slot_at = datetime.combine(pickup_date, slot.start, tzinfo=now.tzinfo)
        if slot_at - now < self.lead_time:
            reason = SlotReason.TOO_SOON
        elif self.is_blocked(pickup_date, slot):
            reason = SlotReason.BLOCKED
        elif remaining <= 0:
            reason = SlotReason.FULL
        else:
            reason = SlotReason.AVAILABLE
        return SlotOption(slot=slot, selectable=reason is SlotReason.AVAILABLE, reason=reason, remaining=max(0, remaining))

    def slots_for(self, pickup_date: date, now: datetime) -> DayAvailability:
        slots = tuple(self.slot_option(pickup_date, slot, now) for slot in self.day_slots(pickup_date))
        notice: str | None = None
        if not slots:
            notice = NO_WINDOW_NOTICE
        elif not any(option.selectable for option in slots):
            if all(option.reason is SlotReason.TOO_SOON for option in slots):
                notice = lead_time_notice(self.catalog.lead_time_hours)
            else:
                notice = NO_SLOTS_NOTICE
        return DayAvailability(pickup_date=pickup_date, slots=slots, notice=notice)

    def is_selectable(self, pickup_date: date, slot: TimeSlot, now: datetime) -> bool:
        if slot not in self.day_slots(pickup_date):
            return False
        return self.slot_option(pickup_date, slot, now).selectable

    def available_dates(self, now: datetime, days: int) -> list[DateOption]:
        """Dates with a pickup window in the next ``days`` days, starting today."""
        today = now.date()
        options: list[DateOption] = []
        for offset in range(max(0, days)):
            pickup_date = today + timedelta(days=offset)
            if self.window_for(pickup_date) is None:
                continue
            day = self.slots_for(pickup_date, now)
            options.append(DateOption(pickup_date=pickup_date, selectable_count=len(day.selectable_slots)))
        return options
