from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, time, timedelta, timezone

from acai_order.availability import (
    NO_SLOTS_NOTICE,
    NO_WINDOW_NOTICE,
    AvailabilityGate,
    AvailabilitySnapshot,
    SlotReason,
    lead_time_notice,
)
from acai_order.models import BlockedSlot, TimeSlot

from conftest import NOW, PICKUP_DATE


def _slot(hour: int, minute: int = 0) -> TimeSlot:
    start = datetime.combine(date(2000, 1, 1), time(hour, minute))
    return TimeSlot(start.time(), (start + timedelta(minutes=30)).time())


def test_slots_inside_lead_time_are_not_selectable(gate):
    for offset in range(3):
        day = NOW.date() + timedelta(days=offset)
        for option in gate.slots_for(day, NOW).slots:
            starts_at = datetime.combine(day, option.slot.start)
            assert option.selectable == (starts_at - NOW >= timedelta(hours=24))


def test_day_entirely_inside_lead_time_gets_advance_notice(gate):
    day = gate.slots_for(NOW.date(), NOW)
    assert day.selectable_slots == []
    assert day.notice == lead_time_notice(24)
    assert all(option.reason is SlotReason.TOO_SOON for option in day.slots)


def test_next_day_opens_exactly_at_lead_time(gate):
    day = gate.slots_for(NOW.date() + timedelta(days=1), NOW)
    assert day.notice is None
    assert day.selectable_slots[0] == _slot(10)
    assert [o.reason for o in day.slots[:2]] == [SlotReason.TOO_SOON, SlotReason.TOO_SOON]


def test_closed_weekday_has_no_window(gate):
    sunday = date(2026, 3, 8)
    assert gate.day_slots(sunday) == []
    assert gate.slots_for(sunday, NOW).notice == NO_WINDOW_NOTICE


def test_window_is_split_into_half_hour_slots(gate):
    slots = gate.day_slots(PICKUP_DATE)
    assert len(slots) == 14
    assert slots[0].value == "09:00-09:30"
    assert slots[-1].value == "15:30-16:00"


def test_blocked_slots_overlap(catalog):
    blocked = replace(
        catalog,
        blocked_slots=(BlockedSlot(PICKUP_DATE, time(12, 0), time(13, 0), "Staff training"),),
    )
    gate = AvailabilityGate(blocked)
    assert gate.slot_option(PICKUP_DATE, _slot(12), NOW).reason is SlotReason.BLOCKED
    assert gate.slot_option(PICKUP_DATE, _slot(12, 30), NOW).reason is SlotReason.BLOCKED
    assert gate.slot_option(PICKUP_DATE, _slot(11, 30), NOW).selectable
    assert gate.slot_option(PICKUP_DATE, _slot(13), NOW).selectable


def test_lead_time_wins_over_block(catalog):
    today = NOW.date()
    blocked = replace(catalog, blocked_slots=(BlockedSlot(today, time(9, 0), time(16, 0)),))
    gate = AvailabilityGate(blocked)
    assert gate.slots_for(today, NOW).notice == lead_time_notice(24)


def test_full_slot_uses_snapshot(catalog):
    snapshot = AvailabilitySnapshot({(PICKUP_DATE, "10:00-10:30"): 0, (PICKUP_DATE, "10:30-11:00"): 2})
    gate = AvailabilityGate(catalog, snapshot)
    full = gate.slot_option(PICKUP_DATE, _slot(10), NOW)
    assert full.reason is SlotReason.FULL and not full.selectable
    assert gate.slot_option(PICKUP_DATE, _slot(10, 30), NOW).remaining == 2
    assert gate.slot_option(PICKUP_DATE, _slot(11), NOW).remaining == catalog.max_per_slot


def test_closed_date_reports_no_slots(catalog):
    gate = AvailabilityGate(catalog, AvailabilitySnapshot(closed_dates=[PICKUP_DATE]))
    day = gate.slots_for(PICKUP_DATE, NOW)
    assert day.selectable_slots == []
    assert day.notice == NO_SLOTS_NOTICE


def test_is_selectable_rejects_slots_outside_window(gate):
    assert gate.is_selectable(PICKUP_DATE, _slot(10), NOW)
    assert not gate.is_selectable(PICKUP_DATE, _slot(17), NOW)
    assert not gate.is_selectable(PICKUP_DATE, TimeSlot(time(10, 15), time(10, 45)), NOW)


def test_available_dates_skip_closed_weekdays(gate):
    options = gate.available_dates(NOW, 7)
    assert [o.pickup_date for o in options] == [date(2026, 3, d) for d in range(2, 8)]
    assert not options[0].available
    assert options[1].selectable_count == 12
    assert options[2].selectable_count == 14


def test_custom_lead_time(catalog):
    gate = AvailabilityGate(replace(catalog, lead_time_hours=48))
    assert gate.slots_for(NOW.date() + timedelta(days=1), NOW).notice == lead_time_notice(48)


def test_timezone_aware_clock(gate):
    aware_now = NOW.replace(tzinfo=timezone.utc)
    assert gate.is_selectable(PICKUP_DATE, _slot(10), aware_now)
    assert not gate.is_selectable(aware_now.date(), _slot(15), aware_now)
