from __future__ import annotations

from datetime import time

import pytest

from acai_order import data
from acai_order.constant import PRODUCT_SETTINGS
from acai_order.data import DEFAULT_CATALOG, parse_hhmm, parse_slot_value, slots_between


def test_parse_hhmm_accepts_seconds():
    assert parse_hhmm("09:30") == time(9, 30)
    assert parse_hhmm(" 16:00:00 ") == time(16, 0)
    with pytest.raises(ValueError):
        parse_hhmm("9am")


def test_parse_slot_value():
    slot = parse_slot_value("13:00-13:30")
    assert slot.value == "13:00-13:30"
    assert slot.label == "1:00 PM - 1:30 PM"
    with pytest.raises(ValueError):
        parse_slot_value("13:00")


def test_slots_between_drops_partial_slot():
    slots = slots_between(time(9, 0), time(10, 45), 30)
    assert [s.value for s in slots] == ["09:00-09:30", "09:30-10:00", "10:00-10:30"]
    with pytest.raises(ValueError):
        slots_between(time(9, 0), time(10, 0), 0)


def test_default_catalog_option_ids():
    assert [c.option_id for c in DEFAULT_CATALOG.crusts] == ["classic", "peanut_butter", "nutella", "honey"]
    assert DEFAULT_CATALOG.crust("nutella").price_cents == 450
    assert DEFAULT_CATALOG.default_add_on().option_id == "none"
    assert DEFAULT_CATALOG.placard("custom_message").is_custom
    assert DEFAULT_CATALOG.ordering_enabled


def test_placard_price_setting_applies_to_free_placards(monkeypatch):
    assert DEFAULT_CATALOG.placard("thank_you").price_cents == 0
    monkeypatch.setitem(PRODUCT_SETTINGS, "placard_price_cents", 500)
    catalog = data._build_default_catalog()
    assert {p.price_cents for p in catalog.placards} == {500}
