from __future__ import annotations

import pytest

from acai_order.persistence import bootstrap_schema, load_cart, load_or_create_cart, save_cart


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "nested" / "cart.db"


def test_empty_database_has_no_cart(db_path):
    bootstrap_schema(db_path)
    assert load_cart(db_path) is None


def test_load_or_create_is_stable(db_path):
    first = load_or_create_cart(db_path)
    second = load_or_create_cart(db_path)
    assert len(first.session_id) == 32
    assert second.session_id == first.session_id
    assert second.item_count == 0


def test_save_cart_updates_single_row(db_path):
    created = load_or_create_cart(db_path)
    save_cart(created.session_id, 5, db_path)
    saved = load_cart(db_path)
    assert saved is not None
    assert saved.session_id == created.session_id
    assert saved.item_count == 5


def test_save_cart_validates_arguments(db_path):
    bootstrap_schema(db_path)
    with pytest.raises(ValueError):
        save_cart("", 0, db_path)
    with pytest.raises(ValueError):
        save_cart("abc", -1, db_path)
