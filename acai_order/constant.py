"""Editable built-in catalog used in offline mode and as API fallbacks."""

from __future__ import annotations

PRODUCT_SETTINGS: dict[str, str | int | bool] = {
    "name": 'Acai Cake (10")',
    "description": "Choose Set A or Set B and customize with crust and add-ons.",
    "base_price_cents": 6200,
    "pickup_location": "121 E. Marine Corps Dr, Hagatna, Guam",
    "pickup_phone": "671-472-7733",
    "pickup_instructions": "Call when you arrive for curbside pickup.",
    "advance_hours": 24,
    "max_per_slot": 5,
    "active": True,
    "placard_enabled": True,
    "placard_price_cents": 0,
}

CRUST_OPTIONS: dict[str, dict[str, str | int]] = {
    "classic": {"label": "Classic", "price_cents": 0, "description": "House granola base"},
    "peanut_butter": {"label": "Peanut Butter", "price_cents": 0, "description": "Creamy peanut butter base"},
    "nutella": {"label": "Nutella", "price_cents": 450, "description": "Chocolate hazelnut spread base"},
    "honey": {"label": "Honey", "price_cents": 450, "description": "Sweet honey drizzle base"},
}

ADD_ON_OPTIONS: dict[str, dict[str, str | int]] = {
    "none": {"label": "None", "price_cents": 0},
    "banana": {"label": "Banana", "price_cents": 300},
    "blueberry": {"label": "Blueberry", "price_cents": 300},
    "strawberry": {"label": "Strawberry", "price_cents": 300},
    "mango": {"label": "Mango", "price_cents": 300},
    "coconut": {"label": "Coconut", "price_cents": 300},
}

PLACARD_OPTIONS: dict[str, dict[str, str | int | bool]] = {
    "happy_birthday": {"label": "Happy Birthday", "price_cents": 0, "custom": False},
    "happy_anniversary": {"label": "Happy Anniversary", "price_cents": 0, "custom": False},
    "congratulations": {"label": "Congratulations", "price_cents": 0, "custom": False},
    "thank_you": {"label": "Thank You", "price_cents": 0, "custom": False},
    "custom_message": {"label": "Custom Message", "price_cents": 0, "custom": True},
}

# weekday follows date.weekday(): Monday is 0.
PICKUP_WINDOWS: list[dict[str, str | int | bool]] = [
    {"weekday": 0, "start": "09:00", "end": "16:00", "active": True},
    {"weekday": 1, "start": "09:00", "end": "16:00", "active": True},
    {"weekday": 2, "start": "09:00", "end": "16:00", "active": True},
    {"weekday": 3, "start": "09:00", "end": "16:00", "active": True},
    {"weekday": 4, "start": "09:00", "end": "16:00", "active": True},
    {"weekday": 5, "start": "09:00", "end": "16:00", "active": True},
    {"weekday": 6, "start": "09:00", "end": "16:00", "active": False},
]

SLOT_MINUTES = 30
MAX_QUANTITY = 10
PLACARD_TEXT_MAX_LENGTH = 50
MIN_PHONE_DIGITS = 7
