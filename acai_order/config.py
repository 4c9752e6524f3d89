"""Runtime configuration defaults for the API client, cart storage and logging."""

from __future__ import annotations

import os


class ConfigurationError(Exception):
    """Raised when an environment override cannot be parsed."""


def _env_str(key: str, default: str) -> str:
    value = os.environ.get(key, "").strip()
    return value or default


def _env_int(key: str, default: int) -> int:
    raw = os.environ.get(key, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}") from exc


def _env_flag(key: str) -> bool:
    return os.environ.get(key, "").strip().lower() in {"1", "true", "yes", "on"}


API_BASE_URL = _env_str("ACAI_API_BASE_URL", "http://localhost:3000/api/v1")
API_TOKEN = os.environ.get("ACAI_API_TOKEN", "").strip() or None
API_TIMEOUT_SECONDS = _env_int("ACAI_API_TIMEOUT_SECONDS", 10)

# Days of slot availability fetched before the wizard starts.
AVAILABILITY_DAYS = _env_int("ACAI_AVAILABILITY_DAYS", 14)

# Dates offered in the date step.
DATE_PICKER_DAYS = 12

CART_DB_PATH = _env_str("ACAI_CART_DB_PATH", "data/cart.db")
DEBUG_LOG_PATH = _env_str("ACAI_DEBUG_LOG_PATH", "/tmp/acai-order-debug.log")

# Use the built-in catalog from app constants instead of the backend.
OFFLINE = _env_flag("ACAI_OFFLINE")
