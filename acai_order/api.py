"""HTTP client for the storefront backend's acai endpoints."""

from __future__ import annotations

import logging
import re
from datetime import date, timedelta
from typing import Any, Callable, TypeVar

import requests

from acai_order.availability import AvailabilitySnapshot
from acai_order.config import API_BASE_URL, API_TIMEOUT_SECONDS, API_TOKEN
from acai_order.data import parse_hhmm
from acai_order.errors import ApiError, ApiUnavailableError, OrderValidationError
from acai_order.models import (
    AddOnOption,
    BlockedSlot,
    Catalog,
    CrustOption,
    OrderConfirmation,
    PickupWindow,
    PlacardOption,
)
from acai_order.pricing import format_cents, to_cents

logger = logging.getLogger(__name__)

SESSION_HEADER = "X-Session-ID"

T = TypeVar("T")


def _slug(value: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", value.lower()).strip("_")


def _cents(item: dict[str, Any], key: str = "price_cents", decimal_key: str = "price") -> int:
    if item.get(key) is not None:
        return int(item[key])
    if item.get(decimal_key) is not None:
        return to_cents(item[decimal_key])
    return 0


def _option_id(item: dict[str, Any]) -> str:
    if item.get("id") is not None:
        return str(item["id"])
    return _slug(str(item.get("name", "")))


def _entries(payload: dict[str, Any], key: str) -> list[dict[str, Any]]:
    entries = payload.get(key) or []
    if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
        raise TypeError(f"{key} must be a list of objects")
    return list(entries)


def _entry_date(entry: dict[str, Any]) -> date:
    return date.fromisoformat(str(entry["date"]))


def _slot_seats(slot: dict[str, Any]) -> tuple[str, int]:
    seats = int(slot.get("remaining") or 0) if slot.get("available", True) else 0
    return str(slot["slot_value"]), seats


def _item_count(payload: dict[str, Any]) -> int:
    return int(payload.get("item_count") or 0)


def _python_weekday(day_of_week: int) -> int:
    """Backend weekdays start at Sunday=0; ``date.weekday()`` starts at Monday=0."""
    return (int(day_of_week) - 1) % 7


def catalog_from_payload(payload: dict[str, Any]) -> Catalog:
    """Build a Catalog from a ``GET /acai/config`` response."""
    settings = payload.get("settings") or {}
    crusts = tuple(
        CrustOption(
            option_id=_option_id(item),
            label=str(item["name"]),
            price_cents=_cents(item),
            description=str(item.get("description") or ""),
        )
        for item in sorted(payload.get("crust_options") or [], key=lambda i: i.get("position", 0))
        if item.get("available", True)
    )
    add_ons = tuple(
        AddOnOption(option_id=_option_id(item), label=str(item["name"]), price_cents=_cents(item))
        for item in sorted(payload.get("add_on_options") or [], key=lambda i: i.get("position", 0))
    )
    placard_default_cents = int(settings.get("placard_price_cents") or 0)
    placards = tuple(
        PlacardOption(
            option_id=_option_id(item),
            label=str(item["name"]),
            price_cents=_cents(item) or placard_default_cents,
            # Older backends only mark the custom placard by its name.
            is_custom=bool(item.get("custom", "custom" in str(item["name"]).lower())),
        )
        for item in sorted(payload.get("placard_options") or [], key=lambda i: i.get("position", 0))
        if item.get("available", True)
    )
    windows = tuple(
        PickupWindow(
            weekday=_python_weekday(item["day_of_week"]),
            start=parse_hhmm(str(item["start_time"])),
            end=parse_hhmm(str(item["end_time"])),
            active=bool(item.get("active", True)),
        )
        for item in payload.get("pickup_windows") or []
    )
    blocked = tuple(
        BlockedSlot(
            blocked_date=date.fromisoformat(str(item["blocked_date"])),
            start=parse_hhmm(str(item["start_time"])),
            end=parse_hhmm(str(item["end_time"])),
            reason=str(item.get("reason") or ""),
        )
        for item in payload.get("blocked_slots") or []
    )

    active = bool(settings.get("active", False)) and bool(payload.get("ordering_enabled", True))
    return Catalog(
        name=str(settings.get("name") or "Acai Cake"),
        description=str(settings.get("description") or ""),
        base_price_cents=_cents(settings, "base_price_cents", "base_price"),
        pickup_location=str(settings.get("pickup_location") or ""),
        pickup_phone=str(settings.get("pickup_phone") or ""),
        pickup_instructions=str(settings.get("pickup_instructions") or ""),
        lead_time_hours=int(settings.get("advance_hours") or 24),
        max_per_slot=int(settings.get("max_per_slot") or 1),
        active=active,
        placard_enabled=bool(settings.get("placard_enabled", False)),
        crusts=crusts,
        add_ons=add_ons,
        placards=placards,
        pickup_windows=windows,
        blocked_slots=blocked,
    )


def confirmation_from_payload(payload: dict[str, Any]) -> OrderConfirmation:
    """Build an OrderConfirmation from a ``POST /acai/orders`` response."""
    order = payload.get("order")
    if not isinstance(order, dict) or order.get("id") is None:
        raise ApiUnavailableError("Order response did not include an order")
    formatted_total = order.get("formatted_total")
    if not formatted_total and order.get("total_cents") is not None:
        formatted_total = format_cents(int(order["total_cents"]))
    return OrderConfirmation(
        order_id=str(order["id"]),
        order_number=str(order.get("order_number") or order["id"]),
        status=str(order.get("status") or "pending"),
        formatted_total=str(formatted_total or ""),
        pickup_date=str(order.get("pickup_date") or ""),
        pickup_time=str(order.get("pickup_time") or ""),
    )


def validation_error_from_payload(payload: Any) -> OrderValidationError:
    """Turn a 400/422 body into an OrderValidationError."""
    if not isinstance(payload, dict):
        return OrderValidationError("The order was rejected.")
    field_errors: dict[str, list[str]] = {}
    raw_errors = payload.get("errors")
    if isinstance(raw_errors, dict):
        for name, messages in raw_errors.items():
            if not isinstance(messages, list):
                messages = [messages] if messages else []
            field_errors[str(name)] = [str(m) for m in messages]
    message = payload.get("error")
    if not message and isinstance(raw_errors, list):
        message = "; ".join(str(m) for m in raw_errors)
    if not message and field_errors:
        message = "; ".join(f"{name.replace('_', ' ')} {msgs[0]}" for name, msgs in field_errors.items() if msgs)
    return OrderValidationError(str(message or "The order was rejected."), field_errors)


class ApiClient:
    """Thin wrapper around a requests session for the acai endpoints."""

    def __init__(
        self,
        base_url: str = API_BASE_URL,
        token: str | None = API_TOKEN,
        timeout: float = API_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
        session_id: str | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session_id = session_id

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self, auth: bool = False) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if auth and self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if self.session_id:
            headers[SESSION_HEADER] = self.session_id
        return headers

    def _request(self, method: str, path: str, auth: bool = False, **kwargs: Any) -> Any:
        url = self._url(path)
        try:
            response = self.session.request(method, url, headers=self._headers(auth), timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise ApiUnavailableError(f"Could not reach {url}: {exc}") from exc

        logger.debug("%s %s -> %s", method, url, response.status_code)
        if response.status_code in (400, 422):
            try:
                body = response.json()
            except ValueError:
                body = None
            raise validation_error_from_payload(body)
        if response.status_code >= 500:
            raise ApiUnavailableError(f"{method} {url} returned {response.status_code}")
        if response.status_code >= 400:
            raise ApiError(f"{method} {url} returned {response.status_code}")

        try:
            body = response.json()
        except ValueError as exc:
            raise ApiUnavailableError(f"{method} {url} returned a non-JSON body") from exc
        if not isinstance(body, dict):
            raise ApiUnavailableError(f"{method} {url} returned {type(body).__name__} instead of an object")
        return body

    def _parse(self, what: str, parser: Callable[..., T], *args: Any) -> T:
        """Run a payload parser, reporting a malformed body as the backend being unavailable."""
        try:
            return parser(*args)
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.warning("malformed %s payload: %r", what, exc)
            raise ApiUnavailableError(f"The server sent an unreadable {what} response") from exc

    def get_config(self) -> Catalog:
        return self._parse("config", catalog_from_payload, self._request("GET", "/acai/config"))

    def get_available_dates(self, days: int) -> list[dict[str, Any]]:
        payload = self._request("GET", "/acai/available_dates", params={"days": days})
        return self._parse("dates", _entries, payload, "dates")

    def get_available_slots(self, pickup_date: date) -> list[dict[str, Any]]:
        payload = self._request("GET", "/acai/available_slots", params={"date": pickup_date.isoformat()})
        return self._parse("slots", _entries, payload, "slots")

    def load_availability(self, days: int, today: date | None = None) -> AvailabilitySnapshot:
        """Fetch remaining seats for every open date in the next ``days`` days."""
        start = today or date.today()
        limit = start + timedelta(days=days)
        remaining: dict[tuple[date, str], int] = {}
        closed: list[date] = []
        for entry in self.get_available_dates(days):
            pickup_date = self._parse("dates", _entry_date, entry)
            if pickup_date >= limit:
                continue
            if entry.get("fully_booked"):
                closed.append(pickup_date)
                continue
            for slot in self.get_available_slots(pickup_date):
                slot_value, seats = self._parse("slots", _slot_seats, slot)
                remaining[(pickup_date, slot_value)] = seats
        logger.info("loaded availability for %d slots, %d closed dates", len(remaining), len(closed))
        return AvailabilitySnapshot(remaining, closed)

    def create_order(self, payload: dict[str, Any]) -> OrderConfirmation:
        body = self._request("POST", "/acai/orders", auth=True, json=payload)
        if body.get("success") is False:
            raise validation_error_from_payload(body)
        return self._parse("order", confirmation_from_payload, body)

    def get_cart_count(self) -> int:
        """Item count of the cart bound to this client's session id."""
        payload = self._request("GET", "/cart")
        return self._parse("cart", _item_count, payload)
