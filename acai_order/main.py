"""Entry point for the acai-order Textual app."""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path

from acai_order.api import ApiClient
from acai_order.availability import AvailabilityGate, AvailabilitySnapshot
from acai_order.cart_store import CartStore
from acai_order.config import AVAILABILITY_DAYS, DEBUG_LOG_PATH, OFFLINE
from acai_order.data import DEFAULT_CATALOG
from acai_order.errors import ApiError
from acai_order.persistence import load_or_create_cart, save_cart
from acai_order.wizard import WizardController
from acai_order.wizard_app import AcaiOrderApp

logger = logging.getLogger("acai_order")


def configure_logging(log_path: str = DEBUG_LOG_PATH) -> None:
    """Send package logs to a file; the terminal belongs to the TUI."""
    try:
        path = Path(log_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(path, encoding="utf-8")
    except OSError:
        handler = logging.NullHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)


def build_app(offline: bool = OFFLINE) -> AcaiOrderApp:
    """Load the cart session, catalog and availability, and wire the app together."""
    saved = load_or_create_cart()
    cart = CartStore(saved.session_id, saved.item_count)
    cart.subscribe(lambda store: save_cart(store.session_id, store.item_count))

    if offline:
        logger.info("offline mode: using the built-in catalog")
        gate = AvailabilityGate(DEFAULT_CATALOG, AvailabilitySnapshot())
        return AcaiOrderApp(WizardController(DEFAULT_CATALOG, gate), cart)

    client = ApiClient(session_id=cart.session_id)
    catalog = client.get_config()
    snapshot = AvailabilitySnapshot()
    if catalog.ordering_enabled:
        snapshot = client.load_availability(AVAILABILITY_DAYS, today=datetime.now().date())
    try:
        cart.set_count(client.get_cart_count())
    except ApiError as exc:
        logger.warning("cart count unavailable: %s", exc)

    gate = AvailabilityGate(catalog, snapshot)
    return AcaiOrderApp(WizardController(catalog, gate), cart, client=client)


def main() -> int:
    """Run the Textual application."""
    configure_logging()
    try:
        app = build_app()
    except ApiError as exc:
        logger.error("startup failed: %s", exc)
        print(f"Could not load the order form: {exc}", file=sys.stderr)
        return 1
    app.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
