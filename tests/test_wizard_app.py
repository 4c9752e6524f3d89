from __future__ import annotations

from dataclasses import replace

from acai_order.availability import AvailabilityGate
from acai_order.cart_store import CartStore
from acai_order.confirmation_modal import ConfirmationModal
from acai_order.contact_modal import ContactModal
from acai_order.errors import ApiUnavailableError, OrderValidationError
from acai_order.models import StepId, TimeSlot
from acai_order.placard_modal import PlacardModal
from acai_order.submission import NETWORK_BANNER, SubmissionState
from acai_order.wizard import WizardController
from acai_order.wizard_app import AcaiOrderApp

from conftest import fixed_clock
from test_api import FakeResponse, make_client


class FakeClient:
    def __init__(self, confirmation=None, error=None, cart_count=1):
        self.confirmation = confirmation
        self.error = error
        self.cart_count = cart_count
        self.orders = []

    def create_order(self, payload):
        self.orders.append(payload)
        if self.error is not None:
            raise self.error
        return self.confirmation

    def get_cart_count(self):
        return self.cart_count


async def test_cart_badge_follows_store(wizard):
    cart = CartStore("sess", 2)
    app = AcaiOrderApp(wizard, cart)
    async with app.run_test() as pilot:
        assert app.sub_title == "Cart (2)"
        cart.set_count(5)
        await pilot.pause()
        assert app.sub_title == "Cart (5)"


async def test_keyboard_walkthrough_to_extras(wizard):
    app = AcaiOrderApp(wizard, CartStore("sess"))
    async with app.run_test() as pilot:
        # First row is today, which is inside the lead time.
        await pilot.press("enter")
        assert wizard.active_step is StepId.DATE
        assert "pickup_date" in wizard.field_errors

        await pilot.press("j", "enter")
        assert wizard.active_step is StepId.TIME
        assert wizard.draft.pickup_date.isoformat() == "2026-03-03"

        # 9:00 and 9:30 are too soon; the cursor stays on a disabled row.
        await pilot.press("enter")
        assert wizard.active_step is StepId.TIME
        await pilot.press("down", "down", "enter")
        assert wizard.draft.slot.value == "10:00-10:30"
        assert wizard.active_step is StepId.CRUST

        await pilot.press("j", "j", "enter")
        assert wizard.draft.crust_id == "nutella"
        assert wizard.active_step is StepId.QUANTITY

        await pilot.press("plus", "plus", "minus")
        assert wizard.draft.quantity == 2
        await pilot.press("enter")
        assert wizard.active_step is StepId.EXTRAS
        assert wizard.total_cents() == (6200 + 450) * 2


async def test_number_keys_reopen_completed_steps(wizard, complete_through):
    complete_through(wizard, StepId.CRUST)
    app = AcaiOrderApp(wizard, CartStore("sess"))
    async with app.run_test() as pilot:
        await pilot.press("5")
        assert wizard.active_step is StepId.QUANTITY
        assert "Complete the earlier steps" in app.system_status

        await pilot.press("2")
        assert wizard.active_step is StepId.TIME
        assert wizard.draft.slot is not None


async def test_placard_modal_sets_placard(wizard, complete_through):
    complete_through(wizard, StepId.QUANTITY)
    app = AcaiOrderApp(wizard, CartStore("sess"))
    async with app.run_test() as pilot:
        app.cursor_index = len(wizard.catalog.add_ons)
        await pilot.press("enter")
        await pilot.pause()
        assert isinstance(app.screen, PlacardModal)

        await pilot.press("j", "enter", "escape")
        await pilot.pause()
        assert not isinstance(app.screen, PlacardModal)
        assert wizard.draft.placard_id == "happy_birthday"
        assert wizard.active_step is StepId.EXTRAS


async def test_contact_modal_validates_before_closing(wizard, complete_through):
    complete_through(wizard, StepId.EXTRAS)
    app = AcaiOrderApp(wizard, CartStore("sess"))
    async with app.run_test() as pilot:
        await pilot.press("enter")
        await pilot.pause()
        assert isinstance(app.screen, ContactModal)

        await pilot.press("a", "n", "a", "enter")
        assert isinstance(app.screen, ContactModal)
        assert set(app.screen.errors) == {"email", "phone"}
        assert app.screen.field_index == 1

        await pilot.press("escape")
        await pilot.pause()
        assert not isinstance(app.screen, ContactModal)
        assert wizard.draft.contact.name == "ana"
        assert wizard.active_step is StepId.CONTACT
        assert not app.submit_enabled


async def test_contact_modal_confirms_valid_details(wizard, complete_through):
    complete_through(wizard, StepId.EXTRAS)
    wizard.set_contact(name="Ana Cruz", email="ana@example.com", phone="671-555-0100")
    app = AcaiOrderApp(wizard, CartStore("sess"))
    async with app.run_test() as pilot:
        await pilot.press("enter")
        await pilot.pause()
        await pilot.press("enter")
        await pilot.pause()
        assert not isinstance(app.screen, ContactModal)
        assert wizard.is_complete()
        assert app.submit_enabled


async def test_submit_success_shows_confirmation(wizard, complete_through, confirmation):
    complete_through(wizard)
    cart = CartStore("sess")
    client = FakeClient(confirmation=confirmation, cart_count=1)
    app = AcaiOrderApp(wizard, cart, client=client)
    async with app.run_test() as pilot:
        await pilot.press("ctrl+s")
        await app.workers.wait_for_complete()
        await pilot.pause()
        assert len(client.orders) == 1
        assert client.orders[0]["pickup_time"] == "10:00-10:30"
        assert isinstance(app.screen, ConfirmationModal)
        assert cart.item_count == 1
        assert app.sub_title == "Cart (1)"
        assert wizard.active_step is StepId.DATE

        await pilot.press("enter")
        await pilot.pause()
        assert not isinstance(app.screen, ConfirmationModal)


async def test_submit_network_failure_keeps_order(wizard, complete_through):
    complete_through(wizard)
    client = FakeClient(error=ApiUnavailableError("connection refused"))
    app = AcaiOrderApp(wizard, CartStore("sess"), client=client)
    async with app.run_test() as pilot:
        await pilot.press("ctrl+s")
        await app.workers.wait_for_complete()
        await pilot.pause()
        assert app.banner == NETWORK_BANNER
        assert wizard.is_complete()
        assert app.submit_enabled


async def test_submit_validation_failure_reopens_step(wizard, complete_through):
    complete_through(wizard)
    error = OrderValidationError("Pickup time is full", {"pickup_time": ["is fully booked"]})
    app = AcaiOrderApp(wizard, CartStore("sess"), client=FakeClient(error=error))
    async with app.run_test() as pilot:
        await pilot.press("ctrl+s")
        await app.workers.wait_for_complete()
        await pilot.pause()
        assert app.banner == "Pickup time is full"
        assert wizard.active_step is StepId.TIME
        assert isinstance(wizard.draft.slot, TimeSlot)


async def test_submit_refused_while_in_flight(wizard, complete_through, confirmation):
    complete_through(wizard)
    client = FakeClient(confirmation=confirmation)
    app = AcaiOrderApp(wizard, CartStore("sess"), client=client)
    async with app.run_test() as pilot:
        app.tracker.begin()
        assert not app.submit_enabled
        await pilot.press("ctrl+s")
        assert client.orders == []
        assert app.system_status == "Your order is already being submitted"


async def test_submit_refused_when_incomplete(wizard, confirmation):
    client = FakeClient(confirmation=confirmation)
    app = AcaiOrderApp(wizard, CartStore("sess"), client=client)
    async with app.run_test() as pilot:
        await pilot.press("ctrl+s")
        assert client.orders == []
        assert app.system_status == "Complete every step before submitting"


async def test_inactive_catalog_offers_no_choices(catalog):
    closed = replace(catalog, active=False)
    wizard = WizardController(closed, AvailabilityGate(closed), clock=fixed_clock)
    app = AcaiOrderApp(wizard, CartStore("sess"))
    async with app.run_test() as pilot:
        await pilot.press("enter", "j")
        assert app._choice_rows() == []
        assert wizard.draft.pickup_date is None
        assert not app.submit_enabled


async def test_submit_with_unreadable_response_shows_banner(wizard, complete_through):
    complete_through(wizard)
    client, session = make_client(
        {
            ("POST", "/acai/orders"): FakeResponse(201, None),
            ("GET", "/cart"): FakeResponse(payload={"item_count": 1}),
        }
    )
    app = AcaiOrderApp(wizard, CartStore("sess"), client=client)
    async with app.run_test() as pilot:
        await pilot.press("ctrl+s")
        await app.workers.wait_for_complete()
        await pilot.pause()
        assert len(session.calls) == 1
        assert app.banner == NETWORK_BANNER
        assert app.tracker.state is SubmissionState.FAILED
        assert wizard.is_complete()
        assert app.submit_enabled


async def test_crust_rows_show_descriptions(wizard, complete_through):
    complete_through(wizard, StepId.TIME)
    app = AcaiOrderApp(wizard, CartStore("sess"))
    async with app.run_test():
        labels = [row.label for row in app._choice_rows()]
        assert labels[0] == "Classic  (included) - House granola base"
        assert labels[2] == "Nutella  +$4.50 - Chocolate hazelnut spread base"
