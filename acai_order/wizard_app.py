"""Main Textual app class."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from rich.text import Text
from textual import work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.css.query import NoMatches
from textual.events import Key
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Header, Static

from acai_order.api import ApiClient
from acai_order.cart_store import CartStore
from acai_order.config import DATE_PICKER_DAYS
from acai_order.confirmation_modal import ConfirmationModal
from acai_order.contact_modal import ContactModal
from acai_order.data import OPTIONAL_STEPS, STEP_TITLES
from acai_order.errors import ApiError, SubmissionInProgressError
from acai_order.models import STEP_ORDER, Catalog, OrderConfirmation, StepId, StepStatus
from acai_order.placard_modal import PlacardModal
from acai_order.pricing import format_cents
from acai_order.rendering import (
    format_crust_option,
    format_date_option,
    format_field_errors,
    format_price,
    format_price_lines,
    format_product_heading,
    format_slot_option,
    format_step_header,
)
from acai_order.submission import SubmissionState, SubmissionTracker, resolve_submission
from acai_order.wizard import WizardController

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChoiceRow:
    """One selectable row in the choices pane."""

    label: str
    action: Callable[[], object]
    enabled: bool = True
    selected: bool = False


class AcaiOrderApp(App):
    """A Textual app that walks a customer through ordering an acai cake."""

    TITLE = "Acai Cake Order"

    CSS = """
    Screen {
        layout: vertical;
    }

    #main-layout {
        height: 1fr;
    }

    #steps-pane {
        width: 2fr;
        border: round $primary;
        padding: 1;
    }

    #choices-pane {
        width: 3fr;
        border: round $secondary;
        padding: 1;
    }

    #steps-list {
        height: 1fr;
    }

    #notice {
        color: #ffb3b3;
        height: auto;
        margin-bottom: 1;
    }

    #choices {
        height: 1fr;
        border: tall $surface;
        padding: 0 1;
    }

    #summary-pane {
        height: auto;
        max-height: 12;
        border: round $surface;
        padding: 0 1;
    }

    #status-bar {
        margin-top: 1;
    }

    .pane-title {
        text-style: bold;
        margin-bottom: 1;
    }
    """

    cursor_index = reactive(0)

    BINDINGS = [
        ("up", "move_cursor(-1)", "Previous"),
        ("down", "move_cursor(1)", "Next"),
        ("enter", "choose_current", "Select"),
        Binding("ctrl+s", "submit_order", "Submit", priority=True),
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(
        self,
        wizard: WizardController,
        cart: CartStore,
        client: ApiClient | None = None,
        tracker: SubmissionTracker | None = None,
    ) -> None:
        super().__init__()
        self.wizard = wizard
        self.cart = cart
        self.client = client
        self.tracker = tracker or SubmissionTracker()
        self.system_status = ""
        self.banner = ""
        self._cursor_step: StepId | None = wizard.active_step
        self._unsubscribe_cart: Callable[[], None] | None = None
        self._log_debug("app_init")

    def _log_debug(self, message: str) -> None:
        logger.debug(message)

    @property
    def catalog(self) -> Catalog:
        return self.wizard.catalog

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal(id="main-layout"):
            with Vertical(id="steps-pane"):
                yield Static(format_product_heading(self.catalog), id="product-heading", classes="pane-title")
                yield Static(id="steps-list")
            with Vertical(id="choices-pane"):
                yield Static(id="choices-title", classes="pane-title")
                yield Static(id="notice")
                yield Static(id="choices")
        with Vertical(id="summary-pane"):
            yield Static(id="summary")
            yield Static(id="status-bar")

    def on_mount(self) -> None:
        self.wizard.subscribe(self._on_wizard_change)
        self._unsubscribe_cart = self.cart.subscribe(self._on_cart_change)
        self.sub_title = self.cart.badge_text()
        self._log_debug(
            f"on_mount ordering_enabled={self.catalog.ordering_enabled} active={self.wizard.active_step}"
        )
        self._refresh_all()

    def on_unmount(self) -> None:
        self.wizard.unsubscribe(self._on_wizard_change)
        if self._unsubscribe_cart is not None:
            self._unsubscribe_cart()
            self._unsubscribe_cart = None

    def _on_wizard_change(self) -> None:
        active = self.wizard.active_step
        if active != self._cursor_step:
            self._cursor_step = active
            self.cursor_index = 0
        self._refresh_all()

    def _on_cart_change(self, cart: CartStore) -> None:
        self.sub_title = cart.badge_text()

    def on_key(self, event: Key) -> None:
        if isinstance(self.screen, ModalScreen):
            return

        self._log_debug(f"on_key key={event.key!r} char={event.character!r} active={self.wizard.active_step}")

        if not event.is_printable or not event.character or len(event.character) != 1:
            return

        key = event.character.lower()
        if key == "j":
            self.action_move_cursor(1)
            event.stop()
            return

        if key == "k":
            self.action_move_cursor(-1)
            event.stop()
            return

        if key in {"+", "="}:
            self._change_quantity(1)
            event.stop()
            return

        if key in {"-", "_"}:
            self._change_quantity(-1)
            event.stop()
            return

        if key.isdigit() and 1 <= int(key) <= len(STEP_ORDER):
            self._reopen_step(STEP_ORDER[int(key) - 1])
            event.stop()

    def action_move_cursor(self, delta: int) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        rows = self._choice_rows()
        if not rows:
            self.cursor_index = 0
            return
        self.cursor_index = (self.cursor_index + delta) % len(rows)
        self._refresh_choices()

    def action_choose_current(self) -> None:
        if isinstance(self.screen, ModalScreen):
            return
        rows = self._choice_rows()
        if not rows:
            return
        if self.cursor_index >= len(rows):
            self.cursor_index = 0
        row = rows[self.cursor_index]
        if not row.enabled:
            self.system_status = f"{row.label.strip()} cannot be selected"
            self._refresh_status()
            return
        self.system_status = ""
        row.action()
        self._refresh_all()

    def action_submit_order(self) -> None:
        self._log_debug(
            f"submit_enter state={self.tracker.state.value} screen={type(self.screen).__name__}"
        )
        if isinstance(self.screen, ModalScreen):
            self._log_debug("submit_blocked reason=modal")
            return
        if not self.catalog.ordering_enabled:
            return
        if self.tracker.in_flight:
            self.system_status = "Your order is already being submitted"
            self._refresh_status()
            self._log_debug("submit_blocked reason=in_flight")
            return
        if not self.wizard.can_submit():
            self.system_status = "Complete every step before submitting"
            self._refresh_status()
            self._log_debug("submit_blocked reason=incomplete")
            return
        if self.client is None:
            self.system_status = "Offline mode: orders cannot be submitted"
            self._refresh_status()
            self._log_debug("submit_blocked reason=offline")
            return

        payload = self.wizard.build_order_request()
        try:
            self.tracker.begin()
        except SubmissionInProgressError:
            self._log_debug("submit_blocked reason=in_flight")
            return
        self.banner = ""
        self.system_status = "Submitting order..."
        self._refresh_all()
        self._log_debug(f"submit_started pickup={payload['pickup_date']} {payload['pickup_time']}")
        self._send_order(payload)

    @work(thread=True, exclusive=True)
    def _send_order(self, payload: dict[str, Any]) -> None:
        assert self.client is not None
        try:
            confirmation = self.client.create_order(payload)
        except ApiError as exc:
            self.call_from_thread(self._finish_submission, None, exc, None)
            return

        cart_count: int | None
        try:
            cart_count = self.client.get_cart_count()
        except ApiError as exc:
            logger.warning("cart refresh failed: %s", exc)
            cart_count = None
        self.call_from_thread(self._finish_submission, confirmation, None, cart_count)

    def _finish_submission(
        self,
        confirmation: OrderConfirmation | None,
        error: ApiError | None,
        cart_count: int | None,
    ) -> None:
        outcome = resolve_submission(self.wizard, self.tracker, confirmation=confirmation, error=error)
        if outcome.state is SubmissionState.SUCCEEDED and outcome.confirmation is not None:
            if cart_count is not None:
                self.cart.set_count(cart_count)
            self.banner = ""
            self.system_status = f"Order placed: #{outcome.confirmation.order_number}"
            self._log_debug(f"submit_succeeded order_number={outcome.confirmation.order_number}")
            self._refresh_all()
            self.push_screen(ConfirmationModal(outcome.confirmation, self.catalog))
            return

        self.banner = outcome.banner or ""
        self.system_status = ""
        if outcome.reopened_step is not None:
            self._cursor_step = outcome.reopened_step
            self.cursor_index = 0
        self._log_debug(f"submit_failed retryable={outcome.retryable} reopened={outcome.reopened_step}")
        self._refresh_all()

    def _change_quantity(self, delta: int) -> None:
        if self.wizard.active_step is not StepId.QUANTITY:
            return
        self.wizard.change_quantity(delta)

    def _reopen_step(self, step: StepId) -> None:
        if not self.catalog.ordering_enabled or self.tracker.in_flight:
            return
        if not self.wizard.can_access(step):
            self.system_status = f"Complete the earlier steps before {STEP_TITLES[step]}"
            self._refresh_status()
            return
        self.wizard.reopen(step)
        self.banner = ""
        self.system_status = ""
        self._refresh_all()

    def _open_contact(self) -> None:
        self.push_screen(ContactModal(self.wizard), callback=self._contact_closed)

    def _contact_closed(self, confirmed: bool | None) -> None:
        self._log_debug(f"contact_closed confirmed={confirmed}")
        self._refresh_all()

    def _open_placard(self) -> None:
        self.push_screen(PlacardModal(self.wizard, on_change=self._refresh_all))

    def _choice_rows(self) -> list[ChoiceRow]:
        if not self.catalog.ordering_enabled:
            return []
        wizard = self.wizard
        draft = wizard.draft
        step = wizard.active_step
        now = wizard.clock()

        if step is StepId.DATE:
            return [
                ChoiceRow(
                    label=format_date_option(option),
                    action=lambda d=option.pickup_date: wizard.select_date(d),
                    selected=draft.pickup_date == option.pickup_date,
                )
                for option in wizard.gate.available_dates(now, DATE_PICKER_DAYS)
            ]

        if step is StepId.TIME:
            if draft.pickup_date is None:
                return []
            day = wizard.gate.slots_for(draft.pickup_date, now)
            return [
                ChoiceRow(
                    label=format_slot_option(option),
                    action=lambda s=option.slot: wizard.select_slot(s),
                    enabled=option.selectable,
                    selected=draft.slot == option.slot,
                )
                for option in day.slots
            ]

        if step is StepId.CRUST:
            return [
                ChoiceRow(
                    label=format_crust_option(option),
                    action=lambda option_id=option.option_id: wizard.select_crust(option_id),
                    selected=draft.crust_id == option.option_id,
                )
                for option in self.catalog.crusts
            ]

        if step is StepId.QUANTITY:
            return [ChoiceRow(label=f"Continue with {draft.quantity}", action=wizard.confirm_active)]

        if step is StepId.EXTRAS:
            rows = [
                ChoiceRow(
                    label=format_price(option.label, option.price_cents) + " per cake"
                    if option.price_cents
                    else option.label,
                    action=lambda option_id=option.option_id: wizard.set_add_on(option_id),
                    selected=draft.add_on_id == option.option_id,
                )
                for option in self.catalog.add_ons
            ]
            if self.catalog.placard_enabled and self.catalog.placards:
                placard = self.catalog.placard(draft.placard_id)
                placard_label = "Placard: none"
                if placard is not None:
                    placard_label = f"Placard: {draft.placard_text or placard.label}"
                rows.append(ChoiceRow(label=f"{placard_label}  (Enter to change)", action=self._open_placard))
            rows.append(ChoiceRow(label="Continue", action=wizard.confirm_active))
            return rows

        if step is StepId.CONTACT:
            return [ChoiceRow(label="Enter contact details", action=self._open_contact)]

        return [ChoiceRow(label="Place order (Ctrl+S)", action=self.action_submit_order)]

    def _visible_rows(self, widget: Static) -> int:
        height = widget.size.height
        if height <= 0:
            return 8
        return max(1, height)

    def _window_bounds(self, total: int, rows: int, selected: int | None) -> tuple[int, int]:
        if total <= 0:
            return (0, 0)

        rows = max(1, rows)
        if total <= rows:
            return (0, total)

        if selected is None:
            start = 0
        else:
            start = max(0, selected - rows // 2)
            start = min(start, total - rows)

        return (start, start + rows)

    def _refresh_all(self) -> None:
        self._refresh_steps()
        self._refresh_choices()
        self._refresh_summary()
        self._refresh_status()

    def _refresh_steps(self) -> None:
        try:
            steps_widget = self.query_one("#steps-list", Static)
        except NoMatches:
            return

        lines = Text()
        for idx, step in enumerate(STEP_ORDER):
            if idx > 0:
                lines.append("\n\n")
            status = self.wizard.status(step)
            summary = self.wizard.summary(step) if status is not StepStatus.PENDING or self._has_value(step) else ""
            lines.append_text(
                format_step_header(idx + 1, STEP_TITLES[step], status, summary, optional=step in OPTIONAL_STEPS)
            )
        steps_widget.update(lines)

    def _has_value(self, step: StepId) -> bool:
        draft = self.wizard.draft
        if step is StepId.DATE:
            return draft.pickup_date is not None
        if step is StepId.TIME:
            return draft.slot is not None
        if step is StepId.CONTACT:
            return bool(draft.contact.name.strip())
        return False

    def _refresh_choices(self) -> None:
        try:
            title_widget = self.query_one("#choices-title", Static)
            notice_widget = self.query_one("#notice", Static)
            choices_widget = self.query_one("#choices", Static)
        except NoMatches:
            return

        if not self.catalog.ordering_enabled:
            title_widget.update("Ordering unavailable")
            notice_widget.update("")
            message = "We're not accepting orders online right now."
            if self.catalog.pickup_phone:
                message += f"\nPlease call {self.catalog.pickup_phone} to order."
            choices_widget.update(message)
            return

        step = self.wizard.active_step
        if step is None:
            title_widget.update("Review & Submit")
        else:
            title_widget.update(f"{STEP_ORDER.index(step) + 1}. {STEP_TITLES[step]}")
        notice_widget.update(format_field_errors(self.wizard.field_errors))

        rows = self._choice_rows()
        if step is StepId.QUANTITY:
            choices_widget.update(self._quantity_text(rows))
            return
        if not rows:
            choices_widget.update("No options available")
            return

        if self.cursor_index >= len(rows):
            self.cursor_index = 0

        visible_rows = self._visible_rows(choices_widget)
        start, end = self._window_bounds(len(rows), visible_rows, self.cursor_index)

        lines = Text()
        if start > 0:
            lines.append("⋮\n", style="dim")

        for idx in range(start, end):
            if idx > start:
                lines.append("\n")
            row = rows[idx]
            pointer = "➤ " if idx == self.cursor_index else "  "
            mark = "(•) " if row.selected else ""
            style = "bold" if row.selected else ("dim" if not row.enabled else "")
            lines.append(f"{pointer}{mark}{row.label}", style=style)

        if end < len(rows):
            lines.append("\n⋮", style="dim")

        choices_widget.update(lines)

    def _quantity_text(self, rows: list[ChoiceRow]) -> Text:
        draft = self.wizard.draft
        text = Text()
        text.append("  -  ", style="bold")
        text.append(f" {draft.quantity} ", style="bold reverse")
        text.append("  +  ", style="bold")
        text.append("\n\nPress +/- to change the number of cakes.\n\n", style="dim")
        pointer = "➤ " if self.cursor_index == 0 else "  "
        text.append(f"{pointer}{rows[0].label}")
        return text

    def _refresh_summary(self) -> None:
        try:
            summary_widget = self.query_one("#summary", Static)
        except NoMatches:
            return

        if not self.catalog.ordering_enabled:
            summary_widget.update(f"Base price: {format_cents(self.catalog.base_price_cents)}")
            return
        summary_widget.update(format_price_lines(self.wizard.price_lines(), self.wizard.total_cents()))

    def _refresh_status(self) -> None:
        try:
            status_widget = self.query_one("#status-bar", Static)
        except NoMatches:
            return

        text = Text()
        if self.banner:
            text.append(self.banner, style="bold #ffb3b3")
            text.append("\n")
        text.append_text(self._submit_hint())
        if self.system_status:
            text.append(f"  {self.system_status}", style="#dddddd")
        status_widget.update(text)

    def _submit_hint(self) -> Text:
        if not self.catalog.ordering_enabled:
            return Text("Ctrl+Q quit", style="dim")
        if self.tracker.in_flight:
            return Text("Submitting...", style="bold #f2b134")
        if self.wizard.can_submit():
            return Text("Ctrl+S Place order", style="bold #5fbf72")
        return Text("Ctrl+S Place order (complete all steps)", style="dim")

    @property
    def submit_enabled(self) -> bool:
        return self.catalog.ordering_enabled and self.wizard.can_submit() and not self.tracker.in_flight
