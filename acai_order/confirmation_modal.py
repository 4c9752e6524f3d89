"""Order placed modal screen."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.screen import ModalScreen
from textual.widgets import Static

from acai_order.data import parse_slot_value
from acai_order.models import Catalog, OrderConfirmation


class ConfirmationModal(ModalScreen[None]):
    """Shows the order number and pickup details of a placed order."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("enter", "close", "Close"),
        ("q", "close", "Close"),
    ]

    CSS = """
    ConfirmationModal {
        align: center middle;
        background: $background 60%;
    }

    #confirmation-dialog {
        width: 60;
        height: auto;
        border: round #5fbf72;
        background: $panel;
        padding: 1 2;
    }

    #confirmation-title {
        text-style: bold;
        color: #5fbf72;
        margin-bottom: 1;
    }

    #confirmation-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    def __init__(self, confirmation: OrderConfirmation, catalog: Catalog) -> None:
        super().__init__()
        self.confirmation = confirmation
        self.catalog = catalog

    def compose(self) -> ComposeResult:
        with Container(id="confirmation-dialog"):
            yield Static("Order placed!", id="confirmation-title")
            yield Static(self._details(), id="confirmation-body")
            yield Static("Enter/Esc start a new order", id="confirmation-help")

    def _details(self) -> Text:
        confirmation = self.confirmation
        text = Text(style="white")
        text.append("Order #: ")
        text.append(confirmation.order_number, style="bold")
        if confirmation.formatted_total:
            text.append(f"\nTotal: {confirmation.formatted_total}")
        if confirmation.pickup_date:
            pickup = confirmation.pickup_date
            if confirmation.pickup_time:
                pickup = f"{pickup} {self._time_label(confirmation.pickup_time)}"
            text.append(f"\nPickup: {pickup}")
        if self.catalog.pickup_location:
            text.append(f"\nLocation: {self.catalog.pickup_location}")
        if self.catalog.pickup_instructions:
            text.append(f"\n{self.catalog.pickup_instructions}", style="dim")
        if self.catalog.pickup_phone:
            text.append(f"\nQuestions? Call {self.catalog.pickup_phone}")
        return text

    @staticmethod
    def _time_label(value: str) -> str:
        try:
            return parse_slot_value(value).label
        except ValueError:
            return value

    def action_close(self) -> None:
        self.dismiss()
