"""Message placard modal screen."""

from __future__ import annotations

from typing import Callable

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Static

from acai_order.constant import PLACARD_TEXT_MAX_LENGTH
from acai_order.models import PlacardOption
from acai_order.pricing import format_cents
from acai_order.wizard import WizardController


class PlacardModal(ModalScreen[None]):
    """Centered modal to pick a placard and type its message."""

    BINDINGS = [
        ("escape", "close", "Close"),
        ("q", "close", "Close"),
        ("ctrl+c", "close", "Close"),
        ("j", "move_cursor(1)", "Next"),
        ("k", "move_cursor(-1)", "Previous"),
        ("up", "move_cursor(-1)", "Previous"),
        ("down", "move_cursor(1)", "Next"),
        ("enter", "choose_current", "Choose"),
    ]

    CSS = """
    PlacardModal {
        align: center middle;
        background: $background 60%;
    }

    #placard-dialog {
        width: 64;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #placard-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #placard-body {
        margin-bottom: 1;
        color: white;
    }

    #placard-help {
        margin-top: 1;
        color: #dddddd;
    }
    """

    cursor_index = reactive(0)

    def __init__(self, wizard: WizardController, on_change: Callable[[], None]) -> None:
        super().__init__()
        self.wizard = wizard
        self.on_change = on_change
        self.options: list[PlacardOption | None] = [None, *wizard.catalog.placards]
        self.typing_text = False
        self.text_value = ""

    def compose(self) -> ComposeResult:
        with Container(id="placard-dialog"):
            yield Static("Message Placard", id="placard-title")
            yield Static(id="placard-body")
            yield Static(id="placard-help")

    def on_mount(self) -> None:
        selected = self.wizard.draft.placard_id
        for idx, option in enumerate(self.options):
            if option is not None and option.option_id == selected:
                self.cursor_index = idx
        self._refresh_content()

    def on_key(self, event) -> None:
        if not self.typing_text:
            return

        if event.key == "escape":
            self.typing_text = False
            self.text_value = ""
            self._refresh_content()
            event.stop()
            return

        if event.key == "enter":
            self._confirm_text()
            event.stop()
            return

        if event.key == "backspace":
            if self.text_value:
                self.text_value = self.text_value[:-1]
            self._refresh_content()
            event.stop()
            return

        if event.is_printable and event.character:
            if len(self.text_value) < PLACARD_TEXT_MAX_LENGTH:
                self.text_value += event.character
            self._refresh_content()
            event.stop()
            return

        # Ignore all non-text keys while typing.
        event.stop()

    def action_close(self) -> None:
        if self.typing_text:
            self.typing_text = False
            self.text_value = ""
            self._refresh_content()
            return
        self.dismiss()
        self.on_change()

    def action_move_cursor(self, delta: int) -> None:
        if self.typing_text:
            return
        self.cursor_index = (self.cursor_index + delta) % len(self.options)
        self._refresh_content()

    def action_choose_current(self) -> None:
        if self.typing_text:
            return
        option = self.options[self.cursor_index]
        if option is None:
            self.wizard.clear_placard()
            self._refresh_content()
            return

        if option.is_custom:
            self.typing_text = True
            self.text_value = self.wizard.draft.placard_text if self.wizard.draft.placard_id == option.option_id else ""
            self._refresh_content()
            return

        self.wizard.set_placard(option.option_id)
        self._refresh_content()

    def _confirm_text(self) -> None:
        option = self.options[self.cursor_index]
        normalized = self.text_value.strip()
        self.typing_text = False
        self.text_value = ""
        if option is not None and normalized:
            self.wizard.set_placard(option.option_id, normalized)
        self._refresh_content()

    def _refresh_content(self) -> None:
        body = self.query_one("#placard-body", Static)
        help_text = self.query_one("#placard-help", Static)
        draft = self.wizard.draft

        content = Text(style="white")
        for idx, option in enumerate(self.options):
            if idx > 0:
                content.append("\n")
            pointer = "➤ " if idx == self.cursor_index else "  "
            if option is None:
                checked = "(•)" if draft.placard_id is None else "( )"
                content.append(f"{pointer}{checked} No placard", style="bold white" if draft.placard_id is None else "white")
                continue

            is_selected = draft.placard_id == option.option_id
            checked = "(•)" if is_selected else "( )"
            label = option.label
            if option.price_cents:
                label = f"{label}  +{format_cents(option.price_cents)}"
            if self.typing_text and idx == self.cursor_index:
                content.append(f"{pointer}{checked} {option.label}: {self.text_value}|", style="bold white")
            elif is_selected and draft.placard_text and draft.placard_text != option.label:
                content.append(f"{pointer}{checked} {label}: “{draft.placard_text}”", style="bold white")
            else:
                content.append(f"{pointer}{checked} {label}", style="bold white" if is_selected else "white")

        if self.typing_text:
            help_text.update(
                f"Type message ({len(self.text_value)}/{PLACARD_TEXT_MAX_LENGTH}), Enter confirm, Esc cancel typing"
            )
        else:
            help_text.update("J/K/↑/↓ move, Enter choose, Esc/q/Ctrl+C close")
        body.update(content)
