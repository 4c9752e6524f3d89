"""Contact details entry modal screen."""

from __future__ import annotations

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Container
from textual.events import Key
from textual.screen import ModalScreen
from textual.widgets import Static

from acai_order.rendering import format_field_errors
from acai_order.wizard import WizardController

# (field key, label, max length)
CONTACT_FIELDS: list[tuple[str, str, int]] = [
    ("name", "Name *", 80),
    ("email", "Email *", 120),
    ("phone", "Phone *", 24),
    ("notes", "Special requests", 200),
]


class ContactModal(ModalScreen[bool]):
    """Collect name, email, phone and notes; dismisses True once the step is confirmed."""

    CSS = """
    ContactModal {
        align: center middle;
        background: $background 60%;
    }

    #contact-dialog {
        width: 64;
        height: auto;
        border: round $secondary;
        background: $panel;
        padding: 1 2;
    }

    #contact-title {
        text-style: bold;
        margin-bottom: 1;
        color: white;
    }

    #contact-fields {
        color: white;
        margin-bottom: 1;
    }

    #contact-error {
        color: #ffb3b3;
        margin-bottom: 1;
    }

    #contact-help {
        color: #dddddd;
    }
    """

    def __init__(self, wizard: WizardController) -> None:
        super().__init__()
        self.wizard = wizard
        draft = wizard.draft
        self.values: dict[str, str] = {
            "name": draft.contact.name,
            "email": draft.contact.email,
            "phone": draft.contact.phone,
            "notes": draft.notes,
        }
        self.field_index = 0
        self.errors: dict[str, str] = {}

    def compose(self) -> ComposeResult:
        with Container(id="contact-dialog"):
            yield Static("Contact Info", id="contact-title")
            yield Static(id="contact-fields")
            yield Static(id="contact-error")
            yield Static(
                "Tab/↑/↓ switch field. Enter confirm. Backspace delete. Esc save and close.",
                id="contact-help",
            )

    def on_mount(self) -> None:
        self._refresh_content()

    def on_key(self, event: Key) -> None:
        if event.key in {"escape", "ctrl+c"}:
            self._store_values()
            self.dismiss(False)
            event.stop()
            return

        if event.key == "enter":
            self._confirm()
            event.stop()
            return

        if event.key in {"tab", "down"}:
            self.field_index = (self.field_index + 1) % len(CONTACT_FIELDS)
            self._refresh_content()
            event.stop()
            return

        if event.key in {"shift+tab", "up"}:
            self.field_index = (self.field_index - 1) % len(CONTACT_FIELDS)
            self._refresh_content()
            event.stop()
            return

        key, _, max_length = CONTACT_FIELDS[self.field_index]
        if event.key == "backspace":
            if self.values[key]:
                self.values[key] = self.values[key][:-1]
                self._refresh_content()
            event.stop()
            return

        if event.is_printable and event.character:
            if len(self.values[key]) < max_length:
                self.values[key] += event.character
            self._refresh_content()
            event.stop()

    def _store_values(self) -> None:
        self.wizard.set_contact(
            name=self.values["name"],
            email=self.values["email"],
            phone=self.values["phone"],
        )
        self.wizard.set_notes(self.values["notes"])

    def _confirm(self) -> None:
        self._store_values()
        if self.wizard.confirm_active():
            self.dismiss(True)
            return
        self.errors = dict(self.wizard.field_errors)
        first_invalid = next(
            (idx for idx, (key, _, _) in enumerate(CONTACT_FIELDS) if key in self.errors),
            self.field_index,
        )
        self.field_index = first_invalid
        self._refresh_content()

    def _refresh_content(self) -> None:
        fields_widget = self.query_one("#contact-fields", Static)
        error_widget = self.query_one("#contact-error", Static)

        content = Text(style="white")
        for idx, (key, label, _) in enumerate(CONTACT_FIELDS):
            if idx > 0:
                content.append("\n")
            focused = idx == self.field_index
            pointer = "➤ " if focused else "  "
            cursor = "|" if focused else ""
            style = "bold white" if focused else "white"
            if key in self.errors:
                style = "bold #ffb3b3"
            content.append(f"{pointer}{label}: {self.values[key]}{cursor}", style=style)
        fields_widget.update(content)
        error_widget.update(format_field_errors(self.errors))
