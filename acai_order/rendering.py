"""Rendering helpers for step headers, option rows and the price summary."""

from __future__ import annotations

from rich.text import Text

from acai_order.availability import DateOption, SlotOption, SlotReason
from acai_order.models import Catalog, CrustOption, StepStatus
from acai_order.pricing import PriceLine, format_cents

_SLOT_REASON_TAGS: dict[SlotReason, str] = {
    SlotReason.TOO_SOON: "Too soon",
    SlotReason.BLOCKED: "Unavailable",
    SlotReason.FULL: "Fully booked",
}


def badge_style(status: StepStatus) -> str:
    """Return a consistent badge style for step states."""
    if status is StepStatus.COMPLETE:
        return "bold #0b1f0f on #5fbf72"
    if status is StepStatus.ACTIVE:
        return "bold #ffffff on #b23a48"
    return "#9a9a9a on #3a3a3a"


def format_step_header(number: int, title: str, status: StepStatus, summary: str, optional: bool = False) -> Text:
    """Render one step row: badge, title and the collapsed summary."""
    text = Text()
    badge = "✓" if status is StepStatus.COMPLETE else str(number)
    text.append(f" {badge} ", style=badge_style(status))
    title_style = "bold" if status is StepStatus.ACTIVE else ("" if status is StepStatus.COMPLETE else "dim")
    text.append(f" {title}", style=title_style)
    if optional:
        text.append(" (Optional)", style="dim")
    if summary and status is not StepStatus.ACTIVE:
        text.append(f"\n     {summary}", style="dim" if status is StepStatus.PENDING else "#5fbf72")
    return text


def format_date_option(option: DateOption) -> str:
    d = option.pickup_date
    label = f"{d:%a, %b} {d.day}"
    if not option.available:
        return f"{label}  (no slots)"
    count = option.selectable_count
    return f"{label}  ({count} slot{'s' if count != 1 else ''})"


def format_slot_option(option: SlotOption) -> str:
    tag = _SLOT_REASON_TAGS.get(option.reason)
    if tag is None:
        return option.slot.label
    return f"{option.slot.label}  ({tag})"


def format_price(label: str, cents: int) -> str:
    if cents == 0:
        return f"{label}  (included)"
    return f"{label}  +{format_cents(cents)}"


def format_crust_option(option: CrustOption) -> str:
    label = format_price(option.label, option.price_cents)
    if option.description:
        return f"{label} - {option.description}"
    return label


def format_product_heading(catalog: Catalog) -> Text:
    """Product name with its description underneath, when there is one."""
    text = Text(catalog.name, style="bold")
    if catalog.description:
        text.append(f"\n{catalog.description}", style="dim")
    return text


def format_price_lines(lines: list[PriceLine], total_cents: int) -> Text:
    """Render the order summary with the total on the last row."""
    text = Text()
    for line in lines:
        text.append(f"{line.label}: {format_cents(line.amount_cents)}\n")
    text.append("Total: ", style="bold")
    text.append(format_cents(total_cents), style="bold #f2b134")
    return text


def format_field_errors(errors: dict[str, str]) -> Text:
    text = Text()
    for idx, message in enumerate(errors.values()):
        if idx > 0:
            text.append("\n")
        text.append(f"! {message}", style="#ffb3b3")
    return text
