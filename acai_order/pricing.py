"""Order total computation in integer cents."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from acai_order.models import Catalog, OrderDraft


@dataclass(frozen=True)
class PriceLine:
    """One row of the order summary breakdown."""

    label: str
    amount_cents: int


def format_cents(cents: int) -> str:
    """Format minor units as a USD string, e.g. ``$62.00``."""
    sign = "-" if cents < 0 else ""
    dollars, remainder = divmod(abs(cents), 100)
    return f"{sign}${dollars:,}.{remainder:02d}"


def to_cents(value: object) -> int:
    """Convert a decimal amount (``"4.50"``, ``4.5``) to integer cents."""
    try:
        amount = Decimal(str(value).strip().lstrip("$"))
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"Invalid money amount: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"Invalid money amount: {value!r}")
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def unit_delta_cents(draft: OrderDraft, catalog: Catalog) -> int:
    """Per-cake price delta from the crust and topping add-on choices."""
    delta = 0
    crust = catalog.crust(draft.crust_id)
    if crust is not None:
        delta += crust.price_cents
    add_on = catalog.add_on(draft.add_on_id)
    if add_on is not None:
        delta += add_on.price_cents
    return delta


def flat_charges_cents(draft: OrderDraft, catalog: Catalog) -> list[int]:
    """Charges applied once per order regardless of quantity."""
    placard = catalog.placard(draft.placard_id)
    if placard is None:
        return []
    return [placard.price_cents]


def order_total(draft: OrderDraft, catalog: Catalog) -> int:
    """(base + delta) * quantity + sum(flat charges)."""
    unit = catalog.base_price_cents + unit_delta_cents(draft, catalog)
    return unit * draft.quantity + sum(flat_charges_cents(draft, catalog))


def price_lines(draft: OrderDraft, catalog: Catalog) -> list[PriceLine]:
    """Itemised breakdown whose amounts always sum to ``order_total``."""
    qty = draft.quantity
    lines = [PriceLine(f"{catalog.name} × {qty}", catalog.base_price_cents * qty)]

    crust = catalog.crust(draft.crust_id)
    if crust is not None and crust.price_cents:
        lines.append(PriceLine(f"{crust.label} × {qty}", crust.price_cents * qty))

    add_on = catalog.add_on(draft.add_on_id)
    if add_on is not None and add_on.price_cents:
        lines.append(PriceLine(f"{add_on.label} × {qty}", add_on.price_cents * qty))

    placard = catalog.placard(draft.placard_id)
    if placard is not None and placard.price_cents:
        lines.append(PriceLine(f"Placard: {placard.label}", placard.price_cents))

    return lines
