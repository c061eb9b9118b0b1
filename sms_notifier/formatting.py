"""Projection of raw order documents into SMS-ready text.

Order documents are written by the ordering app and are only loosely typed:
any field may be missing, empty or of the wrong type. ``project_order`` turns
such a payload into a fully-populated :class:`OrderSummary` with one fallback
rule per field, and ``render_message`` turns that summary into the alert text.
Both are pure functions.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Mapping, Sequence

NO_ITEMS = "No items"
CENT = Decimal("0.01")

_LEADING_NUMBER = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


@dataclass(frozen=True)
class ExtraLine:
    name: str
    quantity: float
    price: float


@dataclass(frozen=True)
class CartLine:
    name: str
    quantity: float
    unit_price: float
    size: str | None = None
    extras: tuple[ExtraLine, ...] = ()

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class OrderSummary:
    order_id: str
    restaurant: str
    items: tuple[CartLine, ...]
    note: str
    total: str
    hostel: str
    location: str
    customer: str
    contact: str


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _text(value: Any, fallback: str) -> str:
    if value is None or value == "" or value is False:
        return fallback
    if _is_number(value) and value == 0:
        return fallback
    return str(value)


def _parse_float(value: Any) -> float:
    """Read the leading number of ``value``, so ``"5 GHS"`` is 5; anything else is 0."""
    if _is_number(value):
        return float(value)
    if isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if match:
            return float(match.group(0))
    return 0.0


def _money(value: float) -> str:
    # ties round away from zero
    if not math.isfinite(value):
        return f"{value:.2f}"
    return str(Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP))


def _quantity(value: Any, default: float = 1) -> float:
    if value is None:
        return default
    if _is_number(value):
        return value
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return default
    return default


def _fmt_quantity(quantity: float) -> str:
    if isinstance(quantity, float) and quantity.is_integer():
        return str(int(quantity))
    return str(quantity)


def _cart(order: Mapping[str, Any]) -> Sequence[Any]:
    for key in ("cart", "cartItems"):
        value = order.get(key)
        if isinstance(value, list):
            return value
    return []


def _extra(raw: Any) -> ExtraLine:
    raw = raw if isinstance(raw, Mapping) else {}
    quantity = raw.get("quantity")
    return ExtraLine(
        name=_text(raw.get("name"), "Unnamed Extra"),
        quantity=_quantity(quantity) if quantity else 1,
        price=_parse_float(raw.get("price")),
    )


def _cart_line(raw: Any) -> CartLine:
    raw = raw if isinstance(raw, Mapping) else {}
    price = raw.get("price")
    extras = raw.get("extras")
    return CartLine(
        name=_text(raw.get("name"), "Unnamed Item"),
        quantity=_quantity(raw.get("quantity")),
        unit_price=float(price) if _is_number(price) else 0.0,
        size=raw.get("size") or None,
        extras=tuple(_extra(e) for e in extras) if isinstance(extras, list) else (),
    )


def project_order(order_id: str, order: Mapping[str, Any] | None) -> OrderSummary:
    order = order or {}
    delivery = order.get("deliveryDetails")
    if not isinstance(delivery, Mapping):
        delivery = {}
    total = order.get("totalAmount")

    return OrderSummary(
        order_id=order_id,
        restaurant=_text(order.get("restaurantName"), "N/A"),
        items=tuple(_cart_line(item) for item in _cart(order)),
        note=_text(delivery.get("note"), "None"),
        total=_money(total) if _is_number(total) else "0.00",
        hostel=_text(delivery.get("hostel"), "N/A"),
        location=_text(delivery.get("location"), "-"),
        customer=_text(order.get("userName"), "Unknown"),
        contact=_text(delivery.get("contactNumber"), "-"),
    )


def render_item(line: CartLine, currency: str = "GHC") -> str:
    size = f" ({line.size})" if line.size else ""
    text = (
        f"{_fmt_quantity(line.quantity)}x {line.name}{size}"
        f" - {currency}{_money(line.line_total)}"
    )
    if line.extras:
        extras = "\n".join(
            f" - {e.name} ({currency}{_money(e.price)}) {_fmt_quantity(e.quantity)}x"
            for e in line.extras
        )
        text += f"\nExtras:\n{extras}"
    return text


def render_message(summary: OrderSummary, currency: str = "GHC") -> str:
    items = "\n".join(render_item(line, currency) for line in summary.items)
    return "\n".join(
        [
            "New Order Received!",
            "",
            f"Restaurant: {summary.restaurant}",
            "Items:",
            items or NO_ITEMS,
            f"Note: {summary.note}",
            f"Total: {currency}{summary.total}",
            "",
            f"Location: {summary.hostel}, Room {summary.location}",
            f"Customer: {summary.customer}",
            f"Contact: {summary.contact}",
            "",
            f"Order ID: {summary.order_id}",
        ]
    )
