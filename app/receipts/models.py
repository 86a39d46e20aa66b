"""Order and line-item types plus boundary validation.

Amounts are ``Decimal`` and already rounded to cents by the caller.
``Order.total`` is displayed as supplied and never recomputed from
``subtotal + tax``.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from decimal import Decimal
from uuid import uuid4

from app.receipts.errors import OrderValidationError
from app.receipts.money import to_decimal

DEFAULT_ITEM_TITLE = "Unnamed Product"
# Single address; whitespace and line breaks are rejected.
RECIPIENT_PATTERN = r"^[^@\s]+@[^@\s]+$"


def _new_order_ref() -> str:
    return uuid4().hex[:12]


@dataclass
class LineItem:
    """One purchased product."""

    title: str
    unit_price: Decimal
    description: str | None = None
    quantity: int = 1


@dataclass
class Order:
    """A completed purchase to be receipted."""

    recipient: str
    items: list[LineItem]
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    order_ref: str = field(default_factory=_new_order_ref)


def validate_order(order: Order) -> None:
    """Raise ``OrderValidationError`` unless *order* is safe to render."""
    recipient = order.recipient
    if not isinstance(recipient, str) or not re.fullmatch(RECIPIENT_PATTERN, recipient):
        raise OrderValidationError("recipient must be an email address")
    if not isinstance(order.items, (list, tuple)):
        raise OrderValidationError("items must be a list")
    for index, item in enumerate(order.items):
        if not isinstance(item, LineItem):
            raise OrderValidationError(f"items[{index}] is not a line item")
        if not isinstance(item.title, str) or not item.title.strip():
            raise OrderValidationError(f"items[{index}].title must be non-empty")
        if item.description is not None and not isinstance(item.description, str):
            raise OrderValidationError(f"items[{index}].description must be text")
        if isinstance(item.quantity, bool) or not isinstance(item.quantity, int) or item.quantity < 1:
            raise OrderValidationError(f"items[{index}].quantity must be a positive integer")
        to_decimal(item.unit_price, f"items[{index}].price")
    to_decimal(order.subtotal, "subtotal")
    to_decimal(order.tax, "tax")
    to_decimal(order.total, "totalAmount")


@dataclass(frozen=True)
class Brand:
    """Operator branding and contact details shown on every receipt."""

    name: str
    support_email: str
    support_url: str
    logo_url: str | None = None
    logo_path: str | None = None
    tax_rate: Decimal = Decimal("0.0625")

    @classmethod
    def from_settings(cls, settings) -> "Brand":
        return cls(
            name=settings.brand_name,
            support_email=settings.support_email,
            support_url=settings.support_url,
            logo_url=settings.brand_logo_url,
            logo_path=settings.brand_logo_path,
            tax_rate=settings.tax_rate,
        )
