"""Currency formatting shared by the PDF renderer and the email composer."""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from app.receipts.errors import OrderValidationError

CURRENCY_SYMBOL = "$"


def to_decimal(value: object, field_name: str = "amount") -> Decimal:
    """Coerce *value* to ``Decimal`` or raise ``OrderValidationError``.

    Floats go through ``str`` so ``19.99`` stays ``19.99`` rather than
    its binary expansion.
    """
    if isinstance(value, bool) or value is None:
        raise OrderValidationError(f"{field_name} must be numeric")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    else:
        raise OrderValidationError(f"{field_name} must be numeric")
    if not result.is_finite():
        raise OrderValidationError(f"{field_name} must be finite")
    return result


def format_amount(value: object) -> str:
    """Return *value* as a fixed two-decimal string, e.g. ``"19.99"``."""
    return f"{to_decimal(value):.2f}"


def format_money(value: object) -> str:
    return f"{CURRENCY_SYMBOL}{format_amount(value)}"


def format_cents(cents: int) -> str:
    return format_money(Decimal(int(cents)) / 100)


def to_cents(value: object) -> int:
    """Convert a major-unit amount to integer cents, rounding half up."""
    amount = to_decimal(value) * 100
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def tax_label(rate: Decimal) -> str:
    """``Decimal("0.0625")`` -> ``"Tax (6.25%)"``."""
    percent = (to_decimal(rate, "tax_rate") * 100).normalize()
    text = format(percent, "f")
    return f"Tax ({text}%)"
