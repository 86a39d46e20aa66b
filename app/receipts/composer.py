"""HTML email body for a receipt.

Pure function over an ``Order``: no I/O besides reading the template.
The logo is referenced by absolute URL, never inlined.
"""
from __future__ import annotations

from dataclasses import dataclass
from html import escape
from pathlib import Path
from string import Template

from app.receipts.models import Brand, Order, validate_order
from app.receipts.money import format_money, tax_label
from app.receipts.pdf_renderer import DEFAULT_TEMPLATE_DIR, load_template


@dataclass
class ComposedMessage:
    subject: str
    html: str


def compose(
    order: Order,
    brand: Brand,
    template_dir: str | Path = DEFAULT_TEMPLATE_DIR,
) -> ComposedMessage:
    """Return the subject line and HTML body summarising *order*.

    Raises ``OrderValidationError`` when items or amounts are missing or
    non-numeric.
    """
    validate_order(order)

    item_rows = "".join(
        f"<li>{escape(item.title)} &mdash; {format_money(item.unit_price)}</li>"
        for item in order.items
    )
    logo_block = ""
    if brand.logo_url:
        logo_block = (
            f'<img src="{escape(brand.logo_url)}" alt="{escape(brand.name)}" '
            'style="max-height: 60px;" />'
        )

    template_html = load_template(Path(template_dir), "receipt_email.html")
    body = Template(template_html).safe_substitute(
        logo_block=logo_block,
        brand_name=escape(brand.name),
        item_rows=item_rows,
        subtotal=format_money(order.subtotal),
        tax_label=tax_label(brand.tax_rate),
        tax=format_money(order.tax),
        total=format_money(order.total),
        support_email=escape(brand.support_email),
    )
    return ComposedMessage(subject=f"Your {brand.name} Receipt", html=body)
