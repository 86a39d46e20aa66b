"""PDF receipt renderer.

Builds the receipt as HTML from ``templates/receipt.html`` and converts
it to PDF with WeasyPrint.  Sections, in order: header band, title
block, item list, totals, footer.

``render`` returns only after WeasyPrint has finished writing the file,
so the returned path is safe to attach.  Write failures (``OSError``)
propagate to the caller.
"""
from __future__ import annotations

import logging
from datetime import datetime
from html import escape
from pathlib import Path
from string import Template

from app.receipts.models import Brand, Order, validate_order
from app.receipts.money import format_money, tax_label

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"
TIMESTAMP_FORMAT = "%B %d, %Y at %I:%M %p"


def load_template(template_dir: Path, name: str) -> str:
    path = template_dir / name
    if not path.is_file():
        raise FileNotFoundError(f"No receipt template {name!r} in {template_dir}")
    return path.read_text(encoding="utf-8")


def _logo_block(brand: Brand) -> str:
    if not brand.logo_path:
        return ""
    logo = Path(brand.logo_path)
    if not logo.is_file():
        logger.warning("Brand logo %s not found, rendering without it", logo.name)
        return ""
    return f'<img class="logo" src="{escape(logo.resolve().as_uri())}" alt="" />'


def _item_rows(order: Order) -> str:
    rows: list[str] = []
    for item in order.items:
        title = escape(item.title)
        if item.quantity > 1:
            title = f"{title} &times; {item.quantity}"
        parts = [f'<div class="item-title">{title}</div>']
        if item.description:
            parts.append(f'<div class="item-desc">{escape(item.description)}</div>')
        parts.append(f'<div class="item-price">{format_money(item.unit_price)}</div>')
        rows.append('      <div class="item">' + "".join(parts) + "</div>")
    return "\n".join(rows)


class ReceiptRenderer:
    """Render a purchase receipt PDF via WeasyPrint."""

    def __init__(
        self,
        brand: Brand,
        template_dir: str | Path = DEFAULT_TEMPLATE_DIR,
    ) -> None:
        self.brand = brand
        self.template_dir = Path(template_dir)

    def build_html(self, order: Order, now: datetime | None = None) -> str:
        """Return the receipt document as an HTML string."""
        validate_order(order)
        generated_at = (now or datetime.now().astimezone()).strftime(TIMESTAMP_FORMAT)
        template_html = load_template(self.template_dir, "receipt.html")
        return Template(template_html).safe_substitute(
            brand_name=escape(self.brand.name),
            logo_block=_logo_block(self.brand),
            generated_at=generated_at,
            item_rows=_item_rows(order),
            subtotal=format_money(order.subtotal),
            tax_label=tax_label(self.brand.tax_rate),
            tax=format_money(order.tax),
            total=format_money(order.total),
            support_url=escape(self.brand.support_url),
            support_email=escape(self.brand.support_email),
        )

    def render(self, order: Order, out_path: str | Path, now: datetime | None = None) -> Path:
        """Write the receipt PDF for *order* to *out_path* and return the path."""
        html_content = self.build_html(order, now=now)

        import weasyprint  # lazy import, pulls in Pango/Cairo

        out_path = Path(out_path)
        weasyprint.HTML(string=html_content, base_url=str(self.template_dir)).write_pdf(
            str(out_path)
        )
        logger.info(
            "Rendered receipt for order %s (%d items) to %s",
            order.order_ref,
            len(order.items),
            out_path.name,
        )
        return out_path
