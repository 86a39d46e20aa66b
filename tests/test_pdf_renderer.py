"""Tests for app/receipts/pdf_renderer.py.

WeasyPrint is replaced with a fake that writes the HTML source to the
target path - no real PDF rendering needed.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from app.receipts.errors import OrderValidationError
from app.receipts.models import Brand, LineItem, Order
from app.receipts.pdf_renderer import ReceiptRenderer, load_template


def _order(items: list[LineItem], subtotal="0", tax="0", total="0") -> Order:
    return Order(
        recipient="buyer@example.com",
        items=items,
        subtotal=Decimal(subtotal),
        tax=Decimal(tax),
        total=Decimal(total),
    )


# ===========================================================================
# build_html
# ===========================================================================

class TestBuildHtml:
    def test_totals_block(self, brand, widget_order):
        html = ReceiptRenderer(brand).build_html(widget_order)

        assert "Subtotal: $19.99" in html
        assert "Tax (6.25%): $1.25" in html
        assert "Total: $21.24" in html

    def test_sections_in_order(self, brand, widget_order):
        html = ReceiptRenderer(brand).build_html(widget_order)

        positions = [
            html.index('class="band"'),
            html.index("Purchase Receipt"),
            html.index('class="items"'),
            html.index('class="totals"'),
            html.index("Thank you for your purchase!"),
        ]
        assert positions == sorted(positions)

    def test_items_in_input_order_with_prices(self, brand):
        order = _order(
            [
                LineItem(title="Alpha", unit_price=Decimal("1.50")),
                LineItem(title="Beta", unit_price=Decimal("2")),
            ],
            subtotal="3.50",
        )
        html = ReceiptRenderer(brand).build_html(order)

        assert html.index("Alpha") < html.index("Beta")
        assert '<div class="item-price">$1.50</div>' in html
        assert '<div class="item-price">$2.00</div>' in html

    def test_description_only_when_present(self, brand):
        order = _order(
            [
                LineItem(title="Plain", unit_price=Decimal("1")),
                LineItem(title="Fancy", unit_price=Decimal("2"), description="Gold plated"),
            ]
        )
        html = ReceiptRenderer(brand).build_html(order)

        assert html.count('class="item-desc"') == 1
        assert "Gold plated" in html

    def test_empty_items_renders_heading_and_totals(self, brand):
        html = ReceiptRenderer(brand).build_html(_order([]))

        assert "<h2>Items</h2>" in html
        assert 'class="item"' not in html
        assert "Total: $0.00" in html

    def test_escapes_item_text(self, brand):
        order = _order([LineItem(title="<script>x</script>", unit_price=Decimal("1"))])
        html = ReceiptRenderer(brand).build_html(order)

        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    def test_quantity_shown_when_more_than_one(self, brand):
        order = _order([LineItem(title="Sticker", unit_price=Decimal("1"), quantity=3)])
        html = ReceiptRenderer(brand).build_html(order)

        assert "Sticker &times; 3" in html

    def test_timestamp_uses_supplied_clock(self, brand, widget_order):
        html = ReceiptRenderer(brand).build_html(widget_order, now=datetime(2026, 3, 4, 15, 30))

        assert "March 04, 2026 at 03:30 PM" in html

    def test_footer_links(self, brand, widget_order):
        html = ReceiptRenderer(brand).build_html(widget_order)

        assert '<a href="https://example.com/support">' in html
        assert '<a href="mailto:support@example.com">' in html

    def test_logo_included_when_file_exists(self, tmp_path, widget_order):
        logo = tmp_path / "logo.png"
        logo.write_bytes(b"\x89PNG")
        brand = Brand(
            name="Acme",
            support_email="s@acme.test",
            support_url="https://acme.test",
            logo_path=str(logo),
        )
        html = ReceiptRenderer(brand).build_html(widget_order)

        assert logo.resolve().as_uri() in html

    def test_missing_logo_file_is_skipped(self, tmp_path, widget_order):
        brand = Brand(
            name="Acme",
            support_email="s@acme.test",
            support_url="https://acme.test",
            logo_path=str(tmp_path / "nope.png"),
        )
        html = ReceiptRenderer(brand).build_html(widget_order)

        assert 'class="logo"' not in html

    def test_invalid_order_raises(self, brand, widget_order):
        widget_order.subtotal = "oops"
        with pytest.raises(OrderValidationError):
            ReceiptRenderer(brand).build_html(widget_order)


# ===========================================================================
# render
# ===========================================================================

class TestRender:
    def test_writes_pdf_to_path(self, brand, widget_order, tmp_path, fake_weasyprint):
        out = tmp_path / "receipt.pdf"
        result = ReceiptRenderer(brand).render(widget_order, out)

        assert result == out
        assert "Widget" in out.read_text(encoding="utf-8")

    def test_passes_template_dir_as_base_url(self, brand, widget_order, tmp_path):
        mock_wp = MagicMock()
        with patch.dict("sys.modules", {"weasyprint": mock_wp}):
            renderer = ReceiptRenderer(brand)
            renderer.render(widget_order, tmp_path / "r.pdf")

        kwargs = mock_wp.HTML.call_args.kwargs
        assert kwargs["base_url"] == str(renderer.template_dir)
        mock_wp.HTML.return_value.write_pdf.assert_called_once_with(str(tmp_path / "r.pdf"))

    def test_write_failure_propagates(self, brand, widget_order, tmp_path):
        def _fail(target):
            raise PermissionError(13, "Permission denied", target)

        failing = SimpleNamespace(
            HTML=lambda string, base_url=None: SimpleNamespace(write_pdf=_fail)
        )
        with patch.dict("sys.modules", {"weasyprint": failing}):
            with pytest.raises(OSError):
                ReceiptRenderer(brand).render(widget_order, tmp_path / "r.pdf")

    def test_recipient_not_in_logs(self, brand, widget_order, tmp_path, fake_weasyprint, caplog):
        with caplog.at_level("DEBUG"):
            ReceiptRenderer(brand).render(widget_order, tmp_path / "r.pdf")

        assert "buyer@example.com" not in caplog.text
        assert widget_order.order_ref in caplog.text


class TestLoadTemplate:
    def test_raises_when_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="No receipt template"):
            load_template(tmp_path, "receipt.html")
