from __future__ import annotations

import os
from decimal import Decimal
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from app.receipts.models import Brand, LineItem, Order


class FakeHTML:
    """Stand-in for ``weasyprint.HTML`` that writes the HTML source as the 'PDF'."""

    def __init__(self, string: str, base_url: str | None = None) -> None:
        self.string = string
        self.base_url = base_url

    def write_pdf(self, target: str) -> None:
        Path(target).write_text(self.string, encoding="utf-8")


@pytest.fixture()
def fake_weasyprint():
    module = SimpleNamespace(HTML=FakeHTML)
    with patch.dict("sys.modules", {"weasyprint": module}):
        yield module


@pytest.fixture()
def brand() -> Brand:
    return Brand(
        name="StephensCode",
        support_email="support@example.com",
        support_url="https://example.com/support",
        logo_url="https://cdn.example.com/logo.png",
    )


@pytest.fixture()
def widget_order() -> Order:
    return Order(
        recipient="buyer@example.com",
        items=[LineItem(title="Widget", unit_price=Decimal("19.99"))],
        subtotal=Decimal("19.99"),
        tax=Decimal("1.25"),
        total=Decimal("21.24"),
    )


@pytest.fixture
def client(monkeypatch: pytest.MonkeyPatch, tmp_path) -> TestClient:
    monkeypatch.setenv("SCRATCH_DIR", str(tmp_path))

    from app.api.deps import get_receipt_delivery, get_stripe_gateway
    from app.core.settings import get_settings

    get_settings.cache_clear()
    get_receipt_delivery.cache_clear()
    get_stripe_gateway.cache_clear()

    from app.main import app

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    get_settings.cache_clear()
    get_receipt_delivery.cache_clear()
    get_stripe_gateway.cache_clear()
    os.environ.pop("SCRATCH_DIR", None)
