"""FastAPI dependency injection: mail transport, renderer and Stripe gateway.

Collaborators are built once per process from settings and shared by
reference.  Tests swap them with ``app.dependency_overrides``.
"""
from __future__ import annotations

from functools import lru_cache

from app.core.settings import get_settings
from app.payments.stripe_gateway import StripeGateway
from app.receipts.delivery import ReceiptDelivery
from app.receipts.models import Brand
from app.receipts.pdf_renderer import ReceiptRenderer
from app.receipts.transport import SmtpTransport


@lru_cache(maxsize=1)
def get_receipt_delivery() -> ReceiptDelivery:
    """Return the process-wide receipt coordinator."""
    settings = get_settings()
    brand = Brand.from_settings(settings)
    return ReceiptDelivery(
        renderer=ReceiptRenderer(brand),
        transport=SmtpTransport.from_settings(settings),
        brand=brand,
        mail_from=settings.sender_address,
        scratch_dir=settings.scratch_dir,
        operator_bcc=settings.operator_bcc,
    )


@lru_cache(maxsize=1)
def get_stripe_gateway() -> StripeGateway:
    """Return the process-wide Stripe gateway."""
    return StripeGateway.from_settings(get_settings())
