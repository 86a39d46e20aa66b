"""Thin wrapper over the Stripe API for hosted checkout and payment intents.

The secret key is passed on every call instead of being assigned to the
module-global ``stripe.api_key``.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

import stripe

from app.receipts.money import format_cents, to_cents

logger = logging.getLogger(__name__)

DEFAULT_ITEM_NAME = "Unnamed Product"
DEFAULT_ITEM_DESCRIPTION = "No description"
CHECKOUT_SOURCE = "StephensCode Cart"


class PaymentGatewayError(Exception):
    """Stripe rejected or failed a request."""


def build_line_items(items: Sequence[Mapping[str, Any]], currency: str) -> list[dict]:
    """Map cart items to Stripe ``line_items`` entries."""
    return [
        {
            "price_data": {
                "currency": currency,
                "unit_amount": to_cents(item.get("price")),
                "product_data": {
                    "name": item.get("title") or DEFAULT_ITEM_NAME,
                    "description": item.get("description") or DEFAULT_ITEM_DESCRIPTION,
                },
            },
            "quantity": item.get("quantity") or 1,
        }
        for item in items
    ]


class StripeGateway:
    """Create Stripe checkout sessions and payment intents."""

    def __init__(self, api_key: str | None, frontend_url: str, currency: str = "usd") -> None:
        self.api_key = api_key
        self.frontend_url = frontend_url.rstrip("/")
        self.currency = currency

    @classmethod
    def from_settings(cls, settings) -> "StripeGateway":
        return cls(
            api_key=settings.stripe_secret_key,
            frontend_url=settings.frontend_url,
            currency=settings.currency,
        )

    def _require_key(self) -> str:
        if not self.api_key:
            raise PaymentGatewayError("Stripe secret key is not configured")
        return self.api_key

    def create_checkout_session(
        self,
        items: Sequence[Mapping[str, Any]],
        customer_email: str | None = None,
    ) -> str:
        """Create a hosted checkout session and return its redirect URL."""
        api_key = self._require_key()
        try:
            session = stripe.checkout.Session.create(
                api_key=api_key,
                payment_method_types=["card"],
                mode="payment",
                customer_email=customer_email,
                line_items=build_line_items(items, self.currency),
                metadata={"source": CHECKOUT_SOURCE},
                success_url=f"{self.frontend_url}/success",
                cancel_url=f"{self.frontend_url}/pricing",
            )
        except stripe.StripeError as exc:
            logger.error("Stripe checkout session error: %s", exc)
            raise PaymentGatewayError(str(exc)) from exc
        logger.info("Created checkout session %s (%d items)", session.id, len(items))
        return session.url

    def create_payment_intent(
        self,
        amount_cents: int,
        currency: str | None = None,
        receipt_email: str | None = None,
    ) -> str:
        """Create a card payment intent and return its client secret."""
        api_key = self._require_key()
        params: dict[str, Any] = {
            "amount": amount_cents,
            "currency": currency or self.currency,
            "automatic_payment_methods": {"enabled": True},
        }
        if receipt_email:
            params["receipt_email"] = receipt_email
        try:
            intent = stripe.PaymentIntent.create(api_key=api_key, **params)
        except stripe.StripeError as exc:
            logger.error("Stripe payment intent error: %s", exc)
            raise PaymentGatewayError(str(exc)) from exc
        logger.info("Created payment intent %s for %s", intent.id, format_cents(amount_cents))
        return intent.client_secret
