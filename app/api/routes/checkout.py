"""Stripe checkout routes.

POST /create-checkout-session returns a hosted checkout redirect URL.
POST /create-payment-intent returns a client secret for Stripe.js.
"""
from __future__ import annotations

from decimal import Decimal

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from app.api.deps import get_stripe_gateway
from app.payments.stripe_gateway import PaymentGatewayError, StripeGateway

router = APIRouter(tags=["checkout"])


class CheckoutItemBody(BaseModel):
    title: str | None = None
    description: str | None = None
    price: Decimal = Field(ge=0)
    quantity: int = Field(default=1, ge=1)


class CheckoutSessionBody(BaseModel):
    items: list[CheckoutItemBody] = Field(min_length=1)
    email: str | None = None


class PaymentIntentBody(BaseModel):
    amount: int = Field(gt=0, description="Amount in cents")
    currency: str | None = None
    email: str | None = None


@router.post("/create-checkout-session", summary="Create a Stripe hosted checkout session")
def create_checkout_session(
    body: CheckoutSessionBody,
    gateway: StripeGateway = Depends(get_stripe_gateway),
):
    try:
        url = gateway.create_checkout_session(
            [item.model_dump() for item in body.items],
            customer_email=body.email,
        )
    except PaymentGatewayError:
        return JSONResponse(status_code=500, content={"error": "Checkout session failed"})
    return {"url": url}


@router.post("/create-payment-intent", summary="Create a Stripe payment intent")
def create_payment_intent(
    body: PaymentIntentBody,
    gateway: StripeGateway = Depends(get_stripe_gateway),
):
    try:
        client_secret = gateway.create_payment_intent(
            body.amount, currency=body.currency, receipt_email=body.email
        )
    except PaymentGatewayError:
        return JSONResponse(status_code=500, content={"error": "Payment intent failed"})
    return {"clientSecret": client_secret}
