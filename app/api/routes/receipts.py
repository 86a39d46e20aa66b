"""POST /send-receipt: render and email a PDF receipt.

The body is validated before any I/O; a malformed order is rejected
with 422.  Render and transport failures both map to the same 500
response, with the failing stage logged for support.
"""
from __future__ import annotations

import logging
from decimal import Decimal

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, field_validator

from app.api.deps import get_receipt_delivery
from app.receipts.delivery import ReceiptDelivery
from app.receipts.errors import OrderValidationError
from app.receipts.models import DEFAULT_ITEM_TITLE, RECIPIENT_PATTERN, LineItem, Order

logger = logging.getLogger(__name__)

router = APIRouter(tags=["receipts"])

FAILURE_MESSAGE = "Failed to send receipt email."


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class ReceiptItemBody(BaseModel):
    title: str | None = None
    description: str | None = None
    price: Decimal
    quantity: int = Field(default=1, ge=1)

    @field_validator("price")
    @classmethod
    def finite_price(cls, value: Decimal) -> Decimal:
        if not value.is_finite():
            raise ValueError("price must be finite")
        return value


class SendReceiptBody(BaseModel):
    to: str = Field(pattern=RECIPIENT_PATTERN)
    items: list[ReceiptItemBody]
    subtotal: Decimal
    tax: Decimal
    total_amount: Decimal = Field(alias="totalAmount")

    @field_validator("subtotal", "tax", "total_amount")
    @classmethod
    def finite_amount(cls, value: Decimal) -> Decimal:
        if not value.is_finite():
            raise ValueError("amount must be finite")
        return value

    def to_order(self) -> Order:
        return Order(
            recipient=self.to,
            items=[
                LineItem(
                    title=(item.title or "").strip() or DEFAULT_ITEM_TITLE,
                    description=item.description or None,
                    unit_price=item.price,
                    quantity=item.quantity,
                )
                for item in self.items
            ],
            subtotal=self.subtotal,
            tax=self.tax,
            total=self.total_amount,
        )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@router.post("/send-receipt", summary="Email a PDF receipt for a completed purchase")
async def send_receipt(
    body: SendReceiptBody,
    delivery: ReceiptDelivery = Depends(get_receipt_delivery),
):
    try:
        result = await delivery.deliver(body.to_order())
    except OrderValidationError as exc:
        return JSONResponse(status_code=400, content={"error": str(exc)})
    if not result.ok:
        logger.error(
            "send-receipt failed for order %s at %s stage: %s",
            result.order_ref,
            result.stage,
            result.detail,
        )
        return JSONResponse(status_code=500, content={"error": FAILURE_MESSAGE})
    return {"success": True}
