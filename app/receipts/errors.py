"""Exception types and delivery outcome for the receipt pipeline."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal


class ReceiptError(Exception):
    """Base class for receipt pipeline failures."""


class OrderValidationError(ReceiptError, ValueError):
    """Order payload is missing fields or carries non-numeric amounts."""


class TransportError(ReceiptError):
    """The mail service refused or failed to accept a message."""

    def __init__(self, detail: str, code: int | None = None) -> None:
        super().__init__(detail)
        self.detail = detail
        self.code = code


class CleanupError(ReceiptError, OSError):
    """A scratch artifact could not be removed."""


@dataclass
class DeliveryResult:
    """Outcome of one ``ReceiptDelivery.deliver`` call."""

    ok: bool
    stage: Literal["sent", "render", "transport"]
    order_ref: str
    accepted: list[str] = field(default_factory=list)
    detail: str | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
