"""Receipt delivery coordinator.

render -> compose -> send -> cleanup, for one order at a time.  Each
call owns a uniquely named scratch PDF so concurrent deliveries never
share a file, and that file is removed on every exit path, including
cancellation.  Failures are reported in the returned ``DeliveryResult``;
nothing is retried here.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from uuid import uuid4

from app.receipts.composer import compose
from app.receipts.errors import CleanupError, DeliveryResult, TransportError
from app.receipts.models import Brand, Order, validate_order
from app.receipts.pdf_renderer import ReceiptRenderer
from app.receipts.transport import Attachment, OutboundMessage, SmtpTransport

logger = logging.getLogger(__name__)

ATTACHMENT_FILENAME = "receipt.pdf"


async def _run_to_completion(func, *args):
    """Run *func* in a worker thread that outlives cancellation of the caller.

    On cancellation the thread is awaited before ``CancelledError`` is
    re-raised, so anything it writes exists by the time cleanup runs.
    """
    future = asyncio.ensure_future(asyncio.to_thread(func, *args))
    try:
        return await asyncio.shield(future)
    except asyncio.CancelledError:
        await asyncio.wait({future})
        raise


def _remove_artifact(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as exc:
        raise CleanupError(f"Could not remove {path.name}: {exc}") from exc


@contextmanager
def scratch_artifact(scratch_dir: str | Path, order_ref: str) -> Iterator[Path]:
    """Yield a fresh scratch path for one receipt; delete it on exit.

    A failed deletion is logged and does not replace the outcome of the
    ``with`` block.
    """
    path = Path(scratch_dir) / f"receipt-{order_ref}-{uuid4().hex}.pdf"
    try:
        yield path
    finally:
        try:
            _remove_artifact(path)
        except CleanupError as exc:
            logger.error("Scratch cleanup failed for order %s: %s", order_ref, exc)


class ReceiptDelivery:
    """Render, email and clean up a receipt for a single order."""

    def __init__(
        self,
        renderer: ReceiptRenderer,
        transport: SmtpTransport,
        brand: Brand,
        mail_from: str,
        scratch_dir: str | Path,
        operator_bcc: str | None = None,
    ) -> None:
        self.renderer = renderer
        self.transport = transport
        self.brand = brand
        self.mail_from = mail_from
        self.scratch_dir = Path(scratch_dir)
        self.operator_bcc = operator_bcc

    def _render_artifact(self, order: Order, artifact: Path) -> Path:
        artifact.parent.mkdir(parents=True, exist_ok=True)
        return self.renderer.render(order, artifact)

    async def deliver(self, order: Order) -> DeliveryResult:
        """Send the receipt for *order*.

        ``OrderValidationError`` is raised before any I/O.  Any render or
        transport failure comes back as a failed ``DeliveryResult``.  If
        cancelled mid-render, the render thread is awaited before the
        scratch file is removed.
        """
        validate_order(order)
        ref = order.order_ref

        with scratch_artifact(self.scratch_dir, ref) as artifact:
            try:
                await _run_to_completion(self._render_artifact, order, artifact)
            except Exception as exc:
                logger.error("Could not generate receipt for order %s: %s", ref, exc)
                return DeliveryResult(
                    ok=False, stage="render", order_ref=ref, detail=str(exc)
                )

            composed = compose(order, self.brand)
            message = OutboundMessage(
                sender=self.mail_from,
                to=order.recipient,
                bcc=self.operator_bcc,
                subject=composed.subject,
                html_body=composed.html,
                attachments=[Attachment(filename=ATTACHMENT_FILENAME, path=artifact)],
                reference=ref,
            )

            try:
                accepted = await asyncio.to_thread(self.transport.send, message)
            except TransportError as exc:
                logger.error("Receipt email for order %s was not sent: %s", ref, exc.detail)
                return DeliveryResult(
                    ok=False, stage="transport", order_ref=ref, detail=exc.detail
                )
            except Exception as exc:
                logger.error("Receipt email for order %s failed: %s", ref, exc)
                return DeliveryResult(
                    ok=False, stage="transport", order_ref=ref, detail=str(exc)
                )

        logger.info("Receipt delivered for order %s", ref)
        return DeliveryResult(ok=True, stage="sent", order_ref=ref, accepted=accepted)
