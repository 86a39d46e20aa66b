"""SMTP mail transport.

Built once at startup from settings and injected into
``ReceiptDelivery``.  Sends a single message per call with no retries;
any SMTP or socket failure surfaces as ``TransportError``.

Safety: recipient addresses are never logged, only the order reference.
"""
from __future__ import annotations

import logging
import mimetypes
import smtplib
from dataclasses import dataclass, field
from email.message import EmailMessage
from pathlib import Path

from app.receipts.errors import TransportError

logger = logging.getLogger(__name__)


@dataclass
class Attachment:
    filename: str
    path: Path


@dataclass
class OutboundMessage:
    """One receipt email.  Constructed per request, never persisted."""

    sender: str
    to: str
    subject: str
    html_body: str
    bcc: str | None = None
    attachments: list[Attachment] = field(default_factory=list)
    reference: str = ""

    def envelope_recipients(self) -> list[str]:
        return [addr for addr in (self.to, self.bcc) if addr]

    def to_email_message(self) -> EmailMessage:
        """Build the MIME message.  ``Bcc`` stays out of the headers."""
        msg = EmailMessage()
        msg["Subject"] = self.subject
        msg["From"] = self.sender
        msg["To"] = self.to
        msg.set_content("Your receipt is attached. View this message in an HTML-capable client.")
        msg.add_alternative(self.html_body, subtype="html")
        for attachment in self.attachments:
            ctype, _ = mimetypes.guess_type(attachment.filename)
            maintype, subtype = (ctype or "application/octet-stream").split("/", 1)
            msg.add_attachment(
                Path(attachment.path).read_bytes(),
                maintype=maintype,
                subtype=subtype,
                filename=attachment.filename,
            )
        return msg


class SmtpTransport:
    """Send messages through an authenticated SMTP relay."""

    def __init__(
        self,
        host: str,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
        timeout: float = 30.0,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings) -> "SmtpTransport":
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
            timeout=settings.smtp_timeout,
        )

    def send(self, message: OutboundMessage) -> list[str]:
        """Send *message* and return the envelope recipients the server accepted."""
        recipients = message.envelope_recipients()
        try:
            mime = message.to_email_message()
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls()
                if self.username and self.password:
                    server.login(self.username, self.password)
                refused = server.send_message(
                    mime, from_addr=message.sender, to_addrs=recipients
                )
        except smtplib.SMTPRecipientsRefused as exc:
            detail = "; ".join(
                f"{code} {err.decode(errors='replace') if isinstance(err, bytes) else err}"
                for code, err in exc.recipients.values()
            )
            logger.warning("Recipients refused for order %s: %s", message.reference, detail)
            raise TransportError(f"Recipient rejected: {detail}") from exc
        except smtplib.SMTPResponseException as exc:
            err = exc.smtp_error
            text = err.decode(errors="replace") if isinstance(err, bytes) else str(err)
            logger.warning(
                "SMTP error %s for order %s: %s", exc.smtp_code, message.reference, text
            )
            raise TransportError(text, code=exc.smtp_code) from exc
        except (smtplib.SMTPException, OSError, ValueError) as exc:
            logger.warning("SMTP failure for order %s: %s", message.reference, exc)
            raise TransportError(str(exc) or exc.__class__.__name__) from exc

        accepted = [addr for addr in recipients if addr not in refused]
        logger.info(
            "Delivered receipt for order %s (%d/%d recipients accepted)",
            message.reference,
            len(accepted),
            len(recipients),
        )
        return accepted
