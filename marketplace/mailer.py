"""Outbound email over SMTP."""
from __future__ import annotations

import asyncio
import logging
import smtplib
from email.message import EmailMessage

from marketplace.config import Settings
from marketplace.errors import MailDeliveryError

logger = logging.getLogger(__name__)


class Mailer:
    """Send plain-text mail through the configured SMTP relay.

    ``smtplib`` is blocking, so delivery runs in a worker thread to keep the
    event loop free while the relay responds.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    async def send(self, to: str, subject: str, body: str) -> None:
        message = EmailMessage()
        message["From"] = self.settings.sender_address or ""
        message["To"] = to
        message["Subject"] = subject
        message.set_content(body)

        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("SMTP delivery to %s failed: %s", to, exc)
            raise MailDeliveryError() from exc
        logger.info("Sent '%s' mail to %s", subject, to)

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port, timeout=30) as smtp:
            if self.settings.smtp_use_tls:
                smtp.starttls()
            if self.settings.smtp_username and self.settings.smtp_password:
                smtp.login(self.settings.smtp_username, self.settings.smtp_password)
            smtp.send_message(message)
