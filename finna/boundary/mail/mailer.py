"""
SMTP mailer.

Dependencies: aiosmtplib, email
System role: Outgoing notification e-mail
"""

import logging
from email.mime.text import MIMEText

import aiosmtplib

from finna.configs.mail import MailSettings

logger = logging.getLogger(__name__)


class MailError(Exception):
    """Raised when a message cannot be delivered to the SMTP server."""


class Mailer:
    """Sends plain-text e-mail through the configured SMTP server."""

    def __init__(self, settings: MailSettings) -> None:
        self.settings = settings

    async def send(self, to: str, sender: str | None, subject: str, body: str) -> None:
        """
        Send a plain-text message.

        Args:
            to: Recipient address
            sender: Sender address (settings default when None)
            subject: Message subject
            body: Message body

        Raises:
            MailError: If the SMTP exchange fails
        """
        message = MIMEText(body, "plain", "utf-8")
        message["From"] = sender or self.settings.from_address
        message["To"] = to
        message["Subject"] = subject

        try:
            await aiosmtplib.send(
                message,
                hostname=self.settings.host,
                port=self.settings.port,
                username=self.settings.username,
                password=self.settings.password,
                use_tls=self.settings.use_tls,
            )
        except aiosmtplib.SMTPException as e:
            logger.error("Sending mail failed", extra={"to": to, "error": str(e)})
            raise MailError(str(e)) from e
        logger.info("Mail sent", extra={"to": to, "subject": subject})
