"""
SMTP mailer for outbound replies.
"""

import smtplib
from email.message import EmailMessage

from receipt_inbox.config import settings
from receipt_inbox.core.exceptions import ReplyDeliveryError
from receipt_inbox.core.logging import get_logger

log = get_logger(__name__)


class SMTPMailer:
    """Sends messages through the configured SMTP relay."""

    def __init__(
        self,
        host: str | None = None,
        port: int | None = None,
        username: str | None = None,
        password: str | None = None,
        starttls: bool | None = None,
        timeout: float = 30.0,
    ):
        self.host = host or settings.smtp_host
        self.port = port or settings.smtp_port
        self.username = username if username is not None else settings.smtp_username
        self.password = password if password is not None else settings.smtp_password
        self.starttls = starttls if starttls is not None else settings.smtp_starttls
        self.timeout = timeout

    def send(self, message: EmailMessage) -> None:
        """
        Deliver a message.

        Raises:
            ReplyDeliveryError: on any SMTP or connection failure
        """
        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as smtp:
                if self.starttls:
                    smtp.starttls()
                if self.username and self.password:
                    smtp.login(self.username, self.password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            log.error("reply_send_failed", to=message["To"], error=str(e))
            raise ReplyDeliveryError(f"Failed to send reply: {e}") from e

        log.info("reply_sent", to=message["To"], subject=message["Subject"])
