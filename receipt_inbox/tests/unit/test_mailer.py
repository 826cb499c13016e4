"""Unit tests for the SMTP mailer."""

import smtplib
from email.message import EmailMessage
from unittest.mock import patch

import pytest

from receipt_inbox.core.exceptions import ReplyDeliveryError
from receipt_inbox.services.mailer import SMTPMailer


def _message():
    message = EmailMessage()
    message["From"] = "receipts@example.com"
    message["To"] = "alice@example.com"
    message["Subject"] = "Re: order"
    message.set_content("hi")
    return message


class TestSMTPMailer:

    def test_send_with_login(self):
        mailer = SMTPMailer(host="smtp.test", port=2525, username="u", password="p", starttls=True)

        with patch("receipt_inbox.services.mailer.smtplib.SMTP") as smtp_cls:
            smtp = smtp_cls.return_value.__enter__.return_value
            mailer.send(_message())

        smtp_cls.assert_called_once_with("smtp.test", 2525, timeout=30.0)
        smtp.starttls.assert_called_once()
        smtp.login.assert_called_once_with("u", "p")
        smtp.send_message.assert_called_once()

    def test_send_without_auth(self):
        mailer = SMTPMailer(host="smtp.test", port=25, username="", password="", starttls=False)

        with patch("receipt_inbox.services.mailer.smtplib.SMTP") as smtp_cls:
            smtp = smtp_cls.return_value.__enter__.return_value
            mailer.send(_message())

        smtp.starttls.assert_not_called()
        smtp.login.assert_not_called()

    def test_smtp_error_wrapped(self):
        mailer = SMTPMailer(host="smtp.test", port=25, username="", password="", starttls=False)

        with patch("receipt_inbox.services.mailer.smtplib.SMTP") as smtp_cls:
            smtp = smtp_cls.return_value.__enter__.return_value
            smtp.send_message.side_effect = smtplib.SMTPRecipientsRefused({})

            with pytest.raises(ReplyDeliveryError):
                mailer.send(_message())
