"""
Shared pytest fixtures for receipt_inbox tests.
"""

from email.message import EmailMessage
from unittest.mock import MagicMock

import pytest

from receipt_inbox.core.models import (
    Category,
    ClassificationResult,
    Currency,
    LineItem,
    Receipt,
)


def build_raw_email(
    subject: str | None = "Your receipt",
    sender: str = "Alice <alice@example.com>",
    recipient: str = "receipts@example.com",
    plain: str | None = None,
    html: str | None = None,
    attachments: list[tuple[str | None, str, bytes]] | None = None,
    message_id: str | None = "<msg-1@example.com>",
) -> bytes:
    """Build raw RFC 822 bytes; attachments are (filename, mime type, content)."""
    msg = EmailMessage()
    if subject is not None:
        msg["Subject"] = subject
    msg["From"] = sender
    msg["To"] = recipient
    if message_id:
        msg["Message-ID"] = message_id

    if plain is not None:
        msg.set_content(plain)
    if html is not None:
        if plain is not None:
            msg.add_alternative(html, subtype="html")
        else:
            msg.set_content(html, subtype="html")

    for filename, content_type, content in attachments or []:
        maintype, subtype = content_type.split("/", 1)
        msg.add_attachment(content, maintype=maintype, subtype=subtype, filename=filename)

    return msg.as_bytes()


@pytest.fixture
def raw_email_factory():
    """Factory for raw email bytes."""
    return build_raw_email


@pytest.fixture
def sample_receipt() -> Receipt:
    """Sample USD receipt with two line items."""
    return Receipt(
        date="20240101",
        company="Acme",
        total_amount="47.50",
        currency=Currency.USD,
        attachment_filename="receipt.pdf",
        category=Category.EQUIPMENT,
        line_items=[
            LineItem(name="Widget", amount="40.00", quantity=1),
            LineItem(name="Cable", amount="2.50", quantity=3),
        ],
    )


@pytest.fixture
def receipt_classification(sample_receipt) -> ClassificationResult:
    return ClassificationResult(is_receipt=True, receipt=sample_receipt)


@pytest.fixture
def rates_response() -> dict:
    """Exchange-rate listing as Airtable returns it."""
    return {
        "records": [
            {"id": "recRate2", "fields": {"Date": "20240102", "JPY per USD": 141.5}},
            {"id": "recRate1", "fields": {"Date": "20240101", "JPY per USD": 141.0}},
        ]
    }


@pytest.fixture
def mock_airtable(rates_response):
    """Airtable client returning rates and a successful insert."""
    airtable = MagicMock()
    airtable.list_records.return_value = rates_response
    insert_response = MagicMock()
    insert_response.status_code = 200
    insert_response.json.return_value = {"records": [{"id": "rec123", "fields": {}}]}
    airtable.create_records.return_value = insert_response
    return airtable


@pytest.fixture
def mock_store():
    """Blob store that accepts every upload."""
    return MagicMock()


@pytest.fixture
def mock_mailer():
    return MagicMock()
