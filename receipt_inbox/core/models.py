"""
Data models for receipt processing.

Uses dataclasses for clean, typed data structures.
"""

import base64
import secrets
import time
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from email.utils import parseaddr
from enum import Enum
from typing import Any, Union


class Currency(str, Enum):
    """Currencies the classifier is allowed to report."""

    USD = "USD"
    JPY = "JPY"
    UNKNOWN = "unknown"


class Category(str, Enum):
    """Ledger expense categories."""

    TRAVEL = "Travel"
    EQUIPMENT = "Equipment"
    SERVICES = "Services"
    SAAS = "SAAS"


@dataclass
class Attachment:
    """Email attachment with its decoded content."""

    content_type: str
    content: bytes = b""
    filename: str | None = None

    @property
    def name(self) -> str:
        """Name shown to the classifier: filename, or the MIME type when unnamed."""
        return self.filename or self.content_type

    @property
    def storage_name(self) -> str:
        """Name used in the archive key."""
        return self.filename or "attachment"

    @property
    def content_base64(self) -> str:
        return base64.b64encode(self.content).decode("ascii")


@dataclass
class Envelope:
    """SMTP envelope the message was delivered with."""

    sender: str = ""
    recipient: str = ""


@dataclass
class InboundEmail:
    """Parsed inbound email."""

    message_id: str = ""
    subject: str | None = None
    sender: str = ""
    recipient: str = ""
    email_date: datetime | None = None
    body_plain: str | None = None
    body_html: str | None = None
    attachments: list[Attachment] = field(default_factory=list)

    @property
    def body(self) -> str | None:
        """Get email body, preferring HTML."""
        return self.body_html or self.body_plain or None

    @property
    def sender_email(self) -> str:
        """Extract email address from sender header."""
        _, address = parseaddr(self.sender or "")
        return address.lower() if address else ""


def parse_amount(value: str | None) -> Decimal | None:
    """
    Parse a model-extracted amount such as "47.50" or "1,200".

    Thousands separators and surrounding whitespace are ignored. Returns None
    for anything that is not a finite number.
    """
    if not value:
        return None
    try:
        amount = Decimal(value.replace(",", "").strip())
    except InvalidOperation:
        return None
    return amount if amount.is_finite() else None


@dataclass
class LineItem:
    """Single line of a receipt."""

    name: str
    amount: str  # decimal as string, as extracted
    quantity: int = 1

    @property
    def line_total(self) -> Decimal | None:
        """amount x quantity, or None when the amount is not a number."""
        amount = parse_amount(self.amount)
        if amount is None:
            return None
        return amount * self.quantity


@dataclass
class Receipt:
    """Structured extraction of a purchase receipt."""

    date: str  # YYYYMMDD
    company: str
    total_amount: str
    currency: Currency
    attachment_filename: str
    category: Category
    line_items: list[LineItem] = field(default_factory=list)

    @classmethod
    def from_schema(cls, data: Any) -> "Receipt":
        """Create Receipt from the classifier wire model."""
        return cls(
            date=data.dateYYYYMMDD,
            company=data.nameOfCompany,
            total_amount=data.totalAmount,
            currency=Currency(data.currency),
            attachment_filename=data.invoiceOrReceiptFullAttachmentFileName,
            category=Category(data.category),
            line_items=[
                LineItem(
                    name=item.nameOfProduct,
                    amount=item.amount,
                    quantity=item.quantity,
                )
                for item in data.lineItems
            ],
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for logging and API responses."""
        return {
            "date": self.date,
            "company": self.company,
            "total_amount": self.total_amount,
            "currency": self.currency.value,
            "attachment_filename": self.attachment_filename,
            "category": self.category.value,
            "line_items": [
                {"name": i.name, "amount": i.amount, "quantity": i.quantity}
                for i in self.line_items
            ],
        }


@dataclass
class ClassificationResult:
    """Decoded classifier answer."""

    is_receipt: bool
    receipt: Receipt | None = None


@dataclass
class SchemaError:
    """Classifier answer that could not be decoded against the schema."""

    reason: str
    raw: str | None = None


ClassificationOutcome = Union[ClassificationResult, SchemaError]


@dataclass
class ExchangeRateRecord:
    """Row of the exchange-rate table."""

    id: str
    date: str
    jpy_per_usd: float


@dataclass(frozen=True)
class LedgerSuccess:
    """Ledger row was created."""

    record_id: str
    record_url: str | None = None


@dataclass(frozen=True)
class LedgerFailure:
    """Ledger row could not be created."""

    error: str


LedgerOutcome = Union[LedgerSuccess, LedgerFailure]


@dataclass
class ProcessingResult:
    """Result from processing one inbound message."""

    success: bool
    correlation_id: str
    action: str  # e.g., "reply_sent", "skipped_empty", "skipped_not_receipt"
    result_id: str | None = None  # ledger record id
    error: str | None = None
    details: dict[str, Any] = field(default_factory=dict)


def generate_correlation_id(now: float | None = None) -> str:
    """
    Build the per-message identifier: unix milliseconds plus a random suffix.

    Example: "1704067200000-9f86d081"
    """
    timestamp = int((time.time() if now is None else now) * 1000)
    return f"{timestamp}-{secrets.token_hex(4)}"
