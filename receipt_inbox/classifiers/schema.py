"""
Wire schema for the receipt classifier and its decode step.

Field names match the JSON the model is asked to produce.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, ValidationError

from receipt_inbox.core.logging import get_logger
from receipt_inbox.core.models import (
    ClassificationOutcome,
    ClassificationResult,
    Receipt,
    SchemaError,
)

log = get_logger(__name__)


class LineItemSchema(BaseModel):
    """Single line item on the receipt."""

    model_config = ConfigDict(extra="forbid")

    nameOfProduct: str
    amount: str
    quantity: int


class ReceiptSchema(BaseModel):
    """Receipt payload, present only when isReceipt is true."""

    model_config = ConfigDict(extra="forbid")

    dateYYYYMMDD: str
    nameOfCompany: str
    totalAmount: str
    currency: Literal["USD", "JPY", "unknown"]
    invoiceOrReceiptFullAttachmentFileName: str
    category: Literal["Travel", "Equipment", "Services", "SAAS"]
    lineItems: list[LineItemSchema]


class ClassificationSchema(BaseModel):
    """Top-level classifier answer."""

    model_config = ConfigDict(extra="forbid")

    isReceipt: bool
    receipt: ReceiptSchema | None = None


def _strip_code_fence(text: str) -> str:
    """Remove markdown code blocks if present."""
    text = text.strip()
    if text.startswith("```"):
        lines = text.split("\n")
        lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        text = "\n".join(lines)
    return text


def decode_classification(text: str | None) -> ClassificationOutcome:
    """
    Decode the raw classifier text into a ClassificationResult.

    Returns a SchemaError instead of raising when the text is empty, is not
    JSON, or does not match ClassificationSchema.
    """
    if text is None or not text.strip():
        return SchemaError(reason="empty classifier response", raw=text)

    cleaned = _strip_code_fence(text)
    try:
        parsed = ClassificationSchema.model_validate_json(cleaned)
    except ValidationError as e:
        log.error("classifier_schema_mismatch", error=str(e), response=cleaned[:500])
        return SchemaError(reason=str(e), raw=cleaned)

    if not parsed.isReceipt:
        # isReceipt=false is authoritative even if a payload slipped through
        if parsed.receipt is not None:
            log.warning("classifier_spurious_receipt_payload")
        return ClassificationResult(is_receipt=False, receipt=None)

    receipt = Receipt.from_schema(parsed.receipt) if parsed.receipt else None
    return ClassificationResult(is_receipt=True, receipt=receipt)
