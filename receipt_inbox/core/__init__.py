"""Core modules for receipt processing."""

from .logging import configure_logging, get_logger, bind_context, clear_context
from .models import (
    Attachment,
    Category,
    ClassificationResult,
    Currency,
    Envelope,
    ExchangeRateRecord,
    InboundEmail,
    LedgerFailure,
    LedgerOutcome,
    LedgerSuccess,
    LineItem,
    ProcessingResult,
    Receipt,
    SchemaError,
    generate_correlation_id,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "clear_context",
    "Attachment",
    "Category",
    "ClassificationResult",
    "Currency",
    "Envelope",
    "ExchangeRateRecord",
    "InboundEmail",
    "LedgerFailure",
    "LedgerOutcome",
    "LedgerSuccess",
    "LineItem",
    "ProcessingResult",
    "Receipt",
    "SchemaError",
    "generate_correlation_id",
]
