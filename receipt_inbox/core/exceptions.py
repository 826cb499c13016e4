"""
Exception hierarchy for the receipt pipeline.
"""


class ReceiptInboxError(Exception):
    """Base class for all pipeline errors."""


class MimeParseError(ReceiptInboxError):
    """Raw message could not be parsed as MIME."""


class ClassifierError(ReceiptInboxError):
    """The classifier backend could not be reached or rejected the request."""


class ClassifierResponseError(ClassifierError):
    """The classifier answered with nothing usable (empty or off-schema)."""


class InconsistentClassificationError(ReceiptInboxError):
    """Classifier flagged a receipt but returned no receipt payload."""


class TabularStoreError(ReceiptInboxError):
    """Airtable request failed."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ReplyDeliveryError(ReceiptInboxError):
    """Reply could not be handed to the mail server."""
