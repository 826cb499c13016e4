"""
Abstract base class for receipt classifiers.
"""

from abc import ABC, abstractmethod

from receipt_inbox.core.models import Attachment, ClassificationOutcome


class BaseClassifier(ABC):
    """Abstract classifier interface."""

    @abstractmethod
    def classify(
        self,
        body: str,
        attachments: list[Attachment],
    ) -> ClassificationOutcome:
        """
        Decide whether an email is a receipt and extract it.

        Args:
            body: Email body (HTML or plain text)
            attachments: Attachments with their decoded content

        Returns:
            ClassificationResult, or SchemaError when the answer could not
            be decoded
        """
        pass
