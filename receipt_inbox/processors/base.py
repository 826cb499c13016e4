"""
Abstract base class for message processors.
"""

from abc import ABC, abstractmethod

from receipt_inbox.core.models import Envelope, ProcessingResult


class BaseProcessor(ABC):
    """Abstract processor interface for inbound message pipelines."""

    @abstractmethod
    def process(
        self,
        raw: bytes,
        envelope: Envelope,
        correlation_id: str,
    ) -> ProcessingResult:
        """
        Process one inbound message.

        Args:
            raw: Raw MIME bytes
            envelope: SMTP envelope the message arrived with
            correlation_id: Per-message identifier

        Returns:
            ProcessingResult describing what was done
        """
        pass
