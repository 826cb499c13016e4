"""Message processors."""

from .base import BaseProcessor
from .receipt import ReceiptProcessor

__all__ = ["BaseProcessor", "ReceiptProcessor"]
