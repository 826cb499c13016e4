"""
Receipt classifiers module.
"""

from receipt_inbox.classifiers.base import BaseClassifier
from receipt_inbox.classifiers.gemini import GeminiReceiptClassifier
from receipt_inbox.classifiers.schema import ClassificationSchema, decode_classification


def get_receipt_classifier() -> BaseClassifier:
    """
    Get the classifier used by the receipt pipeline.

    Returns a GeminiReceiptClassifier configured from settings.
    """
    return GeminiReceiptClassifier()


__all__ = [
    "BaseClassifier",
    "ClassificationSchema",
    "GeminiReceiptClassifier",
    "decode_classification",
    "get_receipt_classifier",
]
