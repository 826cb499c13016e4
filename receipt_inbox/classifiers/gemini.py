"""
Gemini receipt classifier.
"""

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from receipt_inbox.config import settings
from receipt_inbox.core.exceptions import ClassifierError
from receipt_inbox.core.logging import get_logger
from receipt_inbox.core.models import Attachment, ClassificationOutcome, SchemaError
from receipt_inbox.classifiers.base import BaseClassifier
from receipt_inbox.classifiers.prompts import receipt as receipt_prompts
from receipt_inbox.classifiers.schema import ClassificationSchema, decode_classification

log = get_logger(__name__)


class GeminiReceiptClassifier(BaseClassifier):
    """Gemini-based receipt classifier with structured JSON output."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        client: genai.Client | None = None,
    ):
        self.api_key = api_key or settings.gemini_api_key
        self.model_name = model or settings.gemini_model

        if client is None:
            if not self.api_key:
                raise ValueError("GEMINI_API_KEY is required")
            client = genai.Client(api_key=self.api_key)
        self.client = client

    def classify(
        self,
        body: str,
        attachments: list[Attachment],
    ) -> ClassificationOutcome:
        """
        Classify an email body plus attachments as receipt or not.

        Args:
            body: Email body text
            attachments: Attachments sent inline to the model

        Returns:
            ClassificationResult or SchemaError

        Raises:
            ClassifierError: when the Gemini API call fails or cannot be made
        """
        contents = self.build_contents(body, attachments)

        try:
            response = self.client.models.generate_content(
                model=self.model_name,
                contents=contents,
                config=types.GenerateContentConfig(
                    system_instruction=receipt_prompts.SYSTEM_PROMPT,
                    response_mime_type="application/json",
                    response_schema=ClassificationSchema,
                ),
            )
        except genai_errors.APIError as e:
            log.error("gemini_api_error", code=getattr(e, "code", None), error=str(e))
            raise ClassifierError(f"Gemini request failed: {e}") from e
        except httpx.HTTPError as e:
            log.error("gemini_transport_error", error_type=type(e).__name__, error=str(e))
            raise ClassifierError(f"Gemini unreachable: {e}") from e

        outcome = decode_classification(response.text)
        if isinstance(outcome, SchemaError):
            log.warning("receipt_classification_undecodable", reason=outcome.reason[:200])
        else:
            log.info(
                "receipt_classified",
                is_receipt=outcome.is_receipt,
                company=outcome.receipt.company if outcome.receipt else None,
            )
        return outcome

    def build_contents(
        self,
        body: str,
        attachments: list[Attachment],
    ) -> list[types.Part]:
        """Attachment payloads first, then the filename list, then the body."""
        parts = [
            types.Part.from_bytes(data=att.content, mime_type=att.content_type)
            for att in attachments
        ]

        if attachments:
            filenames = "\n".join(f"- {att.name}" for att in attachments)
            parts.append(types.Part.from_text(
                text=receipt_prompts.ATTACHMENT_LIST_TEMPLATE.format(filenames=filenames)
            ))
        else:
            parts.append(types.Part.from_text(text=receipt_prompts.NO_ATTACHMENTS))

        parts.append(types.Part.from_text(
            text=receipt_prompts.BODY_TEMPLATE.format(body=body)
        ))
        return parts
