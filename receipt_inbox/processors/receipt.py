"""
Receipt email processor.

parse -> classify -> archive + record -> reply
"""

from receipt_inbox.core.exceptions import (
    ClassifierResponseError,
    InconsistentClassificationError,
)
from receipt_inbox.core.logging import get_logger, bind_context, clear_context
from receipt_inbox.core.models import (
    ClassificationResult,
    Envelope,
    InboundEmail,
    LedgerFailure,
    LedgerOutcome,
    LedgerSuccess,
    ProcessingResult,
    Receipt,
    SchemaError,
)
from receipt_inbox.classifiers import BaseClassifier, get_receipt_classifier
from receipt_inbox.processors.base import BaseProcessor
from receipt_inbox.services.archiver import AttachmentArchiver, UploadBatch
from receipt_inbox.services.ledger import LedgerRecorder
from receipt_inbox.services.mailer import SMTPMailer
from receipt_inbox.services.mime import parse_raw_email
from receipt_inbox.services.minio import MinIOClient
from receipt_inbox.services.reply import ReplyComposer

log = get_logger(__name__)


class ReceiptProcessor(BaseProcessor):
    """
    Receipt email processor.

    Classifies one inbound message, archives its attachments, records the
    receipt in the ledger and replies to the sender with a summary.
    """

    def __init__(
        self,
        classifier: BaseClassifier | None = None,
        archiver: AttachmentArchiver | None = None,
        ledger: LedgerRecorder | None = None,
        composer: ReplyComposer | None = None,
        mailer: SMTPMailer | None = None,
    ):
        self.classifier = classifier or get_receipt_classifier()
        self.archiver = archiver or AttachmentArchiver(MinIOClient())
        self.ledger = ledger or LedgerRecorder()
        self.composer = composer or ReplyComposer()
        self.mailer = mailer or SMTPMailer()

    def process(
        self,
        raw: bytes,
        envelope: Envelope,
        correlation_id: str,
    ) -> ProcessingResult:
        bind_context(correlation_id=correlation_id)
        try:
            return self._process(raw, envelope, correlation_id)
        finally:
            clear_context()

    def _process(
        self,
        raw: bytes,
        envelope: Envelope,
        correlation_id: str,
    ) -> ProcessingResult:
        email = parse_raw_email(raw)
        bind_context(message_id=email.message_id)

        body = email.body
        if not body:
            log.info("empty_email_body", sender=email.sender_email)
            return ProcessingResult(
                success=True,
                correlation_id=correlation_id,
                action="skipped_empty",
            )

        classification = self._classify(email, body)

        if not classification.is_receipt:
            log.info("not_a_receipt", sender=email.sender_email)
            return ProcessingResult(
                success=True,
                correlation_id=correlation_id,
                action="skipped_not_receipt",
            )

        receipt = classification.receipt
        if receipt is None:
            log.error("inconsistent_classification")
            raise InconsistentClassificationError(
                "Classifier reported a receipt but returned no receipt data"
            )

        uploads = self.archiver.start(correlation_id, email.attachments)
        try:
            outcome = self._record(receipt, correlation_id)
            recipient = envelope.sender or email.sender_email
            message = self.composer.compose(email, receipt, outcome, recipient)
            self.mailer.send(message)
        finally:
            upload_failures = uploads.join()

        return self._result(correlation_id, receipt, outcome, uploads, upload_failures)

    def _classify(self, email: InboundEmail, body: str) -> ClassificationResult:
        outcome = self.classifier.classify(body, email.attachments)
        if isinstance(outcome, SchemaError):
            log.error("classifier_response_rejected", reason=outcome.reason[:200])
            raise ClassifierResponseError(
                f"Classifier response unusable: {outcome.reason}"
            )
        if isinstance(outcome, ClassificationResult):
            return outcome
        raise TypeError(f"Unexpected classifier outcome: {outcome!r}")

    def _record(self, receipt: Receipt, correlation_id: str) -> LedgerOutcome:
        try:
            return self.ledger.record_receipt(receipt, correlation_id)
        except Exception as e:
            log.error("ledger_record_error", error=str(e))
            return LedgerFailure(error=str(e))

    def _result(
        self,
        correlation_id: str,
        receipt: Receipt,
        outcome: LedgerOutcome,
        uploads: UploadBatch,
        upload_failures: list,
    ) -> ProcessingResult:
        details = {
            "company": receipt.company,
            "total": receipt.total_amount,
            "currency": receipt.currency.value,
            "uploads": len(uploads.keys),
            "upload_failures": len(upload_failures),
        }

        if isinstance(outcome, LedgerSuccess):
            log.info("receipt_processed", ledger_record=outcome.record_id, **details)
            return ProcessingResult(
                success=True,
                correlation_id=correlation_id,
                action="reply_sent",
                result_id=outcome.record_id,
                details=details,
            )
        if isinstance(outcome, LedgerFailure):
            log.warning("receipt_processed_without_ledger", error=outcome.error, **details)
            return ProcessingResult(
                success=True,
                correlation_id=correlation_id,
                action="reply_sent",
                error=outcome.error,
                details=details,
            )
        raise TypeError(f"Unexpected ledger outcome: {outcome!r}")
