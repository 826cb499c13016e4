"""
Attachment archiver.

Uploads run on a thread pool while the rest of the pipeline continues; the
caller joins the batch once, at the end of message handling.
"""

from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Protocol

from receipt_inbox.config import settings
from receipt_inbox.core.logging import get_logger
from receipt_inbox.core.models import Attachment

log = get_logger(__name__)


class BlobStore(Protocol):
    def put(self, key: str, data: bytes, content_type: str = ...) -> None:
        ...


@dataclass
class UploadFailure:
    """An upload that raised."""

    key: str
    error: str


def archive_key(correlation_id: str, attachment: Attachment) -> str:
    return f"{correlation_id}/{attachment.storage_name}"


class UploadBatch:
    """Uploads started for one message."""

    def __init__(self, executor: ThreadPoolExecutor | None, futures: dict[Future, str]):
        self._executor = executor
        self._futures = futures
        self._failures: list[UploadFailure] | None = None

    @property
    def keys(self) -> list[str]:
        return list(self._futures.values())

    def join(self) -> list[UploadFailure]:
        """
        Wait for every upload and collect failures.

        Never raises; each failure is logged and returned.
        """
        if self._failures is not None:
            return self._failures

        failures = []
        wait(self._futures)
        for future, key in self._futures.items():
            error = future.exception()
            if error is not None:
                log.error("attachment_upload_failed", key=key, error=str(error))
                failures.append(UploadFailure(key=key, error=str(error)))

        if self._executor is not None:
            self._executor.shutdown(wait=True)

        log.info(
            "attachment_uploads_joined",
            uploaded=len(self._futures) - len(failures),
            failed=len(failures),
        )
        self._failures = failures
        return failures


class AttachmentArchiver:
    """Stores every attachment of a message under its correlation id."""

    def __init__(self, store: BlobStore, max_workers: int | None = None):
        self.store = store
        self.max_workers = max_workers or settings.archive_max_workers

    def start(self, correlation_id: str, attachments: list[Attachment]) -> UploadBatch:
        """
        Submit all uploads and return immediately.

        Args:
            correlation_id: Per-message key prefix
            attachments: Attachments with decoded content

        Returns:
            UploadBatch to join before the handler returns
        """
        if not attachments:
            return UploadBatch(None, {})

        executor = ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(attachments)),
            thread_name_prefix="archive",
        )
        futures = {}
        for attachment in attachments:
            key = archive_key(correlation_id, attachment)
            future = executor.submit(
                self.store.put,
                key,
                attachment.content,
                attachment.content_type,
            )
            futures[future] = key

        log.info("attachment_uploads_started", count=len(futures))
        return UploadBatch(executor, futures)
