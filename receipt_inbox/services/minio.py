"""
MinIO client for archiving receipt attachments.
"""

from io import BytesIO

from minio import Minio

from receipt_inbox.config import settings
from receipt_inbox.core.logging import get_logger

log = get_logger(__name__)


class MinIOClient:
    """Client for MinIO object storage."""

    def __init__(
        self,
        endpoint: str | None = None,
        access_key: str | None = None,
        secret_key: str | None = None,
        bucket: str | None = None,
        secure: bool | None = None,
    ):
        self.endpoint = endpoint or settings.minio_endpoint
        self.access_key = access_key or settings.minio_access_key
        self.secret_key = secret_key or settings.minio_secret_key
        self.bucket = bucket or settings.minio_bucket
        self.secure = secure if secure is not None else settings.minio_secure
        self._client: Minio | None = None
        self._bucket_checked = False

    @property
    def enabled(self) -> bool:
        """Check if MinIO is configured."""
        return bool(self.endpoint and self.access_key and self.secret_key)

    def _get_client(self) -> Minio:
        """Get or create MinIO client."""
        if not self._client:
            if not self.enabled:
                raise RuntimeError("MinIO not configured")
            self._client = Minio(
                self.endpoint,
                access_key=self.access_key,
                secret_key=self.secret_key,
                secure=self.secure,
            )
        return self._client

    def ensure_bucket(self) -> None:
        """Create bucket if it doesn't exist."""
        if self._bucket_checked:
            return
        client = self._get_client()
        if not client.bucket_exists(self.bucket):
            client.make_bucket(self.bucket)
            log.info("minio_bucket_created", bucket=self.bucket)
        self._bucket_checked = True

    def put(
        self,
        key: str,
        data: bytes,
        content_type: str = "application/octet-stream",
    ) -> None:
        """
        Store bytes under key.

        Args:
            key: Object name, e.g. "<correlation_id>/<filename>"
            data: File content bytes
            content_type: MIME type
        """
        client = self._get_client()
        self.ensure_bucket()

        client.put_object(
            self.bucket,
            key,
            BytesIO(data),
            length=len(data),
            content_type=content_type,
        )

        log.info("attachment_uploaded", key=key, size=len(data))
