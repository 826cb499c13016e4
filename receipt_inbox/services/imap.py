"""
IMAP client for polling the receipt inbox.
"""

import imaplib
from dataclasses import dataclass
from typing import Iterator

from receipt_inbox.config import settings
from receipt_inbox.core.logging import get_logger

log = get_logger(__name__)


@dataclass
class RawMessage:
    """Unprocessed message fetched from the mailbox."""

    uid: str
    raw: bytes


class IMAPClient:
    """IMAP client returning raw RFC 822 messages."""

    def __init__(
        self,
        host: str | None = None,
        username: str | None = None,
        password: str | None = None,
        folder: str | None = None,
    ):
        self.host = host or settings.imap_host
        self.username = username or settings.imap_username
        self.password = password or settings.imap_password
        self.folder = folder or settings.imap_folder
        self._conn: imaplib.IMAP4_SSL | None = None

    def connect(self) -> None:
        """Connect and authenticate to IMAP server."""
        log.info("imap_connecting", host=self.host, username=self.username)
        conn = imaplib.IMAP4_SSL(self.host)
        try:
            conn.login(self.username, self.password)
        except imaplib.IMAP4.error:
            conn.logout()
            raise
        self._conn = conn
        log.info("imap_connected")

    def disconnect(self) -> None:
        """Close IMAP connection."""
        if self._conn:
            try:
                self._conn.logout()
            except (imaplib.IMAP4.error, OSError) as e:
                log.warning("imap_logout_error", error=str(e))
            self._conn = None
            log.info("imap_disconnected")

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()

    def fetch_unseen(self, limit: int | None = None) -> Iterator[RawMessage]:
        """
        Yield unseen messages without marking them seen.

        Args:
            limit: Maximum number of messages to fetch (oldest first)
        """
        if not self._conn:
            raise RuntimeError("Not connected to IMAP server")

        self._conn.select(self.folder)
        _, data = self._conn.uid("SEARCH", None, "UNSEEN")
        uids = data[0].split() if data and data[0] else []
        if limit:
            uids = uids[:limit]

        log.info("imap_fetching", folder=self.folder, count=len(uids))

        for uid in uids:
            _, msg_data = self._conn.uid("FETCH", uid, "(BODY.PEEK[])")
            if not msg_data or not msg_data[0] or not isinstance(msg_data[0], tuple):
                log.warning("imap_empty_fetch", uid=uid.decode())
                continue
            yield RawMessage(uid=uid.decode(), raw=msg_data[0][1])

    def mark_seen(self, uid: str) -> None:
        if not self._conn:
            raise RuntimeError("Not connected to IMAP server")
        self._conn.uid("STORE", uid, "+FLAGS", "(\\Seen)")
