"""
MIME parser for raw inbound messages.
"""

from email import message_from_bytes
from email.header import decode_header as email_decode_header
from email.message import Message
from email.utils import parsedate_to_datetime

from receipt_inbox.core.exceptions import MimeParseError
from receipt_inbox.core.logging import get_logger
from receipt_inbox.core.models import Attachment, InboundEmail

log = get_logger(__name__)


def parse_raw_email(raw: bytes) -> InboundEmail:
    """
    Parse a raw RFC 822 message into an InboundEmail.

    Args:
        raw: Message bytes as received from the mail transport

    Returns:
        InboundEmail with decoded bodies and attachment bytes

    Raises:
        MimeParseError: if the bytes cannot be parsed
    """
    if not isinstance(raw, (bytes, bytearray)):
        raise MimeParseError(f"Expected raw bytes, got {type(raw).__name__}")

    try:
        msg = message_from_bytes(bytes(raw))
        email = _parse_message(msg)
    except MimeParseError:
        raise
    except Exception as e:
        log.error("mime_parse_error", error=str(e))
        raise MimeParseError(f"Could not parse message: {e}") from e

    log.info(
        "mime_parsed",
        message_id=email.message_id,
        has_plain=email.body_plain is not None,
        has_html=email.body_html is not None,
        attachments=len(email.attachments),
    )
    return email


def decode_header(header: str | None) -> str:
    """Decode MIME-encoded email header.

    Handles headers like '=?UTF-8?B?...?=' for Japanese and other non-ASCII text.
    """
    if not header:
        return ""
    decoded_parts = []
    for part, charset in email_decode_header(str(header)):
        if isinstance(part, bytes):
            decoded_parts.append(part.decode(charset or "utf-8", errors="replace"))
        else:
            decoded_parts.append(part)
    return "".join(decoded_parts).replace("\r\n", "").replace("\n", "")


def _parse_message(msg: Message) -> InboundEmail:
    email_date = None
    date_str = msg.get("Date")
    if date_str:
        try:
            email_date = parsedate_to_datetime(date_str)
        except (TypeError, ValueError):
            log.debug("mime_date_unparseable", date=date_str)

    body_plain, body_html = _get_body(msg)
    subject = msg.get("Subject")

    return InboundEmail(
        message_id=(msg.get("Message-ID") or "").strip(),
        subject=decode_header(subject) if subject is not None else None,
        sender=decode_header(msg.get("From", "")),
        recipient=decode_header(msg.get("To", "")),
        email_date=email_date,
        body_plain=body_plain,
        body_html=body_html,
        attachments=_get_attachments(msg),
    )


def _is_attachment(part: Message) -> bool:
    """Attachment parts: explicit disposition, or any named non-text leaf."""
    if part.is_multipart():
        return False
    disposition = (part.get("Content-Disposition") or "").lower()
    if disposition.startswith("attachment"):
        return True
    if part.get_filename():
        return True
    return part.get_content_maintype() not in ("text", "multipart", "message")


def _decode_text(part: Message) -> str | None:
    payload = part.get_payload(decode=True)
    if payload is None:
        return None
    charset = part.get_content_charset() or "utf-8"
    try:
        return payload.decode(charset, errors="replace")
    except LookupError:
        return payload.decode("utf-8", errors="replace")


def _get_body(msg: Message) -> tuple[str | None, str | None]:
    """Extract plain text and HTML body from message."""
    text_plain: str | None = None
    text_html: str | None = None

    for part in msg.walk():
        if part.is_multipart() or _is_attachment(part):
            continue

        content_type = part.get_content_type()
        if content_type not in ("text/plain", "text/html"):
            continue

        text = _decode_text(part)
        if not text:
            continue

        if content_type == "text/plain":
            text_plain = (text_plain or "") + text
        else:
            text_html = (text_html or "") + text

    return text_plain, text_html


def _get_attachments(msg: Message) -> list[Attachment]:
    attachments = []
    for part in msg.walk():
        if not _is_attachment(part):
            continue
        filename = part.get_filename()
        attachments.append(Attachment(
            filename=decode_header(filename) if filename else None,
            content_type=part.get_content_type(),
            content=part.get_payload(decode=True) or b"",
        ))
    return attachments
