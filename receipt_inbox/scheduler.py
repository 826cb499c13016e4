"""
APScheduler job runner for polling the receipt mailbox over IMAP.
"""

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from receipt_inbox.config import settings
from receipt_inbox.core.logging import get_logger
from receipt_inbox.core.models import Envelope, generate_correlation_id
from receipt_inbox.processors.base import BaseProcessor
from receipt_inbox.services.imap import IMAPClient

log = get_logger(__name__)

# Global scheduler instance
_scheduler: BackgroundScheduler | None = None


def poll_inbox(processor: BaseProcessor, imap: IMAPClient, limit: int | None = None) -> dict:
    """
    Feed every unseen message to the processor.

    Messages are marked seen once handled, whatever the outcome, so a
    message that keeps failing is not reprocessed on every poll.

    Returns:
        Statistics dict
    """
    stats = {"fetched": 0, "replied": 0, "skipped": 0, "errors": 0}

    with imap:
        for message in imap.fetch_unseen(limit=limit):
            stats["fetched"] += 1
            correlation_id = generate_correlation_id()
            try:
                result = processor.process(message.raw, Envelope(), correlation_id)
                if result.action == "reply_sent":
                    stats["replied"] += 1
                else:
                    stats["skipped"] += 1
            except Exception as e:
                log.error(
                    "poll_message_error",
                    uid=message.uid,
                    correlation_id=correlation_id,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                stats["errors"] += 1
            finally:
                imap.mark_seen(message.uid)

    log.info("poll_inbox_complete", **stats)
    return stats


def poll_inbox_job():
    """Scheduled job: fetch unseen mail and process it."""
    from receipt_inbox.processors.receipt import ReceiptProcessor

    log.info("scheduled_job_starting", job="poll_inbox")
    try:
        poll_inbox(ReceiptProcessor(), IMAPClient())
    except Exception as e:
        log.error("scheduled_job_error", job="poll_inbox", error=str(e))


def start_poll_scheduler() -> BackgroundScheduler:
    """Start the background IMAP polling job."""
    global _scheduler

    if _scheduler is not None:
        log.warning("scheduler_already_running")
        return _scheduler

    _scheduler = BackgroundScheduler()
    _scheduler.add_job(
        poll_inbox_job,
        trigger=IntervalTrigger(minutes=settings.imap_poll_interval_minutes),
        id="poll_inbox",
        name="Poll receipt inbox",
        replace_existing=True,
        max_instances=1,
    )
    _scheduler.start()
    log.info(
        "scheduler_started",
        job="poll_inbox",
        interval_minutes=settings.imap_poll_interval_minutes,
    )
    return _scheduler


def stop_scheduler() -> None:
    """Stop the background scheduler."""
    global _scheduler

    if _scheduler is not None:
        _scheduler.shutdown(wait=False)
        _scheduler = None
        log.info("scheduler_stopped")
