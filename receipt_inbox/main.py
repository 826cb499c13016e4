"""
FastAPI application receiving forwarded receipt emails.
"""

from contextlib import asynccontextmanager
from functools import lru_cache

from fastapi import BackgroundTasks, Depends, FastAPI, HTTPException, Request
from starlette.concurrency import run_in_threadpool

from receipt_inbox import __version__
from receipt_inbox.config import settings
from receipt_inbox.core.exceptions import MimeParseError, ReceiptInboxError
from receipt_inbox.core.logging import configure_logging, get_logger
from receipt_inbox.core.models import Envelope, generate_correlation_id
from receipt_inbox.processors.base import BaseProcessor
from receipt_inbox.processors.receipt import ReceiptProcessor
from receipt_inbox.scheduler import poll_inbox, start_poll_scheduler, stop_scheduler
from receipt_inbox.services.imap import IMAPClient

log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    configure_logging(log_level=settings.log_level, json_output=settings.json_logs)
    log.info("application_starting", version=__version__, model=settings.gemini_model)

    if settings.imap_poll_enabled:
        start_poll_scheduler()
    else:
        log.info("scheduler_disabled", reason="IMAP_POLL_ENABLED is false, webhook only")

    yield

    if settings.imap_poll_enabled:
        stop_scheduler()
    log.info("application_stopped")


app = FastAPI(
    title="Receipt Inbox",
    description="Turns forwarded receipt emails into ledger rows",
    version=__version__,
    lifespan=lifespan,
)


@lru_cache
def get_processor() -> BaseProcessor:
    """Shared processor; holds no per-message state."""
    return ReceiptProcessor()


# Endpoints

@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


@app.post("/inbound")
async def receive_email(
    request: Request,
    sender: str = "",
    recipient: str = "",
    processor: BaseProcessor = Depends(get_processor),
):
    """
    Process one raw inbound email.

    The request body is the raw RFC 822 message. The SMTP envelope is passed
    as query parameters; the reply goes to `sender`, or to the From address
    when it is empty.
    """
    raw = await request.body()
    correlation_id = generate_correlation_id()
    envelope = Envelope(sender=sender, recipient=recipient)

    log.info("inbound_email_received", correlation_id=correlation_id, size=len(raw))

    try:
        result = await run_in_threadpool(processor.process, raw, envelope, correlation_id)
    except MimeParseError as e:
        log.warning("inbound_email_rejected", correlation_id=correlation_id, error=str(e))
        raise HTTPException(status_code=400, detail=str(e))
    except ReceiptInboxError as e:
        log.error(
            "inbound_email_failed",
            correlation_id=correlation_id,
            error_type=type(e).__name__,
            error=str(e),
        )
        raise HTTPException(status_code=502, detail=str(e))

    return {
        "correlation_id": result.correlation_id,
        "action": result.action,
        "success": result.success,
        "result_id": result.result_id,
        "error": result.error,
    }


@app.post("/poll")
async def trigger_poll(
    background_tasks: BackgroundTasks,
    limit: int = 50,
    processor: BaseProcessor = Depends(get_processor),
):
    """
    Poll the IMAP inbox once.

    Runs in background to avoid timeout.
    """
    limit = min(limit, 500)

    def run_poll():
        poll_inbox(processor, IMAPClient(), limit=limit)

    background_tasks.add_task(run_poll)

    return {"status": "poll_started", "limit": limit}


# Run with: uvicorn receipt_inbox.main:app --host 0.0.0.0 --port 8000
