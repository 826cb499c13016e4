"""Unit tests for the FastAPI endpoints."""

from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from receipt_inbox.core.exceptions import ClassifierResponseError, MimeParseError
from receipt_inbox.core.models import ProcessingResult
from receipt_inbox.main import app, get_processor


@pytest.fixture
def processor():
    processor = MagicMock()
    processor.process.side_effect = lambda raw, envelope, correlation_id: ProcessingResult(
        success=True,
        correlation_id=correlation_id,
        action="reply_sent",
        result_id="rec123",
    )
    return processor


@pytest.fixture
def client(processor):
    app.dependency_overrides[get_processor] = lambda: processor
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestInbound:

    def test_passes_raw_bytes_and_envelope(self, client, processor, raw_email_factory):
        raw = raw_email_factory(plain="receipt")

        response = client.post(
            "/inbound",
            params={"sender": "alice@example.com", "recipient": "receipts@example.com"},
            content=raw,
            headers={"Content-Type": "message/rfc822"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["action"] == "reply_sent"
        assert body["result_id"] == "rec123"

        sent_raw, envelope, correlation_id = processor.process.call_args.args
        assert sent_raw == raw
        assert envelope.sender == "alice@example.com"
        assert envelope.recipient == "receipts@example.com"
        assert body["correlation_id"] == correlation_id

    def test_each_message_gets_its_own_correlation_id(self, client, processor):
        client.post("/inbound", content=b"Subject: a\r\n\r\nhi")
        client.post("/inbound", content=b"Subject: b\r\n\r\nhi")

        first = processor.process.call_args_list[0].args[2]
        second = processor.process.call_args_list[1].args[2]
        assert first != second

    def test_mime_error_is_400(self, client, processor):
        processor.process.side_effect = MimeParseError("garbage")
        response = client.post("/inbound", content=b"\x00")
        assert response.status_code == 400

    def test_pipeline_error_is_502(self, client, processor):
        processor.process.side_effect = ClassifierResponseError("empty classifier response")
        response = client.post("/inbound", content=b"Subject: a\r\n\r\nhi")
        assert response.status_code == 502


class TestPoll:

    def test_poll_runs_in_background(self, client, processor):
        with patch("receipt_inbox.main.poll_inbox") as poll_inbox, \
                patch("receipt_inbox.main.IMAPClient") as imap_cls:
            response = client.post("/poll", params={"limit": 10})

        assert response.status_code == 200
        assert response.json() == {"status": "poll_started", "limit": 10}
        poll_inbox.assert_called_once_with(processor, imap_cls.return_value, limit=10)
