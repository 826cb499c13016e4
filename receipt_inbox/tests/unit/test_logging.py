"""Unit tests for logging setup."""

import logging

import pytest
import structlog

from receipt_inbox.core.logging import QUIET_LOGGERS, bind_context, clear_context, configure_logging


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    clear_context()
    structlog.reset_defaults()


class TestConfigureLogging:

    def test_transport_loggers_quieted(self):
        configure_logging(log_level="DEBUG", json_output=False)

        for name in QUIET_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_bind_and_clear_context(self):
        bind_context(correlation_id="123-abc")
        assert structlog.contextvars.get_contextvars()["correlation_id"] == "123-abc"

        clear_context()
        assert structlog.contextvars.get_contextvars() == {}
