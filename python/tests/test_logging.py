"""Tests for structured logging context."""

import logging

import structlog
from structlog.contextvars import get_contextvars, merge_contextvars

from corsgate.logging import configure_logging, request_context


class TestRequestContext:
    """request_context() binds request fields for the duration of a block."""

    def test_fields_bound(self):
        with request_context(path="/health", method="GET", origin="https://a.com"):
            assert get_contextvars() == {
                "path": "/health",
                "method": "GET",
                "origin": "https://a.com",
            }

    def test_fields_merged_into_events(self):
        with request_context(path="/health", method="GET", origin="https://a.com"):
            event = merge_contextvars(None, "info", {"event": "cors_request_decided"})

        assert event == {
            "event": "cors_request_decided",
            "path": "/health",
            "method": "GET",
            "origin": "https://a.com",
        }

    def test_missing_values_omitted(self):
        with request_context(path="/health", method="GET"):
            assert "origin" not in get_contextvars()

    def test_unbound_on_exit(self):
        with request_context(path="/health", method="GET", origin="https://a.com"):
            pass

        assert get_contextvars() == {}

    def test_unbound_after_error(self):
        try:
            with request_context(path="/health"):
                raise RuntimeError("boom")
        except RuntimeError:
            pass

        assert get_contextvars() == {}


class TestConfigureLogging:
    """configure_logging() installs one stdout handler on the root logger."""

    def test_single_handler_and_level(self):
        configure_logging(json_format=True, level=logging.DEBUG)
        root = logging.getLogger()

        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)
        assert root.level == logging.DEBUG
        assert logging.getLogger("uvicorn.access").level == logging.WARNING

    def test_reconfigure_replaces_handler(self):
        configure_logging(json_format=False)
        configure_logging(json_format=True)

        assert len(logging.getLogger().handlers) == 1
