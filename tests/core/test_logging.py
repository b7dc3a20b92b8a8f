"""Tests for structured logging setup."""

from __future__ import annotations

import json
import logging

import structlog

from notebridge.core.logging import bind_context, clear_context, configure_logging, get_logger, unbind_context


class TestConfigureLogging:
    def test_root_level(self):
        configure_logging(level="WARNING", json_format=True)
        assert logging.getLogger().level == logging.WARNING

    def test_json_output(self, capsys):
        configure_logging(level="INFO", json_format=True, service="notebridge-test")
        get_logger("tests").info("case_created", case_id="c-1")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        event = json.loads(line)
        assert event["event"] == "case_created"
        assert event["case_id"] == "c-1"
        assert event["service"] == "notebridge-test"
        assert event["level"] == "info"


class TestContext:
    def setup_method(self):
        clear_context()

    def teardown_method(self):
        clear_context()

    def test_bind_and_unbind(self):
        bind_context(request_id="r-1", user_id="u-1")
        assert structlog.contextvars.get_contextvars() == {"request_id": "r-1", "user_id": "u-1"}
        unbind_context("user_id")
        assert structlog.contextvars.get_contextvars() == {"request_id": "r-1"}

    def test_context_merged_into_events(self, capsys):
        configure_logging(level="INFO", json_format=True)
        bind_context(request_id="r-2")
        get_logger("tests").info("request_completed")
        event = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert event["request_id"] == "r-2"
