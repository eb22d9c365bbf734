"""Tests for structlog configuration and LogContext."""

import json

import pytest
import structlog

from topic_spine.core.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)


class TestConfigureLogging:
    def test_json_output_goes_to_stderr(self, capsys):
        configure_logging(level="INFO", json_format=True, service="topic-test")
        get_logger("tests").info("topic_created", topic_id="t1")

        captured = capsys.readouterr()
        assert captured.out == ""
        line = json.loads(captured.err.strip().splitlines()[-1])
        assert line["event"] == "topic_created"
        assert line["topic_id"] == "t1"
        assert line["service.name"] == "topic-test"
        assert line["log.level"] == "info"
        assert "@timestamp" in line
        assert line["logger"] == "tests"

    def test_logger_created_before_configure_uses_new_config(self, capsys):
        logger = get_logger("early")
        configure_logging(level="INFO", json_format=True)
        logger.info("late_event")
        line = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert line["event"] == "late_event"
        assert line["logger"] == "early"

    def test_unnamed_logger(self, capsys):
        configure_logging(level="INFO", json_format=True)
        get_logger().info("anonymous")
        line = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert line["event"] == "anonymous"
        assert "logger" not in line

    def test_level_filters(self, capsys):
        configure_logging(level="WARNING", json_format=True)
        logger = get_logger("tests")
        logger.info("hidden")
        logger.warning("shown")
        err = capsys.readouterr().err
        assert "hidden" not in err
        assert "shown" in err

    def test_unknown_level_raises(self):
        with pytest.raises(ValueError):
            configure_logging(level="LOUD")

    def test_context_is_merged(self, capsys):
        configure_logging(level="INFO", json_format=True)
        with LogContext(principal_id="editor-id", role="Editor"):
            get_logger("tests").info("topic_versioned")
        line = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert line["principal_id"] == "editor-id"
        assert line["role"] == "Editor"


class TestLogContext:
    def test_binds_and_restores(self):
        with LogContext(principal_id="admin-id", role="Admin"):
            assert structlog.contextvars.get_contextvars() == {
                "principal_id": "admin-id",
                "role": "Admin",
            }
        assert structlog.contextvars.get_contextvars() == {}

    def test_none_values_are_dropped(self):
        with LogContext(principal_id="p", topic_id=None):
            assert "topic_id" not in structlog.contextvars.get_contextvars()

    def test_nested_contexts_restore_outer_values(self):
        with LogContext(principal_id="outer"):
            with LogContext(principal_id="inner"):
                assert structlog.contextvars.get_contextvars()["principal_id"] == "inner"
            assert structlog.contextvars.get_contextvars()["principal_id"] == "outer"


class TestContextHelpers:
    def test_bind_unbind_clear(self):
        bind_context(request="r1", principal_id="p1")
        unbind_context("request")
        assert structlog.contextvars.get_contextvars() == {"principal_id": "p1"}
        clear_context()
        assert structlog.contextvars.get_contextvars() == {}
