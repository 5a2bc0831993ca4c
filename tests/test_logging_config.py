"""Tests for structured logging and request tracing."""

import asyncio
import json
import logging

import pytest

from src.logging_config.config import LogFormat, LoggingConfig, LogLevel
from src.logging_config.context import (
    RequestContext,
    generate_request_id,
    get_context_dict,
    get_request_id,
)
from src.logging_config.setup import (
    ConsoleFormatter,
    StructuredFormatter,
    configure_logging,
    get_logger,
)


def _record(msg="hello", level=logging.INFO, **extra):
    record = logging.LogRecord("src.test", level, __file__, 10, msg, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestLoggingConfig:
    """Tests for logging configuration dataclasses."""

    def test_default_config_values(self):
        config = LoggingConfig()
        assert config.level == LogLevel.INFO
        assert config.format == LogFormat.CONSOLE
        assert config.include_caller is False
        assert config.service_name == "reticule"

    def test_quiet_loggers_default(self):
        config = LoggingConfig()
        assert "httpx" in config.quiet_loggers
        assert "websockets" in config.quiet_loggers

    def test_log_format_enum_values(self):
        assert LogFormat.JSON.value == "json"
        assert LogFormat.CONSOLE.value == "console"


class TestRequestContext:

    def test_generate_request_id_unique(self):
        assert generate_request_id() != generate_request_id()

    def test_sets_and_restores(self):
        assert get_request_id() == ""
        with RequestContext(request_id="req-1", extra={"path": "/time"}):
            assert get_request_id() == "req-1"
            assert get_context_dict() == {"request_id": "req-1", "path": "/time"}
        assert get_request_id() == ""
        assert get_context_dict() == {}

    def test_nested_contexts(self):
        with RequestContext(request_id="outer"):
            with RequestContext(request_id="inner"):
                assert get_request_id() == "inner"
            assert get_request_id() == "outer"

    def test_auto_request_id(self):
        with RequestContext() as ctx:
            assert ctx.request_id
            assert get_request_id() == ctx.request_id

    @pytest.mark.asyncio
    async def test_tasks_isolated(self):
        seen = {}

        async def call(name):
            with RequestContext(request_id=name):
                await asyncio.sleep(0.01)
                seen[name] = get_request_id()

        await asyncio.gather(call("a"), call("b"))
        assert seen == {"a": "a", "b": "b"}


class TestFormatters:

    def test_structured_output(self):
        formatter = StructuredFormatter(service_name="svc")
        entry = json.loads(formatter.format(_record()))
        assert entry["message"] == "hello"
        assert entry["level"] == "INFO"
        assert entry["service"] == "svc"
        assert "module" not in entry

    def test_structured_includes_context_and_fields(self):
        formatter = StructuredFormatter()
        with RequestContext(request_id="req-9"):
            entry = json.loads(formatter.format(_record(path="/accounts/", status_code=200)))
        assert entry["request_id"] == "req-9"
        assert entry["path"] == "/accounts/"
        assert entry["status_code"] == 200

    def test_structured_caller(self):
        entry = json.loads(StructuredFormatter(include_caller=True).format(_record()))
        assert entry["line"] == 10

    def test_structured_exception(self):
        try:
            raise ValueError("boom")
        except ValueError:
            import sys
            record = logging.LogRecord("t", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())
        entry = json.loads(StructuredFormatter().format(record))
        assert entry["exception"]["type"] == "ValueError"

    def test_console_output(self):
        line = ConsoleFormatter().format(_record(level=logging.WARNING))
        assert "WARNING" in line
        assert "hello" in line

    def test_console_includes_context(self):
        with RequestContext(request_id="req-3"):
            line = ConsoleFormatter().format(_record())
        assert "request_id=req-3" in line


class TestConfigureLogging:

    @pytest.fixture(autouse=True)
    def restore_root(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_json_format(self):
        configure_logging(LoggingConfig(format=LogFormat.JSON, level=LogLevel.DEBUG))
        root = logging.getLogger()
        assert isinstance(root.handlers[0].formatter, StructuredFormatter)
        assert root.level == logging.DEBUG

    def test_console_format(self):
        configure_logging(LoggingConfig(format=LogFormat.CONSOLE))
        assert isinstance(logging.getLogger().handlers[0].formatter, ConsoleFormatter)

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("RETICULE_LOG_LEVEL", "error")
        monkeypatch.setenv("RETICULE_LOG_FORMAT", "json")
        configure_logging()
        root = logging.getLogger()
        assert root.level == logging.ERROR
        assert isinstance(root.handlers[0].formatter, StructuredFormatter)

    def test_quiets_third_party(self):
        configure_logging(LoggingConfig(level=LogLevel.DEBUG))
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_get_logger(self):
        assert get_logger("src.coinbasepro.api").name == "src.coinbasepro.api"
