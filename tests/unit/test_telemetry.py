"""Unit tests for logging helpers and the timing decorator."""

import io
import json
import logging

import pytest

from blob_quickstart.commons.telemetry import (
    JsonFormatter,
    LogContext,
    TextFormatter,
    clear_log_context,
    configure_logging,
    get_correlation_id,
    get_log_context,
    set_correlation_id,
    set_log_context,
    timed,
)
from blob_quickstart.commons.telemetry.logger import correlation_id_var


@pytest.fixture(autouse=True)
def reset_context():
    token = correlation_id_var.set(None)
    clear_log_context()
    yield
    correlation_id_var.reset(token)
    clear_log_context()


def _record(message="hello", level=logging.INFO, **extra) -> logging.LogRecord:
    record = logging.LogRecord("blob_quickstart.test", level, __file__, 10, message, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestCorrelationId:
    """Tests for correlation ID helpers."""

    def test_generated_when_missing(self):
        cid = set_correlation_id()
        assert len(cid) == 36
        assert get_correlation_id() == cid

    def test_explicit_value(self):
        assert set_correlation_id("run-1") == "run-1"
        assert get_correlation_id() == "run-1"


class TestLogContext:
    """Tests for log context helpers."""

    def test_empty_by_default(self):
        assert get_log_context() == {}

    def test_set_and_clear(self):
        set_log_context(run_id="abc")
        set_log_context(step="upload")
        assert get_log_context() == {"run_id": "abc", "step": "upload"}

        clear_log_context()
        assert get_log_context() == {}

    def test_returns_copy(self):
        set_log_context(run_id="abc")
        get_log_context()["run_id"] = "mutated"
        assert get_log_context() == {"run_id": "abc"}

    def test_context_manager_restores_previous(self):
        set_log_context(run_id="abc")

        with LogContext(step="download"):
            assert get_log_context() == {"run_id": "abc", "step": "download"}

        assert get_log_context() == {"run_id": "abc"}


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def test_basic_fields(self):
        data = json.loads(JsonFormatter().format(_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "blob_quickstart.test"
        assert data["message"] == "hello"
        assert "path" not in data

    def test_includes_correlation_context_and_extras(self):
        set_correlation_id("run-1")
        set_log_context(run_id="run-1")

        data = json.loads(JsonFormatter().format(_record(duration_ms=1.5, outcome="ok")))

        assert data["correlation_id"] == "run-1"
        assert data["context"] == {"run_id": "run-1"}
        assert data["duration_ms"] == 1.5
        assert data["outcome"] == "ok"

    def test_include_path(self):
        data = json.loads(JsonFormatter(include_path=True).format(_record()))
        assert data["path"].endswith(":10")


class TestTextFormatter:
    """Tests for TextFormatter."""

    def test_plain_output_with_extras(self):
        set_correlation_id("12345678-aaaa")

        line = TextFormatter(use_color=False).format(_record(container="qs-1"))

        assert "INFO" in line
        assert "[blob_quickstart.test]" in line
        assert "[12345678]" in line
        assert line.endswith("hello container=qs-1")
        assert "\033[" not in line

    def test_color_output(self):
        line = TextFormatter(use_color=True).format(_record(level=logging.ERROR))
        assert TextFormatter.COLORS["ERROR"] in line


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_writes_json_to_stream(self):
        stream = io.StringIO()
        logger = configure_logging("INFO", "json", logger_name="bq-test-json", stream=stream)

        logger.info("provisioned", extra={"container": "qs-1"})
        logger.debug("hidden")

        lines = stream.getvalue().splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0])["container"] == "qs-1"
        assert logger.propagate is False

    def test_reconfigure_replaces_handler(self):
        stream = io.StringIO()
        configure_logging("INFO", "text", logger_name="bq-test-text", stream=stream)
        logger = configure_logging("WARNING", "text", logger_name="bq-test-text", stream=stream)

        assert len(logger.handlers) == 1
        assert logger.level == logging.WARNING


class TestTimed:
    """Tests for the timed decorator."""

    async def test_logs_success(self, caplog):
        logger = logging.getLogger("bq-test-timed")

        @timed(logger=logger, level=logging.INFO)
        async def work():
            return 42

        with caplog.at_level(logging.INFO, logger="bq-test-timed"):
            assert await work() == 42

        record = caplog.records[-1]
        assert record.outcome == "ok"
        assert record.duration_ms >= 0

    async def test_logs_error_and_reraises(self, caplog):
        logger = logging.getLogger("bq-test-timed")

        @timed(logger=logger, level=logging.INFO)
        async def broken():
            raise ValueError("nope")

        with caplog.at_level(logging.INFO, logger="bq-test-timed"):
            with pytest.raises(ValueError):
                await broken()

        assert caplog.records[-1].outcome == "error"

    async def test_threshold_suppresses_fast_calls(self, caplog):
        logger = logging.getLogger("bq-test-timed")

        @timed(logger=logger, level=logging.INFO, threshold_ms=60_000)
        async def fast():
            return None

        with caplog.at_level(logging.INFO, logger="bq-test-timed"):
            await fast()

        assert caplog.records == []

    async def test_bare_decorator_keeps_metadata(self):
        @timed
        async def named():
            """Docstring."""

        assert named.__name__ == "named"
        assert named.__doc__ == "Docstring."
