"""Tests for the JSON log formatter."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from preflight_engine.json_formatter import JSONFormatter


@pytest.fixture
def formatter() -> JSONFormatter:
    return JSONFormatter()


def _record(msg: str = "test message", level: int = logging.INFO, **extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="preflight_engine.checks.registry",
        level=level,
        pathname="registry.py",
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Verify structured JSON output from the formatter."""

    def test_basic_format(self, formatter: JSONFormatter) -> None:
        data = json.loads(formatter.format(_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "preflight_engine.checks.registry"
        assert data["message"] == "test message"
        assert "timestamp" in data

    def test_single_line_output(self, formatter: JSONFormatter) -> None:
        output = formatter.format(_record("line one\nline two", logging.WARNING))
        assert "\n" not in output

    def test_args_interpolated(self, formatter: JSONFormatter) -> None:
        record = _record("Preflight check %s failed after %d ms")
        record.args = ("ownership", 12)
        data = json.loads(formatter.format(record))
        assert data["message"] == "Preflight check ownership failed after 12 ms"

    def test_check_included(self, formatter: JSONFormatter) -> None:
        data = json.loads(formatter.format(_record(check="ownership")))
        assert data["check"] == "ownership"

    def test_check_omitted_when_absent(self, formatter: JSONFormatter) -> None:
        data = json.loads(formatter.format(_record()))
        assert "check" not in data
        assert "exc_info" not in data

    def test_exception_included(self, formatter: JSONFormatter) -> None:
        try:
            raise ValueError("boom")
        except ValueError:
            record = _record("failed", logging.ERROR)
            record.exc_info = sys.exc_info()

        data = json.loads(formatter.format(record))
        assert "ValueError: boom" in data["exc_info"]

    def test_non_ascii_preserved(self, formatter: JSONFormatter) -> None:
        output = formatter.format(_record("ressource modifiée"))
        assert "modifiée" in output
