"""Shared fixtures for CLI tests."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from preflight_cli.app import PREFLIGHT_ENVVAR, reset_logging

_ENV_VARS = (
    PREFLIGHT_ENVVAR,
    "PREFLIGHT_DEBUG",
    "PREFLIGHT_LOG_LEVEL",
    "PREFLIGHT_STRUCTURED_LOGGING",
    "PREFLIGHT_RUN_TIMEOUT_SECONDS",
)


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep host environment and log handlers from leaking between tests."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    yield
    reset_logging()
