"""Data models for the preflight check framework.

Defines the typed per-check configuration shape decoded from the
``--preflight`` document and the execution context handed to every check
during a preflight pass.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from preflight_engine.checks.errors import MalformedConfigError

_TRUE_STRINGS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_STRINGS = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def parse_bool(value: str) -> bool:
    """Parse a boolean string such as ``"true"`` or ``"0"``.

    Raises
    ------
    ValueError
        If *value* is not one of the accepted spellings.
    """
    if value in _TRUE_STRINGS:
        return True
    if value in _FALSE_STRINGS:
        return False
    raise ValueError(f"invalid boolean representation {value!r}")


class CheckConfig(BaseModel):
    """Configuration for a single check as supplied by the user.

    Only ``enabled`` is interpreted by the registry.  Every other key is
    kept verbatim in the extra bag and is exposed through :attr:`options`.
    """

    model_config = ConfigDict(extra="allow")

    enabled: bool | None = Field(
        default=None,
        description="Override for the check's enabled state. None leaves it unchanged.",
    )

    @field_validator("enabled", mode="before")
    @classmethod
    def parse_enabled(cls, v: object) -> bool | None:
        if v is None or isinstance(v, bool):
            return v
        if isinstance(v, str):
            return parse_bool(v)
        raise ValueError(f"enabled must be a boolean string, got {type(v).__name__}")

    @property
    def options(self) -> dict[str, Any]:
        """Keys other than ``enabled``, untouched."""
        return dict(self.model_extra or {})

    @classmethod
    def from_value(cls, name: str, value: object) -> CheckConfig:
        """Validate the raw configuration *value* given for check *name*.

        Raises
        ------
        MalformedConfigError
            If *value* is not an object or its ``enabled`` field is invalid.
        """
        if not isinstance(value, dict):
            raise MalformedConfigError(name, f"expected an object, got {type(value).__name__}")
        try:
            return cls.model_validate(value)
        except ValidationError as exc:
            reason = "; ".join(err["msg"] for err in exc.errors())
            raise MalformedConfigError(name, reason) from exc


class RunContext:
    """Execution context passed to every check during a preflight pass.

    Carries cooperative cancellation and an optional deadline.  The
    registry never polls the context itself; checks that perform slow
    work are expected to call :meth:`raise_if_cancelled` or consult
    :meth:`remaining`.

    Parameters
    ----------
    timeout:
        Seconds from construction until the deadline passes.  ``None``
        means no deadline.
    values:
        Host-supplied values checks may consult (read-only).
    """

    def __init__(
        self,
        *,
        timeout: float | None = None,
        values: Mapping[str, Any] | None = None,
    ) -> None:
        self._deadline: float | None = time.monotonic() + timeout if timeout is not None else None
        self._cancelled = False
        self._values: Mapping[str, Any] = MappingProxyType(dict(values or {}))

    @property
    def deadline(self) -> float | None:
        """Deadline on the :func:`time.monotonic` clock, if any."""
        return self._deadline

    @property
    def values(self) -> Mapping[str, Any]:
        return self._values

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    def cancel(self) -> None:
        """Signal cancellation to any check observing this context."""
        self._cancelled = True

    def remaining(self) -> float | None:
        """Seconds left before the deadline (never negative), or ``None``."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def raise_if_cancelled(self) -> None:
        """Raise if the context was cancelled or its deadline has passed.

        Raises
        ------
        asyncio.CancelledError
            If :meth:`cancel` was called.
        TimeoutError
            If the deadline has passed.
        """
        if self._cancelled:
            raise asyncio.CancelledError("preflight run cancelled")
        if self.expired:
            raise TimeoutError("preflight deadline exceeded")


class Timer:
    """Simple monotonic timer for measuring check execution duration."""

    def __init__(self) -> None:
        self._start: float = 0.0

    def start(self) -> None:
        self._start = time.monotonic()

    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self._start) * 1000)
