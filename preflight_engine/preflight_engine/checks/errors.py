"""Exception hierarchy for the preflight check framework.

Configuration errors are raised synchronously by
:meth:`~preflight_engine.checks.registry.Registry.parse` and never leave a
partial mutation behind.  Execution errors are raised by
:meth:`~preflight_engine.checks.registry.Registry.run` and abort the
remainder of the preflight pass.
"""

from __future__ import annotations


class PreflightError(Exception):
    """Base exception for all preflight errors."""


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------


class PreflightConfigError(PreflightError):
    """A preflight configuration document could not be applied."""


class MalformedInputError(PreflightConfigError):
    """The configuration text is not a JSON object."""


class UnknownCheckError(PreflightConfigError):
    """The configuration document names checks that are not registered.

    Attributes
    ----------
    names:
        The unrecognised check names, sorted.
    """

    def __init__(self, names: list[str]) -> None:
        self.names = sorted(names)
        formatted = ", ".join(f"{n!r}" for n in self.names)
        super().__init__(f"unknown preflight check {formatted} specified")


class MalformedConfigError(PreflightConfigError):
    """A single check's configuration value is invalid."""

    def __init__(self, name: str, reason: str) -> None:
        self.name = name
        self.reason = reason
        super().__init__(f"unable to parse config for {name!r}: {reason}")


# ---------------------------------------------------------------------------
# Execution errors
# ---------------------------------------------------------------------------


class CheckExecutionError(PreflightError):
    """A registered check failed during a preflight pass.

    The underlying failure is chained as ``__cause__``.
    """

    def __init__(self, name: str, cause: BaseException) -> None:
        self.name = name
        super().__init__(f'running preflight check "{name}": {cause}')
