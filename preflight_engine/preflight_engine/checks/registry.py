"""Preflight check registry.

The :class:`Registry` owns the named checks of one invocation, merges a
user-supplied JSON configuration document into them and runs every
enabled check, in sorted name order, before changes are applied.
"""

from __future__ import annotations

import bisect
import json
import logging
from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any

from preflight_engine.checks.base import Check
from preflight_engine.checks.errors import (
    CheckExecutionError,
    MalformedConfigError,
    MalformedInputError,
    UnknownCheckError,
)
from preflight_engine.checks.models import CheckConfig, RunContext, Timer

if TYPE_CHECKING:
    import click

logger = logging.getLogger(__name__)


class Registry:
    """A collection of named preflight checks and their configuration.

    Names are kept in a sorted list alongside the mapping so that
    rendering, help text and execution order are deterministic.

    Parameters
    ----------
    checks:
        Initial checks, keyed by name.
    """

    def __init__(self, checks: Mapping[str, Check] | None = None) -> None:
        self._known: dict[str, Check] = {}
        self._names: list[str] = []
        self._config: dict[str, dict[str, Any]] | None = None
        for name, check in (checks or {}).items():
            self.add_check(name, check)

    # ------------------------------------------------------------------
    # Registration and introspection
    # ------------------------------------------------------------------

    def add_check(self, name: str, check: Check) -> None:
        """Register *check* under *name*.

        Registering a name twice replaces the earlier check; the last
        registration wins.

        Raises
        ------
        ValueError
            If *name* is empty.
        """
        if not name:
            raise ValueError("Preflight check name must not be empty.")
        if name in self._known:
            logger.debug("Replacing preflight check %s", name)
        else:
            bisect.insort(self._names, name)
            logger.debug("Registered preflight check %s", name)
        self._known[name] = check

    def get(self, name: str) -> Check | None:
        """Look up a check by name.  Returns ``None`` if not registered."""
        return self._known.get(name)

    def names(self) -> list[str]:
        """Return all registered check names, sorted."""
        return list(self._names)

    def enabled_names(self) -> list[str]:
        """Return the names of enabled checks, sorted."""
        return [name for name in self._names if self._known[name].enabled]

    def items(self) -> list[tuple[str, Check]]:
        """Return ``(name, check)`` pairs, sorted by name."""
        return [(name, self._known[name]) for name in self._names]

    @property
    def config(self) -> dict[str, dict[str, Any]] | None:
        """The last successfully parsed configuration document, if any."""
        return self._config

    def __len__(self) -> int:
        return len(self._known)

    def __contains__(self, name: object) -> bool:
        return name in self._known

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    # ------------------------------------------------------------------
    # Rendering and parsing
    # ------------------------------------------------------------------

    def render(self) -> str:
        """Summarise check states as ``name=true,other=false``, sorted by name."""
        return ",".join(f"{name}={str(check.enabled).lower()}" for name, check in self.items())

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"Registry({self.render()!r})"

    def parse(self, text: str) -> None:
        """Merge the JSON configuration document *text* into known checks.

        The document maps check names to objects.  Each object may carry an
        ``enabled`` boolean string; the whole object, ``enabled`` included,
        is forwarded to the check's :meth:`~Check.set_config`.  Checks not
        named in the document are left untouched.

        Every entry is validated before any check is mutated, so a failed
        call has no effect.

        Raises
        ------
        MalformedInputError
            If *text* is not a JSON object.
        UnknownCheckError
            If the document names checks that are not registered.
        MalformedConfigError
            If an entry is not an object, its ``enabled`` value cannot be
            parsed, or the check rejects its configuration.
        """
        try:
            document = json.loads(text)
        except json.JSONDecodeError as exc:
            raise MalformedInputError(f"Invalid JSON format: {text!r}: {exc}") from exc
        if not isinstance(document, dict):
            raise MalformedInputError(
                f"Invalid preflight configuration: expected a JSON object, got {type(document).__name__}"
            )

        unknown = [name for name in document if name not in self._known]
        if unknown:
            raise UnknownCheckError(unknown)

        validated = {name: CheckConfig.from_value(name, document[name]) for name in sorted(document)}

        self._apply(document, validated)
        self._config = document
        logger.info("Applied preflight configuration for %d check(s): %s", len(document), self.render())

    def _apply(self, document: dict[str, Any], validated: dict[str, CheckConfig]) -> None:
        """Forward configurations, then apply enabled overrides.

        Configurations already forwarded are restored, bypassing
        :meth:`~Check.set_config`, if a check rejects its own, and no enabled
        state is touched in that case.
        """
        previous: list[tuple[Check, dict[str, Any]]] = []
        for name in validated:
            check = self._known[name]
            old_config = check.config
            try:
                check.set_config(document[name])
            except Exception as exc:
                for applied, applied_config in reversed(previous):
                    applied._restore_config(applied_config)
                raise MalformedConfigError(name, str(exc)) from exc
            previous.append((check, old_config))

        for name, check_config in validated.items():
            if check_config.enabled is not None:
                self._known[name].set_enabled(check_config.enabled)

    # ------------------------------------------------------------------
    # Flag binding
    # ------------------------------------------------------------------

    def add_flags(self, command: click.Command) -> None:
        """Add the ``--preflight`` option to *command*, bound to this registry."""
        from preflight_engine.checks.flags import add_flags

        add_flags(self, command)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def run(self, context: RunContext, change_graph: Any) -> None:
        """Run every enabled check, in sorted name order.

        Stops at the first failing check.  The registry does not poll
        *context* for cancellation between checks.

        Raises
        ------
        CheckExecutionError
            Wrapping the first failure, with the failing check's name.
        """
        enabled = self.enabled_names()
        if not enabled:
            logger.info("No preflight checks enabled.")
            return

        logger.info("Running %d preflight check(s): %s", len(enabled), ", ".join(enabled))
        for name in enabled:
            check = self._known[name]
            timer = Timer()
            timer.start()
            logger.debug("Running preflight check %s", name, extra={"check": name})
            try:
                await check.run(context, change_graph)
            except Exception as exc:
                logger.warning(
                    "Preflight check %s failed after %d ms: %s",
                    name,
                    timer.elapsed_ms(),
                    exc,
                    extra={"check": name},
                )
                raise CheckExecutionError(name, exc) from exc
            logger.debug(
                "Preflight check %s passed in %d ms",
                name,
                timer.elapsed_ms(),
                extra={"check": name},
            )
