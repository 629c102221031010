"""Preflight CLI application -- Typer-based host for a check registry.

A host application registers its default checks into a
:class:`~preflight_engine.checks.Registry` and hands it to
:func:`create_app`.  The resulting Typer application exposes one
``--preflight`` option on every command, bound to that registry.

Human-readable output goes to *stderr* via Rich; ``--json`` output goes to
*stdout* so that pipelines can compose cleanly.

Example::

    registry = Registry({"ownership": FuncCheck(check_ownership, enabled=True)})
    app = create_app(registry)
    app()
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from preflight_cli.display import display_check_states, display_run_failed, display_run_passed
from preflight_engine.checks import CheckExecutionError, Registry, RunContext, preflight_option
from preflight_engine.checks.models import Timer
from preflight_engine.config import Settings, load_settings
from preflight_engine.json_formatter import JSONFormatter

logger = logging.getLogger(__name__)

console = Console(stderr=True)

PREFLIGHT_ENVVAR = "PREFLIGHT_CHECKS"

_LOGGER_NAMES = ("preflight_engine", "preflight_cli")
_handler: logging.Handler | None = None


@dataclass
class _Options:
    json_output: bool = False
    settings: Settings = field(default_factory=Settings)


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def configure_logging(settings: Settings) -> None:
    """Install a stderr log handler on the preflight loggers.

    Structured JSON lines are emitted when ``settings.structured_logging``
    is set; otherwise records are rendered through Rich.  Calling this
    again replaces the previously installed handler.
    """
    global _handler  # noqa: PLW0603
    reset_logging()

    handler: logging.Handler
    if settings.structured_logging:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JSONFormatter())
    else:
        handler = RichHandler(console=console, show_time=False, show_path=False)

    for name in _LOGGER_NAMES:
        pkg_logger = logging.getLogger(name)
        pkg_logger.addHandler(handler)
        pkg_logger.setLevel(settings.effective_log_level)
    _handler = handler


def reset_logging() -> None:
    """Remove the handler installed by :func:`configure_logging`, if any."""
    global _handler  # noqa: PLW0603
    if _handler is None:
        return
    for name in _LOGGER_NAMES:
        pkg_logger = logging.getLogger(name)
        pkg_logger.removeHandler(_handler)
        pkg_logger.setLevel(logging.NOTSET)
    _handler = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def load_change_graph(source: str) -> Any:
    """Load the change-graph document from a JSON file, or stdin for ``-``.

    The document is returned as decoded and is not inspected further.
    """
    try:
        text = sys.stdin.read() if source == "-" else Path(source).read_text(encoding="utf-8")
    except OSError as exc:
        console.print(f"[red]Cannot read change graph '{escape(source)}': {escape(str(exc))}[/red]")
        raise typer.Exit(code=3) from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        console.print(f"[red]Invalid change graph '{escape(source)}': {escape(str(exc))}[/red]")
        raise typer.Exit(code=3) from exc


def _write_json(payload: dict[str, Any]) -> None:
    sys.stdout.write(json.dumps(payload, sort_keys=True, default=str) + "\n")


def _positive_timeout(value: float | None) -> float | None:
    if value is not None and value <= 0:
        raise typer.BadParameter("must be a positive number of seconds")
    return value


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------


def create_app(registry: Registry, *, envvar: str | None = PREFLIGHT_ENVVAR) -> typer.Typer:
    """Build a Typer application bound to *registry*.

    Register every default check before calling this so the ``--preflight``
    help text lists them.

    Parameters
    ----------
    registry:
        The checks available to this invocation.
    envvar:
        Environment variable consulted when ``--preflight`` is not given.
        ``None`` disables the fallback.
    """
    app = typer.Typer(
        name="preflight",
        help="Run preflight checks against a set of pending changes.",
        no_args_is_help=True,
        rich_markup_mode=None,
    )

    @app.callback()
    def _global_options(
        ctx: typer.Context,
        json_mode: bool = typer.Option(
            False,
            "--json/--no-json",
            help="Emit structured JSON to stdout instead of human-readable output.",
        ),
    ) -> None:
        """Global options applied to every command."""
        settings = load_settings()
        configure_logging(settings)
        ctx.obj = _Options(json_output=json_mode, settings=settings)

    @app.command()
    def run(
        ctx: typer.Context,
        changes: str = typer.Argument(
            ...,
            help="Path to the change-graph JSON document, or '-' to read stdin.",
        ),
        preflight: Registry | None = preflight_option(registry, envvar=envvar),
        timeout: float | None = typer.Option(
            None,
            "--timeout",
            callback=_positive_timeout,
            help="Deadline in seconds handed to checks (default: PREFLIGHT_RUN_TIMEOUT_SECONDS).",
        ),
    ) -> None:
        """Run every enabled preflight check against CHANGES.

        Stops at the first failing check and exits with code 1.
        """
        options: _Options = ctx.obj
        if preflight is not None:
            logger.debug("Preflight configuration: %s", json.dumps(preflight.config, sort_keys=True))

        change_graph = load_change_graph(changes)
        context = RunContext(timeout=timeout if timeout is not None else options.settings.run_timeout_seconds)

        timer = Timer()
        timer.start()
        try:
            asyncio.run(registry.run(context, change_graph))
        except CheckExecutionError as exc:
            elapsed = timer.elapsed_ms()
            if options.json_output:
                _write_json(
                    {
                        "passed": False,
                        "failed_check": exc.name,
                        "error": str(exc.__cause__ if exc.__cause__ is not None else exc),
                        "duration_ms": elapsed,
                    }
                )
            else:
                display_run_failed(console, exc, elapsed)
            raise typer.Exit(code=1) from exc

        elapsed = timer.elapsed_ms()
        names = registry.enabled_names()
        if options.json_output:
            _write_json({"passed": True, "checks": names, "duration_ms": elapsed})
        else:
            display_run_passed(console, names, elapsed)

    @app.command(name="list")
    def list_checks(
        ctx: typer.Context,
        preflight: Registry | None = preflight_option(registry, envvar=envvar),
    ) -> None:
        """List registered checks and their effective state."""
        options: _Options = ctx.obj
        if options.json_output:
            rows = [
                {"name": name, "enabled": check.enabled, "config": check.config}
                for name, check in registry.items()
            ]
            sys.stdout.write(json.dumps(rows, indent=2, default=str) + "\n")
        else:
            display_check_states(console, registry)

    return app
