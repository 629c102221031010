"""Rich output formatting for the preflight CLI.

All functions write to a :class:`rich.console.Console` instance (typically
bound to *stderr*) so that machine-readable output on *stdout* is never
polluted with human-readable decoration.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

if TYPE_CHECKING:
    from preflight_engine.checks import CheckExecutionError, Registry


def _coloured_state(enabled: bool) -> str:
    """Return a Rich markup string for an enabled flag."""
    if enabled:
        return "[green]enabled[/green]"
    return "[dim]disabled[/dim]"


# ---------------------------------------------------------------------------
# Check states
# ---------------------------------------------------------------------------


def display_check_states(console: Console, registry: Registry) -> None:
    """Render a table of every registered check and its effective state.

    Parameters
    ----------
    console:
        Rich console to write to.
    registry:
        The registry whose checks are listed, in sorted order.
    """
    if not len(registry):
        console.print("[dim]No preflight checks registered.[/dim]")
        return

    table = Table(
        title=f"Preflight Checks ({len(registry)})",
        show_lines=False,
        pad_edge=True,
        expand=False,
    )
    table.add_column("Name", style="bold")
    table.add_column("State")
    table.add_column("Configuration")

    for name, check in registry.items():
        options = ", ".join(f"{k}={v}" for k, v in sorted(check.config.items()) if k != "enabled")
        table.add_row(escape(name), _coloured_state(check.enabled), escape(options) or "-")

    console.print(table)


# ---------------------------------------------------------------------------
# Run outcome
# ---------------------------------------------------------------------------


def display_run_passed(console: Console, names: list[str], elapsed_ms: int) -> None:
    """Render a successful preflight pass."""
    if not names:
        console.print("[yellow]No preflight checks enabled.[/yellow]")
        return
    console.print(f"[green]✓ Preflight passed[/green] ({len(names)} check(s), {elapsed_ms}ms)")
    for name in names:
        console.print(f"  [green]✓[/green] {escape(name)}")


def display_run_failed(console: Console, error: CheckExecutionError, elapsed_ms: int) -> None:
    """Render the check failure that stopped a preflight pass."""
    cause = error.__cause__ if error.__cause__ is not None else error
    console.print(
        Panel(
            f"[bold]Check:[/bold]  {escape(error.name)}\n[bold]Error:[/bold]  {escape(str(cause))}",
            title=f"Preflight failed ({elapsed_ms}ms)",
            border_style="red",
        )
    )
