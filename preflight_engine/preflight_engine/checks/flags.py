"""Command-line binding for a preflight :class:`Registry`.

Exposes a single ``--preflight`` option whose value is a JSON document
merged into the registry through :meth:`Registry.parse`.  The registry
itself knows nothing about click; everything library specific lives here.

Usage with a plain click command::

    registry.add_flags(command)

Usage with typer::

    def apply(preflight: Registry | None = preflight_option(registry)) -> None:
        ...
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click
import typer

from preflight_engine.checks.errors import PreflightConfigError

if TYPE_CHECKING:
    from preflight_engine.checks.registry import Registry

PREFLIGHT_FLAG = "preflight"


def usage(registry: Registry) -> str:
    """Return the help text for the ``--preflight`` option."""
    return f"preflight checks to run. Available preflight checks are [{','.join(registry.names())}]"


class RegistryParamType(click.ParamType):
    """Click parameter type that merges its value into a registry.

    Converting a value parses it into the bound registry and yields the
    registry itself.  Configuration errors become click usage errors, so
    a bad ``--preflight`` value aborts the invocation with exit code 2.
    """

    name = "preflight"

    def __init__(self, registry: Registry) -> None:
        self.registry = registry

    def convert(self, value: Any, param: click.Parameter | None, ctx: click.Context | None) -> Registry:
        if value is self.registry:
            return self.registry
        try:
            self.registry.parse(value)
        except PreflightConfigError as exc:
            self.fail(str(exc), param, ctx)
        return self.registry


def _default_display(registry: Registry) -> str | bool:
    return registry.render() or False


def add_flags(registry: Registry, command: click.Command) -> None:
    """Append the ``--preflight`` option to *command*.

    The option is not passed to the command callback; supplying it only
    configures *registry*.  Call this after all checks are registered so
    the help text lists them.

    Raises
    ------
    ValueError
        If *command* already has a ``--preflight`` option.
    """
    opt = f"--{PREFLIGHT_FLAG}"
    if any(opt in getattr(p, "opts", ()) for p in command.params):
        raise ValueError(f"Command {command.name!r} already has a {opt} option.")
    command.params.append(
        click.Option(
            [opt],
            type=RegistryParamType(registry),
            default=None,
            expose_value=False,
            show_default=_default_display(registry),
            help=usage(registry),
        )
    )


def preflight_option(registry: Registry, *, envvar: str | None = None) -> Any:
    """Build a ``typer.Option`` bound to *registry*.

    The command parameter receives the registry when the option (or
    *envvar*) is supplied and ``None`` otherwise.
    """
    return typer.Option(
        None,
        f"--{PREFLIGHT_FLAG}",
        click_type=RegistryParamType(registry),
        envvar=envvar,
        show_default=_default_display(registry),
        help=usage(registry),
    )
