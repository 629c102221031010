"""Preflight checks -- a validation gate run before changes are applied.

A :class:`Registry` owns named checks, merges a JSON configuration
document into them and runs the enabled ones in sorted order, stopping
at the first failure.

Quick start::

    from preflight_engine.checks import FuncCheck, Registry, RunContext

    async def ownership(context, change_graph):
        ...

    registry = Registry({"ownership": FuncCheck(ownership, enabled=True)})
    registry.parse('{"ownership": {"enabled": "false"}}')
    await registry.run(RunContext(), change_graph)
"""

from preflight_engine.checks.base import Check, CheckFunc, FuncCheck
from preflight_engine.checks.errors import (
    CheckExecutionError,
    MalformedConfigError,
    MalformedInputError,
    PreflightConfigError,
    PreflightError,
    UnknownCheckError,
)
from preflight_engine.checks.flags import PREFLIGHT_FLAG, RegistryParamType, add_flags, preflight_option
from preflight_engine.checks.models import CheckConfig, RunContext, parse_bool
from preflight_engine.checks.registry import Registry

__all__ = [
    "PREFLIGHT_FLAG",
    "Check",
    "CheckConfig",
    "CheckExecutionError",
    "CheckFunc",
    "FuncCheck",
    "MalformedConfigError",
    "MalformedInputError",
    "PreflightConfigError",
    "PreflightError",
    "Registry",
    "RegistryParamType",
    "RunContext",
    "UnknownCheckError",
    "add_flags",
    "parse_bool",
    "preflight_option",
]
