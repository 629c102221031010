"""Base classes for preflight check implementations.

A check wraps an enabled flag, an opaque configuration payload handed to
it by the :class:`~preflight_engine.checks.registry.Registry`, and an
async execution capability.  A check signals failure by raising; the
exception propagates unchanged and is wrapped with the check's name one
layer up, in the registry.
"""

from __future__ import annotations

import abc
import inspect
from collections.abc import Awaitable, Callable
from typing import Any

from preflight_engine.checks.models import RunContext

CheckFunc = Callable[[RunContext, Any], Awaitable[None]]


class Check(abc.ABC):
    """Abstract base for all preflight checks.

    Subclasses must implement :meth:`run`.  A check does not know the
    name it is registered under; names live only in the registry.

    Parameters
    ----------
    enabled:
        Initial enabled state.
    """

    def __init__(self, enabled: bool = False) -> None:
        self._enabled = enabled
        self._config: dict[str, Any] = {}

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def config(self) -> dict[str, Any]:
        """The configuration last supplied through :meth:`set_config`."""
        return self._config

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def set_config(self, config: dict[str, Any]) -> None:
        """Store *config* for use by :meth:`run`.

        The base implementation accepts anything.  Subclasses that need to
        validate their configuration should raise from an override.
        """
        self._config = dict(config)

    def _restore_config(self, config: dict[str, Any]) -> None:
        """Reinstate a previously accepted configuration without revalidating it."""
        self._config = config

    @abc.abstractmethod
    async def run(self, context: RunContext, change_graph: Any) -> None:
        """Inspect *change_graph* and raise to veto the change.

        Parameters
        ----------
        context:
            Execution context carrying cancellation and deadline.
        change_graph:
            The pending changes.  Must be treated as read-only.
        """


class FuncCheck(Check):
    """A check backed by a plain coroutine function.

    Parameters
    ----------
    func:
        ``async def func(context, change_graph) -> None``.
    enabled:
        Initial enabled state.
    """

    def __init__(self, func: CheckFunc, enabled: bool = False) -> None:
        if not inspect.iscoroutinefunction(func):
            raise TypeError(f"check function {func!r} must be a coroutine function")
        super().__init__(enabled)
        self._func = func

    async def run(self, context: RunContext, change_graph: Any) -> None:
        await self._func(context, change_graph)

    def __repr__(self) -> str:
        name = getattr(self._func, "__qualname__", repr(self._func))
        return f"FuncCheck({name}, enabled={self._enabled})"
