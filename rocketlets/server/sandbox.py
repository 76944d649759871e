"""Per-call dispatch scope.

Each ``ProxiedRocketlet.call`` builds a fresh ``DispatchScope`` and runs the
rocketlet method inside its own ``contextvars`` context with that scope
installed. Rocketlet code reaches modules and logging only through the scope:

    from rocketlets.server.sandbox import console, require

    class Greeter(Rocketlet):
        def greet(self, name):
            json = require("json")
            console().debug("greeting", name=name)
            return json.dumps({"hello": name})

Nothing else of the host is bound in the scope, and concurrent calls never
see each other's scope.
"""

from __future__ import annotations

import threading
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, Callable

from rocketlets.definition.accessors.logger import RocketletLogger
from rocketlets.definition.rocketlet import Rocketlet
from rocketlets.errors import NoActiveScopeError

ModuleResolver = Callable[[str], Any]

_current_scope: ContextVar[DispatchScope | None] = ContextVar(
    "rocketlet_dispatch_scope", default=None
)


@dataclass(frozen=True)
class DispatchScope:
    rocketlet: Rocketlet
    method: str
    args: tuple[Any, ...]
    require: ModuleResolver
    console: RocketletLogger
    cancelled: threading.Event = field(default_factory=threading.Event)

    def run(self, func: Callable[..., Any], *args: Any) -> Any:
        """Call ``func`` with this scope installed; used as the thread target."""
        token = _current_scope.set(self)
        try:
            return func(*args)
        finally:
            _current_scope.reset(token)

    async def run_async(self, func: Callable[..., Any], *args: Any) -> Any:
        token = _current_scope.set(self)
        try:
            return await func(*args)
        finally:
            _current_scope.reset(token)


def current_scope() -> DispatchScope:
    scope = _current_scope.get()
    if scope is None:
        raise NoActiveScopeError()
    return scope


def require(module: str) -> Any:
    """Resolve ``module`` through the resolver injected by the host."""
    return current_scope().require(module)


def console() -> RocketletLogger:
    return current_scope().console


def cancelled() -> bool:
    """True once the call has overrun its deadline; long loops should stop."""
    return current_scope().cancelled.is_set()
