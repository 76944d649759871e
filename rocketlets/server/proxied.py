"""Proxy through which the host calls into a rocketlet."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any

from rocketlets.config import Settings
from rocketlets.definition.accessors.logger import RocketletLogger
from rocketlets.definition.metadata import RocketletAuthorInfo, RocketletInfo
from rocketlets.definition.rocketlet import Rocketlet, RocketletMethod
from rocketlets.errors import (
    DispatchTimeoutError,
    ErrorKind,
    InsufficientArgumentsError,
    MethodNotFoundError,
    ProxyError,
)
from rocketlets.server.capabilities import CapabilitySet, MethodSpec
from rocketlets.server.resolver import AllowListResolver
from rocketlets.server.sandbox import DispatchScope, ModuleResolver
from rocketlets.server.worker import DispatchThread
from rocketlets.utils.logging import get_logger

log = get_logger(__name__)

DEFAULT_TIMEOUT = 0.1  # seconds


class DispatchState(str, Enum):
    IDLE = "idle"
    VALIDATED = "validated"
    DISPATCHING = "dispatching"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


@dataclass
class CallResult:
    """Outcome of ``ProxiedRocketlet.call_result``.

    ``kind`` tells structural failures (not found, too few arguments,
    timeout) apart from errors the rocketlet raised itself.
    """

    method: str
    state: DispatchState
    value: Any = None
    error: Exception | None = None
    kind: ErrorKind | None = None

    @property
    def ok(self) -> bool:
        return self.state is DispatchState.SUCCEEDED

    def unwrap(self) -> Any:
        if self.error is not None:
            raise self.error
        return self.value


class _Invocation:
    __slots__ = ("method", "state", "kind")

    def __init__(self, method: str) -> None:
        self.method = method
        self.state = DispatchState.IDLE
        self.kind: ErrorKind | None = None

    def fail(self, state: DispatchState, kind: ErrorKind) -> None:
        self.state = state
        self.kind = kind


def _method_name(method: RocketletMethod | str) -> str:
    if isinstance(method, RocketletMethod):
        return method.value
    return method


class ProxiedRocketlet:
    """Wraps a rocketlet so the host never calls it directly.

    Every ``call`` checks that the method exists and received enough
    arguments, then runs it in a fresh ``DispatchScope`` bounded by
    ``timeout`` seconds. Only the rocketlet, the arguments, the injected
    ``custom_require`` and the rocketlet's own logger are visible to the
    method through that scope.

    The proxy keeps no per-call state, so concurrent calls are fine as far as
    the proxy is concerned. Serializing calls to a rocketlet that is not
    reentrant is up to the host.
    """

    def __init__(
        self,
        rocketlet: Rocketlet,
        custom_require: ModuleResolver,
        *,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._rocketlet = rocketlet
        self._require = custom_require
        self._timeout = timeout
        self._capabilities = CapabilitySet.from_instance(rocketlet)

    @classmethod
    def from_settings(
        cls,
        rocketlet: Rocketlet,
        settings: Settings,
        custom_require: ModuleResolver | None = None,
    ) -> ProxiedRocketlet:
        if custom_require is None:
            custom_require = AllowListResolver(settings.proxy.allowed_modules)
        return cls(rocketlet, custom_require, timeout=settings.proxy.timeout)

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def capabilities(self) -> CapabilitySet:
        return self._capabilities

    def has_method(self, method: RocketletMethod | str) -> bool:
        return _method_name(method) in self._capabilities

    async def call(self, method: RocketletMethod | str, *args: Any) -> Any:
        """Dispatch ``method`` to the rocketlet and return its result unchanged.

        Raises ``MethodNotFoundError``, ``InsufficientArgumentsError`` or
        ``DispatchTimeoutError``; anything the rocketlet raises propagates
        as is.
        """
        return await self._call(_Invocation(_method_name(method)), args)

    async def call_result(self, method: RocketletMethod | str, *args: Any) -> CallResult:
        """Like ``call`` but returns a ``CallResult`` instead of raising."""
        invocation = _Invocation(_method_name(method))
        try:
            value = await self._call(invocation, args)
        except Exception as e:
            return CallResult(invocation.method, invocation.state, error=e, kind=invocation.kind)
        return CallResult(invocation.method, invocation.state, value=value)

    async def _call(self, invocation: _Invocation, args: tuple[Any, ...]) -> Any:
        try:
            spec = self._validate(invocation.method, args)
        except ProxyError as e:
            invocation.fail(DispatchState.FAILED, e.kind)
            raise
        invocation.state = DispatchState.VALIDATED

        logger = self._rocketlet.get_logger()
        scope = DispatchScope(
            rocketlet=self._rocketlet,
            method=invocation.method,
            args=tuple(args),
            require=self._require,
            console=logger,
        )

        logger.debug("method_calling", method=invocation.method)
        invocation.state = DispatchState.DISPATCHING
        try:
            result = await self._dispatch(spec, scope)
        except DispatchTimeoutError:
            invocation.fail(DispatchState.TIMED_OUT, ErrorKind.TIMEOUT)
            log.warning(
                "rocketlet_call_timed_out",
                rocketlet=self._rocketlet.get_id(),
                method=invocation.method,
                timeout=self._timeout,
            )
            raise
        except Exception:
            invocation.fail(DispatchState.FAILED, ErrorKind.PLUGIN)
            raise

        invocation.state = DispatchState.SUCCEEDED
        logger.debug("method_called", method=invocation.method)
        return result

    def _validate(self, method: str, args: tuple[Any, ...]) -> MethodSpec:
        spec = self._capabilities.get(method)
        if spec is None:
            raise MethodNotFoundError(self._rocketlet.get_name(), self._rocketlet.get_id(), method)
        if len(args) < spec.min_args:
            raise InsufficientArgumentsError(method, spec.min_args, len(args))
        return spec

    async def _dispatch(self, spec: MethodSpec, scope: DispatchScope) -> Any:
        worker = DispatchThread(
            scope,
            spec.func,
            spec.trim(scope.args),
            is_coroutine=spec.is_coroutine,
            loop=asyncio.get_running_loop(),
        )
        worker.start()

        try:
            done, _ = await asyncio.wait({worker.future}, timeout=self._timeout)
        except asyncio.CancelledError:
            worker.cancel()
            raise
        if worker.future not in done:
            worker.cancel()
            raise DispatchTimeoutError(scope.method, self._timeout)
        return worker.future.result()

    def get_name(self) -> str:
        return self._rocketlet.get_name()

    def get_name_slug(self) -> str:
        return self._rocketlet.get_name_slug()

    def get_id(self) -> str:
        return self._rocketlet.get_id()

    def get_version(self) -> str:
        return self._rocketlet.get_version()

    def get_description(self) -> str:
        return self._rocketlet.get_description()

    def get_required_api_version(self) -> str:
        return self._rocketlet.get_required_api_version()

    def get_author_info(self) -> RocketletAuthorInfo:
        return self._rocketlet.get_author_info()

    def get_info(self) -> RocketletInfo:
        return self._rocketlet.get_info()

    def get_logger(self) -> RocketletLogger:
        return self._rocketlet.get_logger()
