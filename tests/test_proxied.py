"""Tests for the rocketlet invocation proxy."""

import asyncio
import json
import time
from contextvars import ContextVar
from unittest.mock import MagicMock

import pytest

from rocketlets.config import ProxyConfig, Settings
from rocketlets.definition import Rocketlet, RocketletAuthorInfo, RocketletInfo, RocketletLogger
from rocketlets.definition.rocketlet import RocketletMethod
from rocketlets.errors import (
    DispatchTimeoutError,
    ErrorKind,
    InsufficientArgumentsError,
    MethodNotFoundError,
    ModuleNotAllowedError,
    NoActiveScopeError,
    ProxyError,
)
from rocketlets.server import AllowListResolver, DispatchState, ProxiedRocketlet
from rocketlets.server.sandbox import cancelled, console, current_scope, require

HOST_SECRET: ContextVar[str] = ContextVar("host_secret", default="unset")

INFO = RocketletInfo(
    id="r1",
    name="Sample",
    name_slug="sample",
    version="1.0.0",
    description="A sample rocketlet",
    required_api_version="^0.9.0",
    author=RocketletAuthorInfo(name="Dev"),
)


class SampleRocketlet(Rocketlet):
    not_callable = "value"

    def __init__(self, logger):
        super().__init__(INFO, logger)
        self.initialized = False
        self.stopped = False

    def initialize(self):
        self.initialized = True
        return "ready"

    def foo(self, a, b):
        return a + b

    def optional(self, a, b=2):
        return a, b

    def sleepy(self, seconds):
        time.sleep(seconds)
        return "woke"

    async def async_sleepy(self, seconds):
        await asyncio.sleep(seconds)
        return "woke"

    def boom(self):
        raise ValueError("boom")

    async def async_boom(self):
        raise KeyError("missing")

    async def async_blocking(self, seconds):
        time.sleep(seconds)
        return "finished"

    def quick(self):
        return "quick"

    def uses_require(self, name):
        return require(name)

    def log_something(self):
        console().info("hello", source="plugin")
        return True

    def echo_args(self, delay):
        time.sleep(delay)
        return current_scope().args

    async def async_echo_args(self, delay):
        await asyncio.sleep(delay)
        return current_scope().args

    def loop_until_cancelled(self):
        while not cancelled():
            time.sleep(0.005)
        self.stopped = True

    def peek_host(self):
        return HOST_SECRET.get()

    def whoami(self):
        scope = current_scope()
        return scope.rocketlet is self, scope.method

    def _private(self):
        return "hidden"


@pytest.fixture
def logger():
    return MagicMock(spec=RocketletLogger)


@pytest.fixture
def rocketlet(logger):
    return SampleRocketlet(logger)


@pytest.fixture
def resolver():
    return MagicMock(name="require")


@pytest.fixture
def proxy(rocketlet, resolver):
    return ProxiedRocketlet(rocketlet, resolver)


class TestHasMethod:
    def test_defined_method(self, proxy):
        assert proxy.has_method("foo") is True

    def test_enum_member(self, proxy):
        assert proxy.has_method(RocketletMethod.INITIALIZE) is True
        assert proxy.has_method(RocketletMethod.ON_ENABLE) is False

    def test_missing_method(self, proxy):
        assert proxy.has_method("bar") is False

    def test_non_callable_attribute(self, proxy):
        assert proxy.has_method("not_callable") is False

    def test_private_method_hidden(self, proxy):
        assert proxy.has_method("_private") is False

    def test_no_side_effects(self, proxy, logger, rocketlet):
        proxy.has_method("foo")
        proxy.has_method("bar")
        logger.debug.assert_not_called()
        assert rocketlet.initialized is False


class TestCall:
    async def test_returns_result(self, proxy):
        assert await proxy.call("foo", 1, 2) == 3

    async def test_enum_method(self, proxy, rocketlet):
        assert await proxy.call(RocketletMethod.INITIALIZE) == "ready"
        assert rocketlet.initialized is True

    async def test_result_returned_unchanged(self, proxy):
        payload = {"nested": [1, 2]}
        assert await proxy.call("foo", payload["nested"], [3]) == [1, 2, 3]

    async def test_insufficient_arguments(self, proxy, logger):
        with pytest.raises(InsufficientArgumentsError) as exc:
            await proxy.call("foo", 1)
        assert exc.value.method == "foo"
        assert exc.value.expected == 2
        assert exc.value.actual == 1
        logger.debug.assert_not_called()

    async def test_extra_arguments_tolerated(self, proxy):
        assert await proxy.call("foo", 1, 2, 3) == 3

    async def test_optional_parameter(self, proxy):
        assert await proxy.call("optional", 1) == (1, 2)
        assert await proxy.call("optional", 1, 5) == (1, 5)

    async def test_method_not_found(self, proxy, logger):
        with pytest.raises(MethodNotFoundError) as exc:
            await proxy.call("bar")
        assert exc.value.method == "bar"
        assert exc.value.rocketlet_name == "Sample"
        assert exc.value.rocketlet_id == "r1"
        assert "Sample (r1)" in str(exc.value)
        logger.debug.assert_not_called()

    async def test_non_callable_is_not_found(self, proxy):
        with pytest.raises(MethodNotFoundError):
            await proxy.call("not_callable")

    async def test_lifecycle_events_logged(self, proxy, logger):
        await proxy.call("foo", 1, 2)
        assert [c.args for c in logger.debug.call_args_list] == [
            ("method_calling",),
            ("method_called",),
        ]
        logger.debug.assert_any_call("method_calling", method="foo")
        logger.debug.assert_any_call("method_called", method="foo")

    async def test_plugin_error_propagates_unchanged(self, proxy, logger):
        with pytest.raises(ValueError, match="boom") as exc:
            await proxy.call("boom")
        assert not isinstance(exc.value, ProxyError)
        logger.debug.assert_called_once_with("method_calling", method="boom")

    async def test_async_plugin_error_propagates(self, proxy):
        with pytest.raises(KeyError):
            await proxy.call("async_boom")


class TestTimeout:
    async def test_blocking_method_times_out(self, proxy, logger):
        with pytest.raises(DispatchTimeoutError) as exc:
            await proxy.call("sleepy", 0.5)
        assert exc.value.method == "sleepy"
        assert exc.value.timeout == pytest.approx(0.1)
        assert isinstance(exc.value, TimeoutError)
        logger.debug.assert_called_once_with("method_calling", method="sleepy")

    async def test_blocking_method_under_deadline(self, proxy):
        assert await proxy.call("sleepy", 0.01) == "woke"

    async def test_async_method_times_out(self, proxy):
        with pytest.raises(DispatchTimeoutError):
            await proxy.call("async_sleepy", 1)

    async def test_async_method_under_deadline(self, proxy):
        assert await proxy.call("async_sleepy", 0.01) == "woke"

    async def test_timeout_returns_promptly(self, proxy):
        start = time.monotonic()
        with pytest.raises(DispatchTimeoutError):
            await proxy.call("sleepy", 1)
        assert time.monotonic() - start < 0.5

    async def test_cancellation_token_set(self, proxy, rocketlet):
        with pytest.raises(DispatchTimeoutError):
            await proxy.call("loop_until_cancelled")
        await asyncio.sleep(0.1)
        assert rocketlet.stopped is True

    async def test_custom_timeout(self, rocketlet, resolver):
        proxy = ProxiedRocketlet(rocketlet, resolver, timeout=0.5)
        assert await proxy.call("sleepy", 0.2) == "woke"

    async def test_blocking_coroutine_times_out(self, proxy):
        start = time.monotonic()
        with pytest.raises(DispatchTimeoutError) as exc:
            await proxy.call("async_blocking", 0.4)
        assert exc.value.method == "async_blocking"
        assert time.monotonic() - start < 0.3

    async def test_blocking_coroutine_leaves_host_loop_running(self, proxy):
        ticks = 0

        async def ticker():
            nonlocal ticks
            while True:
                ticks += 1
                await asyncio.sleep(0.01)

        task = asyncio.create_task(ticker())
        try:
            with pytest.raises(DispatchTimeoutError):
                await proxy.call("async_blocking", 0.4)
        finally:
            task.cancel()
        assert ticks >= 5

    async def test_blocking_coroutine_under_deadline(self, proxy):
        assert await proxy.call("async_blocking", 0.01) == "finished"

    async def test_calls_succeed_after_many_timeouts(self, proxy):
        results = await asyncio.gather(*(proxy.call_result("sleepy", 1) for _ in range(40)))
        assert all(r.state is DispatchState.TIMED_OUT for r in results)
        assert await proxy.call("quick") == "quick"
        assert await proxy.call("async_blocking", 0) == "finished"


def test_timed_out_call_does_not_delay_loop_shutdown(rocketlet, resolver):
    proxy = ProxiedRocketlet(rocketlet, resolver)

    async def main():
        result = await proxy.call_result("sleepy", 2)
        return result.state

    start = time.monotonic()
    assert asyncio.run(main()) is DispatchState.TIMED_OUT
    assert time.monotonic() - start < 1


class TestScope:
    async def test_require_uses_injected_resolver(self, proxy, resolver):
        resolver.return_value = "fake-module"
        assert await proxy.call("uses_require", "http") == "fake-module"
        resolver.assert_called_once_with("http")

    async def test_console_is_rocketlet_logger(self, proxy, logger):
        assert await proxy.call("log_something") is True
        logger.info.assert_called_once_with("hello", source="plugin")

    async def test_scope_exposes_rocketlet_and_method(self, proxy):
        assert await proxy.call("whoami") == (True, "whoami")

    async def test_scope_keeps_all_supplied_args(self, proxy):
        assert await proxy.call("echo_args", 0, "extra") == (0, "extra")

    async def test_host_context_not_visible(self, proxy):
        token = HOST_SECRET.set("host-only")
        try:
            assert await proxy.call("peek_host") == "unset"
        finally:
            HOST_SECRET.reset(token)

    async def test_concurrent_sync_calls_isolated(self, proxy):
        first, second = await asyncio.gather(
            proxy.call("echo_args", 0.03, "a"),
            proxy.call("echo_args", 0.01, "b"),
        )
        assert first == (0.03, "a")
        assert second == (0.01, "b")

    async def test_concurrent_async_calls_isolated(self, proxy):
        results = await asyncio.gather(
            *(proxy.call("async_echo_args", 0.02 - i * 0.005, i) for i in range(4))
        )
        assert [r[1] for r in results] == [0, 1, 2, 3]

    async def test_scope_cleared_after_call(self, proxy):
        await proxy.call("whoami")
        with pytest.raises(NoActiveScopeError):
            current_scope()


class TestCallResult:
    async def test_success(self, proxy):
        result = await proxy.call_result("foo", 2, 3)
        assert result.ok is True
        assert result.state is DispatchState.SUCCEEDED
        assert result.value == 5
        assert result.kind is None
        assert result.unwrap() == 5

    async def test_not_found(self, proxy):
        result = await proxy.call_result("bar")
        assert result.state is DispatchState.FAILED
        assert result.kind is ErrorKind.NOT_FOUND
        assert isinstance(result.error, MethodNotFoundError)

    async def test_insufficient_arguments(self, proxy):
        result = await proxy.call_result("foo")
        assert result.kind is ErrorKind.INSUFFICIENT_ARGUMENTS
        assert result.error.expected == 2
        assert result.error.actual == 0

    async def test_timeout(self, proxy):
        result = await proxy.call_result("sleepy", 0.5)
        assert result.state is DispatchState.TIMED_OUT
        assert result.kind is ErrorKind.TIMEOUT

    async def test_plugin_error(self, proxy):
        result = await proxy.call_result("boom")
        assert result.ok is False
        assert result.kind is ErrorKind.PLUGIN
        with pytest.raises(ValueError):
            result.unwrap()

    async def test_plugin_raised_proxy_error_counts_as_plugin(self, rocketlet, resolver):
        inner = ProxiedRocketlet(rocketlet, resolver)

        class Outer(SampleRocketlet):
            async def relay(self):
                return await inner.call("bar")

        outer = ProxiedRocketlet(Outer(MagicMock(spec=RocketletLogger)), resolver)
        result = await outer.call_result("relay")
        assert isinstance(result.error, MethodNotFoundError)
        assert result.kind is ErrorKind.PLUGIN


class TestMetadata:
    def test_pass_through(self, proxy, rocketlet, logger):
        assert proxy.get_name() == "Sample"
        assert proxy.get_name_slug() == "sample"
        assert proxy.get_id() == "r1"
        assert proxy.get_version() == "1.0.0"
        assert proxy.get_description() == "A sample rocketlet"
        assert proxy.get_required_api_version() == "^0.9.0"
        assert proxy.get_author_info() is rocketlet.get_author_info()
        assert proxy.get_info() is INFO
        assert proxy.get_logger() is logger


class TestFromSettings:
    async def test_timeout_and_default_resolver(self, rocketlet):
        settings = Settings(proxy=ProxyConfig(timeout_ms=250, allowed_modules=["json"]))
        proxy = ProxiedRocketlet.from_settings(rocketlet, settings)
        assert proxy.timeout == pytest.approx(0.25)
        assert await proxy.call("uses_require", "json") is json
        with pytest.raises(ModuleNotAllowedError):
            await proxy.call("uses_require", "os")

    def test_explicit_resolver(self, rocketlet):
        resolver = AllowListResolver([])
        proxy = ProxiedRocketlet.from_settings(rocketlet, Settings(), resolver)
        assert proxy.timeout == pytest.approx(0.1)
