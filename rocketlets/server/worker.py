"""One daemon thread per rocketlet call."""

from __future__ import annotations

import asyncio
import contextvars
import threading
from typing import Any, Callable

from rocketlets.server.sandbox import DispatchScope
from rocketlets.utils.logging import get_logger

log = get_logger(__name__)


class DispatchThread(threading.Thread):
    """Runs a single rocketlet method away from the host event loop.

    Sync methods are called directly on the thread. Coroutine methods get a
    private event loop on the thread, so an ``async def`` that blocks
    without awaiting stalls only that loop. The outcome is handed back to
    ``future`` on the host loop with ``call_soon_threadsafe``.

    The thread is a daemon and is never joined: a call that overruns its
    deadline keeps its thread until it returns, without holding up other
    calls or host shutdown.
    """

    def __init__(
        self,
        scope: DispatchScope,
        func: Callable[..., Any],
        args: tuple[Any, ...],
        *,
        is_coroutine: bool,
        loop: asyncio.AbstractEventLoop,
    ) -> None:
        super().__init__(name=f"rocketlet-{scope.method}", daemon=True)
        self._scope = scope
        self._func = func
        self._args = args
        self._is_coroutine = is_coroutine
        self._host_loop = loop
        self.future: asyncio.Future[Any] = loop.create_future()

        self._lock = threading.Lock()
        self._inner_loop: asyncio.AbstractEventLoop | None = None
        self._inner_task: asyncio.Task[Any] | None = None

    def run(self) -> None:
        # An empty context: no host context variables leak into the call
        ctx = contextvars.Context()
        try:
            if self._is_coroutine:
                result = ctx.run(asyncio.run, self._drive())
            else:
                result = ctx.run(self._scope.run, self._func, *self._args)
        except (Exception, asyncio.CancelledError) as e:
            self._settle(None, e)
        else:
            self._settle(result, None)

    def cancel(self) -> None:
        """Signal the call to stop once its deadline has passed.

        Coroutines are cancelled at their next ``await``. Sync code only
        sees the scope's ``cancelled`` flag.
        """
        self._scope.cancelled.set()
        if not self.future.done():
            self.future.cancel()

        with self._lock:
            loop, task = self._inner_loop, self._inner_task
        if loop is None or task is None:
            return
        try:
            loop.call_soon_threadsafe(task.cancel)
        except RuntimeError:
            # Private loop already closed, the coroutine has finished
            pass

    async def _drive(self) -> Any:
        with self._lock:
            if self._scope.cancelled.is_set():
                raise asyncio.CancelledError()
            self._inner_loop = asyncio.get_running_loop()
            self._inner_task = asyncio.current_task()
        return await self._scope.run_async(self._func, *self._args)

    def _settle(self, result: Any, error: BaseException | None) -> None:
        def settle() -> None:
            if self.future.done():
                return
            if error is not None:
                self.future.set_exception(error)
            else:
                self.future.set_result(result)

        try:
            self._host_loop.call_soon_threadsafe(settle)
        except RuntimeError:
            log.debug("dispatch_result_dropped", method=self._scope.method)
