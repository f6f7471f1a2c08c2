r"""Future adapter for asyncio.

This module provides ``ProgressFuture``, an ``asyncio.Future`` that can
also notify observers about progress, and ``AsyncioAdapter``, the future
adapter that runs retriers on an asyncio event loop.

Example:
    ```pycon
    >>> import asyncio
    >>> from aretrier import configure
    >>> from aretrier.future import AsyncioAdapter
    >>> attempt = configure(AsyncioAdapter())
    >>> async def fetch(error, attempt_no):
    ...     return "data"
    ...
    >>> async def main():
    ...     return await attempt(fetch, lambda error, attempt_no, decide: 100)
    ...
    >>> asyncio.run(main())
    'data'

    ```
"""

from __future__ import annotations

__all__ = ["AsyncioAdapter", "ProgressFuture"]

import asyncio
import inspect
from typing import TYPE_CHECKING, Any

from aretrier.future.base import FutureAdapter

if TYPE_CHECKING:
    from collections.abc import Callable


class ProgressFuture(asyncio.Future):
    """An ``asyncio.Future`` with progress notifications.

    Progress callbacks are scheduled with ``loop.call_soon`` in the order
    they were registered, the same way asyncio schedules done callbacks.
    Notifications sent after the future is done are dropped.

    Example:
        ```pycon
        >>> import asyncio
        >>> from aretrier.future import ProgressFuture
        >>> async def main():
        ...     future = ProgressFuture()
        ...     future.add_progress_callback(print)
        ...     future.notify("halfway")
        ...     future.set_result(42)
        ...     return await future
        ...
        >>> asyncio.run(main())
        halfway
        42

        ```
    """

    def __init__(self, *, loop: asyncio.AbstractEventLoop | None = None) -> None:
        super().__init__(loop=loop)
        self._progress_callbacks: list[Callable[[Any], Any]] = []

    def add_progress_callback(self, fn: Callable[[Any], Any]) -> None:
        """Add a callback to be run on each progress notification.

        Args:
            fn: Function called with the notified value.
        """
        self._progress_callbacks.append(fn)

    def remove_progress_callback(self, fn: Callable[[Any], Any]) -> int:
        """Remove all instances of a progress callback.

        Args:
            fn: The callback to remove.

        Returns:
            The number of callbacks removed.
        """
        filtered = [callback for callback in self._progress_callbacks if callback != fn]
        removed = len(self._progress_callbacks) - len(filtered)
        self._progress_callbacks[:] = filtered
        return removed

    def notify(self, value: Any) -> None:
        """Notify the progress callbacks.

        Args:
            value: The value passed to each progress callback.
        """
        if self.done():
            return
        loop = self.get_loop()
        for callback in self._progress_callbacks:
            loop.call_soon(callback, value)

    def then(
        self,
        on_success: Callable[[Any], Any] | None = None,
        on_failure: Callable[[BaseException], Any] | None = None,
        on_progress: Callable[[Any], Any] | None = None,
    ) -> ProgressFuture:
        """Register continuations and return a chained future.

        The chained future is resolved with the return value of the
        continuation that ran. Without a matching continuation, the
        outcome of this future passes through unchanged. An exception
        raised by a continuation rejects the chained future. Progress
        notifications are forwarded to the chained future.

        Args:
            on_success: Optional function called with the result.
            on_failure: Optional function called with the exception.
            on_progress: Optional function called on each notification.

        Returns:
            The chained future.
        """
        chained = ProgressFuture(loop=self.get_loop())
        if on_progress is not None:
            self.add_progress_callback(on_progress)
        self.add_progress_callback(chained.notify)

        def _settle(future: asyncio.Future) -> None:
            if chained.done():
                return
            if future.cancelled():
                chained.cancel()
                return
            exc = future.exception()
            try:
                if exc is None:
                    value = future.result()
                    if on_success is not None:
                        value = on_success(value)
                elif on_failure is not None:
                    value = on_failure(exc)
                else:
                    chained.set_exception(exc)
                    return
            except Exception as handler_exc:  # noqa: BLE001
                chained.set_exception(handler_exc)
                return
            chained.set_result(value)

        self.add_done_callback(_settle)
        return chained


class AsyncioAdapter(FutureAdapter):
    r"""Future adapter for asyncio.

    Outcome futures are ``ProgressFuture`` instances, any awaitable
    (coroutine, future, task) can be followed, and timers are armed with
    ``loop.call_later``.

    Args:
        loop: Optional event loop. By default, the running loop at the
            time of each call is used, so the adapter can be created at
            import time and shared.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop
        # Strong references to the tasks wrapping followed coroutines
        self._tasks: set[asyncio.Future] = set()

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(loop={self._loop!r})"

    def create(self, resolver: Callable[..., None]) -> ProgressFuture:
        future = ProgressFuture(loop=self._get_loop())

        def resolve(value: Any = None) -> None:
            if not future.done():
                future.set_result(value)

        def reject(error: BaseException) -> None:
            if not future.done():
                future.set_exception(error)

        resolver(resolve, reject, future.notify)
        return future

    def is_done(self, future: Any) -> bool:
        return future.done()

    def is_future(self, value: Any) -> bool:
        return inspect.isawaitable(value)

    def subscribe(
        self,
        future: Any,
        on_success: Callable[[Any], None],
        on_failure: Callable[[BaseException], None],
    ) -> None:
        task = asyncio.ensure_future(future, loop=self._get_loop())
        self._tasks.add(task)

        def _on_done(done: asyncio.Future) -> None:
            self._tasks.discard(done)
            if done.cancelled():
                on_failure(asyncio.CancelledError())
                return
            exc = done.exception()
            if exc is None:
                on_success(done.result())
            else:
                on_failure(exc)

        task.add_done_callback(_on_done)

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        self._get_loop().call_later(delay, callback)

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        return asyncio.get_running_loop()
