"""Cooperative cancellation for streamed model output."""

from __future__ import annotations

import asyncio
import threading
from collections.abc import AsyncIterable, AsyncIterator, Callable

from .errors import Cancelled

_END = object()


class CancellationToken:
    """One-shot, thread-safe cancellation signal.

    The token can be set from any thread (or a signal handler) and never
    resets. Coroutines waiting on :meth:`wait` are woken through their own
    event loop.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def add_callback(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Run ``callback`` once the token is cancelled.

        Returns a function that unregisters the callback. If the token is
        already cancelled the callback runs immediately.
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)

                def remove() -> None:
                    with self._lock:
                        if callback in self._callbacks:
                            self._callbacks.remove(callback)

                return remove
        callback()
        return lambda: None

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise Cancelled("stream cancelled by caller")

    async def wait(self) -> None:
        if self._event.is_set():
            return
        loop = asyncio.get_running_loop()
        waiter = loop.create_future()

        def wake() -> None:
            loop.call_soon_threadsafe(_resolve, waiter)

        remove = self.add_callback(wake)
        try:
            await waiter
        finally:
            remove()


def _resolve(future: asyncio.Future) -> None:
    if not future.done():
        future.set_result(None)


async def _pull(iterator: AsyncIterator[str]) -> object:
    try:
        return await iterator.__anext__()
    except StopAsyncIteration:
        return _END


async def cancellable(
    stream: AsyncIterable[str], cancel: CancellationToken
) -> AsyncIterator[str]:
    """Yield from ``stream`` until it ends or ``cancel`` is set.

    Every read races the token, so a cancellation raised while a chunk is
    still in flight aborts the read instead of waiting for it. The token is
    also checked before each read, so nothing more is pulled from ``stream``
    once it is set. The underlying stream is closed on exit.
    """

    iterator = aiter(stream)
    try:
        while True:
            cancel.raise_if_cancelled()
            read = asyncio.ensure_future(_pull(iterator))
            waiter = asyncio.ensure_future(cancel.wait())
            try:
                await asyncio.wait({read, waiter}, return_when=asyncio.FIRST_COMPLETED)
            finally:
                for task in (read, waiter):
                    if not task.done():
                        task.cancel()
                await asyncio.gather(read, waiter, return_exceptions=True)
            cancel.raise_if_cancelled()
            chunk = read.result()
            if chunk is _END:
                return
            yield chunk
    finally:
        aclose = getattr(iterator, "aclose", None)
        if aclose is not None:
            await aclose()
