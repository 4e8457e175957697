from __future__ import annotations

import asyncio
import inspect
from collections import deque
from typing import Any, Awaitable, Callable, Deque, TypeVar, Union

T = TypeVar("T")


class AsyncMutex:
    """
    First-in-first-out asyncio lock used to serialize read-modify-write
    sequences against shared storage.

    A single `locked` flag records ownership. `acquire` claims it immediately
    when free, otherwise it queues a future; `release` hands ownership straight
    to the oldest waiter so the flag never drops in between and a newcomer
    cannot jump the queue.
    """

    def __init__(self):
        self._locked = False
        self._waiters: Deque[asyncio.Future] = deque()

    async def acquire(self) -> None:
        if not self._locked:
            self._locked = True
            return

        future = asyncio.get_running_loop().create_future()
        self._waiters.append(future)
        try:
            await future
        except asyncio.CancelledError:
            if future.done() and not future.cancelled():
                # ownership was handed over before the cancellation landed
                self.release()
            elif future in self._waiters:
                self._waiters.remove(future)
            raise

    def release(self) -> None:
        if not self._locked:
            raise RuntimeError("release() called on an unlocked AsyncMutex")
        while self._waiters:
            future = self._waiters.popleft()
            if not future.done():
                future.set_result(None)
                return
        self._locked = False

    async def run_exclusive(self, fn: Callable[..., Union[Awaitable[T], T]], *args: Any, **kwargs: Any) -> T:
        """
        Acquire, run `fn`, release. The result or exception of `fn` reaches
        the caller only after the lock has been released.
        """
        await self.acquire()
        try:
            result = fn(*args, **kwargs)
            if inspect.isawaitable(result):
                result = await result
            return result
        finally:
            self.release()

    async def __aenter__(self) -> "AsyncMutex":
        await self.acquire()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.release()

    def locked(self) -> bool:
        return self._locked

    def queue_length(self) -> int:
        return len(self._waiters)


storage_mutex = AsyncMutex()
