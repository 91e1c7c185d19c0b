"""
Blocking calls off the event loop, one at a time.

A camera read or an estimator call cannot be interrupted once its worker
thread has started. Cancelling the awaiting task only abandons the call;
the thread keeps running. WorkerSlot remembers that abandoned call so the
next call on the same slot (or a close of the resource behind it) waits
for it to finish first.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Callable, Optional


def _log_abandoned_failure(future: asyncio.Future) -> None:
    if not future.cancelled() and future.exception() is not None:
        logging.debug(f"Abandoned worker call failed: {future.exception()!r}")


class WorkerSlot:
    """
    Runs at most one call at a time for one resource.

    Example:
        reads = WorkerSlot("camera")
        frame = await reads.run(camera.read)
        ...
        await reads.settle()
        camera.close()
    """

    def __init__(self, name: str):
        self.name = name
        self._pending: Optional[asyncio.Future] = None

    @property
    def busy(self) -> bool:
        return self._pending is not None and not self._pending.done()

    async def settle(self) -> None:
        """Wait until no call is running on this slot."""
        while self.busy:
            logging.debug(f"Waiting for in-flight {self.name} call")
            await asyncio.wait({self._pending})

    async def run(self, fn: Callable[..., Any], *args: Any) -> Any:
        """
        Call fn(*args) in a worker thread (or await it, for coroutine
        functions) after any earlier call on this slot has finished.

        Cancelling the caller does not cancel the call; it stays pending on
        the slot until its thread returns.
        """
        await self.settle()
        if inspect.iscoroutinefunction(fn):
            future = asyncio.ensure_future(fn(*args))
        else:
            future = asyncio.ensure_future(asyncio.to_thread(fn, *args))
        self._pending = future
        try:
            return await asyncio.shield(future)
        except asyncio.CancelledError:
            future.add_done_callback(_log_abandoned_failure)
            raise
