"""Debounced local writes.

`schedule()` (re)starts a single timer; only the most recently scheduled
timer fires, so a burst of edits costs one write. The write itself is a
coroutine supplied by the owner.

Once a write has started it is never interrupted: `cancel()` only drops a
timer that has not fired yet, and `flush()` waits for writes already in
flight instead of racing them.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


class Debouncer:
    def __init__(self, action: Callable[[], Awaitable[None]], delay: float = 0.5) -> None:
        self._action = action
        self._delay = delay
        self._timer: asyncio.Task[None] | None = None
        self._writes: set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> bool:
        """True while a timer is waiting or a write is still running."""
        return self._timer_pending or any(not t.done() for t in self._writes)

    @property
    def _timer_pending(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def schedule(self) -> None:
        """Cancel any pending timer and start a new one."""
        self.cancel()
        self._timer = asyncio.get_running_loop().create_task(self._fire())

    def cancel(self) -> None:
        """Drop the pending timer. A write that already started runs to completion."""
        if self._timer_pending:
            self._timer.cancel()
        self._timer = None

    async def _fire(self) -> None:
        await asyncio.sleep(self._delay)
        self._timer = None
        self._start_write()

    def _start_write(self) -> None:
        task = asyncio.get_running_loop().create_task(self._action())
        self._writes.add(task)
        task.add_done_callback(self._write_done)

    def _write_done(self, task: asyncio.Task[None]) -> None:
        self._writes.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Debounced write failed", exc_info=task.exception())

    async def flush(self) -> None:
        """Run a pending write now, then wait for every write in flight."""
        if self._timer_pending:
            self.cancel()
            logger.debug("Flushing pending write")
            self._start_write()
        await self._wait_writes()

    async def _wait_writes(self) -> None:
        while any(not t.done() for t in self._writes):
            await asyncio.gather(*self._writes, return_exceptions=True)

    async def wait(self) -> None:
        """Wait for the pending timer (if any) to fire and its write to finish."""
        while self.pending:
            if self._timer_pending:
                await asyncio.gather(self._timer, return_exceptions=True)
            else:
                await self._wait_writes()
