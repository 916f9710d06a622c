"""Outbound push queue.

Every mutation pushes its record to the remote store in the background.
Pushes go through a `PushQueue`: callers submit and return immediately, at
most `concurrency` pushes run at once, and a failed push is logged and
dropped (no retry).

Completion order is not submission order. Two pushes for the same record
may reach the remote in either order.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

PushFn = Callable[[], Awaitable[None]]


class PushQueue:
    def __init__(self, concurrency: int = 4) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self._semaphore = asyncio.Semaphore(concurrency)
        self._tasks: set[asyncio.Task[None]] = set()
        self.failures = 0
        self.completed = 0

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def submit(self, label: str, push: PushFn) -> asyncio.Task[None]:
        """Schedule `push` on the running loop. Must be called from within it."""
        task = asyncio.get_running_loop().create_task(self._run(label, push))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, label: str, push: PushFn) -> None:
        async with self._semaphore:
            try:
                await push()
            except Exception as e:
                self.failures += 1
                logger.warning("Push failed (%s): %s", label, e)
                return
        self.completed += 1
        logger.debug("Push completed (%s)", label)

    async def drain(self) -> None:
        """Wait until every submitted push has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
