"""Tests for chancery.debounce.Debouncer."""

import asyncio

from chancery.debounce import Debouncer

DELAY = 0.05


class Recorder:
    def __init__(self) -> None:
        self.calls = 0

    async def __call__(self) -> None:
        self.calls += 1


async def test_fires_once_after_delay():
    action = Recorder()
    d = Debouncer(action, delay=DELAY)
    d.schedule()
    assert d.pending
    assert action.calls == 0
    await d.wait()
    assert action.calls == 1
    assert not d.pending


async def test_burst_coalesces_into_one_call():
    action = Recorder()
    d = Debouncer(action, delay=DELAY)
    for _ in range(10):
        d.schedule()
    await d.wait()
    assert action.calls == 1


async def test_reschedule_restarts_window():
    action = Recorder()
    d = Debouncer(action, delay=DELAY)
    d.schedule()
    await asyncio.sleep(DELAY * 0.6)
    d.schedule()
    await asyncio.sleep(DELAY * 0.6)
    assert action.calls == 0  # first timer was cancelled
    await d.wait()
    assert action.calls == 1


async def test_cancel_skips_write():
    action = Recorder()
    d = Debouncer(action, delay=DELAY)
    d.schedule()
    d.cancel()
    await asyncio.sleep(DELAY * 2)
    assert action.calls == 0


async def test_flush_runs_pending_write_immediately():
    action = Recorder()
    d = Debouncer(action, delay=10)
    d.schedule()
    await d.flush()
    assert action.calls == 1
    assert not d.pending


async def test_flush_without_pending_is_noop():
    action = Recorder()
    d = Debouncer(action, delay=DELAY)
    await d.flush()
    assert action.calls == 0


class SlowRecorder(Recorder):
    def __init__(self, duration: float) -> None:
        super().__init__()
        self.duration = duration
        self.finished = 0

    async def __call__(self) -> None:
        self.calls += 1
        await asyncio.sleep(self.duration)
        self.finished += 1


async def test_cancel_leaves_started_write_running():
    action = SlowRecorder(DELAY * 2)
    d = Debouncer(action, delay=DELAY)
    d.schedule()
    await asyncio.sleep(DELAY * 1.5)  # timer fired, write in progress
    assert action.calls == 1

    d.cancel()
    assert d.pending
    await d.wait()
    assert action.finished == 1
    assert not d.pending


async def test_flush_waits_for_started_write():
    action = SlowRecorder(DELAY * 2)
    d = Debouncer(action, delay=DELAY)
    d.schedule()
    await asyncio.sleep(DELAY * 1.5)
    d.schedule()

    await d.flush()

    assert action.calls == 2
    assert action.finished == 2
    assert not d.pending


async def test_failed_write_is_not_pending():
    async def broken() -> None:
        raise RuntimeError("disk gone")

    d = Debouncer(broken, delay=DELAY)
    d.schedule()
    await d.wait()
    assert not d.pending
