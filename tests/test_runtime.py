"""Test the event feed and frame schedulers."""
import asyncio
import pytest
from skirmish.engine.model import Event
from skirmish.runtime.eventlog import EventFeed
from skirmish.runtime.frames import AsyncioFrameScheduler, ManualFrameScheduler


def make_event(i: int) -> Event:
    return Event(id=i, tick=i, timestamp=i * 0.05, summary=f"event {i}", tone="system")


def test_feed_puts_batches_on_top():
    """Newest batch goes first and keeps its own most-recent-first order."""
    feed = EventFeed(limit=10)
    feed.push([make_event(2), make_event(1)])
    feed.push([make_event(4), make_event(3)])
    assert [e.id for e in feed.latest()] == [4, 3, 2, 1]
    assert [e.id for e in feed.latest(2)] == [4, 3]


def test_feed_drops_oldest_beyond_limit():
    """Only the newest `limit` events survive."""
    feed = EventFeed(limit=3)
    for i in range(1, 6):
        feed.push([make_event(i)])
    assert [e.id for e in feed.latest()] == [5, 4, 3]
    assert len(feed) == 3

    feed.clear()
    assert feed.latest() == []


def test_feed_since_pages_oldest_first():
    """since() hands back the oldest unseen events and a cursor."""
    feed = EventFeed(limit=36)
    feed.push([make_event(i) for i in range(6, 0, -1)])

    chunk, cursor = feed.since(0, limit=2)
    assert [e.id for e in chunk] == [2, 1]
    assert cursor == 2

    chunk, cursor = feed.since(cursor, limit=10)
    assert [e.id for e in chunk] == [6, 5, 4, 3]
    assert cursor == 6

    chunk, cursor = feed.since(cursor)
    assert chunk == []
    assert cursor == 6


def test_manual_scheduler_fires_pending_frames():
    """Frames requested during a fire wait for the next one."""
    frames = ManualFrameScheduler()
    stamps = []

    def callback(ts):
        stamps.append(ts)
        if len(stamps) < 3:
            frames.request_frame(callback)

    frames.request_frame(callback)
    assert frames.fire(10.0) == 1
    assert stamps == [10.0]
    assert frames.pending == 1

    assert frames.fire_many(5, 16.0) == 2
    assert stamps == [10.0, 26.0, 42.0]
    assert frames.pending == 0


def test_manual_scheduler_cancel():
    """A cancelled frame never runs."""
    frames = ManualFrameScheduler()
    stamps = []
    handle = frames.request_frame(stamps.append)
    frames.cancel_frame(handle)
    frames.cancel_frame(handle)
    assert frames.fire(5.0) == 0
    assert stamps == []


@pytest.mark.asyncio
async def test_asyncio_scheduler_fires_with_loop_time():
    """Frames fire on the running loop with a millisecond timestamp."""
    frames = AsyncioFrameScheduler(frame_interval_ms=5.0)
    stamps = []
    before = asyncio.get_running_loop().time() * 1000.0
    frames.request_frame(stamps.append)
    await asyncio.sleep(0.05)
    assert len(stamps) == 1
    assert stamps[0] >= before


@pytest.mark.asyncio
async def test_asyncio_scheduler_cancel():
    """Cancelling before the deadline prevents the callback."""
    frames = AsyncioFrameScheduler(frame_interval_ms=20.0)
    stamps = []
    handle = frames.request_frame(stamps.append)
    frames.cancel_frame(handle)
    await asyncio.sleep(0.05)
    assert stamps == []
