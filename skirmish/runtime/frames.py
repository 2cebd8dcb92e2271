"""Frame scheduling for the simulation loop.

A scheduler arms exactly one callback per request and hands it a monotonic
timestamp in milliseconds, like a browser animation frame. Cancelling a
frame only prevents a callback that has not started yet.
"""

import asyncio
import itertools
from typing import Callable, Dict, Hashable, Optional, Protocol

FrameCallback = Callable[[float], None]

class FrameScheduler(Protocol):
    def request_frame(self, callback: FrameCallback) -> Hashable: ...

    def cancel_frame(self, handle: Hashable) -> None: ...

class AsyncioFrameScheduler:
    """Fires frames on the running asyncio loop at a fixed display cadence."""

    def __init__(self, frame_interval_ms: float = 1000.0 / 60.0):
        self.frame_interval_ms = frame_interval_ms

    def request_frame(self, callback: FrameCallback) -> asyncio.TimerHandle:
        loop = asyncio.get_running_loop()
        return loop.call_later(self.frame_interval_ms / 1000.0,
                               lambda: callback(loop.time() * 1000.0))

    def cancel_frame(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()

class ManualFrameScheduler:
    """Headless scheduler: frames only fire when the caller says so."""

    def __init__(self):
        self._ids = itertools.count(1)
        self._pending: Dict[int, FrameCallback] = {}
        self.now_ms = 0.0

    @property
    def pending(self) -> int:
        return len(self._pending)

    def request_frame(self, callback: FrameCallback) -> int:
        handle = next(self._ids)
        self._pending[handle] = callback
        return handle

    def cancel_frame(self, handle: int) -> None:
        self._pending.pop(handle, None)

    def fire(self, timestamp_ms: Optional[float] = None) -> int:
        """Run every frame requested so far; frames they request wait for the next fire."""
        if timestamp_ms is not None:
            self.now_ms = timestamp_ms
        due, self._pending = self._pending, {}
        for callback in due.values():
            callback(self.now_ms)
        return len(due)

    def fire_many(self, count: int, interval_ms: float, start_ms: Optional[float] = None) -> int:
        """Fire up to count frames interval_ms apart; stops early once nothing is pending."""
        if start_ms is not None:
            self.now_ms = start_ms - interval_ms
        fired = 0
        for _ in range(count):
            if not self._pending:
                break
            self.fire(self.now_ms + interval_ms)
            fired += 1
        return fired
