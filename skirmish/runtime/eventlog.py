from collections import deque
from typing import Deque, Iterable, List, Optional
from skirmish.engine.model import EVENT_LIMIT, Event

class EventFeed:
    """Bounded event storage, most recent first."""

    def __init__(self, limit: int = EVENT_LIMIT):
        self.limit = limit
        self._log: Deque[Event] = deque(maxlen=limit)

    def push(self, batch: Iterable[Event]) -> int:
        """Put a most-recent-first batch on top of the feed, dropping the oldest.

        Returns the number of events retained from the batch.
        """
        batch = list(batch)
        for e in reversed(batch):
            self._log.appendleft(e)
        return min(len(batch), self.limit)

    def latest(self, limit: Optional[int] = None) -> List[Event]:
        """Return the newest events, up to limit."""
        items = list(self._log)
        return items if limit is None else items[:max(0, limit)]

    def since(self, after_id: int, limit: int = EVENT_LIMIT) -> tuple[list[Event], int]:
        """Return the oldest events newer than after_id, up to limit, and the cursor for the next call."""
        newer = [e for e in self._log if e.id > after_id]
        chunk = newer[-limit:] if limit > 0 else []
        newest = chunk[0].id if chunk else after_id
        return chunk, newest

    def clear(self) -> None:
        self._log.clear()

    def __len__(self) -> int:
        return len(self._log)
