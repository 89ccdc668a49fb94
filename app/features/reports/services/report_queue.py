import asyncio
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Optional


@dataclass
class PendingReport:
    """A report request waiting for its turn. ``future`` is resolved exactly once."""

    url: str
    future: asyncio.Future
    enqueued_at: float = field(default_factory=time.monotonic)

    @property
    def waited(self) -> float:
        """Seconds since the request was queued."""
        return time.monotonic() - self.enqueued_at


class ReportQueue:
    """Unbounded FIFO of pending report requests."""

    def __init__(self):
        self._items: Deque[PendingReport] = deque()

    def enqueue(self, pending: PendingReport) -> None:
        self._items.append(pending)

    def dequeue(self) -> Optional[PendingReport]:
        if not self._items:
            return None
        return self._items.popleft()

    def peek(self) -> Optional[PendingReport]:
        return self._items[0] if self._items else None

    def find(self, url: str) -> Optional[PendingReport]:
        """First queued request for ``url``, if any."""
        for pending in self._items:
            if pending.url == url:
                return pending
        return None

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)
