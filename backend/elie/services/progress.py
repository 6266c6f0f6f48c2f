"""
Progress events for file ingestion.

The pipeline publishes; a consumer (the upload route's event stream)
iterates. Publishing never waits on the consumer and may happen from
any thread.
"""

import asyncio
import enum
import threading
from dataclasses import dataclass
from typing import AsyncIterator, Optional


class IngestionState(str, enum.Enum):
    NOT_STARTED = "not_started"
    UPLOADING = "uploading"
    AWAITING_READINESS = "awaiting_readiness"
    REGISTERING = "registering"
    COMMITTED = "committed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (IngestionState.COMMITTED, IngestionState.FAILED)


@dataclass(frozen=True)
class ProgressEvent:
    state: IngestionState
    percent: int = 0
    detail: Optional[str] = None

    def to_dict(self) -> dict:
        return {"state": self.state.value, "percent": self.percent, "detail": self.detail}


def upload_percentage(sent: int, total: Optional[int]) -> int:
    """round(sent / total * 100) clamped to [0, 100]; 0 when the total is unknown."""
    if not total or total <= 0:
        return 0
    return max(0, min(100, round(sent / total * 100)))


class ProgressChannel:
    """Unbounded, one-directional channel of ``ProgressEvent``s.

    Upload percentages are forced to be non-decreasing; a terminal
    state closes the channel and later events are dropped.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop or asyncio.get_running_loop()
        self._queue: asyncio.Queue = asyncio.Queue()
        self._lock = threading.Lock()
        self._percent = 0
        self._closed = False
        self.last_event: Optional[ProgressEvent] = None

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, event: ProgressEvent) -> None:
        with self._lock:
            if self._closed:
                return
            if event.state == IngestionState.UPLOADING:
                if event.percent < self._percent:
                    return
                self._percent = event.percent
            if event.state.is_terminal:
                self._closed = True
            self.last_event = event

        if self._in_loop_thread():
            self._queue.put_nowait(event)
        else:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, event)

    def upload_progress(self, percent: int) -> None:
        self.publish(ProgressEvent(IngestionState.UPLOADING, percent))

    def _in_loop_thread(self) -> bool:
        try:
            return asyncio.get_running_loop() is self._loop
        except RuntimeError:
            return False

    async def __aiter__(self) -> AsyncIterator[ProgressEvent]:
        while True:
            event = await self._queue.get()
            yield event
            if event.state.is_terminal:
                return
