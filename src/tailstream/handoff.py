"""Thread-safe handoff of chunks from the watcher thread to the reader."""

from __future__ import annotations

import queue
import threading
import time

from .models import END_OF_STREAM, Chunk

# Slice used to re-check a cancel event while blocked in pop()
CANCEL_CHECK_INTERVAL = 0.1


class HandoffQueue:
    """Unbounded FIFO of chunks with blocking pop.

    The watcher is the single producer and the reader the single consumer.
    The END_OF_STREAM chunk closes the stream for the consumer.
    """

    def __init__(self) -> None:
        self._queue: queue.Queue[Chunk] = queue.Queue()

    def push(self, chunk: Chunk) -> None:
        """Append a chunk. Never blocks."""
        self._queue.put_nowait(chunk)

    def push_end(self) -> None:
        """Append the end-of-stream marker."""
        self.push(END_OF_STREAM)

    def pop(
        self,
        timeout: float | None = None,
        cancel: threading.Event | None = None,
    ) -> Chunk | None:
        """Remove and return the oldest chunk, blocking until one is available.

        Args:
            timeout: Maximum seconds to wait, or None to wait indefinitely.
            cancel: Optional event that aborts the wait when set.

        Returns:
            The next chunk, or None if the wait timed out or was cancelled.
        """
        if cancel is None:
            try:
                return self._queue.get(timeout=timeout)
            except queue.Empty:
                return None

        deadline = None if timeout is None else time.monotonic() + timeout
        while not cancel.is_set():
            wait = CANCEL_CHECK_INTERVAL
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return None
                wait = min(wait, remaining)
            try:
                return self._queue.get(timeout=wait)
            except queue.Empty:
                continue
        return None

    def qsize(self) -> int:
        """Approximate number of queued chunks."""
        return self._queue.qsize()
