"""Sequential byte stream over the live-growing content of a file.

FollowingReader adapts the chunks produced by a DirectoryWatcher into the
standard binary read interface, giving "tail -f" semantics: reads block until
new bytes are appended and end-of-data is reported only once the stream is
closed or the watcher has ended.
"""

from __future__ import annotations

import io
import logging
from collections.abc import Iterator
from functools import partial
from pathlib import Path

from .config import FollowConfig
from .exceptions import InvalidTargetError
from .handoff import HandoffQueue
from .models import Chunk
from .watcher import DirectoryWatcher, ObserverFactory, create_observer

logger = logging.getLogger(__name__)


class FollowingReader(io.RawIOBase):
    """Binary stream of bytes appended to a file after the stream starts.

    The watcher is started lazily by the first read (or explicitly by
    start()). Only bytes appended after the watcher is ready are delivered.
    The stream is forward-only: seeking and mark/reset are not supported.

    Closing the reader stops the watcher and wakes any read blocked in
    another thread; every read after that returns end-of-data.

    Example:
        with FollowingReader("/var/log/app.log") as stream:
            shutil.copyfileobj(stream, sys.stdout.buffer, 1024)
    """

    def __init__(
        self,
        path: str | Path,
        config: FollowConfig | None = None,
        observer_factory: ObserverFactory | None = None,
    ) -> None:
        """Initialize the reader.

        Args:
            path: File to follow. It does not need to exist yet.
            config: Watcher settings; defaults to FollowConfig().
            observer_factory: Override for the watchdog observer.

        Raises:
            InvalidTargetError: If path is a directory.
        """
        target = Path(path)
        if target.is_dir():
            raise InvalidTargetError(f"{target}: must be a file")

        super().__init__()
        self.path = target.absolute()
        self.config = config or FollowConfig()

        if observer_factory is None:
            observer_factory = partial(create_observer, polling=self.config.use_polling_observer)

        self._handoff = HandoffQueue()
        self._watcher = DirectoryWatcher(
            self.path,
            self._handoff,
            poll_interval=self.config.poll_interval_seconds,
            block_size=self.config.read_block_size,
            observer_factory=observer_factory,
        )

        self._buffer: bytes | None = None
        self._pos = -1
        self._ended = False

    def readable(self) -> bool:
        return True

    def start(self) -> None:
        """Start the watcher and block until it is watching.

        Called implicitly by the first read. Calling it directly makes the
        baseline independent of when the first read happens.
        """
        if self._watcher.started:
            return
        self._watcher.start()
        self._watcher.wait_until_ready()
        if self._watcher.setup_error is not None:
            logger.warning(f"Following {self.path} ended early: {self._watcher.setup_error}")

    def read_byte(self) -> int | None:
        """Read a single byte, blocking until one is appended.

        Returns:
            The byte value (0-255), or None once the stream has ended.
        """
        if self.closed or not self._fill():
            return None
        assert self._buffer is not None
        value = self._buffer[self._pos]
        self._advance(1)
        return value

    def readinto(self, buffer) -> int:
        """Read bytes into a writable buffer.

        Blocks only when nothing is buffered, then copies at most the bytes
        remaining in the current chunk.

        Returns:
            Number of bytes copied; 0 once the stream has ended.
        """
        view = memoryview(buffer).cast("B")
        if len(view) == 0 or self.closed or not self._fill():
            return 0
        assert self._buffer is not None

        count = min(len(view), len(self._buffer) - self._pos)
        view[:count] = self._buffer[self._pos : self._pos + count]
        self._advance(count)
        return count

    def available(self) -> int:
        """Number of bytes that can be read without blocking."""
        if self._buffer is None or self._pos < 0:
            return 0
        return len(self._buffer) - self._pos

    def iter_chunks(self) -> Iterator[bytes]:
        """Yield appended content as it arrives until the stream ends."""
        while not self.closed and self._fill():
            assert self._buffer is not None
            data = self._buffer[self._pos :]
            self._advance(len(data))
            yield data

    def close(self) -> None:
        """Stop following. Safe to call more than once."""
        # Construction may have failed before the watcher existed
        if not self.closed and getattr(self, "_watcher", None) is not None:
            # Wake a reader blocked in pop() and stop the watcher thread
            self._handoff.push_end()
            self._watcher.stop()
            logger.debug(f"Closed follower for {self.path}")
        super().close()

    def _fill(self) -> bool:
        """Make sure the buffer holds unread bytes, pulling chunks as needed.

        Returns:
            False if the stream has ended.
        """
        while self._pos < 0:
            if self._ended:
                return False

            chunk = self._next_chunk()
            if chunk is None or chunk.is_end:
                self._ended = True
                self._buffer = None
                return False

            if chunk.data:
                self._buffer = chunk.data
                self._pos = 0
        return True

    def _next_chunk(self) -> Chunk | None:
        if not self._watcher.started:
            self.start()
        return self._handoff.pop()

    def _advance(self, count: int) -> None:
        assert self._buffer is not None
        self._pos += count
        if self._pos >= len(self._buffer):
            self._pos = -1


def follow(path: str | Path, config: FollowConfig | None = None) -> FollowingReader:
    """Open a FollowingReader for path.

    Example:
        with follow("app.log") as stream:
            for chunk in stream.iter_chunks():
                handle(chunk)
    """
    return FollowingReader(path, config=config)
