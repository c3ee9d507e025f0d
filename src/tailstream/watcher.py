"""Background watcher that forwards bytes appended to a single file.

This module subscribes to change notifications for the parent directory of
the followed file (via watchdog), filters them down to the target file, and
pushes each newly appended byte range onto a HandoffQueue. It detects
truncation and rotation by comparing the file's size with the baseline.
"""

from __future__ import annotations

import logging
import os
import queue
import threading
from collections.abc import Callable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver
from watchdog.observers.polling import PollingObserver

from .exceptions import WatchSetupError
from .handoff import HandoffQueue
from .models import ChangeEvent, ChangeKind, Chunk, WatchedFile

logger = logging.getLogger(__name__)

# Default poll interval in seconds
DEFAULT_POLL_INTERVAL = 2.0

# Default number of bytes read per chunk
DEFAULT_BLOCK_SIZE = 1024

ObserverFactory = Callable[[], BaseObserver]


def create_observer(polling: bool = False) -> BaseObserver:
    """Create a watchdog observer.

    Args:
        polling: Use stat() polling instead of native OS notifications.

    Returns:
        A new, unstarted observer.
    """
    if polling:
        return PollingObserver()
    return Observer()


class _DirectoryEventHandler(FileSystemEventHandler):
    """Translates watchdog events into ChangeEvents on a queue."""

    def __init__(self, events: queue.Queue[ChangeEvent | None]):
        super().__init__()
        self._events = events

    def _post(self, kind: ChangeKind, path: str | bytes) -> None:
        self._events.put(ChangeEvent(kind, Path(os.fsdecode(path)).name))

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._post(ChangeKind.CREATED, event.src_path)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._post(ChangeKind.MODIFIED, event.src_path)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._post(ChangeKind.DELETED, event.src_path)

    def on_moved(self, event: FileSystemEvent) -> None:
        # A rename is a delete of the old name and a create of the new one
        if not event.is_directory:
            self._post(ChangeKind.DELETED, event.src_path)
            self._post(ChangeKind.CREATED, event.dest_path)


class DirectoryWatcher:
    """Watches one file's directory and forwards appended bytes.

    The watcher runs on its own daemon thread. It captures the file's size as
    the baseline before signalling readiness, so callers that wait on
    wait_until_ready() never miss growth that happens after it returns.

    Whenever the thread exits (stop requested, setup failure, or the observer
    dying) an end-of-stream chunk is pushed and the readiness signal is set,
    so no consumer is left blocked.

    Example:
        handoff = HandoffQueue()
        watcher = DirectoryWatcher(Path("/var/log/app.log"), handoff)
        watcher.start()
        watcher.wait_until_ready()
        chunk = handoff.pop()
    """

    def __init__(
        self,
        path: str | Path,
        handoff: HandoffQueue,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        block_size: int = DEFAULT_BLOCK_SIZE,
        observer_factory: ObserverFactory | None = None,
    ) -> None:
        """Initialize the watcher.

        Args:
            path: File to follow. Its parent directory is what gets watched.
            handoff: Queue receiving the appended bytes.
            poll_interval: Seconds between checks of the stop flag.
            block_size: Maximum bytes per forwarded chunk.
            observer_factory: Callable returning an unstarted watchdog observer.
        """
        self.target = WatchedFile(path=Path(path).absolute())
        self._handoff = handoff
        self._poll_interval = poll_interval
        self._block_size = block_size
        self._observer_factory = observer_factory or create_observer

        self._events: queue.Queue[ChangeEvent | None] = queue.Queue()
        self._ready = threading.Event()
        self._stop_requested = threading.Event()
        self._thread: threading.Thread | None = None
        self.setup_error: WatchSetupError | None = None

    @property
    def started(self) -> bool:
        """True once start() has launched the background thread."""
        return self._thread is not None

    @property
    def running(self) -> bool:
        """True while the watch is established and not asked to stop."""
        return (
            self._ready.is_set()
            and self.setup_error is None
            and not self._stop_requested.is_set()
            and self._thread is not None
            and self._thread.is_alive()
        )

    def start(self) -> None:
        """Launch the background thread. Does nothing if already started."""
        if self._thread is not None:
            return
        self._thread = threading.Thread(
            target=self.run, name=f"{self.target.path} watcher", daemon=True
        )
        self._thread.start()

    def wait_until_ready(self, timeout: float | None = None) -> bool:
        """Block until the watch is established (or has failed).

        Returns:
            False if the timeout expired first, True otherwise.
        """
        return self._ready.wait(timeout)

    def stop(self) -> None:
        """Ask the background thread to exit."""
        self._stop_requested.set()
        # Wake the poll immediately instead of waiting out the interval
        self._events.put(None)

    def join(self, timeout: float | None = None) -> None:
        """Wait for the background thread to finish."""
        if self._thread is not None:
            self._thread.join(timeout)

    def run(self) -> None:
        """Thread body: establish the watch, then process events until stopped."""
        observer: BaseObserver | None = None
        try:
            try:
                observer = self._observer_factory()
                observer.schedule(
                    _DirectoryEventHandler(self._events),
                    str(self.target.parent),
                    recursive=False,
                )
                observer.start()
            except Exception as e:
                self.setup_error = WatchSetupError(
                    f"Cannot watch {self.target.parent}: {e}"
                )
                logger.error(f"Failed to start watcher for {self.target.path}: {e}")
                return

            # Baseline is captured before readiness is signalled
            self.target.size = self.target.current_size()
            self._ready.set()
            logger.info(
                f"Watching {self.target.path} (baseline {self.target.size} bytes, "
                f"poll interval {self._poll_interval:.1f}s)"
            )

            while not self._stop_requested.is_set():
                try:
                    event = self._events.get(timeout=self._poll_interval)
                except queue.Empty:
                    if not observer.is_alive():
                        logger.error(f"Observer for {self.target.parent} died, stopping")
                        break
                    continue

                if event is None or self._stop_requested.is_set():
                    continue

                try:
                    self.process_event(event)
                except Exception as e:
                    # A single bad event must not end the watch
                    logger.error(f"Error processing {event} for {self.target.path}: {e}")
        finally:
            if observer is not None:
                self._shutdown_observer(observer)
            self._handoff.push_end()
            self._ready.set()
            logger.info(f"Watcher for {self.target.path} stopped")

    def process_event(self, event: ChangeEvent) -> None:
        """Apply one change notification to the watched file.

        Notifications for other entries are ignored. An overflow triggers a
        growth check, since events for the target may have been dropped.

        Args:
            event: Notification for an entry of the watched directory.
        """
        if event.kind is ChangeKind.OVERFLOW:
            logger.warning(f"Event overflow in {self.target.parent}, rechecking {self.target.name}")
            self.forward_growth()
            return

        if event.name != self.target.name:
            return

        if event.kind is ChangeKind.DELETED:
            logger.info(f"{self.target.path} was removed, resetting baseline")
            self.target.size = 0
            return

        self.forward_growth()

    def forward_growth(self) -> int:
        """Push bytes appended since the baseline onto the handoff queue.

        If the file is now smaller than the baseline it was truncated or
        replaced, and it is read again from the start.

        Returns:
            Number of bytes forwarded.
        """
        current_size = self.target.current_size()
        if current_size < self.target.size:
            logger.info(
                f"{self.target.path} was truncated "
                f"(size {current_size} < baseline {self.target.size})"
            )
            self.target.size = 0

        forwarded = 0
        with self.target.path.open("rb") as fp:
            fp.seek(self.target.size)
            while block := fp.read(self._block_size):
                self._handoff.push(Chunk(block))
                forwarded += len(block)
            self.target.size = fp.tell()

        if forwarded:
            logger.debug(f"Forwarded {forwarded} bytes from {self.target.path}")
        return forwarded

    def _shutdown_observer(self, observer: BaseObserver) -> None:
        try:
            if observer.is_alive():
                observer.stop()
                observer.join(timeout=self._poll_interval)
        except Exception as e:
            logger.warning(f"Error stopping observer for {self.target.parent}: {e}")
