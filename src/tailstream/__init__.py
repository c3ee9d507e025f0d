"""Follow the live-growing content of a file as a byte stream.

This package provides a "tail -f" style reader: a background watcher that
observes change notifications for a file's directory, a handoff queue, and a
blocking binary stream that yields only bytes appended after it starts.

Key Components:
    - models: Chunks, change events and the watched file's baseline
    - handoff: Thread-safe queue between watcher and reader
    - watcher: Background directory watcher built on watchdog
    - reader: io.RawIOBase stream over the appended bytes
    - config: Configuration dataclass with YAML loading

Example:
    >>> from tailstream import FollowConfig, FollowingReader
    >>> with FollowingReader("/var/log/app.log", FollowConfig()) as stream:
    ...     data = stream.read(1024)
"""

from __future__ import annotations

from .config import FollowConfig, load_follow_config
from .exceptions import InvalidTargetError, TailStreamError, WatchSetupError
from .handoff import HandoffQueue
from .logging_config import configure_logging
from .models import END_OF_STREAM, ChangeEvent, ChangeKind, Chunk, WatchedFile
from .reader import FollowingReader, follow
from .watcher import DirectoryWatcher, create_observer

__all__ = [
    "FollowConfig",
    "load_follow_config",
    "TailStreamError",
    "InvalidTargetError",
    "WatchSetupError",
    "HandoffQueue",
    "configure_logging",
    "END_OF_STREAM",
    "ChangeEvent",
    "ChangeKind",
    "Chunk",
    "WatchedFile",
    "FollowingReader",
    "follow",
    "DirectoryWatcher",
    "create_observer",
]

__version__ = "0.1.0"
