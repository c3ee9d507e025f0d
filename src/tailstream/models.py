"""Data models for the file following pipeline.

This module defines the values that flow between the directory watcher,
the handoff queue, and the following reader: filesystem change events,
byte chunks, and the watched file's baseline state.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class ChangeKind(Enum):
    """Kind of filesystem change reported for a watched directory.

    Attributes:
        CREATED: An entry appeared in the directory.
        MODIFIED: An entry's content changed.
        DELETED: An entry was removed from the directory.
        OVERFLOW: The notification source dropped events; entry unknown.
    """

    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"
    OVERFLOW = "overflow"


@dataclass(frozen=True)
class ChangeEvent:
    """A single change notification for an entry of the watched directory.

    Attributes:
        kind: What happened to the entry.
        name: File name of the affected entry, or None for OVERFLOW.
    """

    kind: ChangeKind
    name: str | None = None


@dataclass(frozen=True)
class Chunk:
    """A contiguous run of newly appended bytes, or the end-of-stream marker.

    Attributes:
        data: Bytes discovered by the watcher, in file order.
        is_end: True only for the terminal marker that closes the stream.
    """

    data: bytes = b""
    is_end: bool = False

    def __len__(self) -> int:
        return len(self.data)


END_OF_STREAM = Chunk(is_end=True)


@dataclass
class WatchedFile:
    """Baseline state of the file being followed.

    Attributes:
        path: Absolute path of the followed file.
        size: Offset up to which content has already been forwarded.
    """

    path: Path
    size: int = 0

    @property
    def parent(self) -> Path:
        return self.path.parent

    @property
    def name(self) -> str:
        return self.path.name

    def current_size(self) -> int:
        """Return the file's size on disk, or 0 if it does not exist."""
        try:
            return self.path.stat().st_size
        except FileNotFoundError:
            return 0
