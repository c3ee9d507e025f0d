"""Exceptions raised by tailstream."""

from __future__ import annotations


class TailStreamError(OSError):
    """Base class for file following errors."""


class InvalidTargetError(TailStreamError):
    """The path given to a reader cannot be followed (it is a directory)."""


class WatchSetupError(TailStreamError):
    """The change notification observer could not be established."""
