"""Shared fixtures for tailstream tests."""

import logging
from pathlib import Path
from typing import Any

import pytest
from helpers import DEADLINE_SECONDS, FakeObserver

from tailstream.config import FollowConfig
from tailstream.logging_config import LOGGER_NAME
from tailstream.reader import FollowingReader


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo configure_logging() so caplog sees tailstream records."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def fast_config() -> FollowConfig:
    """Config with a short poll interval so shutdown is quick."""
    return FollowConfig(poll_interval_seconds=0.1)


@pytest.fixture
def empty_file(tmp_path: Path) -> Path:
    """Create an empty file to follow."""
    path = tmp_path / "follow.log"
    path.write_bytes(b"")
    return path


@pytest.fixture
def ten_byte_file(tmp_path: Path) -> Path:
    """Create a file that already holds 10 bytes."""
    path = tmp_path / "follow.log"
    path.write_bytes(b"0123456789")
    return path


@pytest.fixture
def fake_observer() -> FakeObserver:
    return FakeObserver()


@pytest.fixture
def make_reader(fast_config: FollowConfig):
    """Factory for readers that are always closed on teardown."""
    readers: list[FollowingReader] = []

    def _make(path: Path, **kwargs: Any) -> FollowingReader:
        kwargs.setdefault("config", fast_config)
        reader = FollowingReader(path, **kwargs)
        readers.append(reader)
        return reader

    yield _make

    for reader in readers:
        reader.close()
        reader._watcher.join(timeout=DEADLINE_SECONDS)
