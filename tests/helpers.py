"""Helpers shared by tailstream tests."""

import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any

import pytest

from tailstream.reader import FollowingReader

# Upper bound for any blocking call in the tests
DEADLINE_SECONDS = 10.0


class FakeObserver:
    """Stand-in for a watchdog observer; events are injected via .handler."""

    def __init__(self) -> None:
        self.handler: Any = None
        self.path: str | None = None
        self.recursive: bool | None = None
        self.alive = False
        self.stopped = False

    def schedule(self, handler: Any, path: str, recursive: bool = False) -> None:
        self.handler = handler
        self.path = path
        self.recursive = recursive

    def start(self) -> None:
        self.alive = True

    def stop(self) -> None:
        self.alive = False
        self.stopped = True

    def join(self, timeout: float | None = None) -> None:
        pass

    def is_alive(self) -> bool:
        return self.alive


def call_with_deadline(
    func: Callable[[], Any],
    timeout: float = DEADLINE_SECONDS,
    on_timeout: Callable[[], None] | None = None,
) -> Any:
    """Run a blocking call on a worker thread and fail the test if it hangs.

    on_timeout should unblock the call (typically by closing the reader).
    """
    with ThreadPoolExecutor(max_workers=1) as pool:
        future = pool.submit(func)
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError:
            if on_timeout is not None:
                on_timeout()
            pytest.fail(f"Blocking call did not return within {timeout}s")


def read_exactly(reader: FollowingReader, size: int) -> bytes:
    """Read until size bytes have arrived or the stream ends."""
    data = bytearray()
    while len(data) < size:
        chunk = call_with_deadline(lambda: reader.read(size - len(data)), on_timeout=reader.close)
        if not chunk:
            break
        data.extend(chunk)
    return bytes(data)


def wait_for(predicate: Callable[[], bool], timeout: float = DEADLINE_SECONDS) -> bool:
    """Poll predicate until it is true or the timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()
