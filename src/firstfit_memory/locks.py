from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator


class ReadWriteLock:
    """
    Many readers or one writer.

    The allocation manager takes the write side for a whole allocate or free
    call, retry cascade included, and the read side for snapshots.
    """

    def __init__(self) -> None:
        self._active_readers = 0
        self._counter_guard = threading.Lock()
        self._state_guard = threading.Lock()

    @contextmanager
    def read_lock(self) -> Iterator[None]:
        with self._counter_guard:
            self._active_readers += 1
            if self._active_readers == 1:
                self._state_guard.acquire()
        try:
            yield
        finally:
            with self._counter_guard:
                self._active_readers -= 1
                if self._active_readers == 0:
                    self._state_guard.release()

    @contextmanager
    def write_lock(self) -> Iterator[None]:
        with self._state_guard:
            yield
