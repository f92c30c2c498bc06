from __future__ import annotations

from collections import deque
from typing import Deque, Iterator, Optional

from .config import DEFAULT_MAX_WAIT_QUEUE
from .errors import QueueFull
from .memory_object import WaitingProcess


class WaitQueue:
    """
    Bounded FIFO of requests waiting for memory.

    Only the head is ever offered to the allocator, so arrival order is also
    service order.
    """

    def __init__(self, max_length: int = DEFAULT_MAX_WAIT_QUEUE) -> None:
        self.max_length = max_length
        self._entries: Deque[WaitingProcess] = deque()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[WaitingProcess]:
        return iter(list(self._entries))

    def __contains__(self, process_id: object) -> bool:
        return any(entry.process_id == process_id for entry in self._entries)

    def full(self) -> bool:
        return len(self._entries) >= self.max_length

    def push(self, process_id: int, size: int) -> WaitingProcess:
        if self.full():
            raise QueueFull(process_id, size)
        entry = WaitingProcess(process_id=process_id, requested_size=size)
        self._entries.append(entry)
        return entry

    def peek(self) -> Optional[WaitingProcess]:
        return self._entries[0] if self._entries else None

    def pop(self) -> WaitingProcess:
        return self._entries.popleft()
