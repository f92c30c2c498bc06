from __future__ import annotations


class AllocationError(Exception):
    """Base class for every recoverable allocator failure."""


class CapacityExceeded(AllocationError):
    """The block table or the process table is at its structural limit."""


class QueueFull(AllocationError):
    """
    The wait queue is at its bound.

    The rejected request is not retried later; callers must treat it as a
    permanent failure.
    """

    def __init__(self, process_id: int, size: int) -> None:
        super().__init__(f"Wait queue is full. Cannot add process {process_id} ({size}KB).")
        self.process_id = process_id
        self.size = size


class InvalidArgument(AllocationError, ValueError):
    """Non-positive sizes, duplicate process ids and similar caller mistakes."""


class ProcessNotFound(AllocationError):
    def __init__(self, process_id: int) -> None:
        super().__init__(f"Process {process_id} not found")
        self.process_id = process_id
