from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Set

from .allocators import Allocator, FirstFitAllocator
from .config import SystemLimits
from .errors import CapacityExceeded, InvalidArgument, ProcessNotFound, QueueFull
from .locks import ReadWriteLock
from .memory_object import Process
from .memory_space import BlockTable
from .wait_queue import WaitQueue

if TYPE_CHECKING:
    from experiments.instrumentation import MemoryProfiler

logger = logging.getLogger(__name__)

ALLOCATED = "allocated"
QUEUED = "queued"


@dataclass(frozen=True)
class AllocationResult:
    """Outcome of an allocate call that did not fail outright."""

    status: str
    process_id: int
    size: int
    address: Optional[int] = None

    @property
    def allocated(self) -> bool:
        return self.status == ALLOCATED

    @property
    def queued(self) -> bool:
        return self.status == QUEUED


@dataclass(frozen=True)
class FreeResult:
    """The released process record, plus the waiting processes placed by the retry."""

    process: Process
    promoted: List[Process] = field(default_factory=list)

    @property
    def process_id(self) -> int:
        return self.process.id

    @property
    def address(self) -> int:
        return self.process.address

    @property
    def size(self) -> int:
        return self.process.size


class AllocationManager:
    """
    Owns one simulated system: the block table, the active processes and the
    wait queue.

    Requests are placed with the configured allocator (first fit by default).
    Requests that cannot be placed wait in FIFO order and are retried on every
    free, head of the queue only: a small request never overtakes a larger
    one that arrived first.
    """

    def __init__(
        self,
        block_sizes: Sequence[int],
        *,
        limits: Optional[SystemLimits] = None,
        allocator: Optional[Allocator] = None,
        profiler: Optional["MemoryProfiler"] = None,
        thread_safe: bool = False,
    ) -> None:
        self.limits = limits or SystemLimits()
        self.table = BlockTable(block_sizes, max_blocks=self.limits.max_blocks)
        self.allocator = allocator or FirstFitAllocator()
        self.wait_queue = WaitQueue(self.limits.max_wait_queue)
        self.profiler = profiler
        self._lock = ReadWriteLock() if thread_safe else None

        self.processes: Dict[int, Process] = {}
        self._freed_ids: Set[int] = set()
        self.promotion_count = 0

    # -- Allocation -----------------------------------------------------------------
    def allocate(self, process_id: int, size: int) -> AllocationResult:
        """
        Place `size` units for `process_id`, or queue the request when no block fits.

        Raises InvalidArgument, CapacityExceeded or QueueFull; on any error the
        system is left exactly as it was.
        """

        def write_op() -> AllocationResult:
            self._validate_request(process_id, size)
            if len(self.processes) >= self.limits.max_processes:
                self._record_rejection(process_id, size, "process_table_full")
                raise CapacityExceeded(
                    f"Process table is full ({self.limits.max_processes} active processes)."
                )
            index = self.allocator.select(self.table, size)
            if index is None:
                return self._enqueue(process_id, size)
            if not self.table.can_split(index, size):
                self._record_rejection(process_id, size, "block_table_full")
                raise CapacityExceeded(
                    f"Placing {size}KB needs a split but the block table is full "
                    f"({self.limits.max_blocks} blocks)."
                )
            process = self._place(process_id, size, index)
            return AllocationResult(ALLOCATED, process_id, size, address=process.address)

        if self._lock:
            with self._lock.write_lock():
                return write_op()
        return write_op()

    def _validate_request(self, process_id: int, size: int) -> None:
        if not isinstance(process_id, int) or isinstance(process_id, bool):
            raise InvalidArgument(f"Process id must be an integer, got {process_id!r}")
        if not isinstance(size, int) or isinstance(size, bool) or size <= 0:
            raise InvalidArgument(f"Requested size must be a positive integer, got {size!r}")
        state = self.state_of(process_id)
        if state != "unseen":
            raise InvalidArgument(f"Process {process_id} is already {state}.")

    def _enqueue(self, process_id: int, size: int) -> AllocationResult:
        try:
            self.wait_queue.push(process_id, size)
        except QueueFull:
            self._record_rejection(process_id, size, "queue_full")
            raise
        logger.info("Process %d added to wait queue due to insufficient memory", process_id)
        if self.profiler:
            self.profiler.record_event(
                "queued",
                {
                    "process_id": process_id,
                    "size": size,
                    "queue_length": len(self.wait_queue),
                    "heap_free": self.table.total_free(),
                },
            )
        return AllocationResult(QUEUED, process_id, size)

    def _place(self, process_id: int, size: int, index: int) -> Process:
        block = self.table.split(index, size)
        process = Process(id=process_id, address=block.start, size=block.size)
        self.processes[process_id] = process
        if self.profiler:
            self.profiler.record_event(
                "allocation",
                {
                    "process_id": process_id,
                    "size": size,
                    "address": block.start,
                    "strategy": self.allocator.name,
                    "blocks": len(self.table),
                    "heap_used": self.table.allocated(),
                    "heap_free": self.table.total_free(),
                },
            )
        return process

    def _record_rejection(self, process_id: int, size: int, reason: str) -> None:
        logger.debug("Rejected process %d (%d): %s", process_id, size, reason)
        if self.profiler:
            self.profiler.record_event(
                "rejected",
                {"process_id": process_id, "size": size, "reason": reason},
            )

    # -- Release -------------------------------------------------------------------
    def free(self, process_id: int) -> FreeResult:
        """Release an active process, then serve waiting requests from the queue head."""

        def write_op() -> FreeResult:
            process = self.processes.get(process_id)
            if process is None:
                raise ProcessNotFound(process_id)
            self.table.free_block_containing(process.address)
            del self.processes[process_id]
            process.release()
            self._freed_ids.add(process_id)
            logger.info("Memory for Process %d freed", process_id)
            if self.profiler:
                self.profiler.record_event(
                    "free",
                    {
                        "process_id": process_id,
                        "address": process.address,
                        "size": process.size,
                        "held_seconds": process.held_seconds(),
                        "heap_used": self.table.allocated(),
                        "heap_free": self.table.total_free(),
                    },
                )
            promoted = self._drain_wait_queue()
            return FreeResult(process, promoted)

        if self._lock:
            with self._lock.write_lock():
                return write_op()
        return write_op()

    def _drain_wait_queue(self) -> List[Process]:
        promoted: List[Process] = []
        while True:
            head = self.wait_queue.peek()
            if head is None:
                break
            # Aggregate free space is necessary but not sufficient.
            if self.table.total_free() < head.requested_size:
                break
            index = self.allocator.select(self.table, head.requested_size)
            if index is None:
                break
            if len(self.processes) >= self.limits.max_processes:
                break
            if not self.table.can_split(index, head.requested_size):
                break
            process = self._place(head.process_id, head.requested_size, index)
            self.wait_queue.pop()
            promoted.append(process)
            self.promotion_count += 1
            logger.info("Process %d moved from waiting queue and allocated memory", process.id)
            if self.profiler:
                self.profiler.record_event(
                    "promotion",
                    {
                        "process_id": process.id,
                        "address": process.address,
                        "size": process.size,
                        "wait_seconds": max(0.0, process.allocated_at - head.enqueued_at),
                        "queue_length": len(self.wait_queue),
                    },
                )
        return promoted

    # -- Introspection -------------------------------------------------------------
    def state_of(self, process_id: int) -> str:
        """One of 'unseen', 'active', 'waiting' or 'freed'."""
        if process_id in self.processes:
            return "active"
        if process_id in self.wait_queue:
            return "waiting"
        if process_id in self._freed_ids:
            return "freed"
        return "unseen"

    def active_processes(self) -> List[Process]:
        return sorted(self.processes.values(), key=lambda process: process.address)

    def snapshot(self) -> Dict[str, List[Dict[str, Any]]]:
        """Read-only copy of blocks, active processes and waiting requests."""

        def read_op() -> Dict[str, List[Dict[str, Any]]]:
            return {
                "blocks": self.table.snapshot(),
                "active_processes": [process.as_dict() for process in self.processes.values()],
                "waiting": [entry.as_dict() for entry in self.wait_queue],
            }

        if self._lock:
            with self._lock.read_lock():
                return read_op()
        return read_op()

    def stats(self) -> Dict[str, Any]:
        stats = {
            "blocks": len(self.table),
            "free_blocks": sum(1 for block in self.table.blocks() if block.free),
            "active_processes": len(self.processes),
            "waiting": len(self.wait_queue),
            "promotions": self.promotion_count,
            "heap_capacity": self.table.capacity,
            "heap_used": self.table.allocated(),
            "heap_free": self.table.total_free(),
            "fragmentation": self.table.fragmentation(),
        }
        if self._lock:
            stats["thread_safe"] = 1.0
        return stats
