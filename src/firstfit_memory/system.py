"""
Function-style entry points for shells and scripts.

Each function takes the system it operates on explicitly, so several
independent simulations can run side by side.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from .allocators import Allocator
from .config import SystemLimits
from .memory_manager import AllocationManager, AllocationResult, FreeResult

if TYPE_CHECKING:
    from experiments.instrumentation import MemoryProfiler


def create_system(
    block_sizes: Sequence[int],
    *,
    limits: Optional[SystemLimits] = None,
    allocator: Optional[Allocator] = None,
    profiler: Optional["MemoryProfiler"] = None,
    thread_safe: bool = False,
) -> AllocationManager:
    return AllocationManager(
        block_sizes,
        limits=limits,
        allocator=allocator,
        profiler=profiler,
        thread_safe=thread_safe,
    )


def allocate(system: AllocationManager, process_id: int, size: int) -> AllocationResult:
    return system.allocate(process_id, size)


def free(system: AllocationManager, process_id: int) -> FreeResult:
    return system.free(process_id)


def snapshot(system: AllocationManager) -> Dict[str, List[Dict[str, Any]]]:
    return system.snapshot()
