"""
First-fit memory allocation simulator.

Expose the allocator core and the function-style API used by shells.
"""

from .allocators import Allocator, FirstFitAllocator
from .config import SystemLimits
from .errors import (
    AllocationError,
    CapacityExceeded,
    InvalidArgument,
    ProcessNotFound,
    QueueFull,
)
from .memory_manager import AllocationManager, AllocationResult, FreeResult
from .memory_object import Process, WaitingProcess
from .memory_space import Block, BlockTable
from .system import allocate, create_system, free, snapshot

__all__ = [
    "Allocator",
    "FirstFitAllocator",
    "SystemLimits",
    "AllocationError",
    "CapacityExceeded",
    "InvalidArgument",
    "ProcessNotFound",
    "QueueFull",
    "AllocationManager",
    "AllocationResult",
    "FreeResult",
    "Process",
    "WaitingProcess",
    "Block",
    "BlockTable",
    "allocate",
    "create_system",
    "free",
    "snapshot",
]
