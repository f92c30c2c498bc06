from __future__ import annotations

import random
from dataclasses import dataclass
from typing import List, Optional


@dataclass
class Operation:
    kind: str
    process_id: int
    size: int = 0


class WorkloadGenerator:
    """
    Generate reproducible allocate/free streams for the allocator.

    Allocation sizes are drawn uniformly from [min_size, max_size]. Frees pick
    a random process among those issued so far and not yet released, so some
    of them target requests that are still waiting in the queue.
    """

    def __init__(
        self,
        seed: Optional[int] = None,
        *,
        min_size: int = 1,
        max_size: int = 64,
        free_probability: float = 0.4,
    ) -> None:
        if min_size <= 0 or max_size < min_size:
            raise ValueError(f"Invalid size range [{min_size}, {max_size}]")
        self.random = random.Random(seed)
        self.min_size = min_size
        self.max_size = max_size
        self.free_probability = free_probability
        self._next_process_id = 1
        self._outstanding: List[int] = []

    def next_operation(self) -> Operation:
        if self._outstanding and self.random.random() < self.free_probability:
            index = self.random.randrange(len(self._outstanding))
            process_id = self._outstanding.pop(index)
            return Operation("free", process_id)
        process_id = self._next_process_id
        self._next_process_id += 1
        self._outstanding.append(process_id)
        return Operation("alloc", process_id, self.random.randint(self.min_size, self.max_size))

    def forget(self, process_id: int) -> None:
        """Drop a process that the allocator rejected so it is never freed."""
        try:
            self._outstanding.remove(process_id)
        except ValueError:
            pass
