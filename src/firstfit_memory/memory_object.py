from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass(slots=True)
class Process:
    """
    A process bound to one allocated block.

    address and size mirror the start and size of that block at the moment
    the allocation succeeded.
    """

    id: int
    address: int
    size: int
    active: bool = True
    allocated_at: float = field(default_factory=time.time)
    freed_at: Optional[float] = None

    def release(self) -> None:
        self.active = False
        self.freed_at = time.time()

    def held_seconds(self) -> Optional[float]:
        """Time between allocation and release, None while still active."""
        if self.freed_at is None:
            return None
        return max(0.0, self.freed_at - self.allocated_at)

    def as_dict(self) -> Dict[str, int]:
        return {"id": self.id, "address": self.address, "size": self.size}


@dataclass(slots=True)
class WaitingProcess:
    """A request that could not be placed when it arrived."""

    process_id: int
    requested_size: int
    enqueued_at: float = field(default_factory=time.time)

    def as_dict(self) -> Dict[str, int]:
        return {"process_id": self.process_id, "size": self.requested_size}
