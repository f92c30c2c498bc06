from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from .memory_space import BlockTable


class Allocator(ABC):
    """Placement strategy: decides which block serves a request."""

    name = "abstract"

    @abstractmethod
    def select(self, table: BlockTable, size: int) -> Optional[int]:
        """Return the index of the block to allocate from, or None when nothing fits."""
        ...


class FirstFitAllocator(Allocator):
    """
    First-fit placement: walk the block table in address order and take the
    first free block large enough for the request, even when a later block
    would fit more tightly.
    """

    name = "first_fit"

    def select(self, table: BlockTable, size: int) -> Optional[int]:
        return table.find_first_fit(size)
