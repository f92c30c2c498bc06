from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from .config import DEFAULT_MAX_BLOCKS
from .errors import CapacityExceeded, InvalidArgument


@dataclass(slots=True)
class Block:
    start: int
    size: int
    free: bool = True

    @property
    def end(self) -> int:
        return self.start + self.size

    def split(self, size: int) -> Tuple["Block", Optional["Block"]]:
        """Return the allocated prefix plus the free remainder, if any."""
        allocated = Block(start=self.start, size=size, free=False)
        remainder_size = self.size - size
        if remainder_size <= 0:
            return allocated, None
        remainder = Block(start=self.start + size, size=remainder_size)
        return allocated, remainder

    def as_dict(self) -> Dict[str, object]:
        return {"start": self.start, "size": self.size, "free": self.free}


class BlockTable:
    """
    Simulated contiguous memory laid out as an ordered list of blocks.

    Blocks always partition [0, capacity): index order is address order and
    consecutive blocks touch. The table only grows by splitting a free block
    into an allocated prefix and a free remainder. Freed blocks are never
    merged with their neighbours.
    """

    def __init__(self, sizes: Sequence[int], *, max_blocks: int = DEFAULT_MAX_BLOCKS) -> None:
        self.max_blocks = max_blocks
        self._blocks: List[Block] = []
        self.initialize(sizes)

    def initialize(self, sizes: Sequence[int]) -> None:
        """Lay out free blocks back to back from address 0 in the given order."""
        sizes = list(sizes)
        if not sizes:
            raise InvalidArgument("At least one memory block is required.")
        if len(sizes) > self.max_blocks:
            raise CapacityExceeded(
                f"{len(sizes)} blocks requested but the table holds at most {self.max_blocks}."
            )
        for size in sizes:
            if not isinstance(size, int) or isinstance(size, bool) or size <= 0:
                raise InvalidArgument(f"Block sizes must be positive integers, got {size!r}")
        blocks: List[Block] = []
        start_address = 0
        for size in sizes:
            blocks.append(Block(start_address, size))
            start_address += size
        self._blocks = blocks

    def __len__(self) -> int:
        return len(self._blocks)

    @property
    def capacity(self) -> int:
        return sum(block.size for block in self._blocks)

    def total_free(self) -> int:
        return sum(block.size for block in self._blocks if block.free)

    def allocated(self) -> int:
        return sum(block.size for block in self._blocks if not block.free)

    def fragmentation(self) -> float:
        free_sizes = [block.size for block in self._blocks if block.free]
        available = sum(free_sizes)
        if available == 0:
            return 0.0
        return 1.0 - (max(free_sizes) / available)

    def find_first_fit(self, size: int) -> Optional[int]:
        """
        Scan in address order and return the index of the first free block
        that can hold `size`, or None. Ties go to the lowest address.
        """
        for index, block in enumerate(self._blocks):
            if block.free and block.size >= size:
                return index
        return None

    def needs_split(self, index: int, size: int) -> bool:
        return self._blocks[index].size != size

    def can_split(self, index: int, size: int) -> bool:
        """True when allocating `size` from block `index` stays within max_blocks."""
        return not self.needs_split(index, size) or len(self._blocks) < self.max_blocks

    def split(self, index: int, requested_size: int) -> Block:
        """
        Allocate `requested_size` from the free block at `index`.

        An exact fit flips the block in place; otherwise a free remainder block
        is inserted right after it. Returns the allocated block.
        """
        block = self._blocks[index]
        if not block.free or block.size < requested_size or requested_size <= 0:
            raise InvalidArgument(
                f"Block {index} (start={block.start}, size={block.size}, free={block.free}) "
                f"cannot hold {requested_size}"
            )
        if not self.can_split(index, requested_size):
            raise CapacityExceeded(
                f"Splitting block {index} would exceed the maximum of {self.max_blocks} blocks."
            )
        allocated, remainder = block.split(requested_size)
        self._blocks[index] = allocated
        if remainder:
            self._blocks.insert(index + 1, remainder)
        return allocated

    def free_block_containing(self, address: int) -> Block:
        """Mark the block starting at `address` free. Neighbours are left as they are."""
        block = self.block_at(address)
        if block is None:
            raise InvalidArgument(f"No block starts at address {address}")
        block.free = True
        return block

    def block_at(self, address: int) -> Optional[Block]:
        for block in self._blocks:
            if block.start == address:
                return block
        return None

    def blocks(self) -> List[Block]:
        """Return copies of the blocks for inspection."""
        return [Block(block.start, block.size, block.free) for block in self._blocks]

    def snapshot(self) -> List[Dict[str, object]]:
        return [block.as_dict() for block in self._blocks]
