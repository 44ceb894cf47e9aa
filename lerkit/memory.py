"""Variable-size allocator that hands out offsets inside a linear range."""

from __future__ import annotations

import bisect
from itertools import count


class AllocationError(Exception):
    """Raised when no free block can hold the requested size."""


class VariableSizeAllocator:
    """Best-fit allocator keeping free blocks ordered by offset and by size.

    Adjacent free blocks are merged when a range is released.
    """

    def __init__(self, max_size: int = 0) -> None:
        self._sequence = count()
        self.reset(max_size)

    def reset(self, max_size: int) -> None:
        """Forget every allocation and make the whole range free again."""
        if max_size < 0:
            raise ValueError("max_size must not be negative")
        self.max_size = max_size
        self._free_size = max_size
        # offset -> (size, insertion sequence)
        self._blocks: dict[int, tuple[int, int]] = {}
        self._offsets: list[int] = []
        # (size, insertion sequence, offset); ties go to the oldest block
        self._by_size: list[tuple[int, int, int]] = []
        self._add_block(0, max_size)

    def _add_block(self, offset: int, size: int) -> None:
        if size <= 0:
            return
        seq = next(self._sequence)
        self._blocks[offset] = (size, seq)
        bisect.insort(self._offsets, offset)
        bisect.insort(self._by_size, (size, seq, offset))

    def _remove_block(self, offset: int) -> int:
        size, seq = self._blocks.pop(offset)
        del self._offsets[bisect.bisect_left(self._offsets, offset)]
        del self._by_size[bisect.bisect_left(self._by_size, (size, seq, offset))]
        return size

    def allocate(self, size: int) -> int:
        """Reserve ``size`` units and return the offset of the reservation."""
        if size < 0:
            raise ValueError("size must not be negative")
        if self._free_size < size:
            raise AllocationError(f"not enough free space for {size} units")

        index = bisect.bisect_left(self._by_size, (size,))
        if index == len(self._by_size):
            raise AllocationError(f"no free block large enough for {size} units")

        block_size, _, offset = self._by_size[index]
        self._remove_block(offset)
        self._add_block(offset + size, block_size - size)
        self._free_size -= size
        return offset

    def free(self, offset: int, size: int) -> None:
        """Release ``size`` units at ``offset``, merging with neighbours."""
        if offset < 0 or size <= 0 or offset + size > self.max_size:
            raise ValueError(f"range [{offset}, {offset + size}) is outside the allocator")

        index = bisect.bisect_right(self._offsets, offset)
        next_offset = self._offsets[index] if index < len(self._offsets) else None
        prev_offset = self._offsets[index - 1] if index > 0 else None

        touches_prev = (
            prev_offset is not None and prev_offset + self._blocks[prev_offset][0] == offset
        )
        touches_next = next_offset is not None and offset + size == next_offset

        new_offset, new_size = offset, size
        if touches_prev:
            new_offset = prev_offset
            new_size += self._remove_block(prev_offset)
        if touches_next:
            new_size += self._remove_block(next_offset)

        self._add_block(new_offset, new_size)
        self._free_size += size

    def free_size(self) -> int:
        """Total number of free units."""
        return self._free_size

    def free_blocks(self) -> list[tuple[int, int]]:
        """Free blocks as ``(offset, size)`` pairs ordered by offset."""
        return [(offset, self._blocks[offset][0]) for offset in self._offsets]