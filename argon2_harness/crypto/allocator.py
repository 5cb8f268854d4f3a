import logging
from typing import Dict

from argon2.low_level import ffi

logger = logging.getLogger(__name__)


class TrackingAllocator:
    """
    Caller-owned allocate/free pair for the primitive's working memory.

    Blocks are cffi-owned buffers kept alive in a table until freed, so the
    primitive never touches memory Python has already collected.
    """

    def __init__(self, limit: int = 0):
        # limit == 0 means unbounded
        self.limit = limit
        self.blocks: Dict[int, object] = {}
        self.allocated_total = 0

    @staticmethod
    def _address(memory) -> int:
        return int(ffi.cast("uintptr_t", memory))

    @property
    def outstanding(self) -> int:
        return len(self.blocks)

    def allocate(self, length: int):
        """Return a new uint8_t buffer of `length` bytes, or None on failure."""
        if self.limit and length > self.limit:
            logger.warning("refusing allocation of %d bytes (limit %d)", length, self.limit)
            return None
        try:
            block = ffi.new("uint8_t[]", length)
        except MemoryError:
            logger.error("allocation of %d bytes failed", length)
            return None
        self.blocks[self._address(block)] = block
        self.allocated_total += length
        return block

    def free(self, memory, length: int) -> None:
        # A NULL pointer with zero length is a no-op
        if memory == ffi.NULL:
            return
        if self.blocks.pop(self._address(memory), None) is None:
            logger.warning("free of unknown block (%d bytes)", length)
