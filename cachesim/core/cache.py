"""Core cache implementation

This file provides the set-associative, write-back cache engine used by the
simulator and reporter.
Behavior:
- Cache is composed of sets; each set has `associativity` slots (ways).
  word_offset = (address % block_size) // 4
  set_index = (address // block_size) % num_sets
  tag = address // (block_size * num_sets)
- Misses pick the LRU slot of the set; a dirty victim is written back to RAM
  at its own address before the new block is loaded.
- read/write return an AccessResult describing what happened.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple

from .address import AddressDecomposer
from .config import WORD_SIZE, CacheConfig
from .errors import OutOfRangeAddressError
from .ram import RAM
from .replacement_policies import LRUReplacement
from ..data.stats_export import Statistics

logger = logging.getLogger(__name__)

UNUSED_TAG = -1


@dataclass
class CacheBlock:
    """container for a cache line.

    Fields:
    - valid: whether the line currently holds useful data
    - dirty: whether the line was written since it was loaded
    - tag: the tag stored in the line (-1 while unused)
    - data: the block's words (length = block_size / 4)
    """

    num_words: int
    valid: bool = False
    dirty: bool = False
    tag: int = UNUSED_TAG
    data: List[int] = field(default_factory=list)

    def __post_init__(self):
        if not self.data:
            self.data = [0] * self.num_words

    def is_hit(self, tag: int) -> bool:
        return self.valid and self.tag == tag

    def read_word(self, offset: int) -> int:
        return self.data[offset]

    def write_word(self, offset: int, value: int) -> None:
        self.data[offset] = value

    def fill(self, tag: int, words: Sequence[int]) -> None:
        if len(words) != self.num_words:
            raise ValueError(f"expected {self.num_words} words, got {len(words)}")
        self.tag = tag
        self.valid = True
        self.dirty = False
        self.data = list(words)

    def mark_dirty(self) -> None:
        assert self.valid, "cannot mark an invalid block dirty"
        self.dirty = True

    def mark_clean(self) -> None:
        self.dirty = False


@dataclass(frozen=True)
class EvictedBlock:
    """Snapshot of a slot taken just before it is overwritten."""

    slot: int
    valid: bool
    dirty: bool
    tag: int
    data: Tuple[int, ...]

    @property
    def needs_writeback(self) -> bool:
        return self.valid and self.dirty


@dataclass
class AccessResult:
    hit: bool
    is_write: bool
    address: int
    set_index: int
    slot: int
    tag: int
    word_offset: int
    value: int
    evicted: Optional[EvictedBlock] = None
    wrote_back: bool = False


class CacheSet:
    """Fixed number of blocks plus the LRU ranks of their slots."""

    def __init__(self, associativity: int, words_per_block: int):
        self.blocks = [CacheBlock(words_per_block) for _ in range(associativity)]
        self.policy = LRUReplacement(associativity)

    @property
    def ranks(self) -> List[int]:
        return list(self.policy.ranks)

    def find(self, tag: int) -> Optional[int]:
        """Slot holding `tag`, or None on a miss."""
        for slot, block in enumerate(self.blocks):
            if block.is_hit(tag):
                return slot
        return None

    def select_victim(self) -> int:
        return self.policy.victim()

    def evict(self, slot: int) -> EvictedBlock:
        # no memory access here: the engine decides whether a write-back is owed
        block = self.blocks[slot]
        return EvictedBlock(slot, block.valid, block.dirty, block.tag, tuple(block.data))

    def fill(self, slot: int, tag: int, words: Sequence[int]) -> CacheBlock:
        block = self.blocks[slot]
        block.fill(tag, words)
        return block

    def promote(self, slot: int) -> None:
        self.policy.access(slot)

    def reset(self):
        for i, block in enumerate(self.blocks):
            self.blocks[i] = CacheBlock(block.num_words)
        self.policy.reset()


class Cache:
    """Set-associative write-back cache with LRU replacement.

    Owns its sets, the backing RAM and the statistics for one trace replay.
    """

    def __init__(self, config: CacheConfig, ram: Optional[RAM] = None, stats: Optional[Statistics] = None):
        self.config = config
        self.ram = ram if ram is not None else RAM()
        self.stats = stats or Statistics()
        self.decoder = AddressDecomposer(config.block_size, config.num_sets)
        if self.config.words_per_block > self.ram.size_words:
            raise ValueError("RAM is smaller than a single cache block")
        self.sets: List[CacheSet] = [
            CacheSet(config.associativity, config.words_per_block) for _ in range(config.num_sets)
        ]

    @property
    def num_sets(self) -> int:
        return self.config.num_sets

    @property
    def associativity(self) -> int:
        return self.config.associativity

    def accepts(self, address: int) -> bool:
        """True if the block holding `address` lies entirely inside RAM."""
        if address < 0:
            return False
        base = (address // self.config.block_size) * self.config.block_size
        return self.ram.contains_block(base // WORD_SIZE, self.config.words_per_block)

    def read(self, address: int) -> AccessResult:
        result = self._access(address, is_write=False)
        self.stats.reads += 1
        self.stats.record_access(result.hit)
        return result

    def write(self, address: int, value: int) -> AccessResult:
        result = self._access(address, is_write=True, value=value)
        self.stats.writes += 1
        self.stats.record_access(result.hit)
        return result

    def _access(self, address: int, is_write: bool, value: int = 0) -> AccessResult:
        # checked before any counter, slot or RAM word is touched
        if not self.accepts(address):
            raise OutOfRangeAddressError(address, self.ram.size_bytes)
        tag, set_index, offset = self.decoder.decompose(address)
        cache_set = self.sets[set_index]

        slot = cache_set.find(tag)
        hit = slot is not None
        evicted = None
        wrote_back = False
        if not hit:
            if is_write:
                self.stats.write_misses += 1
            else:
                self.stats.read_misses += 1
            slot, evicted, wrote_back = self._handle_miss(cache_set, set_index, tag)

        block = cache_set.blocks[slot]
        if is_write:
            block.write_word(offset, value & 0xFFFFFFFF)
            block.mark_dirty()
        cache_set.promote(slot)

        return AccessResult(
            hit=hit,
            is_write=is_write,
            address=address,
            set_index=set_index,
            slot=slot,
            tag=tag,
            word_offset=offset,
            value=block.read_word(offset),
            evicted=evicted,
            wrote_back=wrote_back,
        )

    def _handle_miss(self, cache_set: CacheSet, set_index: int, tag: int):
        slot = cache_set.select_victim()
        # a slot that never held data is filled without an eviction
        evicted = cache_set.evict(slot) if cache_set.blocks[slot].valid else None
        wrote_back = False
        if evicted is not None and evicted.needs_writeback:
            # the victim goes back to its own address, not the incoming one
            self._write_back(evicted.tag, set_index, evicted.data)
            self.stats.dirty_evictions += 1
            wrote_back = True
            logger.debug("set %d slot %d: dirty eviction of tag %#x", set_index, slot, evicted.tag)

        base_word = self.decoder.block_base_word(tag, set_index)
        words = self.ram.read_block(base_word, self.config.words_per_block)
        self.stats.memory_reads += 1
        cache_set.fill(slot, tag, words)
        return slot, evicted, wrote_back

    def _write_back(self, tag: int, set_index: int, data: Sequence[int]) -> None:
        self.ram.write_block(self.decoder.block_base_word(tag, set_index), data)
        self.stats.memory_writes += 1

    def flush(self) -> int:
        """Write every dirty block back to RAM; blocks stay valid.

        Returns the number of blocks written back.
        """
        flushed = 0
        for set_index, cache_set in enumerate(self.sets):
            for block in cache_set.blocks:
                if block.valid and block.dirty:
                    self._write_back(block.tag, set_index, block.data)
                    block.mark_clean()
                    flushed += 1
        self.stats.flushed_blocks += flushed
        logger.debug("flush wrote back %d dirty blocks", flushed)
        return flushed

    def contents(self) -> Iterator[Tuple[int, int, CacheBlock]]:
        """Yield (set_index, slot, block) for every block."""
        for set_index, cache_set in enumerate(self.sets):
            for slot, block in enumerate(cache_set.blocks):
                yield set_index, slot, block

    def reset(self):
        """Clear cache contents and replacement state (RAM and stats untouched)."""
        for s in self.sets:
            s.reset()
