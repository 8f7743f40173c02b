"""Unit tests for the cache engine (no trace parsing, no reporting).

They cover:

- cold misses and immediate re-access hits
- LRU eviction order within a set
- dirty-bit handling and write-back to RAM on eviction
- the end-of-trace flush
- the two direct-mapped scenarios used as reference output
"""
import random

import pytest

from cachesim.core.cache import Cache, CacheBlock, UNUSED_TAG
from cachesim.core.config import CacheConfig
from cachesim.core.ram import RAM


def _set_tags(cache: Cache, set_index: int):
    return sorted(b.tag for b in cache.sets[set_index].blocks if b.valid)


def test_fresh_block_is_invalid_clean_and_unused():
    b = CacheBlock(4)
    assert b.valid is False
    assert b.dirty is False
    assert b.tag == UNUSED_TAG
    assert b.data == [0, 0, 0, 0]
    assert not b.is_hit(UNUSED_TAG)


def test_mark_dirty_on_invalid_block_fails_loudly():
    b = CacheBlock(1)
    with pytest.raises(AssertionError):
        b.mark_dirty()


def test_block_fill_checks_length_and_cleans():
    b = CacheBlock(2)
    b.fill(7, [10, 11])
    b.mark_dirty()
    b.fill(8, [12, 13])
    assert (b.tag, b.valid, b.dirty, b.data) == (8, True, False, [12, 13])
    with pytest.raises(ValueError):
        b.fill(9, [1])


def test_cold_reads_to_same_set_both_miss(direct_mapped):
    # Input: 0 0x0, 0 0x400 on 1KiB/4B/direct-mapped
    # Expected: two misses, no dirty eviction
    r1 = direct_mapped.read(0x0)
    r2 = direct_mapped.read(0x400)
    assert r1.hit is False and r2.hit is False
    assert r1.set_index == r2.set_index == 0
    assert r1.evicted is None
    assert r2.evicted is not None and r2.evicted.dirty is False
    s = direct_mapped.stats
    assert s.misses == 2
    assert s.read_misses == 2
    assert s.dirty_evictions == 0


def test_dirty_block_evicted_and_reloaded(direct_mapped):
    # Input: 1 0x0 0xAAAA, 0 0x400, 0 0x0
    # Expected: 1 write miss, 2 read misses, 1 dirty eviction; the reload of
    # 0x0 sees the written-back value
    w = direct_mapped.write(0x0, 0xAAAA)
    assert w.hit is False
    r1 = direct_mapped.read(0x400)
    assert r1.wrote_back is True
    assert r1.evicted.tag == 0
    assert r1.value == 0x400 // 4
    r2 = direct_mapped.read(0x0)
    assert r2.hit is False
    assert r2.value == 0xAAAA
    s = direct_mapped.stats
    assert (s.misses, s.read_misses, s.write_misses, s.dirty_evictions) == (3, 2, 1, 1)
    assert direct_mapped.ram.read_word(0) == 0xAAAA


@pytest.mark.parametrize('capacity,block,assoc', [
    (1, 4, 1),
    (1, 16, 2),
    (4, 32, 4),
    (8, 64, 16),
])
def test_second_access_to_same_address_hits(capacity, block, assoc):
    c = Cache(CacheConfig(capacity, block, assoc))
    for addr in (0x0, 0x44, 0x1234, 0xFFFFFC):
        assert c.read(addr).hit is False
        assert c.read(addr).hit is True
    w = c.write(0x2000, 0x5A5A)
    assert w.hit is False
    r = c.read(0x2000)
    assert r.hit is True
    assert r.value == 0x5A5A


def test_write_miss_fills_rest_of_block_from_memory():
    # 16-byte blocks: writing word 2 must leave words 0, 1, 3 as loaded from RAM
    c = Cache(CacheConfig(1, 16, 1))
    res = c.write(0x108, 0xDEADBEEF)
    block = c.sets[res.set_index].blocks[res.slot]
    assert block.data == [0x40, 0x41, 0xDEADBEEF, 0x43]
    assert block.dirty is True
    assert res.word_offset == 2


def test_write_hit_marks_dirty_without_memory_traffic(direct_mapped):
    direct_mapped.read(0x10)
    before = direct_mapped.ram.block_writes
    res = direct_mapped.write(0x10, 1)
    assert res.hit is True
    assert direct_mapped.sets[res.set_index].blocks[res.slot].dirty is True
    assert direct_mapped.ram.block_writes == before
    assert direct_mapped.ram.read_word(4) == 4


def test_lru_evicts_first_accessed_of_n_plus_one(four_way):
    # tags 0..4 all map to set 0 (stride 0x100); the fifth evicts tag 0
    results = [four_way.read(tag * 0x100) for tag in range(5)]
    assert all(r.set_index == 0 for r in results)
    assert results[-1].evicted is not None
    assert results[-1].evicted.tag == 0
    assert _set_tags(four_way, 0) == [1, 2, 3, 4]


def test_lru_respects_reaccess(four_way):
    for tag in range(4):
        four_way.read(tag * 0x100)
    assert four_way.read(0x0).hit is True
    res = four_way.read(4 * 0x100)
    assert res.evicted.tag == 1
    assert _set_tags(four_way, 0) == [0, 2, 3, 4]


def test_invalid_slots_fill_in_index_order(four_way):
    slots = [four_way.read(tag * 0x100).slot for tag in range(4)]
    assert slots == [0, 1, 2, 3]


def test_dirty_eviction_counter_two_way():
    # 2-way, 128 sets: set 0 addresses are tag * 0x200
    # w t0, r t1, w t2 (evicts dirty t0), r t3 (evicts clean t1), r t0 (evicts dirty t2)
    c = Cache(CacheConfig(1, 4, 2))
    trace = [(True, 0), (False, 1), (True, 2), (False, 3), (False, 0)]
    results = []
    for is_write, tag in trace:
        addr = tag * 0x200
        results.append(c.write(addr, 0x100 + tag) if is_write else c.read(addr))
    evicted_tags = [r.evicted.tag for r in results if r.evicted is not None]
    assert evicted_tags == [0, 1, 2]
    assert [r.wrote_back for r in results] == [False, False, True, False, True]
    assert c.stats.dirty_evictions == 2
    assert c.stats.dirty_evictions == sum(r.wrote_back for r in results)
    # the reload of t0 sees its own written-back value
    assert results[-1].value == 0x100


def test_write_back_goes_to_victims_own_address():
    c = Cache(CacheConfig(1, 16, 1))
    c.write(0x24, 0x1111)           # set 2, tag 0
    c.read(0x424)                   # set 2, tag 1 -> evicts tag 0
    assert c.ram.read_word(0x24 // 4) == 0x1111
    assert c.ram.read_word(0x424 // 4) == 0x424 // 4


def test_flush_writes_back_everything_and_cleans():
    # Input: 400 random writes (and some reads) on a 2-way, 16-byte-block cache
    # Expected: after flush every written word is in RAM and no block is dirty
    rng = random.Random(7)
    c = Cache(CacheConfig(1, 16, 2))
    expected = {}
    for _ in range(400):
        addr = rng.randrange(0, 0x4000, 4)
        if rng.random() < 0.6:
            value = rng.getrandbits(32)
            c.write(addr, value)
            expected[addr] = value
        else:
            c.read(addr)
    c.flush()
    for addr, value in expected.items():
        assert c.ram.read_word(addr // 4) == value
    assert not any(block.dirty for _, _, block in c.contents())
    # flushing is not an eviction
    assert c.stats.flushed_blocks > 0
    assert c.flush() == 0


def test_flush_leaves_blocks_valid(direct_mapped):
    direct_mapped.write(0x8, 3)
    assert direct_mapped.flush() == 1
    assert direct_mapped.read(0x8).hit is True
    assert direct_mapped.stats.dirty_evictions == 0


def test_counters_track_reads_and_writes(direct_mapped):
    direct_mapped.read(0x0)
    direct_mapped.write(0x0, 1)
    direct_mapped.write(0x4, 1)
    s = direct_mapped.stats
    assert (s.accesses, s.reads, s.writes, s.hits, s.misses) == (3, 1, 2, 1, 2)
    assert len(s.miss_rate_history) == 3


def test_cache_reset_clears_dirty_bits(direct_mapped):
    direct_mapped.write(0x0, 1)
    direct_mapped.write(0x4, 1)
    direct_mapped.reset()
    for _, _, b in direct_mapped.contents():
        assert b.dirty is False
        assert b.valid is False


def test_small_ram_rejected_for_large_blocks():
    with pytest.raises(ValueError):
        Cache(CacheConfig(1, 64, 1), ram=RAM(size_words=8))


def test_accepts_checks_whole_block_in_range(direct_mapped):
    assert direct_mapped.accepts(0)
    assert direct_mapped.accepts(0xFFFFFF)
    assert not direct_mapped.accepts(0x1000000)
    assert not direct_mapped.accepts(-4)


@pytest.mark.parametrize('address', [0x1000000, 0x7FFFFFFC, -4])
def test_out_of_range_access_leaves_state_untouched(direct_mapped, address):
    # Input: dirty block in set 0, then a read/write whose address is outside RAM
    # Expected: OutOfRangeAddressError before any counter, slot or RAM word changes
    from cachesim.core.errors import OutOfRangeAddressError

    direct_mapped.write(0x0, 0xAAAA)
    s = direct_mapped.stats
    before = s.as_dict()
    with pytest.raises(OutOfRangeAddressError):
        direct_mapped.read(address)
    with pytest.raises(OutOfRangeAddressError):
        direct_mapped.write(address, 1)
    assert s.as_dict() == before
    assert s.read_misses + s.write_misses == s.misses
    block = direct_mapped.sets[0].blocks[0]
    assert (block.tag, block.dirty, block.data) == (0, True, [0xAAAA])
    assert direct_mapped.ram.storage == {}
    assert direct_mapped.ram.block_writes == 0


def test_miss_rate_history_can_be_switched_off():
    from cachesim.data.stats_export import Statistics

    c = Cache(CacheConfig(1, 4, 1), stats=Statistics(record_history=False))
    for addr in range(0, 0x100, 4):
        c.read(addr)
    assert c.stats.accesses == 64
    assert c.stats.miss_rate_history == []
    assert c.stats.miss_rate == 100.0
