"""Plain-text report of a finished replay: statistics, cache contents and an
optional window of main memory.
"""
from typing import Optional, Tuple

from ..core.cache import Cache, UNUSED_TAG
from ..core.config import WORD_SIZE
from ..core.ram import RAM
from ..data.stats_export import Statistics

WORDS_PER_ROW = 8


def format_statistics(stats: Statistics) -> str:
    lines = [
        "STATISTICS:",
        f"Accesses: {stats.accesses} Reads: {stats.reads} Writes: {stats.writes}",
        f"TotalMisses: {stats.misses} ReadMisses: {stats.read_misses} WriteMisses: {stats.write_misses}",
        f"TotalMissRate: {stats.miss_rate:.2f}% ReadMissRate: {stats.read_miss_rate:.2f}% "
        f"WriteMissRate: {stats.write_miss_rate:.2f}%",
        f"Number of Dirty Blocks Evicted from the cache: {stats.dirty_evictions}",
    ]
    if stats.malformed_records or stats.rejected_records:
        lines.append(
            f"Skipped records: {stats.malformed_records} malformed, "
            f"{stats.rejected_records} out of range"
        )
    return "\n".join(lines)


def _tag_text(tag: int) -> str:
    return "-" * 8 if tag == UNUSED_TAG else f"{tag:08x}"


def format_cache_contents(cache: Cache) -> str:
    words = cache.config.words_per_block
    header = "Set   V Tag      D  " + " ".join(f"Word{i:<4}" for i in range(words))
    lines = ["CACHE CONTENTS", header]
    for set_index, _slot, block in cache.contents():
        data = " ".join(f"{w:08x}" for w in block.data)
        lines.append(
            f"{set_index:<5x} {int(block.valid)} {_tag_text(block.tag)} {int(block.dirty)}  {data}"
        )
    return "\n".join(lines)


def format_memory(ram: RAM, start_word: int, count: int) -> str:
    lines = ["MAIN MEMORY:", "Address   Words"]
    row = []
    row_addr = None
    for word, value in ram.dump(start_word, count):
        if row_addr is None:
            row_addr = word * WORD_SIZE
        row.append(f"{value:08x}")
        if len(row) == WORDS_PER_ROW:
            lines.append(f"{row_addr:08x}  " + " ".join(row))
            row, row_addr = [], None
    if row:
        lines.append(f"{row_addr:08x}  " + " ".join(row))
    return "\n".join(lines)


def render_report(cache: Cache, memory_window: Optional[Tuple[int, int]] = None) -> str:
    """Full report; `memory_window` is (start byte address, word count)."""
    parts = [format_statistics(cache.stats), "", format_cache_contents(cache)]
    if memory_window is not None:
        start, count = memory_window
        parts += ["", format_memory(cache.ram, start // WORD_SIZE, count)]
    return "\n".join(parts) + "\n"
