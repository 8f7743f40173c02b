"""CacheSimulator replays a trace against the core Cache.
Feeds records into the Cache in file order and keeps the skip/reject counts.

Records that cannot be parsed are logged and skipped. Records whose address
falls outside the backing RAM are rejected the same way (never clamped) and
never reach the cache.
"""
import logging
from typing import Callable, Iterable, List, Optional, Tuple, Union

from .cache import Cache
from .errors import MalformedRecordError
from .trace import TraceRecord, numbered_lines, parse_record

logger = logging.getLogger(__name__)

Entry = Tuple[int, Union[TraceRecord, str]]


class CacheSimulator:
    def __init__(self, cache: Cache, *, flush_at_end: bool):
        self.cache = cache
        self.stats = cache.stats
        self.flush_at_end = bool(flush_at_end)
        self.flushed = False
        self.sequence: List[Entry] = []
        self.index = 0

    def load_trace(self, lines: Iterable[str]):
        # raw lines are parsed lazily in step() so a bad line only costs itself
        self.sequence = list(numbered_lines(lines))
        self.index = 0
        self.flushed = False

    def load_records(self, records: Iterable[TraceRecord]):
        self.sequence = [(i, r) for i, r in enumerate(records, start=1)]
        self.index = 0
        self.flushed = False

    def has_next(self) -> bool:
        return self.index < len(self.sequence)

    def step(self) -> Optional[dict]:
        if not self.has_next():
            return None
        line_no, entry = self.sequence[self.index]
        self.index += 1

        if isinstance(entry, str):
            try:
                record = parse_record(entry, line_no)
            except MalformedRecordError as exc:
                self.stats.malformed_records += 1
                logger.warning("skipping malformed record: %s", exc)
                return {'line_no': line_no, 'skipped': 'malformed', 'error': str(exc)}
        else:
            record = entry

        if not self.cache.accepts(record.address):
            self.stats.rejected_records += 1
            logger.warning("line %d: rejecting out-of-range address %#x", line_no, record.address)
            return {'line_no': line_no, 'skipped': 'out-of-range', 'address': record.address}

        if record.is_write:
            result = self.cache.write(record.address, record.data)
        else:
            result = self.cache.read(record.address)

        return {
            'line_no': line_no,
            'address': record.address,
            'is_write': result.is_write,
            'hit': result.hit,
            'set_index': result.set_index,
            'slot': result.slot,
            'value': result.value,
            'evicted': result.evicted,
            'wrote_back': result.wrote_back,
            'stats': {
                'accesses': self.stats.accesses,
                'misses': self.stats.misses,
                'miss_rate': self.stats.miss_rate,
                'dirty_evictions': self.stats.dirty_evictions,
            },
        }

    def run_all(self, callback: Optional[Callable[[dict], None]] = None):
        while self.has_next():
            info = self.step()
            if callback:
                callback(info)
        if self.flush_at_end and not self.flushed:
            self.cache.flush()
            self.flushed = True
        return self.stats
