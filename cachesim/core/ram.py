"""Simple main-memory model.

This is a word-addressable RAM abstraction (16 MiB of 4-byte words by
default). Word `i` initially holds the value `i`; only words that were
written back are stored, in a sparse dict.

Parameters:
- RAM(size_words)
- read_word(word) / write_word(word, value)
- read_block(base_word, count) / write_block(base_word, words)
- dump(start_word, count) -> [(word_address, value), ...]
- reset() -> restores the initial contents
"""
from typing import List, Sequence, Tuple

from .config import MEMORY_WORDS, WORD_SIZE
from .errors import OutOfRangeAddressError

WORD_MASK = 0xFFFFFFFF


class RAM:
    def __init__(self, size_words: int = MEMORY_WORDS):
        if size_words < 1:
            raise ValueError("size_words must be >= 1")
        self.size_words = int(size_words)
        # word address -> value, only for words that differ from the initial pattern
        self.storage = {}
        self.block_reads = 0
        self.block_writes = 0

    @property
    def size_bytes(self) -> int:
        return self.size_words * WORD_SIZE

    def _check_word(self, word: int) -> int:
        if not isinstance(word, int):
            raise TypeError(f"word address must be int, got {type(word).__name__}")
        if word < 0 or word >= self.size_words:
            raise OutOfRangeAddressError(word * WORD_SIZE, self.size_bytes)
        return word

    def contains_block(self, base_word: int, count: int) -> bool:
        return 0 <= base_word and base_word + count <= self.size_words

    def read_word(self, word: int) -> int:
        w = self._check_word(word)
        return self.storage.get(w, w)

    def write_word(self, word: int, value: int) -> None:
        w = self._check_word(word)
        self.storage[w] = int(value) & WORD_MASK

    def read_block(self, base_word: int, count: int) -> List[int]:
        """Read `count` contiguous words starting at `base_word`."""
        self._check_word(base_word)
        self._check_word(base_word + count - 1)
        self.block_reads += 1
        return [self.storage.get(w, w) for w in range(base_word, base_word + count)]

    def write_block(self, base_word: int, words: Sequence[int]) -> None:
        self._check_word(base_word)
        self._check_word(base_word + len(words) - 1)
        self.block_writes += 1
        for i, value in enumerate(words):
            self.storage[base_word + i] = int(value) & WORD_MASK

    def dump(self, start_word: int, count: int) -> List[Tuple[int, int]]:
        """Window of memory for inspection; clipped to the end of the store."""
        self._check_word(start_word)
        end = min(start_word + max(0, count), self.size_words)
        return [(w, self.storage.get(w, w)) for w in range(start_word, end)]

    def reset(self):
        self.storage.clear()
        self.block_reads = 0
        self.block_writes = 0
