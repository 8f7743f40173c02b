"""LRU replacement for one cache set.

Recency is kept as a rank per slot (higher = more recently used):

- access(slot): the slot gets the top rank (capacity - 1); every slot whose
  rank was above the slot's previous rank drops by one. Ranks never go below
  zero, occupied slots always hold distinct ranks and untouched slots stay 0.
- victim(): the slot with the lowest rank, ties to the lowest slot index.
- peek(): slots ordered LRU -> MRU (for reporting/debug)
- reset(): forget all recency
"""
from typing import List


class LRUReplacement:
    """Least-Recently-Used replacement over a fixed number of slots."""

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = int(capacity)
        self.ranks: List[int] = [0] * self.capacity

    @property
    def top_rank(self) -> int:
        return self.capacity - 1

    def access(self, slot: int) -> None:
        """Promote `slot` to most recently used."""
        previous = self.ranks[slot]
        for i, rank in enumerate(self.ranks):
            if i != slot and rank > previous:
                self.ranks[i] = rank - 1
        self.ranks[slot] = self.top_rank

    def victim(self) -> int:
        # min() returns the first minimum, i.e. the lowest slot index on ties
        return min(range(self.capacity), key=lambda i: self.ranks[i])

    def peek(self) -> List[int]:
        """Return slots from LRU->MRU as list."""
        return sorted(range(self.capacity), key=lambda i: (self.ranks[i], i))

    def reset(self) -> None:
        self.ranks = [0] * self.capacity


__all__ = ["LRUReplacement"]
