"""Cache configuration.

Capacity is given in KiB, block size in bytes and associativity in blocks
per set. Every value must come from its allowed set of powers of two:

  capacity:      1, 2, 4, ... 1024 KiB
  block size:    4, 8, ... 512 bytes
  associativity: 1, 2, 4, 8, 16

  num_sets = capacity * 1024 / (block_size * associativity)
"""
from dataclasses import dataclass

from .errors import ConfigurationError

WORD_SIZE = 4
MEMORY_SIZE_BYTES = 16 * 1024 * 1024
MEMORY_WORDS = MEMORY_SIZE_BYTES // WORD_SIZE

ALLOWED_CAPACITIES = tuple(2 ** i for i in range(0, 11))
ALLOWED_BLOCK_SIZES = tuple(2 ** i for i in range(2, 10))
ALLOWED_ASSOCIATIVITIES = (1, 2, 4, 8, 16)


@dataclass(frozen=True)
class CacheConfig:
    capacity_kb: int
    block_size: int
    associativity: int

    def __post_init__(self):
        for name, value, allowed in (
            ("capacity", self.capacity_kb, ALLOWED_CAPACITIES),
            ("block size", self.block_size, ALLOWED_BLOCK_SIZES),
            ("associativity", self.associativity, ALLOWED_ASSOCIATIVITIES),
        ):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")
            if value <= 0:
                raise ConfigurationError(f"{name} must be positive, got {value}")
            if value not in allowed:
                raise ConfigurationError(f"{name} {value} not in allowed values {list(allowed)}")
        if self.num_sets < 1:
            raise ConfigurationError(
                f"invalid configuration: {self.capacity_kb}KiB / ({self.block_size}B * "
                f"{self.associativity}-way) gives no sets"
            )

    @classmethod
    def from_strings(cls, capacity: str, block_size: str, associativity: str) -> "CacheConfig":
        """Build a config from command-line strings (decimal)."""
        try:
            values = [int(str(v).strip(), 10) for v in (capacity, block_size, associativity)]
        except ValueError as exc:
            raise ConfigurationError(f"cache parameters must be integers: {exc}") from exc
        return cls(*values)

    @property
    def capacity_bytes(self) -> int:
        return self.capacity_kb * 1024

    @property
    def num_sets(self) -> int:
        return self.capacity_bytes // (self.block_size * self.associativity)

    @property
    def num_blocks(self) -> int:
        return self.num_sets * self.associativity

    @property
    def words_per_block(self) -> int:
        return self.block_size // WORD_SIZE
