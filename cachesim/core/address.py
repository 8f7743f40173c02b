"""Address decomposition.

  word_offset = (addr mod block_size) / 4
  set_index   = (addr / block_size) mod num_sets
  tag         = addr / (block_size * num_sets)

and the inverse used by write-back:

  base byte address = (tag * num_sets + set_index) * block_size
"""
from dataclasses import dataclass
from typing import NamedTuple

from .config import WORD_SIZE
from .errors import OutOfRangeAddressError


class DecodedAddress(NamedTuple):
    tag: int
    set_index: int
    word_offset: int


@dataclass(frozen=True)
class AddressDecomposer:
    block_size: int
    num_sets: int

    def _check(self, address: int) -> int:
        if address < 0:
            raise OutOfRangeAddressError(address, 0)
        return address

    def word_offset(self, address: int) -> int:
        return (self._check(address) % self.block_size) // WORD_SIZE

    def set_index(self, address: int) -> int:
        return (self._check(address) // self.block_size) % self.num_sets

    def tag(self, address: int) -> int:
        return self._check(address) // (self.block_size * self.num_sets)

    def decompose(self, address: int) -> DecodedAddress:
        return DecodedAddress(self.tag(address), self.set_index(address), self.word_offset(address))

    def block_base_address(self, tag: int, set_index: int) -> int:
        """Byte address of the first word of block (tag, set_index)."""
        return (tag * self.num_sets + set_index) * self.block_size

    def block_base_word(self, tag: int, set_index: int) -> int:
        return self.block_base_address(tag, set_index) // WORD_SIZE

    def word_address(self, address: int) -> int:
        return self._check(address) // WORD_SIZE
