"""Exceptions raised by the simulator.

- ConfigurationError: bad capacity / block size / associativity combination
- MalformedRecordError: a trace line that cannot be parsed
- OutOfRangeAddressError: an address outside the backing store
"""


class CacheSimError(Exception):
    """Base class for every simulator error."""


class ConfigurationError(CacheSimError, ValueError):
    pass


class MalformedRecordError(CacheSimError, ValueError):
    def __init__(self, message: str, line_no: int = 0, line: str = ""):
        super().__init__(f"line {line_no}: {message}: {line!r}" if line_no else message)
        self.line_no = line_no
        self.line = line


class OutOfRangeAddressError(CacheSimError, IndexError):
    def __init__(self, address: int, limit: int):
        super().__init__(f"address {address:#x} out of range [0, {limit:#x})")
        self.address = address
        self.limit = limit


__all__ = ["CacheSimError", "ConfigurationError", "MalformedRecordError", "OutOfRangeAddressError"]
