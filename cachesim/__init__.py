"""Set-associative write-back data cache simulator."""
from .core.cache import Cache, CacheBlock, CacheSet
from .core.config import CacheConfig
from .core.errors import ConfigurationError, MalformedRecordError, OutOfRangeAddressError
from .core.ram import RAM
from .core.simulator import CacheSimulator

__version__ = "1.0.0"

__all__ = [
    "Cache", "CacheBlock", "CacheSet", "CacheConfig", "CacheSimulator", "RAM",
    "ConfigurationError", "MalformedRecordError", "OutOfRangeAddressError",
]
