"""Test configuration for pytest.

Ensure the repository root is on sys.path so tests can import the `cachesim`
package without an install, and provide a few shared cache fixtures.
"""
import os
import sys

import pytest

# Compute project root: two directories above this file (cachesim/tests -> cachesim -> project root)
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from cachesim.core.cache import Cache  # noqa: E402
from cachesim.core.config import CacheConfig  # noqa: E402


@pytest.fixture
def direct_mapped():
    # 1KiB, 4-byte blocks, 1-way -> 256 sets; 0x0 and 0x400 share set 0
    return Cache(CacheConfig(1, 4, 1))


@pytest.fixture
def four_way():
    # 1KiB, 4-byte blocks, 4-way -> 64 sets; set 0 holds addresses tag * 0x100
    return Cache(CacheConfig(1, 4, 4))
