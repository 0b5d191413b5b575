"""
Counting store module for the visitor beacon.
Implements Strategy Pattern for flexible store backends.
"""

from .strategies import CounterStoreStrategy, RedisCounterStore, InMemoryCounterStore
from .factory import CounterStoreFactory, StoreBackend
from .keys import KeySpace, normalize_prefix

__all__ = [
    "CounterStoreStrategy",
    "RedisCounterStore",
    "InMemoryCounterStore",
    "CounterStoreFactory",
    "StoreBackend",
    "KeySpace",
    "normalize_prefix",
]
