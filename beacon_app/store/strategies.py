"""
Counting store strategies using Strategy Pattern.
Allows switching between different store backends (Redis, In-Memory).

The store is the only source of truth for every counter. Implementations
must make each operation atomic on their own; callers never lock.
"""

from abc import ABC, abstractmethod
from typing import Dict, Set
import asyncio
import threading


class CounterStoreStrategy(ABC):
    """
    Abstract base class for counting stores.
    
    Narrow capability interface: a liveness probe, set membership and
    hash-field increments. Nothing about connections leaks through it.
    
    All methods are async because store operations involve I/O (network for Redis).
    Failures are raised, not swallowed; the aggregator decides how to degrade.
    """
    
    @abstractmethod
    async def ping(self) -> bool:
        """Check that the store answers"""
        pass
    
    @abstractmethod
    async def set_add(self, key: str, member: str) -> None:
        """
        Add a member to a set (no-op if already present).
        
        Args:
            key: Set key
            member: Member to add
        """
        pass
    
    @abstractmethod
    async def set_cardinality(self, key: str) -> int:
        """
        Number of members in a set.
        
        Args:
            key: Set key
            
        Returns:
            Cardinality (0 for a missing key)
        """
        pass
    
    @abstractmethod
    async def hash_increment(self, key: str, field: str, delta: int = 1) -> int:
        """
        Atomically increment a hash field.
        
        Args:
            key: Hash key
            field: Field inside the hash
            delta: Amount to add
            
        Returns:
            Value after the increment
        """
        pass


class RedisCounterStore(CounterStoreStrategy):
    """
    Redis counting store.
    
    Wraps one shared redis.Redis client. The client's connection pool is
    thread-safe, so every command is pushed onto a worker thread and
    concurrent hits never block the event loop or each other.
    
    SADD, SCARD and HINCRBY are atomic on the server side.
    """
    
    def __init__(self, redis_client):
        """
        Initialize Redis store.
        
        Args:
            redis_client: Redis client instance (redis.Redis)
        """
        self.redis = redis_client
    
    async def ping(self) -> bool:
        return bool(await asyncio.to_thread(self.redis.ping))
    
    async def set_add(self, key: str, member: str) -> None:
        await asyncio.to_thread(self.redis.sadd, key, member)
    
    async def set_cardinality(self, key: str) -> int:
        return int(await asyncio.to_thread(self.redis.scard, key))
    
    async def hash_increment(self, key: str, field: str, delta: int = 1) -> int:
        return int(await asyncio.to_thread(self.redis.hincrby, key, field, delta))


class InMemoryCounterStore(CounterStoreStrategy):
    """
    In-memory counting store using Python dicts.
    
    Pros:
    - No external service
    - Good for development and testing
    
    Cons:
    - Not shared between processes
    - Lost on restart
    
    A single lock makes every operation atomic, mirroring Redis semantics.
    """
    
    def __init__(self):
        """Initialize empty sets and hashes"""
        self._sets: Dict[str, Set[str]] = {}
        self._hashes: Dict[str, Dict[str, int]] = {}
        self._lock = threading.Lock()
    
    async def ping(self) -> bool:
        return True
    
    async def set_add(self, key: str, member: str) -> None:
        with self._lock:
            self._sets.setdefault(key, set()).add(member)
    
    async def set_cardinality(self, key: str) -> int:
        with self._lock:
            return len(self._sets.get(key, ()))
    
    async def hash_increment(self, key: str, field: str, delta: int = 1) -> int:
        with self._lock:
            fields = self._hashes.setdefault(key, {})
            fields[field] = fields.get(field, 0) + delta
            return fields[field]
