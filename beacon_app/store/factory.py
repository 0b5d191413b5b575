"""
Factory for creating counting store instances.
Simple, clean factory with singleton caching.
"""

import logging
import threading
import time
from enum import Enum
from .strategies import CounterStoreStrategy, RedisCounterStore, InMemoryCounterStore
from beacon_app.config import settings

logger = logging.getLogger(__name__)


class StoreBackend(Enum):
    """Available counting store backends"""
    REDIS = "redis"
    MEMORY = "memory"


class CounterStoreFactory:
    """
    Simple factory for creating counting store instances.
    
    Uses Singleton Pattern - creates instance once, reuses it across all hits.
    Gets configuration from settings (not passed as parameters).
    """
    
    _instance: CounterStoreStrategy = None  # Single cached instance
    _lock = threading.Lock()  # Serializes the first create() calls
    
    @classmethod
    def create(cls, backend: StoreBackend) -> CounterStoreStrategy:
        """
        Create or return cached store instance.
        
        Args:
            backend: Type of store backend (from enum)
            
        Returns:
            Singleton store instance
        """
        # Return cached instance if exists
        if cls._instance is not None:
            return cls._instance
        
        with cls._lock:
            if cls._instance is None:
                cls._instance = cls._build(backend)
        return cls._instance
    
    @classmethod
    def _build(cls, backend: StoreBackend) -> CounterStoreStrategy:
        if backend == StoreBackend.REDIS:
            import redis
            
            redis_client = redis.from_url(
                settings.redis_url,
                decode_responses=True,
                socket_connect_timeout=settings.store_timeout,
                socket_timeout=settings.store_timeout,
            )
            cls._wait_for_redis(redis_client)
            
            logger.info("Redis counting store initialized")
            return RedisCounterStore(redis_client)
            
        elif backend == StoreBackend.MEMORY:
            logger.info("In-memory counting store initialized")
            return InMemoryCounterStore()
            
        raise ValueError(f"Unknown store backend: {backend}")
    
    @staticmethod
    def _wait_for_redis(redis_client) -> bool:
        """
        Ping Redis until it answers or the retries run out.
        
        The client is kept either way: while Redis is down each hit
        degrades its metrics to 0 instead of failing.
        """
        import redis
        
        retries = settings.store_connect_retries
        delay = settings.store_connect_retry_delay
        for attempt in range(retries):
            try:
                redis_client.ping()
                return True
            except redis.RedisError as e:
                remaining = retries - attempt - 1
                logger.error(
                    "Redis connection failed (%s), retrying in %s seconds, %d attempts left",
                    e, delay, remaining
                )
                if remaining:
                    time.sleep(delay)
        return False
    
    @classmethod
    def clear_instance(cls):
        """Clear cached instance (for testing)"""
        cls._instance = None
