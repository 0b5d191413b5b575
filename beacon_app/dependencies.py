"""
FastAPI dependencies for dependency injection.

This module provides the singleton counting store, key space and
aggregator that are injected into routes.

Pattern: Dependency Injection
- Tests swap the store via app.dependency_overrides[get_store]
- Backend chosen from settings
"""

from functools import lru_cache

from fastapi import Depends, Request

from beacon_app.config import settings
from beacon_app.services.metric_aggregator import MetricAggregator
from beacon_app.store.factory import CounterStoreFactory, StoreBackend
from beacon_app.store.keys import KeySpace
from beacon_app.store.strategies import CounterStoreStrategy


@lru_cache()
def get_store() -> CounterStoreStrategy:
    """
    Get counting store instance (singleton).
    
    Factory gets config from settings internally.
    @lru_cache ensures this is called only once.
    """
    backend = StoreBackend(settings.store_backend)
    return CounterStoreFactory.create(backend)


@lru_cache()
def get_key_space() -> KeySpace:
    """Get key naming for the configured prefix (singleton)"""
    return KeySpace(settings.redis_prefix)


def get_metric_aggregator(
    store: CounterStoreStrategy = Depends(get_store),
    keys: KeySpace = Depends(get_key_space)
) -> MetricAggregator:
    """Get MetricAggregator bound to the shared store"""
    return MetricAggregator(store=store, keys=keys, timeout=settings.store_timeout)


def get_client_ip(request: Request) -> str:
    """
    Client identity for unique-visitor counting.
    
    Behind a proxy the first X-Forwarded-For entry wins, then X-Real-IP,
    then the socket peer.
    """
    if settings.trust_forwarded_headers:
        forwarded = request.headers.get("x-forwarded-for", "")
        first = forwarded.split(",")[0].strip()
        if first:
            return first
        real_ip = request.headers.get("x-real-ip", "").strip()
        if real_ip:
            return real_ip
    return request.client.host if request.client else ""
