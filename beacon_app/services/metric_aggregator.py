"""
Metric aggregation for one hit.

Three updates run concurrently against the shared store, one per metric:
    site_uv  SADD <prefix>site_uv:<host> <client>, then SCARD
    site_pv  HINCRBY <prefix>site_pv <host> 1
    page_pv  HINCRBY <prefix>page_pv:<host> <path> 1

The keys are disjoint, so there is no ordering between them and no
transaction. Each update catches its own failure, logs it, and reports
0 for that metric only. The hit always waits for all three updates and
never retries.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from beacon_app.schemas.beacon import Hit, MetricCounts
from beacon_app.store.keys import KeySpace
from beacon_app.store.strategies import CounterStoreStrategy

logger = logging.getLogger(__name__)

DEGRADED = 0


class MetricAggregator:
    """
    Updates the three metrics of a hit and collects their current values.
    
    Holds no state of its own beyond the shared store handle, the key
    space and the timeout, so one is built per request.
    """
    
    def __init__(
        self,
        store: CounterStoreStrategy,
        keys: KeySpace,
        timeout: Optional[float] = None
    ):
        """
        Args:
            store: Shared counting store
            keys: Key naming for this deployment
            timeout: Seconds allowed per store operation (None = unbounded)
        """
        self.store = store
        self.keys = keys
        self.timeout = timeout
    
    async def aggregate(self, hit: Hit) -> MetricCounts:
        """Run the three updates concurrently and assemble the result"""
        site_uv, site_pv, page_pv = await asyncio.gather(
            self._guarded("site_uv", self.keys.site_uv(hit.host), self._record_site_uv, hit),
            self._guarded("site_pv", self.keys.site_pv(), self._increment_site_pv, hit),
            self._guarded("page_pv", self.keys.page_pv(hit.host), self._increment_page_pv, hit),
        )
        return MetricCounts(site_uv=site_uv, site_pv=site_pv, page_pv=page_pv)
    
    async def _guarded(
        self,
        metric: str,
        key: str,
        update: Callable[[Hit], Awaitable[int]],
        hit: Hit
    ) -> int:
        try:
            return await update(hit)
        except Exception as e:
            logger.error("Failed to update %s (%s) for %s: %r", metric, key, hit.host, e)
            return DEGRADED
    
    def _bounded(self, operation: Awaitable):
        if self.timeout is None:
            return operation
        return asyncio.wait_for(operation, self.timeout)
    
    async def _record_site_uv(self, hit: Hit) -> int:
        # Every hit issues the add, even for a known visitor.
        key = self.keys.site_uv(hit.host)
        await self._bounded(self.store.set_add(key, hit.client_id))
        return await self._bounded(self.store.set_cardinality(key))
    
    async def _increment_site_pv(self, hit: Hit) -> int:
        return await self._bounded(
            self.store.hash_increment(self.keys.site_pv(), hit.host, 1)
        )
    
    async def _increment_page_pv(self, hit: Hit) -> int:
        return await self._bounded(
            self.store.hash_increment(self.keys.page_pv(hit.host), hit.path, 1)
        )
