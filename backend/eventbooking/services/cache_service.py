"""
Redis cache for event listing pages.

Each filtered, paginated listing response is stored as JSON under
"events:list:page={page}&size={size}&{filters}" with a TTL. Creating an event
or a booking changes what a listing shows, so both drop every listing key.

Single events are never cached: checkout reads need live seat counts.
When Redis is disabled or unreachable every read goes to the database and
cache errors are logged, never raised to the request.
"""

import json
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from eventbooking.core.config import Settings, get_settings
from eventbooking.core.logging import get_logger
from eventbooking.core.metrics import record_cache_operation
from eventbooking.schemas.event import EventFilters

logger = get_logger(__name__)

EVENT_LIST_PREFIX = "events:list:"


def make_event_list_key(filters: EventFilters, page: int, page_size: int) -> str:
    return f"{EVENT_LIST_PREFIX}page={page}&size={page_size}&{filters.cache_key()}"


class EventListCache:
    def __init__(self, settings: Settings, client: Optional[redis.Redis] = None):
        self.settings = settings
        self._client = client

    async def client(self) -> Optional[redis.Redis]:
        """Connect lazily; a failed connection is retried on the next call."""
        if self._client is not None:
            return self._client
        if not self.settings.REDIS_ENABLED:
            return None

        connection = redis.from_url(
            self.settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True,
        )
        try:
            await connection.ping()
        except (RedisError, OSError) as e:
            logger.error("redis_connection_failed", url=self.settings.REDIS_URL, error=str(e))
            await connection.aclose()
            return None

        logger.info("redis_connected", url=self.settings.REDIS_URL)
        self._client = connection
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def get_page(self, filters: EventFilters, page: int, page_size: int) -> Optional[dict]:
        client = await self.client()
        if client is None:
            return None

        key = make_event_list_key(filters, page, page_size)
        try:
            data = await client.get(key)
        except RedisError as e:
            logger.error("cache_get_error", key=key, error=str(e))
            return None

        record_cache_operation("get", hit=bool(data))
        if not data:
            return None
        logger.debug("cache_hit", key=key)
        return json.loads(data)

    async def set_page(self, filters: EventFilters, page: int, page_size: int, data: dict) -> None:
        client = await self.client()
        if client is None:
            return

        key = make_event_list_key(filters, page, page_size)
        try:
            await client.setex(key, self.settings.REDIS_CACHE_TTL, json.dumps(data, default=str))
        except RedisError as e:
            logger.error("cache_set_error", key=key, error=str(e))

    async def invalidate(self) -> None:
        """Drop every cached listing page."""
        client = await self.client()
        if client is None:
            return

        try:
            keys = [key async for key in client.scan_iter(match=f"{EVENT_LIST_PREFIX}*", count=100)]
            if keys:
                await client.delete(*keys)
        except RedisError as e:
            logger.error("cache_invalidation_error", error=str(e))
            return
        logger.info("cache_invalidated", keys_deleted=len(keys))

    async def stats(self) -> dict:
        client = await self.client()
        if client is None:
            return {"status": "disabled"}

        try:
            info = await client.info("stats")
        except RedisError as e:
            return {"status": "error", "error": str(e)}

        hits = info.get("keyspace_hits", 0)
        misses = info.get("keyspace_misses", 0)
        return {
            "status": "connected",
            "hits": hits,
            "misses": misses,
            "hit_rate": round(hits / max(hits + misses, 1) * 100, 2),
        }


event_cache = EventListCache(get_settings())


async def invalidate_event_cache() -> None:
    await event_cache.invalidate()
