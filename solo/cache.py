import json
import logging

import redis.asyncio as redis

from solo.config import settings

logger = logging.getLogger(__name__)


class CacheManager:
    """
    Cache-aside manager backed by Redis.

    The manager starts disconnected; the application must ``await
    cache.connect()`` at startup (and ``disconnect()`` at shutdown) for the
    services to use Redis at all.  Until then, and whenever Redis is
    unavailable, reads return None and writes are skipped, so the cache is
    never a source of errors for the article service.
    """

    def __init__(self) -> None:
        self._redis: redis.Redis | None = None
        # Bumped on every list invalidation; see set_article_list.
        self._list_generations: dict[int, int] = {}

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Open the connection pool."""
        self._redis = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        try:
            await self._redis.ping()
            logger.info("Redis connected: %s", settings.REDIS_URL)
        except Exception as exc:  # pragma: no cover
            logger.warning("Redis ping failed, cache disabled: %s", exc)
            self._redis = None

    async def disconnect(self) -> None:
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    # ------------------------------------------------------------------
    # Core cache operations
    # ------------------------------------------------------------------

    async def get(self, key: str) -> dict | list | None:
        """Return the cached value for *key*, or None on a miss / error."""
        if not self._redis:
            return None
        try:
            data = await self._redis.get(key)
        except Exception as exc:
            logger.debug("Cache GET error for key=%r: %s", key, exc)
            return None
        if data is None:
            logger.debug("Cache miss key=%r", key)
            return None
        logger.debug("Cache hit key=%r", key)
        return json.loads(data)

    async def set(self, key: str, value: dict | list, ttl: int | None = None) -> None:
        if not self._redis:
            return
        try:
            await self._redis.set(key, json.dumps(value, default=str), ex=ttl)
        except Exception as exc:
            logger.debug("Cache SET error for key=%r: %s", key, exc)

    async def delete_pattern(self, pattern: str) -> None:
        """Delete all keys matching *pattern* using SCAN."""
        if not self._redis:
            return
        try:
            keys: list[str] = []
            async for key in self._redis.scan_iter(match=pattern):
                keys.append(key)
            if keys:
                await self._redis.delete(*keys)
                logger.debug("Cache invalidated %d key(s) matching %r", len(keys), pattern)
        except Exception as exc:
            logger.debug("Cache DELETE_PATTERN error for pattern=%r: %s", pattern, exc)

    # ------------------------------------------------------------------
    # Article list pages
    # ------------------------------------------------------------------

    @staticmethod
    def article_list_key(blog_id: int, page: int) -> str:
        return f"articles:console:{blog_id}:{page}"

    def article_list_generation(self, blog_id: int) -> int:
        """Invalidation counter of *blog_id*; take it before reading the page."""
        return self._list_generations.get(blog_id, 0)

    async def set_article_list(
        self,
        blog_id: int,
        page: int,
        value: dict,
        generation: int,
        ttl: int | None = None,
    ) -> None:
        """
        Cache a list page read under *generation*.

        Skipped when the blog's pages were invalidated since the read began,
        so a slow reader cannot put back a page a writer just purged.  The
        counter is per process; writers in other processes are only bounded
        by the TTL.
        """
        if self.article_list_generation(blog_id) != generation:
            logger.debug("Cache SET skipped for stale page blog_id=%s page=%s", blog_id, page)
            return
        await self.set(self.article_list_key(blog_id, page), value, ttl=ttl)

    async def invalidate_article_list(self, blog_id: int) -> None:
        """Drop every cached console list page of *blog_id*."""
        self._list_generations[blog_id] = self.article_list_generation(blog_id) + 1
        await self.delete_pattern(f"articles:console:{blog_id}:*")


# Module-level singleton shared by the services.
cache = CacheManager()
