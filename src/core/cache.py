"""In-memory TTL cache for expensive aggregate queries."""

from __future__ import annotations

import asyncio
import functools
import json
import logging
import time
from dataclasses import dataclass
from threading import Lock
from typing import Any, Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Clock = Callable[[], float]


@dataclass
class CacheEntry:
    """A cached value with its absolute expiry time."""

    value: Any
    expires_at: float

    def is_expired(self, now: float) -> bool:
        """Check if this entry has expired at ``now``."""
        return now > self.expires_at


@dataclass
class CacheConfig:
    """Configuration for the TTL cache."""

    default_ttl_seconds: int = 300
    cleanup_interval_seconds: int = 300  # Sweep expired entries every 5 minutes

    @classmethod
    def from_settings(cls) -> "CacheConfig":
        """Create config from application settings."""
        from src.core.config import get_settings
        settings = get_settings()
        return cls(
            default_ttl_seconds=settings.businesses_cache_ttl,
            cleanup_interval_seconds=settings.cache_cleanup_interval_seconds,
        )


class TTLCache:
    """Key/value cache where every entry carries its own expiry.

    Expired entries are dropped lazily on ``get`` and proactively by
    ``cleanup``, which a background task runs periodically once
    ``start_cleanup_task`` has been called.
    """

    def __init__(self, config: CacheConfig | None = None, clock: Clock | None = None) -> None:
        """Initialize the cache.

        Args:
            config: Optional cache configuration.
            clock: Source of the current time in seconds (defaults to time.monotonic).
        """
        self.config = config or CacheConfig()
        self._clock = clock or time.monotonic
        self._cache: dict[str, CacheEntry] = {}
        self._lock = Lock()
        self._cleanup_task: asyncio.Task | None = None

    async def start_cleanup_task(self) -> None:
        """Start background cleanup task."""
        if self._cleanup_task is None:
            self._cleanup_task = asyncio.create_task(self._cleanup_loop())
            logger.info("Cache cleanup task started")

    async def stop_cleanup_task(self) -> None:
        """Stop background cleanup task."""
        if self._cleanup_task:
            self._cleanup_task.cancel()
            try:
                await self._cleanup_task
            except asyncio.CancelledError:
                pass
            self._cleanup_task = None
            logger.info("Cache cleanup task stopped")

    async def _cleanup_loop(self) -> None:
        """Background loop to cleanup expired entries."""
        while True:
            await asyncio.sleep(self.config.cleanup_interval_seconds)
            count = self.cleanup()
            if count > 0:
                logger.debug("Cache cleaned up %d expired entries", count)

    def get(self, key: str) -> Any | None:
        """Get a cached value if present and not expired.

        Args:
            key: Cache key.

        Returns:
            The cached value or None if not found/expired.
        """
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                logger.debug("Cache miss for key %s", key)
                return None

            if entry.is_expired(self._clock()):
                logger.debug("Cache expired for key %s", key)
                del self._cache[key]
                return None

            logger.debug("Cache hit for key %s", key)
            return entry.value

    def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        """Store a value, replacing any existing entry for ``key``.

        Args:
            key: Cache key.
            value: Value to cache.
            ttl_seconds: Seconds until the entry expires (config default if omitted).
        """
        ttl = self.config.default_ttl_seconds if ttl_seconds is None else ttl_seconds
        expires_at = self._clock() + ttl

        with self._lock:
            self._cache[key] = CacheEntry(value=value, expires_at=expires_at)
        logger.debug("Cached key %s (expires in %ds)", key, ttl)

    def delete(self, key: str) -> bool:
        """Remove an entry. Returns whether it existed."""
        with self._lock:
            return self._cache.pop(key, None) is not None

    def clear(self) -> int:
        """Clear all cached entries.

        Returns:
            Number of entries cleared.
        """
        with self._lock:
            count = len(self._cache)
            self._cache.clear()
        logger.info("Cleared %d entries from cache", count)
        return count

    def cleanup(self) -> int:
        """Remove all expired entries.

        Returns:
            Number of entries removed.
        """
        now = self._clock()
        with self._lock:
            expired_keys = [k for k, v in self._cache.items() if v.is_expired(now)]
            for key in expired_keys:
                del self._cache[key]
            return len(expired_keys)

    def invalidate_pattern(self, pattern: str) -> int:
        """Remove every entry whose key contains ``pattern``.

        Returns:
            Number of entries removed.
        """
        with self._lock:
            matching = [k for k in self._cache if pattern in k]
            for key in matching:
                del self._cache[key]
        if matching:
            logger.debug("Invalidated %d cache entries matching %r", len(matching), pattern)
        return len(matching)

    def get_stats(self) -> dict:
        """Get cache statistics for monitoring.

        Returns:
            Dictionary with cache stats.
        """
        now = self._clock()
        with self._lock:
            valid_count = sum(1 for v in self._cache.values() if not v.is_expired(now))
            return {
                "total_entries": len(self._cache),
                "valid_entries": valid_count,
                "expired_entries": len(self._cache) - valid_count,
                "default_ttl_seconds": self.config.default_ttl_seconds,
            }


def make_cache_key(prefix: str, *args: Any, **kwargs: Any) -> str:
    """Build a deterministic cache key from a prefix and call arguments."""
    payload = json.dumps([args, kwargs], sort_keys=True, default=str, separators=(",", ":"))
    return f"{prefix}_{payload}"


def cached(
    cache: TTLCache,
    ttl_seconds: int | None = None,
    prefix: str | None = None,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Memoise an async function in ``cache``.

    The key is built from ``prefix`` (the function's qualified name by
    default) and the JSON-serialised arguments. None results are not cached.
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        key_prefix = prefix or func.__qualname__

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            key = make_cache_key(key_prefix, *args, **kwargs)
            hit = cache.get(key)
            if hit is not None:
                return hit

            result = await func(*args, **kwargs)
            if result is not None:
                cache.set(key, result, ttl_seconds)
            return result

        return wrapper

    return decorator


async def init_cache() -> TTLCache:
    """Create the process cache and start its cleanup task. Call at app startup."""
    cache = TTLCache(CacheConfig.from_settings())
    await cache.start_cleanup_task()
    return cache


async def shutdown_cache(cache: TTLCache | None) -> None:
    """Stop the cache cleanup task. Call at app shutdown."""
    if cache:
        await cache.stop_cleanup_task()
