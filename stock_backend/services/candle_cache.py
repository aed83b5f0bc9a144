"""
Candle Cache

Redis read-through cache in front of a candle store:
1. Redis cache - serialized find() results keyed by symbol/interval/outputsize
2. Candle store - source of truth, queried on a miss

Writes go to the store first, then every cached outputsize variant of the
touched symbol/interval pairs is deleted. Redis is best-effort: a Redis
outage or a corrupted entry only costs latency, never an error.
"""

import json
from datetime import timedelta
from typing import List, Optional, Union
from redis import Redis as RedisClient

from stock_backend.models.candle import CandleData
from stock_backend.utils.logger import create_logger

logger = create_logger(__name__)

DEFAULT_TTL = timedelta(minutes=5)
DEFAULT_NAMESPACE = "candles"
SCAN_PAGE_SIZE = 200
GLOB_SPECIAL_CHARS = "\\*?[]"


def safe(value: str) -> str:
    """
    Escape characters that would break the ":"-separated key layout.

    Args:
        value: Raw key component

    Returns:
        str: Component with spaces and colons replaced by underscores
    """
    return value.replace(" ", "_").replace(":", "_")


def escape_glob(value: str) -> str:
    """Backslash-escape Redis glob metacharacters so value matches literally."""
    return "".join("\\" + ch if ch in GLOB_SPECIAL_CHARS else ch for ch in value)


class CachingCandleRepository:
    """Decorates a candle store (find / upsert_batch) with Redis caching."""

    def __init__(
        self,
        redis: Optional[RedisClient],
        ttl: Union[timedelta, int, float],
        inner,
        namespace: str = DEFAULT_NAMESPACE,
    ):
        """
        Initialize caching candle repository.

        Args:
            redis: Redis client, or None to pass every call through
            ttl: Cache TTL (timedelta or seconds); non-positive means 5 minutes
            inner: Wrapped candle store
            namespace: Key namespace; empty means "candles"
        """
        if not isinstance(ttl, timedelta):
            ttl = timedelta(seconds=ttl)
        if ttl <= timedelta(0):
            ttl = DEFAULT_TTL

        self.redis = redis
        self.ttl = ttl
        self.inner = inner
        self.namespace = namespace or DEFAULT_NAMESPACE

    def cache_key(self, symbol: str, interval: str, outputsize: int) -> str:
        return f"{self.namespace}:{safe(symbol)}:{safe(interval)}:{outputsize}"

    def cache_key_prefix(self, symbol: str, interval: str) -> str:
        return f"{self.namespace}:{safe(symbol)}:{safe(interval)}:"

    def find(self, symbol: str, interval: str, outputsize: int) -> List[CandleData]:
        """
        Get candles from cache, falling back to the wrapped store.

        Args:
            symbol: Ticker symbol
            interval: Candle interval
            outputsize: Maximum number of candles

        Returns:
            list: CandleData, newest first

        Raises:
            Exception: Whatever the wrapped store raises
        """
        if self.redis is None:
            return self.inner.find(symbol, interval, outputsize)

        key = self.cache_key(symbol, interval, outputsize)

        cached = self._get_from_cache(key)
        if cached is not None:
            logger.debug(f"Candle cache hit for {key}")
            return cached

        candles = self.inner.find(symbol, interval, outputsize)
        self._set_cache(key, candles)
        return candles

    def upsert_batch(self, candles: List[CandleData]) -> None:
        """
        Write candles to the wrapped store and invalidate affected cache keys.

        Args:
            candles: Candles to upsert

        Raises:
            Exception: Whatever the wrapped store raises (cache left untouched)
        """
        self.inner.upsert_batch(candles)

        if self.redis is None or not candles:
            return

        prefixes = {self.cache_key_prefix(c.symbol, c.interval) for c in candles}
        for prefix in sorted(prefixes):
            try:
                deleted = self._delete_by_prefix(prefix)
                logger.debug(f"Invalidated {deleted} cache key(s) for {prefix}")
            except Exception as e:
                logger.error(f"Candle cache invalidation error for {prefix}: {e}")

    def _get_from_cache(self, key: str) -> Optional[List[CandleData]]:
        """
        Read and decode a cache entry.

        Returns:
            list: Cached candles, or None on miss, corruption or Redis error
        """
        try:
            payload = self.redis.get(key)
        except Exception as e:
            logger.error(f"Candle cache read error: {e}")
            return None

        if not payload:
            return None

        try:
            return [CandleData.from_dict(item) for item in json.loads(payload)]
        except Exception as e:
            logger.warning(f"Corrupted candle cache entry {key}, deleting: {e}")
            try:
                self.redis.delete(key)
            except Exception as delete_error:
                logger.error(f"Candle cache delete error: {delete_error}")
            return None

    def _set_cache(self, key: str, candles: List[CandleData]):
        try:
            payload = json.dumps([c.to_dict() for c in candles])
            self.redis.set(key, payload, ex=self.ttl)
            logger.debug(f"Cached {len(candles)} candle(s) at {key} (TTL: {self.ttl})")
        except Exception as e:
            logger.error(f"Candle cache write error: {e}")

    def _delete_by_prefix(self, prefix: str) -> int:
        """
        Delete all keys starting with prefix using incremental SCAN.

        Returns:
            int: Number of keys deleted
        """
        deleted = 0
        cursor = 0
        while True:
            cursor, keys = self.redis.scan(cursor=cursor, match=f"{escape_glob(prefix)}*", count=SCAN_PAGE_SIZE)
            if keys:
                deleted += self.redis.delete(*keys)
            if cursor == 0:
                break
        return deleted
