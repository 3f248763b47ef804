import json
import logging
from typing import Any, Optional
from foodfinder.core.config import REDIS_DSN
import redis.asyncio as redis

logger = logging.getLogger(__name__)

redis_client = redis.from_url(REDIS_DSN, decode_responses=True)


def get_cache_key(*parts: Any) -> str:
    """Join key parts with ":", e.g. ("stores", "search", "adobo")."""
    if not parts:
        raise ValueError("Cache key cannot be empty")
    return ":".join(str(part) for part in parts)


async def get_cached_data(key: str) -> Optional[Any]:
    """
    Read a JSON value. A Redis outage is logged and reported as a miss so
    callers fall through to the database.
    """
    try:
        raw = await redis_client.get(key)
    except Exception as e:
        logger.error("Cache read failed for %s: %s", key, e)
        return None
    return json.loads(raw) if raw else None


async def set_cached_data(key: str, data: Any, ttl: int = 3600) -> bool:
    """
    Store a JSON value for ttl seconds.

    Returns:
        bool: False when Redis rejected the write
    """
    try:
        await redis_client.set(key, json.dumps(data), ex=ttl)
    except Exception as e:
        logger.error("Cache write failed for %s: %s", key, e)
        return False
    return True


async def invalidate_cache(
    key: Optional[str] = None, pattern: Optional[str] = None
) -> int:
    """
    Drop one key, or every key matching pattern (e.g. "stores:*").

    Returns:
        int: Number of deleted keys
    """
    try:
        if key:
            keys = [key]
        elif pattern:
            keys = await redis_client.keys(pattern)
        else:
            keys = []
        if not keys:
            return 0
        return await redis_client.delete(*keys)
    except Exception as e:
        logger.error("Cache invalidation failed (%s): %s", key or pattern, e)
        return 0
