"""
Redis cache client with connection pooling and JSON serialization.
"""
import json
from typing import Optional, Any
import redis.asyncio as redis
from app.core.config import settings
from app.core.logging import logger


class RedisCache:
    """
    Async Redis cache shared by every API instance.

    Redis errors are logged and reported as a miss so that a cache outage
    degrades to hitting the database instead of failing requests.
    """
    
    def __init__(self, url: Optional[str] = None, max_connections: int = 20):
        self._url = url or settings.REDIS_URL
        self._max_connections = max_connections
        self._pool: Optional[redis.ConnectionPool] = None
        self._client: Optional[redis.Redis] = None
    
    def _get_client(self) -> redis.Redis:
        if self._client is None:
            self._pool = redis.ConnectionPool.from_url(
                self._url,
                decode_responses=True,
                max_connections=self._max_connections,
            )
            self._client = redis.Redis(connection_pool=self._pool)
            logger.info("Redis connection pool created")
        return self._client
    
    async def get(self, key: str) -> Optional[Any]:
        try:
            value = await self._get_client().get(key)
            if value:
                return json.loads(value)
            return None
        except Exception as e:
            logger.error(f"Redis GET error for key {key}: {e}")
            return None
    
    async def set(self, key: str, value: Any, expire: int = 300) -> bool:
        """
        Set value in cache with expiration.
        
        Args:
            key: Cache key
            value: Value to cache (JSON serialized, ``str`` fallback for UUIDs and datetimes)
            expire: Time to live in seconds
        """
        try:
            serialized = json.dumps(value, default=str)
            await self._get_client().setex(key, expire, serialized)
            return True
        except Exception as e:
            logger.error(f"Redis SET error for key {key}: {e}")
            return False
    
    async def delete(self, key: str) -> bool:
        try:
            await self._get_client().delete(key)
            return True
        except Exception as e:
            logger.error(f"Redis DELETE error for key {key}: {e}")
            return False
    
    async def delete_pattern(self, pattern: str) -> int:
        """
        Delete all keys matching pattern (e.g. ``events:public:*``).
        
        Uses SCAN so large keyspaces do not block the server.
        """
        try:
            client = self._get_client()
            keys = [key async for key in client.scan_iter(match=pattern)]
            if keys:
                return await client.delete(*keys)
            return 0
        except Exception as e:
            logger.error(f"Redis DELETE_PATTERN error for pattern {pattern}: {e}")
            return 0
    
    async def exists(self, key: str) -> bool:
        try:
            return await self._get_client().exists(key) > 0
        except Exception as e:
            logger.error(f"Redis EXISTS error for key {key}: {e}")
            return False
    
    async def close(self):
        """Close the Redis connection pool."""
        if self._client:
            await self._client.aclose()
            self._client = None
            self._pool = None
            logger.info("Redis connection pool closed")


# Shared instance; lifecycle is bound to the app in app.main
cache = RedisCache()
