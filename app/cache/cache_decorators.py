"""
Cache decorator for async functions returning JSON-serializable data.
"""
import hashlib
import json
from functools import wraps
from typing import Callable, Any, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from app.cache.redis_client import cache
from app.core.config import settings
from app.core.logging import logger


def cached(key_prefix: str, expire: Optional[int] = None):
    """
    Cache an async function's result in Redis under ``<key_prefix>:<args hash>``.
    
    Session arguments are left out of the key. Invalidate with
    ``cache.delete_pattern(f"{key_prefix}:*")``.
    
    Usage:
        @cached("events:public")
        async def list_public_events(db, page, per_page):
            ...
    """
    ttl = expire if expire is not None else settings.EVENTS_CACHE_TTL

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            cache_key = f"{key_prefix}:{_generate_key_from_args(args, kwargs)}"
            
            cached_value = await cache.get(cache_key)
            if cached_value is not None:
                logger.debug(f"Cache hit for key: {cache_key}")
                return cached_value
            
            logger.debug(f"Cache miss for key: {cache_key}")
            result = await func(*args, **kwargs)
            await cache.set(cache_key, result, ttl)
            return result
        return wrapper
    return decorator


def _generate_key_from_args(args: tuple, kwargs: dict) -> str:
    key_data = {
        "args": [str(arg) for arg in args if not isinstance(arg, AsyncSession)],
        "kwargs": {k: str(v) for k, v in kwargs.items() if not isinstance(v, AsyncSession)},
    }
    key_string = json.dumps(key_data, sort_keys=True)
    return hashlib.md5(key_string.encode()).hexdigest()
