"""
Redis caching service for remote generation responses
"""
import json
import os
import redis
from typing import Optional, Any
import structlog

logger = structlog.get_logger()

DEFAULT_REDIS_URL = "redis://localhost:6379/0"


class CacheService:
    def __init__(self, redis_url: Optional[str] = DEFAULT_REDIS_URL):
        self.redis_client = None
        self._memory_cache = {}
        if not redis_url:
            return
        try:
            self.redis_client = redis.from_url(redis_url, decode_responses=True, socket_connect_timeout=1)
            # Test connection
            self.redis_client.ping()
            logger.info("redis_cache_connected", url=redis_url)
        except Exception as e:
            logger.warning("redis_unavailable_using_memory_cache", error=str(e))
            self.redis_client = None

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache"""
        try:
            if self.redis_client:
                value = self.redis_client.get(key)
                return json.loads(value) if value else None
            return self._memory_cache.get(key)
        except Exception as e:
            logger.error("cache_get_failed", key=key, error=str(e))
            return None

    def set(self, key: str, value: Any, expire: int = 3600) -> bool:
        """Set value in cache with expiration"""
        try:
            if self.redis_client:
                return bool(self.redis_client.setex(key, expire, json.dumps(value)))
            self._memory_cache[key] = value
            return True
        except Exception as e:
            logger.error("cache_set_failed", key=key, error=str(e))
            return False

    def delete(self, key: str) -> bool:
        """Delete value from cache"""
        try:
            if self.redis_client:
                return bool(self.redis_client.delete(key))
            return self._memory_cache.pop(key, None) is not None
        except Exception as e:
            logger.error("cache_delete_failed", key=key, error=str(e))
            return False


# Global cache instance
cache = CacheService(os.getenv("REDIS_URL", DEFAULT_REDIS_URL))
