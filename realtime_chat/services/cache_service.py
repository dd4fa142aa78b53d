"""
Cache service - Redis cache for the message history
"""
from typing import Optional, Any
import json
import logging
import redis

from realtime_chat.config import settings

logger = logging.getLogger(__name__)

HISTORY_KEY = "messages:history"
HISTORY_GENERATION_KEY = "messages:history:generation"


class CacheService:
    """Service for caching operations. Every Redis failure degrades to a miss."""

    def __init__(self, redis_client: Optional[redis.Redis] = None, enabled: Optional[bool] = None):
        self.enabled = settings.CACHE_ENABLED if enabled is None else enabled
        self._redis_client = redis_client

    @property
    def redis_client(self) -> redis.Redis:
        if self._redis_client is None:
            self._redis_client = redis.Redis(
                host=settings.REDIS_HOST,
                port=settings.REDIS_PORT,
                db=settings.REDIS_DB,
                decode_responses=True,
                socket_connect_timeout=1,
                socket_timeout=1
            )
        return self._redis_client

    def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache

        Args:
            key: Cache key

        Returns:
            Cached value or None
        """
        if not self.enabled:
            return None
        try:
            value = self.redis_client.get(key)
            if value:
                return json.loads(value)
            return None
        except (redis.RedisError, ValueError) as e:
            logger.warning(f"Cache get error: {e}")
            return None

    def set(self, key: str, value: Any, ttl: int = 60) -> bool:
        """
        Set value in cache

        Args:
            key: Cache key
            value: JSON-serializable value
            ttl: Time to live in seconds

        Returns:
            True if successful
        """
        if not self.enabled:
            return False
        try:
            self.redis_client.setex(key, ttl, json.dumps(value))
            return True
        except redis.RedisError as e:
            logger.warning(f"Cache set error: {e}")
            return False

    def delete(self, key: str) -> bool:
        """Delete key from cache"""
        if not self.enabled:
            return False
        try:
            self.redis_client.delete(key)
            return True
        except redis.RedisError as e:
            logger.warning(f"Cache delete error: {e}")
            return False

    def history_generation(self) -> Optional[int]:
        """
        Current history generation, bumped by every invalidation.

        Read it before loading history from the database and pass it to
        get_history/set_history. A fill that raced an invalidation is then
        written under a generation nobody reads any more.

        Returns:
            Generation number, or None when the cache is off or unreachable
        """
        if not self.enabled:
            return None
        try:
            return int(self.redis_client.get(HISTORY_GENERATION_KEY) or 0)
        except (redis.RedisError, ValueError) as e:
            logger.warning(f"Cache generation error: {e}")
            return None

    @staticmethod
    def history_key(generation: int) -> str:
        return f"{HISTORY_KEY}:{generation}"

    def get_history(self, generation: int) -> Optional[list]:
        """Cached message history for this generation, oldest first"""
        return self.get(self.history_key(generation))

    def set_history(self, messages: list, generation: int) -> bool:
        """Cache the serialized message history loaded at `generation`"""
        return self.set(self.history_key(generation), messages, ttl=settings.HISTORY_CACHE_TTL)

    def invalidate_history(self) -> bool:
        """Retire the cached history after a new message is stored"""
        if not self.enabled:
            return False
        try:
            generation = self.redis_client.incr(HISTORY_GENERATION_KEY)
            self.redis_client.delete(self.history_key(generation - 1))
            return True
        except redis.RedisError as e:
            logger.warning(f"Cache invalidate error: {e}")
            return False

    def get_stats(self) -> dict:
        """Get Redis statistics"""
        if not self.enabled:
            return {"enabled": False}
        try:
            info = self.redis_client.info()
            return {
                "enabled": True,
                "used_memory": info.get("used_memory_human"),
                "connected_clients": info.get("connected_clients"),
                "keyspace_hits": info.get("keyspace_hits", 0),
                "keyspace_misses": info.get("keyspace_misses", 0),
            }
        except redis.RedisError as e:
            return {"enabled": True, "error": str(e)}


# Global cache service instance
cache_service = CacheService()
