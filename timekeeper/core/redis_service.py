import redis
import json
from typing import Dict, Optional, Any
import logging
from timekeeper.core.config import settings

logger = logging.getLogger(__name__)


class RedisCacheService:
    """Redis-backed cache for the values clients poll every few seconds.

    Every method degrades to a no-op (or a miss) when Redis is disabled or
    unreachable, so callers always fall back to the database.
    """

    def __init__(self, redis_url: str = None, password: Optional[str] = None, enabled: bool = None):
        self.redis_url = redis_url or settings.redis_url
        self.password = password or settings.redis_password
        self.ttl = settings.poll_cache_ttl
        self.redis_client = None

        if enabled is None:
            enabled = settings.enable_redis_cache
        if not enabled:
            logger.info("Redis cache disabled by configuration")
            return

        try:
            self.redis_client = redis.from_url(
                self.redis_url,
                password=self.password,
                decode_responses=True,
                socket_timeout=settings.redis_socket_timeout,
                socket_connect_timeout=settings.redis_socket_connect_timeout,
                max_connections=settings.redis_max_connections
            )

            # Test connection
            self.redis_client.ping()
            logger.info("Redis connection established successfully")

        except redis.RedisError as e:
            logger.warning(f"Redis unavailable, polling falls back to the database: {str(e)}")
            self.redis_client = None

    def is_available(self) -> bool:
        """Check if Redis is available"""
        return self.redis_client is not None

    @staticmethod
    def today_key(user_id) -> str:
        return f"attendance:today:{user_id}"

    @staticmethod
    def unread_key(user_id) -> str:
        return f"notifications:unread:{user_id}"

    def get_json(self, key: str) -> Optional[Any]:
        if not self.is_available():
            return None

        try:
            data = self.redis_client.get(key)
            if data is None:
                return None
            return json.loads(data)
        except (redis.RedisError, ValueError) as e:
            logger.error(f"Error reading cache key {key}: {str(e)}")
            return None

    def set_json(self, key: str, value: Any, ttl: int = None) -> bool:
        if not self.is_available():
            return False

        try:
            self.redis_client.setex(key, ttl or self.ttl, json.dumps(value, default=str))
            return True
        except (redis.RedisError, TypeError) as e:
            logger.error(f"Error writing cache key {key}: {str(e)}")
            return False

    def invalidate(self, *keys: str) -> bool:
        """Drop cached values after a write that changes them."""
        if not self.is_available() or not keys:
            return False

        try:
            self.redis_client.delete(*keys)
            return True
        except redis.RedisError as e:
            logger.error(f"Error invalidating cache keys {keys}: {str(e)}")
            return False

    def health_check(self) -> Dict[str, Any]:
        """Report Redis connection health for the /health endpoint."""
        if not self.is_available():
            return {"status": "unavailable"}

        try:
            self.redis_client.ping()
            info = self.redis_client.info()
            return {
                "status": "available",
                "redis_version": info.get("redis_version"),
                "used_memory": info.get("used_memory_human"),
                "connected_clients": info.get("connected_clients")
            }
        except redis.RedisError as e:
            logger.error(f"Redis health check failed: {str(e)}")
            return {"status": "error", "error": str(e)}


# Global Redis service instance
redis_service = RedisCacheService()
