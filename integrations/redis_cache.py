import json
import logging
import redis
import time
from functools import lru_cache
from typing import Optional, Any
from core.config import get_settings

logger = logging.getLogger(__name__)

class InMemoryCache:
    """Fallback cache using python memory"""
    def __init__(self):
        self._store = {}
        logger.warning("⚠️ Using In-Memory Cache (Redis unavailable)")

    def get_json(self, key: str) -> Optional[Any]:
        entry = self._store.get(key)
        if not entry:
            return None
        if entry['expires'] is not None and entry['expires'] < time.time():
            del self._store[key]
            return None
        return entry['data']

    def set_json(self, key: str, value: Any, ttl_seconds: Optional[int] = 3600):
        self._store[key] = {
            'data': value,
            'expires': time.time() + ttl_seconds if ttl_seconds else None
        }

    def delete(self, key: str):
        self._store.pop(key, None)

class CacheService:
    """
    JSON key-value store. Redis when reachable, process memory otherwise.
    A ttl of None keeps the value until it is deleted.
    """
    def __init__(self, redis_url: Optional[str] = None):
        self.backend = None

        # Try Redis First
        if redis_url:
            try:
                self.redis = redis.from_url(redis_url, decode_responses=True)
                self.redis.ping()
                self.backend = "redis"
                logger.info("✅ Connected to Redis Cache")
            except Exception as e:
                logger.warning(f"Redis connect failed: {e}")

        # Fallback
        if not self.backend:
            self.memory = InMemoryCache()
            self.backend = "memory"

    def get_json(self, key: str) -> Optional[Any]:
        if self.backend == "redis":
            try:
                data = self.redis.get(key)
                return json.loads(data) if data else None
            except (redis.RedisError, json.JSONDecodeError) as e:
                logger.error(f"Cache get failed: {e}")
                return None
        else:
            return self.memory.get_json(key)

    def set_json(self, key: str, value: Any, ttl_seconds: Optional[int] = 3600):
        if self.backend == "redis":
            try:
                if ttl_seconds:
                    self.redis.setex(key, ttl_seconds, json.dumps(value))
                else:
                    self.redis.set(key, json.dumps(value))
            except redis.RedisError as e:
                logger.error(f"Cache set failed: {e}")
        else:
            self.memory.set_json(key, value, ttl_seconds)

    def delete(self, key: str):
        if self.backend == "redis":
            try:
                self.redis.delete(key)
            except redis.RedisError as e:
                logger.error(f"Cache delete failed: {e}")
        else:
            self.memory.delete(key)

@lru_cache()
def get_cache() -> CacheService:
    return CacheService(get_settings().REDIS_URL)
