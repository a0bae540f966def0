"""Redis cache service"""
import hashlib
import json
from typing import Any, Optional

import redis
from loguru import logger

from detection_backend.settings import settings


class CacheService:
    """
    Redis cache for dashboard responses

    Every error is logged and reported as a miss so the caller falls back
    to the database.
    """

    def __init__(self, url: Optional[str] = None, default_ttl: Optional[int] = None, enabled: Optional[bool] = None):
        self.enabled = settings.CACHE_ENABLED if enabled is None else enabled
        self.default_ttl = default_ttl or settings.CACHE_TTL_SECONDS
        self.client = None
        if self.enabled:
            self.client = redis.from_url(
                url or settings.redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )

    def generate_key(self, prefix: str, **params) -> str:
        """Cache key from a prefix and query parameters"""
        params_str = json.dumps(params, sort_keys=True, default=str)
        hash_suffix = hashlib.md5(params_str.encode()).hexdigest()[:8]
        return f"{prefix}:{hash_suffix}"

    def get(self, key: str) -> Optional[Any]:
        if self.client is None:
            return None
        try:
            value = self.client.get(key)
            if value:
                return json.loads(value)
            return None
        except (redis.RedisError, ValueError) as e:
            logger.warning(f"Cache get error: {e}")
            return None

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        if self.client is None:
            return False
        try:
            serialized = json.dumps(value, default=str)
            self.client.setex(key, ttl or self.default_ttl, serialized)
            return True
        except (redis.RedisError, TypeError) as e:
            logger.warning(f"Cache set error: {e}")
            return False

    def clear_pattern(self, pattern: str) -> int:
        """Delete every key matching pattern"""
        if self.client is None:
            return 0
        try:
            keys = list(self.client.scan_iter(pattern))
            if keys:
                return self.client.delete(*keys)
            return 0
        except redis.RedisError as e:
            logger.warning(f"Cache clear error: {e}")
            return 0

    def ping(self) -> bool:
        if self.client is None:
            return False
        try:
            return bool(self.client.ping())
        except redis.RedisError:
            return False
