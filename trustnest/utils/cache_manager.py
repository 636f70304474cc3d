import json
import logging
from typing import Any, Optional

import redis

logger = logging.getLogger('trustnest.cache')


class CacheManager:
    def __init__(self, redis_client=None):
        self.redis = redis_client
        self.default_ttl = 300

    def init_app(self, app, redis_client=None):
        self.redis = redis_client or redis.from_url(app.config['REDIS_URL'])
        self.default_ttl = app.config.get('CACHE_TTL_SECONDS', 300)

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache"""
        if self.redis is None:
            return None
        try:
            data = self.redis.get(key)
            if data:
                return json.loads(data)
            return None
        except (redis.RedisError, ValueError) as e:
            logger.warning(f"Cache get failed for {key}: {e}")
            return None

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        """Set value in cache with TTL"""
        if self.redis is None:
            return False
        try:
            self.redis.setex(key, ttl or self.default_ttl, json.dumps(value, default=str))
            return True
        except (redis.RedisError, TypeError) as e:
            logger.warning(f"Cache set failed for {key}: {e}")
            return False

    def delete(self, key: str) -> bool:
        """Delete key from cache"""
        if self.redis is None:
            return False
        try:
            self.redis.delete(key)
            return True
        except redis.RedisError as e:
            logger.warning(f"Cache delete failed for {key}: {e}")
            return False
