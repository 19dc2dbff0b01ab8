from typing import Optional
from redis import Redis
from redis.exceptions import RedisError
import logging

logger = logging.getLogger(__name__)


class CacheClient:
    """Thin wrapper over the redis connection used for response caching"""

    def __init__(self, redis: Redis):
        self.redis = redis

    @classmethod
    def from_url(cls, url: str) -> "CacheClient":
        redis = Redis.from_url(url, decode_responses=True, socket_connect_timeout=1)
        logger.info("Initialized cache client")
        return cls(redis)

    def ping(self) -> bool:
        return bool(self.redis.ping())

    def delete_prefix(self, prefix: str) -> int:
        """SCAN for `<prefix>*` and delete every match"""
        deleted = 0
        for key in self.redis.scan_iter(match=f"{prefix}*", count=100):
            deleted += self.redis.delete(key)
        logger.info(f"Deleted {deleted} cache keys with prefix '{prefix}'")
        return deleted

    def close(self) -> None:
        try:
            self.redis.close()
        except RedisError as e:
            logger.warning(f"Error closing cache client: {e}")


def create_cache_client(url: Optional[str]) -> Optional[CacheClient]:
    """Build a cache client, or None when no cache is configured"""
    if not url:
        logger.warning("REDIS_URL not set, cache features disabled")
        return None
    return CacheClient.from_url(url)
