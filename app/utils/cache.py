"""
Redis cache utility for leaderboard pages and content counts
"""
import redis
import json
import logging
from typing import Optional, Any
from app.config import settings

logger = logging.getLogger(__name__)


class CacheService:
    """Redis-based cache; every failure degrades to a cache miss"""
    
    def __init__(self, redis_url: str = None):
        redis_url = settings.REDIS_URL if redis_url is None else redis_url
        self.redis_client = None
        
        if not redis_url:
            logger.info("REDIS_URL not set. Caching disabled.")
            return
        
        try:
            self.redis_client = redis.from_url(
                redis_url,
                decode_responses=True,
                socket_connect_timeout=5
            )
            # Test connection
            self.redis_client.ping()
            logger.info("Redis connection established")
        except Exception as e:
            logger.warning(f"Redis connection failed: {str(e)}. Caching disabled.")
            self.redis_client = None
    
    def leaderboard_key(self, limit: int, offset: int) -> str:
        return f"leaderboard:{limit}:{offset}"
    
    def content_count_key(self, category: str) -> str:
        return f"content_count:{category}"
    
    def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache
        
        Args:
            key: Cache key
            
        Returns:
            Cached value or None
        """
        if not self.redis_client:
            return None
        
        try:
            value = self.redis_client.get(key)
            if value is not None:
                logger.debug(f"Cache hit: {key}")
                return json.loads(value)
            logger.debug(f"Cache miss: {key}")
            return None
        except Exception as e:
            logger.error(f"Cache get error: {str(e)}")
            return None
    
    def set(
        self,
        key: str,
        value: Any,
        ttl: int
    ) -> bool:
        """
        Set value in cache
        
        Args:
            key: Cache key
            value: Value to cache (must be JSON serializable)
            ttl: Time to live in seconds
            
        Returns:
            Success status
        """
        if not self.redis_client:
            return False
        
        try:
            serialized = json.dumps(value, default=str)
            self.redis_client.setex(key, ttl, serialized)
            logger.debug(f"Cache set: {key} (TTL: {ttl}s)")
            return True
        except Exception as e:
            logger.error(f"Cache set error: {str(e)}")
            return False
    
    def clear_prefix(self, prefix: str) -> bool:
        """Drop every key starting with prefix (e.g. all cached leaderboard pages)"""
        if not self.redis_client:
            return False
        
        try:
            keys = list(self.redis_client.scan_iter(match=f"{prefix}*"))
            if keys:
                self.redis_client.delete(*keys)
                logger.info(f"Cleared {len(keys)} cache entries for {prefix}*")
            return True
        except Exception as e:
            logger.error(f"Cache clear error: {str(e)}")
            return False


# Global instance
cache_service = CacheService()
