"""
Rate limiting middleware for API endpoints
"""
import time
from collections import defaultdict
from fastapi import Request, HTTPException
from typing import Dict
import logging

from app.config import settings
from app.utils.identity import identity_resolver

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    In-memory sliding-window rate limiter, keyed per user (or per IP when anonymous).
    Limits are per process.
    """
    
    def __init__(self, requests_per_minute: int = 60, requests_per_hour: int = 1000):
        self.requests_per_minute = requests_per_minute
        self.requests_per_hour = requests_per_hour
        
        # Storage: {client_id: [timestamp, ...]}
        self.minute_tracker: Dict[str, list] = defaultdict(list)
        self.hour_tracker: Dict[str, list] = defaultdict(list)
    
    def _get_client_id(self, request: Request) -> str:
        """Extract client identifier from request"""
        identity = identity_resolver.resolve(request)
        if identity:
            return f"user:{identity.user_id}"
        
        # Fallback to IP address
        client_ip = request.client.host if request.client else "unknown"
        return f"ip:{client_ip}"
    
    def _cleanup_old_entries(self, tracker: Dict[str, list], window_seconds: int, now: float):
        """Remove entries older than window"""
        cutoff_time = now - window_seconds
        
        for client_id in list(tracker.keys()):
            tracker[client_id] = [ts for ts in tracker[client_id] if ts > cutoff_time]
            
            # Remove empty entries
            if not tracker[client_id]:
                del tracker[client_id]
    
    def reset(self):
        self.minute_tracker.clear()
        self.hour_tracker.clear()
    
    async def check_rate_limit(self, request: Request) -> None:
        """
        Check if request exceeds rate limits
        
        Raises:
            HTTPException: 429 if rate limit exceeded
        """
        client_id = self._get_client_id(request)
        current_time = time.time()
        
        # Cleanup old entries
        self._cleanup_old_entries(self.minute_tracker, 60, current_time)
        self._cleanup_old_entries(self.hour_tracker, 3600, current_time)
        
        # Check minute limit
        minute_requests = len(self.minute_tracker[client_id])
        if minute_requests >= self.requests_per_minute:
            logger.warning(f"Rate limit exceeded (minute): {client_id}")
            raise HTTPException(
                status_code=429,
                detail={
                    "error": "rate_limit_exceeded",
                    "message": f"Too many requests. Limit: {self.requests_per_minute} requests per minute",
                    "retry_after": 60
                }
            )
        
        # Check hour limit
        hour_requests = len(self.hour_tracker[client_id])
        if hour_requests >= self.requests_per_hour:
            logger.warning(f"Rate limit exceeded (hour): {client_id}")
            raise HTTPException(
                status_code=429,
                detail={
                    "error": "rate_limit_exceeded",
                    "message": f"Too many requests. Limit: {self.requests_per_hour} requests per hour",
                    "retry_after": 3600
                }
            )
        
        # Record this request
        self.minute_tracker[client_id].append(current_time)
        self.hour_tracker[client_id].append(current_time)
        
        logger.debug(f"Rate limit check passed: {client_id} (minute: {minute_requests+1}, hour: {hour_requests+1})")


# Global instance
rate_limiter = RateLimiter(
    requests_per_minute=settings.RATE_LIMIT_PER_MINUTE,
    requests_per_hour=settings.RATE_LIMIT_PER_HOUR
)
