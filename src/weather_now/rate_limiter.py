"""Rate limiting for weather fetch triggers."""

import logging
import math
import time
from typing import Callable, Optional

import redis.asyncio as redis

from weather_now.config import (
    REDIS_URL,
    RATE_LIMIT_FETCHES_PER_MINUTE,
    RATE_LIMIT_REDIS_KEY_PREFIX
)

logger = logging.getLogger(__name__)


class RateLimiter:
    """Sliding-window rate limiter backed by a Redis sorted set.

    Each upstream weather request costs quota, so fetch triggers are
    counted over a one-minute window. Only allowed triggers are recorded,
    so a rejected retry never extends the lockout. Allows requests if
    Redis is unavailable.
    """

    def __init__(
        self,
        redis_client: Optional[redis.Redis] = None,
        max_requests: int = RATE_LIMIT_FETCHES_PER_MINUTE,
        window_size: float = 60.0,
        clock: Callable[[], float] = time.time
    ):
        """Initialize rate limiter.

        Args:
            redis_client: Optional Redis client. If None, creates new client.
            max_requests: Triggers allowed per window
            window_size: Window length in seconds
            clock: Returns the current time in seconds
        """
        self.redis_client = redis_client or redis.from_url(REDIS_URL)
        self.max_requests = max_requests
        self.window_size = window_size
        self.sorted_set_key = f"{RATE_LIMIT_REDIS_KEY_PREFIX}:fetch"
        self._clock = clock

    async def is_allowed(self) -> tuple[bool, int]:
        """Check a trigger against the limit and record it if allowed.

        Returns:
            Tuple of (is_allowed, retry_after_seconds)
            - is_allowed: True if the trigger should be allowed
            - retry_after_seconds: Seconds until the oldest counted trigger
              leaves the window (0 if allowed)
        """
        try:
            current_time = self._clock()
            # Scores in microseconds
            current_timestamp = int(current_time * 1000000)
            window_start = (current_time - self.window_size) * 1000000

            # Drop expired entries, then count what is left
            pipe = self.redis_client.pipeline()
            pipe.zremrangebyscore(self.sorted_set_key, 0, window_start)
            pipe.zcard(self.sorted_set_key)
            pipe.zrange(self.sorted_set_key, 0, 0, withscores=True)
            _, request_count, oldest = await pipe.execute()

            if request_count >= self.max_requests:
                oldest_score = oldest[0][1] if oldest else current_timestamp
                expires_at = oldest_score / 1000000 + self.window_size
                retry_after = max(1, math.ceil(expires_at - current_time))
                logger.debug(f"Rate limited: count={request_count}, max={self.max_requests}, retry_after={retry_after}")
                return False, retry_after

            pipe = self.redis_client.pipeline()
            pipe.zadd(self.sorted_set_key, {str(current_timestamp): current_timestamp})
            pipe.expire(self.sorted_set_key, int(self.window_size * 2))
            await pipe.execute()

            logger.debug(f"Not rate limited: count={request_count + 1}, max={self.max_requests}")
            return True, 0

        except Exception as e:
            # Allow request if Redis is down
            logger.error(f"Rate limiter error: {e}")
            return True, 0

    async def close(self):
        """Close Redis connection."""
        if self.redis_client:
            await self.redis_client.aclose()
