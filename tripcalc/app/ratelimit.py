"""Rate limiting utilities."""

from datetime import datetime

import redis

from tripcalc.app.db.context import RequestContext
from tripcalc.app.db.repositories import RetryAfter


def make_rate_limit_key(ctx: RequestContext, bucket: str) -> str:
    """Create rate limit key from context and bucket.

    Args:
        ctx: Request context
        bucket: Bucket name (e.g., "geocode")

    Returns:
        Rate limit key
    """
    return f"{ctx.org_id}:{ctx.user_id}:{bucket}"


class RedisRateLimiter:
    """Fixed-window rate limiter backed by Redis counters."""

    def __init__(self, redis_client: redis.Redis, max_requests: int, window_seconds: int = 3600) -> None:
        """Initialize rate limiter.

        Args:
            redis_client: Redis client
            max_requests: Maximum requests per window
            window_seconds: Window size in seconds (default one hour)
        """
        self._redis = redis_client
        self._max_requests = max_requests
        self._window_seconds = window_seconds

    def check_quota(self, key: str, now: datetime) -> RetryAfter | None:
        """Count this request against the current window.

        Returns:
            RetryAfter if over quota, None if allowed
        """
        window_start = int(now.timestamp() // self._window_seconds) * self._window_seconds
        redis_key = f"ratelimit:{key}:{window_start}"

        count = self._redis.incr(redis_key)
        if count == 1:
            self._redis.expire(redis_key, self._window_seconds)

        if count <= self._max_requests:
            return None

        ttl = self._redis.ttl(redis_key)
        if ttl is None or ttl < 0:
            # Key lost its expiry; fall back to the window boundary
            ttl = window_start + self._window_seconds - int(now.timestamp())
        return RetryAfter(seconds=max(1, int(ttl)))
