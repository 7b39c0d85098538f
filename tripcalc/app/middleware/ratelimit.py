"""Rate limiting middleware."""

from datetime import datetime

from tripcalc.app.db.context import RequestContext
from tripcalc.app.db.repositories import RateLimiter
from tripcalc.app.ratelimit import make_rate_limit_key


class RateLimitMiddleware:
    """Maps request paths to buckets and enforces per-bucket quotas."""

    def __init__(self, limiter: RateLimiter, bucket_map: dict[str, str]) -> None:
        """Initialize rate limit middleware.

        Args:
            limiter: Rate limiter implementation
            bucket_map: Mapping from path prefixes to bucket names
        """
        self._limiter = limiter
        self._bucket_map = bucket_map

    def check_rate_limit(
        self, path: str, ctx: RequestContext, now: datetime | None = None
    ) -> tuple[bool, int]:
        """Check if request is allowed under rate limit.

        Args:
            path: Request path
            ctx: Request context
            now: Current time (for testing)

        Returns:
            Tuple of (allowed, retry_after_seconds)
        """
        bucket = self.bucket_for(path)
        if bucket is None:
            return (True, 0)

        key = make_rate_limit_key(ctx, bucket)
        retry_after = self._limiter.check_quota(key, now or datetime.now())

        if retry_after is None:
            return (True, 0)

        return (False, retry_after.seconds)

    def bucket_for(self, path: str) -> str | None:
        """Longest matching prefix wins."""
        matches = [prefix for prefix in self._bucket_map if path.startswith(prefix)]
        if not matches:
            return None
        return self._bucket_map[max(matches, key=len)]


def create_default_bucket_map() -> dict[str, str]:
    """Geocoding shares one hourly bucket across both directions."""
    return {
        "/itinerary/geocode": "geocode",
        "/itinerary/reverse-geocode": "geocode",
    }
