"""Itinerary endpoints - geocoding in front of the item location editor."""

import logging
from datetime import timedelta
from functools import lru_cache
from typing import Annotated

import redis
from fastapi import APIRouter, Depends, HTTPException, Request, status
from pydantic import Field

from tripcalc.app.adapters.geocoding import (
    CityBounds,
    GeocodeCache,
    GeocodingError,
    NominatimGeocoder,
)
from tripcalc.app.api.auth import get_current_context
from tripcalc.app.config import get_settings
from tripcalc.app.db.context import RequestContext
from tripcalc.app.db.inmemory import InMemoryRateLimiter
from tripcalc.app.db.repositories import RateLimiter
from tripcalc.app.middleware.ratelimit import RateLimitMiddleware, create_default_bucket_map
from tripcalc.app.models.common import CamelModel, GeoLocation
from tripcalc.app.ratelimit import RedisRateLimiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/itinerary", tags=["itinerary"])

MIN_ADDRESS_LENGTH = 3


class GeocodeRequest(CamelModel):
    """Request body for POST /itinerary/geocode."""

    address: str
    bounds: CityBounds | None = None


class ReverseGeocodeRequest(CamelModel):
    """Request body for POST /itinerary/reverse-geocode."""

    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


@lru_cache
def get_geocoder() -> NominatimGeocoder:
    """Process-wide geocoder; the cache lives as long as the process."""
    settings = get_settings()
    return NominatimGeocoder(
        base_url=settings.geocode_base_url,
        user_agent=settings.geocode_user_agent,
        timeout_s=settings.geocode_timeout_s,
        cache=GeocodeCache(
            ttl=timedelta(hours=settings.geocode_cache_ttl_hours),
            max_entries=settings.geocode_cache_max_entries,
        ),
    )


@lru_cache
def get_rate_limiter() -> RateLimiter:
    """Redis-backed when configured, otherwise per-process."""
    settings = get_settings()
    if settings.redis_url:
        client = redis.from_url(settings.redis_url, decode_responses=True)  # type: ignore[no-untyped-call]
        return RedisRateLimiter(client, max_requests=settings.geocode_requests_per_hour)
    return InMemoryRateLimiter(max_requests=settings.geocode_requests_per_hour)


def get_rate_limit_middleware(
    limiter: Annotated[RateLimiter, Depends(get_rate_limiter)],
) -> RateLimitMiddleware:
    return RateLimitMiddleware(limiter, create_default_bucket_map())


def enforce_rate_limit(
    request: Request,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    middleware: Annotated[RateLimitMiddleware, Depends(get_rate_limit_middleware)],
) -> RequestContext:
    """Reject with 429 once the caller's hourly geocoding quota is spent."""
    allowed, retry_after = middleware.check_rate_limit(request.url.path, ctx)
    if not allowed:
        logger.warning(f"[itinerary] rate limited {ctx.user_id} on {request.url.path}")
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many geocoding requests, try again later",
            headers={"Retry-After": str(retry_after)},
        )
    return ctx


Geocoder = Annotated[NominatimGeocoder, Depends(get_geocoder)]
LimitedCtx = Annotated[RequestContext, Depends(enforce_rate_limit)]


@router.post("/geocode", response_model=GeoLocation)
async def geocode(request: GeocodeRequest, ctx: LimitedCtx, geocoder: Geocoder) -> GeoLocation:
    """Resolve an address to coordinates.

    Returns:
        400 for addresses shorter than 3 characters, 404 when nothing matches,
        502 when the upstream geocoder fails
    """
    address = request.address.strip()
    if len(address) < MIN_ADDRESS_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Address must be at least {MIN_ADDRESS_LENGTH} characters",
        )

    try:
        result = await geocoder.geocode(address, request.bounds)
    except GeocodingError as e:
        logger.error(f"[itinerary] geocode failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail="Geocoding service unavailable"
        ) from e

    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Address not found")
    return result


@router.post("/reverse-geocode", response_model=GeoLocation)
async def reverse_geocode(
    request: ReverseGeocodeRequest, ctx: LimitedCtx, geocoder: Geocoder
) -> GeoLocation:
    """Resolve coordinates to an address."""
    try:
        result = await geocoder.reverse_geocode(request.lat, request.lon)
    except GeocodingError as e:
        logger.error(f"[itinerary] reverse geocode failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail="Geocoding service unavailable"
        ) from e

    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Location not found")
    return result
