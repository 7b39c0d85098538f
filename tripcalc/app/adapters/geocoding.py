"""Geocoding adapter using Nominatim (OpenStreetMap, keyless).

The planner never calls this; routes call it and hand resolved
``GeoLocation`` values to item edits.
"""

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timedelta

import httpx
from pydantic import BaseModel

from tripcalc.app.models.common import GeoLocation
from tripcalc.app.utils.metrics import geocode_latency_ms, geocode_requests_total

logger = logging.getLogger(__name__)


class GeocodingError(Exception):
    """Base class for geocoding failures."""

    pass


class GeocodingUnavailableError(GeocodingError):
    """Upstream geocoder failed or timed out."""

    pass


class CityBounds(BaseModel):
    """Bounding box used to bias search results."""

    north: float
    south: float
    east: float
    west: float

    def viewbox(self) -> str:
        return f"{self.west},{self.north},{self.east},{self.south}"


@dataclass
class _CacheEntry:
    value: GeoLocation | None
    expires_at: datetime


class GeocodeCache:
    """In-process TTL cache keyed by normalized query, capped at ``max_entries``.

    Entries share one TTL, so insertion order is also expiry order: expired
    entries are swept from the front on every write and the oldest entry is
    evicted once the cap is reached.
    """

    def __init__(self, ttl: timedelta, max_entries: int = 10_000) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._ttl = ttl
        self._max_entries = max_entries
        self._entries: OrderedDict[str, _CacheEntry] = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str, now: datetime | None = None) -> tuple[bool, GeoLocation | None]:
        """Return ``(hit, value)``; expired entries are evicted."""
        entry = self._entries.get(key)
        if entry is None:
            return (False, None)
        if (now or datetime.now()) >= entry.expires_at:
            del self._entries[key]
            return (False, None)
        return (True, entry.value)

    def set(self, key: str, value: GeoLocation | None, now: datetime | None = None) -> None:
        now = now or datetime.now()
        self._sweep(now)
        self._entries.pop(key, None)
        while len(self._entries) >= self._max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"[geocoding] cache full, evicted {evicted}")
        self._entries[key] = _CacheEntry(value=value, expires_at=now + self._ttl)

    def _sweep(self, now: datetime) -> None:
        while self._entries:
            key, entry = next(iter(self._entries.items()))
            if entry.expires_at > now:
                break
            del self._entries[key]


def search_cache_key(address: str, bounds: CityBounds | None) -> str:
    bounds_key = bounds.viewbox() if bounds else "no-bounds"
    return f"search:{address.lower().strip()}:{bounds_key}"


def reverse_cache_key(lat: float, lon: float) -> str:
    return f"reverse:{lat:.5f},{lon:.5f}"


def _to_location(data: dict) -> GeoLocation:
    """Map a Nominatim record onto a GeoLocation.

    Raises:
        GeocodingError: If the record lacks usable coordinates
    """
    place_id = data.get("place_id")
    try:
        return GeoLocation(
            lat=float(data["lat"]),
            lon=float(data["lon"]),
            address=data.get("display_name") or f"{data['lat']}, {data['lon']}",
            place_id=str(place_id) if place_id is not None else None,
        )
    except (KeyError, TypeError, ValueError) as e:
        raise GeocodingError("malformed geocoder record") from e


class NominatimGeocoder:
    """Geocoding and reverse-geocoding collaborator."""

    def __init__(
        self,
        base_url: str = "https://nominatim.openstreetmap.org",
        user_agent: str = "TripCalc/1.0",
        timeout_s: float = 4.0,
        cache: GeocodeCache | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize geocoder.

        Args:
            base_url: Nominatim base URL
            user_agent: User agent (required by Nominatim usage policy)
            timeout_s: Per-request timeout
            cache: Optional result cache (includes negative results)
            client: Optional httpx client (for testing with mocks)
        """
        self._base_url = base_url.rstrip("/")
        self._user_agent = user_agent
        self._timeout_s = timeout_s
        self._cache = cache
        self._client = client

    async def _get(self, kind: str, path: str, params: dict[str, str | float | int]) -> object:
        close_client = False
        client = self._client
        if client is None:
            client = httpx.AsyncClient(timeout=self._timeout_s)
            close_client = True

        started = time.perf_counter()
        try:
            response = await client.get(
                f"{self._base_url}{path}",
                params=params,
                headers={"User-Agent": self._user_agent},
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as e:
            geocode_requests_total.labels(kind=kind, outcome="error").inc()
            logger.warning(f"[geocoding] {kind} failed: {type(e).__name__}")
            raise GeocodingUnavailableError(f"{kind} request failed") from e
        except ValueError as e:
            geocode_requests_total.labels(kind=kind, outcome="error").inc()
            raise GeocodingError(f"{kind} returned invalid JSON") from e
        finally:
            geocode_latency_ms.labels(kind=kind).observe((time.perf_counter() - started) * 1000)
            if close_client:
                await client.aclose()

    async def geocode(self, address: str, bounds: CityBounds | None = None) -> GeoLocation | None:
        """Resolve a free-text address.

        Returns:
            The best match, or None when the address is not found

        Raises:
            GeocodingUnavailableError: On network or HTTP errors
        """
        key = search_cache_key(address, bounds)
        if self._cache is not None:
            hit, cached = self._cache.get(key)
            if hit:
                geocode_requests_total.labels(kind="geocode", outcome="cache_hit").inc()
                return cached

        params: dict[str, str | float | int] = {"q": address, "format": "json", "limit": 1}
        if bounds is not None:
            params["viewbox"] = bounds.viewbox()
            params["bounded"] = 1

        data = await self._get("geocode", "/search", params)
        if not isinstance(data, list):
            raise GeocodingError("unexpected search response shape")
        result = _to_location(data[0]) if data else None

        geocode_requests_total.labels(
            kind="geocode", outcome="found" if result else "not_found"
        ).inc()
        if self._cache is not None:
            self._cache.set(key, result)
        return result

    async def reverse_geocode(self, lat: float, lon: float) -> GeoLocation | None:
        """Resolve coordinates to an address.

        Returns:
            The location, or None when nothing is known at that point

        Raises:
            GeocodingUnavailableError: On network or HTTP errors
        """
        key = reverse_cache_key(lat, lon)
        if self._cache is not None:
            hit, cached = self._cache.get(key)
            if hit:
                geocode_requests_total.labels(kind="reverse", outcome="cache_hit").inc()
                return cached

        data = await self._get("reverse", "/reverse", {"lat": lat, "lon": lon, "format": "json"})
        result = None
        if isinstance(data, dict) and "error" not in data and "lat" in data:
            result = _to_location(data)

        geocode_requests_total.labels(
            kind="reverse", outcome="found" if result else "not_found"
        ).inc()
        if self._cache is not None:
            self._cache.set(key, result)
        return result
