"""In-memory implementations of repository interfaces."""

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from tripcalc.app.db.context import RequestContext
from tripcalc.app.db.repositories import RetryAfter, TripSummary
from tripcalc.app.models.common import TravelStyle
from tripcalc.app.models.trip import TripAggregate


@dataclass
class _StoredTrip:
    ctx: RequestContext
    name: str
    travel_style: TravelStyle
    payload: Any
    updated_at: datetime


class InMemoryTripRepository:
    """In-memory implementation of TripRepository.

    Stores the serialized payload, not the model, so loads go through the
    same normalization path as the SQL implementation.
    """

    def __init__(self) -> None:
        self._trips: dict[uuid.UUID, _StoredTrip] = {}

    def create_trip(
        self,
        trip: TripAggregate,
        ctx: RequestContext,
        *,
        name: str,
        travel_style: TravelStyle = TravelStyle.mid_range,
    ) -> uuid.UUID:
        """Create a new trip."""
        trip_id = uuid.uuid4()
        self._trips[trip_id] = _StoredTrip(
            ctx=ctx,
            name=name,
            travel_style=travel_style,
            payload=trip.to_payload(),
            updated_at=datetime.now(),
        )
        return trip_id

    def put_raw(
        self,
        trip_id: uuid.UUID,
        payload: Any,
        ctx: RequestContext,
        *,
        name: str = "Imported trip",
        travel_style: TravelStyle = TravelStyle.mid_range,
    ) -> None:
        """Store an arbitrary (possibly legacy) payload as-is."""
        self._trips[trip_id] = _StoredTrip(
            ctx=ctx, name=name, travel_style=travel_style, payload=payload, updated_at=datetime.now()
        )

    def raw_payload(self, trip_id: uuid.UUID) -> Any:
        stored = self._trips.get(trip_id)
        return stored.payload if stored else None

    def _owned(self, trip_id: uuid.UUID, ctx: RequestContext) -> _StoredTrip | None:
        stored = self._trips.get(trip_id)
        if stored is None:
            return None

        # Enforce tenancy
        if stored.ctx.org_id != ctx.org_id or stored.ctx.user_id != ctx.user_id:
            return None

        return stored

    def load(self, trip_id: uuid.UUID, ctx: RequestContext) -> TripAggregate | None:
        """Load trip state."""
        stored = self._owned(trip_id, ctx)
        if stored is None:
            return None
        return TripAggregate.from_payload(stored.payload)

    def save(self, trip_id: uuid.UUID, trip: TripAggregate, ctx: RequestContext) -> bool:
        """Write trip state back wholesale."""
        stored = self._owned(trip_id, ctx)
        if stored is None:
            return False

        stored.payload = trip.to_payload()
        stored.updated_at = datetime.now()
        return True

    def get_travel_style(self, trip_id: uuid.UUID, ctx: RequestContext) -> TravelStyle | None:
        """Get the travel style of a trip."""
        stored = self._owned(trip_id, ctx)
        return stored.travel_style if stored else None

    def list_trips(self, ctx: RequestContext, limit: int = 10) -> list[TripSummary]:
        """List most recently updated trips for user."""
        results: list[TripSummary] = []

        for trip_id, stored in self._trips.items():
            # Enforce tenancy
            if stored.ctx.org_id != ctx.org_id or stored.ctx.user_id != ctx.user_id:
                continue

            results.append(
                TripSummary(
                    trip_id=trip_id,
                    name=stored.name,
                    travel_style=stored.travel_style,
                    day_count=len(TripAggregate.from_payload(stored.payload).days),
                    updated_at=stored.updated_at,
                )
            )

        # Sort by updated_at descending
        results.sort(key=lambda x: x.updated_at, reverse=True)

        return results[:limit]


class InMemoryRateLimiter:
    """In-memory implementation of RateLimiter using fixed window."""

    def __init__(self, max_requests: int, window_seconds: int = 3600) -> None:
        """Initialize rate limiter.

        Args:
            max_requests: Maximum requests per window
            window_seconds: Window size in seconds (default one hour)
        """
        self._max_requests = max_requests
        self._window_seconds = window_seconds
        self._windows: dict[str, tuple[datetime, int]] = {}

    def check_quota(self, key: str, now: datetime) -> RetryAfter | None:
        """Check if quota is available."""
        if key not in self._windows:
            # First request
            self._windows[key] = (now, 1)
            return None

        window_start, count = self._windows[key]
        window_end = window_start + timedelta(seconds=self._window_seconds)

        # Window expired, start a new one
        if now >= window_end:
            self._windows[key] = (now, 1)
            return None

        if count >= self._max_requests:
            seconds_remaining = int((window_end - now).total_seconds())
            return RetryAfter(seconds=max(1, seconds_remaining))

        self._windows[key] = (window_start, count + 1)
        return None
