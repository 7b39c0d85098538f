"""Repository protocol interfaces for data access."""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import UUID

from tripcalc.app.db.context import RequestContext
from tripcalc.app.models.common import TravelStyle
from tripcalc.app.models.trip import TripAggregate


@dataclass
class TripSummary:
    """Summary of a trip for listing."""

    trip_id: UUID
    name: str
    travel_style: TravelStyle
    day_count: int
    updated_at: datetime


class TripRepository(Protocol):
    """Persistence collaborator for trip state."""

    def create_trip(
        self,
        trip: TripAggregate,
        ctx: RequestContext,
        *,
        name: str,
        travel_style: TravelStyle = TravelStyle.mid_range,
    ) -> UUID:
        """Create a new trip.

        Args:
            trip: Initial trip state
            ctx: Request context with org/user IDs
            name: Display name
            travel_style: Style selecting the base costs

        Returns:
            Trip ID
        """
        ...

    def load(self, trip_id: UUID, ctx: RequestContext) -> TripAggregate | None:
        """Load trip state, normalizing legacy payloads.

        Args:
            trip_id: Trip ID
            ctx: Request context (enforces tenancy)

        Returns:
            Trip state or None if not found
        """
        ...

    def save(self, trip_id: UUID, trip: TripAggregate, ctx: RequestContext) -> bool:
        """Write trip state back wholesale.

        Args:
            trip_id: Trip ID
            trip: Complete trip state
            ctx: Request context (enforces tenancy)

        Returns:
            False if the trip does not exist for this context
        """
        ...

    def get_travel_style(self, trip_id: UUID, ctx: RequestContext) -> TravelStyle | None:
        """Get the travel style of a trip.

        Args:
            trip_id: Trip ID
            ctx: Request context (enforces tenancy)

        Returns:
            Travel style or None if not found
        """
        ...

    def list_trips(self, ctx: RequestContext, limit: int = 10) -> list[TripSummary]:
        """List most recently updated trips for user.

        Args:
            ctx: Request context (enforces tenancy)
            limit: Maximum number of results

        Returns:
            List of trip summaries
        """
        ...


@dataclass
class RetryAfter:
    """Rate limit retry-after information."""

    seconds: int


class RateLimiter(Protocol):
    """Rate limiter interface."""

    def check_quota(self, key: str, now: datetime) -> RetryAfter | None:
        """Check if quota is available.

        Args:
            key: Rate limit key
            now: Current timestamp

        Returns:
            RetryAfter if over quota, None if allowed
        """
        ...
