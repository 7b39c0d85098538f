"""SQL implementations of repository interfaces."""

import uuid
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from tripcalc.app.db.context import RequestContext
from tripcalc.app.db.models import Trip
from tripcalc.app.db.queries import query_trips
from tripcalc.app.db.repositories import TripSummary
from tripcalc.app.db.seed_dev import ensure_tenant
from tripcalc.app.models.common import TravelStyle
from tripcalc.app.models.trip import TripAggregate


class SqlTripRepository:
    """SQL implementation of TripRepository."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def create_trip(
        self,
        trip: TripAggregate,
        ctx: RequestContext,
        *,
        name: str,
        travel_style: TravelStyle = TravelStyle.mid_range,
    ) -> uuid.UUID:
        """Create a new trip."""
        ensure_tenant(self._session, ctx)
        trip_id = uuid.uuid4()

        row = Trip(
            trip_id=trip_id,
            org_id=ctx.org_id,
            user_id=ctx.user_id,
            name=name,
            travel_style=travel_style.value,
            calculator_state=trip.to_payload(),
        )

        self._session.add(row)
        self._session.commit()

        return trip_id

    def load(self, trip_id: uuid.UUID, ctx: RequestContext) -> TripAggregate | None:
        """Load trip state."""
        row = query_trips(self._session, ctx).filter(Trip.trip_id == trip_id).first()

        if row is None:
            return None

        return TripAggregate.from_payload(row.calculator_state)

    def save(self, trip_id: uuid.UUID, trip: TripAggregate, ctx: RequestContext) -> bool:
        """Write trip state back wholesale."""
        row = query_trips(self._session, ctx).filter(Trip.trip_id == trip_id).first()

        if row is None:
            return False

        row.calculator_state = trip.to_payload()
        row.updated_at = datetime.now(UTC)
        self._session.commit()

        return True

    def get_travel_style(self, trip_id: uuid.UUID, ctx: RequestContext) -> TravelStyle | None:
        """Get the travel style of a trip."""
        row = query_trips(self._session, ctx).filter(Trip.trip_id == trip_id).first()

        if row is None:
            return None

        return TravelStyle(row.travel_style)

    def list_trips(self, ctx: RequestContext, limit: int = 10) -> list[TripSummary]:
        """List most recently updated trips for user."""
        rows = query_trips(self._session, ctx).order_by(Trip.updated_at.desc()).limit(limit).all()

        return [
            TripSummary(
                trip_id=row.trip_id,
                name=row.name,
                travel_style=TravelStyle(row.travel_style),
                day_count=len(TripAggregate.from_payload(row.calculator_state).days),
                updated_at=row.updated_at,
            )
            for row in rows
        ]
