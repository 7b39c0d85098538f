"""Tenancy-safe query helpers."""

from sqlalchemy.orm import Query, Session

from tripcalc.app.db.context import RequestContext
from tripcalc.app.db.models import Trip


def query_trips(session: Session, ctx: RequestContext) -> Query:
    """Query trip table with org/user scoping enforced.

    Args:
        session: SQLAlchemy session
        ctx: Request context with org_id and user_id

    Returns:
        Query filtered by org_id and user_id
    """
    return session.query(Trip).filter(Trip.org_id == ctx.org_id, Trip.user_id == ctx.user_id)
