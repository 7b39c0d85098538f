"""Tenant bootstrap for stub authentication."""

import logging

from sqlalchemy.orm import Session

from tripcalc.app.db.context import DEFAULT_ORG_ID, DEFAULT_USER_ID, RequestContext
from tripcalc.app.db.engine import get_session_factory
from tripcalc.app.db.models import Org, User

logger = logging.getLogger(__name__)


def ensure_tenant(session: Session, ctx: RequestContext) -> None:
    """Create the org and user rows for ``ctx`` if missing. Idempotent; does not commit.

    Stub auth accepts any ``org_id:user_id`` pair, so rows are created on
    first write rather than at sign-up.
    """
    if session.get(Org, ctx.org_id) is None:
        logger.info(f"[seed] creating org {ctx.org_id}")
        session.add(Org(org_id=ctx.org_id, name=f"Org {str(ctx.org_id)[:8]}"))
        session.flush()

    if session.get(User, ctx.user_id) is None:
        logger.info(f"[seed] creating user {ctx.user_id}")
        session.add(User(user_id=ctx.user_id, org_id=ctx.org_id, email=f"{ctx.user_id}@tripcalc.local"))
        session.flush()


def seed_dev_org_and_user() -> None:
    """Seed the fixed dev tenant used when no bearer token is sent."""
    with get_session_factory()() as session:
        ensure_tenant(session, RequestContext(org_id=DEFAULT_ORG_ID, user_id=DEFAULT_USER_ID))
        session.commit()
    print("Dev seeding complete")


if __name__ == "__main__":
    seed_dev_org_and_user()
