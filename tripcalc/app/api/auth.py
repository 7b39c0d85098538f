"""Minimal auth dependency.

Stub implementation that extracts org_id/user_id from a bearer token or uses
development defaults. Real token validation is out of scope for the planner.
"""

import uuid
from typing import Annotated

from fastapi import Header, HTTPException, status

from tripcalc.app.db.context import DEFAULT_ORG_ID, DEFAULT_USER_ID, RequestContext


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_context(
    authorization: Annotated[str | None, Header()] = None,
) -> RequestContext:
    """Extract request context from the authorization header.

    Accepts ``Bearer <org_id>:<user_id>``; a missing header maps to the
    development tenant.

    Raises:
        HTTPException: If authorization is present but malformed
    """
    if not authorization:
        return RequestContext(org_id=DEFAULT_ORG_ID, user_id=DEFAULT_USER_ID)

    scheme, _, token = authorization.partition(" ")
    if scheme != "Bearer" or not token:
        raise _unauthorized("Invalid authorization header format")

    org_part, sep, user_part = token.partition(":")
    if not sep:
        raise _unauthorized("Invalid bearer token (expected org_id:user_id)")

    try:
        return RequestContext(org_id=uuid.UUID(org_part), user_id=uuid.UUID(user_part))
    except ValueError as e:
        raise _unauthorized("Invalid token format (expected org_id:user_id)") from e
