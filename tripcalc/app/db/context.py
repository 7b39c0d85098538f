"""Request context for tenancy enforcement."""

from dataclasses import dataclass
from uuid import UUID

# Development tenant used when no bearer token is sent
DEFAULT_ORG_ID = UUID("00000000-0000-0000-0000-000000000001")
DEFAULT_USER_ID = UUID("00000000-0000-0000-0000-000000000002")


@dataclass(frozen=True)
class RequestContext:
    """Request context containing org and user identity.

    Used to enforce tenancy boundaries in all trip storage operations.
    """

    org_id: UUID
    user_id: UUID
