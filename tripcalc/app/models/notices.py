"""Notice models - expected, user-facing rejections of a mutation."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

# JSON-serializable value types for notice details
JsonValue = str | int | float | bool | None | dict[str, Any] | list[Any]


class NoticeSeverity(str, Enum):
    """Severity levels for notices."""

    ADVISORY = "advisory"
    BLOCKING = "blocking"


class NoticeKind(str, Enum):
    """Categories of notices."""

    CAPACITY = "capacity"
    CONFIRMATION_DECLINED = "confirmation_declined"


class Notice(BaseModel):
    """A rejected mutation the user should be told about.

    The state the mutation targeted is left unchanged whenever a notice
    with BLOCKING severity is produced.
    """

    kind: NoticeKind
    code: str  # Machine-usable short code, e.g., "MAX_DAYS_REACHED"
    message: str  # Human-readable description (1 sentence)
    severity: NoticeSeverity = NoticeSeverity.BLOCKING
    details: dict[str, JsonValue] = Field(default_factory=dict)


def max_days_notice(limit: int) -> Notice:
    return Notice(
        kind=NoticeKind.CAPACITY,
        code="MAX_DAYS_REACHED",
        message=f"Maximum {limit} days per trip.",
        details={"limit": limit},
    )


def min_days_notice() -> Notice:
    return Notice(
        kind=NoticeKind.CAPACITY,
        code="MIN_DAYS_REQUIRED",
        message="Trip must have at least 1 day.",
        details={"limit": 1},
    )


def max_saved_locations_notice(limit: int) -> Notice:
    return Notice(
        kind=NoticeKind.CAPACITY,
        code="MAX_SAVED_LOCATIONS_REACHED",
        message=f"Maximum {limit} saved locations per trip.",
        details={"limit": limit},
    )


def declined_notice(action: str) -> Notice:
    return Notice(
        kind=NoticeKind.CONFIRMATION_DECLINED,
        code="CONFIRMATION_DECLINED",
        message=f"{action} was cancelled.",
        severity=NoticeSeverity.ADVISORY,
        details={"action": action},
    )
