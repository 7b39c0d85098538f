"""Structured logging for trip mutations."""

import logging
from typing import Any
from uuid import UUID

from tripcalc.app.db.context import RequestContext

logger = logging.getLogger(__name__)


class StructuredTripLogger:
    """Structured logger for trip mutations."""

    def log_mutation(
        self,
        ctx: RequestContext,
        trip_id: UUID,
        operation: str,
        outcome: str,
        notice_code: str | None = None,
        **details: Any,
    ) -> None:
        """Log a mutation outcome with structured data."""
        log_data: dict[str, Any] = {
            "org_id": str(ctx.org_id),
            "user_id": str(ctx.user_id),
            "trip_id": str(trip_id),
            "operation": operation,
            "outcome": outcome,
            **details,
        }

        if notice_code:
            log_data["notice_code"] = notice_code

        log_msg = f"Trip mutation: {operation} - {outcome}"

        if outcome in ("applied", "noop"):
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
