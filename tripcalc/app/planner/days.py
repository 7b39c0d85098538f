"""Day plan collection - ordered, densely numbered days of a trip."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from pydantic import field_validator

from tripcalc.app.models.common import CamelModel
from tripcalc.app.models.itinerary import ItineraryItem
from tripcalc.app.models.notices import Notice, max_days_notice, min_days_notice
from tripcalc.app.models.plan import CategoryToggles, DayPlan, create_default_day
from tripcalc.app.models.trip import MAX_TRIP_DAYS
from tripcalc.app.planner.ids import IdGenerator, UuidIdGenerator

logger = logging.getLogger(__name__)


class DayPatch(CamelModel):
    """Partial update of a day. ``day_number`` is not patchable."""

    date: str | None = None
    day_name: str | None = None
    included: CategoryToggles | None = None
    include_base: CategoryToggles | None = None
    custom_items: list[ItineraryItem] | None = None

    @field_validator("included", "include_base", "custom_items")
    @classmethod
    def reject_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("field cannot be null; omit it to leave it unchanged")
        return v


@dataclass
class DayMutation:
    """Outcome of a structural mutation.

    ``day`` is the day that was added, removed, duplicated or updated; it is
    None for a no-op. ``notice`` is set when the mutation was rejected.
    """

    day: DayPlan | None = None
    notice: Notice | None = None

    @property
    def applied(self) -> bool:
        return self.day is not None and self.notice is None


def renumber(days: Sequence[DayPlan]) -> list[DayPlan]:
    """Reassign day numbers 1..N by position."""
    return [
        day if day.day_number == n else day.model_copy(update={"day_number": n})
        for n, day in enumerate(days, start=1)
    ]


class DayPlanCollection:
    """Ordered collection of day plans.

    Every structural mutation builds the renumbered list first and swaps it in
    whole, so readers never observe gaps or duplicates in day numbers.
    """

    def __init__(
        self,
        days: Sequence[DayPlan],
        ids: IdGenerator | None = None,
        max_days: int = MAX_TRIP_DAYS,
    ) -> None:
        if not days:
            raise ValueError("a trip must have at least one day")
        if len(days) > max_days:
            raise ValueError(f"a trip can have at most {max_days} days, got {len(days)}")
        self._days = renumber(days)
        self._ids = ids or UuidIdGenerator()
        self._max_days = max_days

    @property
    def days(self) -> list[DayPlan]:
        return list(self._days)

    def __len__(self) -> int:
        return len(self._days)

    def get_day(self, day_number: int) -> DayPlan | None:
        for day in self._days:
            if day.day_number == day_number:
                return day
        return None

    def find_day_containing(self, item_id: str) -> DayPlan | None:
        """Day whose custom items currently contain ``item_id``."""
        for day in self._days:
            if day.find_item(item_id) is not None:
                return day
        return None

    def replace_all(self, days: Sequence[DayPlan]) -> None:
        """Swap in a whole new day list (used by bulk propagation)."""
        if not days:
            raise ValueError("a trip must have at least one day")
        self._days = renumber(days)

    def add_day(self) -> DayMutation:
        """Append a default day, unless the ceiling is reached."""
        if len(self._days) >= self._max_days:
            logger.info(f"[days] add_day rejected at {len(self._days)} days")
            return DayMutation(notice=max_days_notice(self._max_days))

        day = create_default_day(len(self._days) + 1)
        self._days = [*self._days, day]
        return DayMutation(day=day)

    def remove_day(self, day_number: int) -> DayMutation:
        """Remove a day and renumber the rest by position."""
        target = self.get_day(day_number)
        if target is None:
            return DayMutation()
        if len(self._days) == 1:
            logger.info("[days] remove_day rejected, last remaining day")
            return DayMutation(notice=min_days_notice())

        self._days = renumber([d for d in self._days if d.day_number != day_number])
        return DayMutation(day=target)

    def duplicate_day(self, day_number: int) -> DayMutation:
        """Append a deep copy of a day with fresh item ids and no date."""
        source = self.get_day(day_number)
        if source is None:
            return DayMutation()
        if len(self._days) >= self._max_days:
            logger.info(f"[days] duplicate_day rejected at {len(self._days)} days")
            return DayMutation(notice=max_days_notice(self._max_days))

        copy = source.model_copy(deep=True)
        items = [item.model_copy(update={"id": self._ids.new_id()}) for item in copy.custom_items]
        day = copy.model_copy(
            update={
                "day_number": len(self._days) + 1,
                "date": None,
                "day_name": f"{source.day_name} (copy)" if source.day_name else None,
                "custom_items": items,
            }
        )
        self._days = [*self._days, day]
        return DayMutation(day=day)

    def update_day(self, day_number: int, patch: DayPatch) -> DayMutation:
        """Merge a partial update into the matching day; unknown days are ignored."""
        changes = patch.model_dump(exclude_unset=True)
        updated: DayPlan | None = None
        days: list[DayPlan] = []
        for day in self._days:
            if day.day_number == day_number:
                updated = day.model_copy(update={k: getattr(patch, k) for k in changes})
                days.append(updated)
            else:
                days.append(day)

        if updated is None:
            logger.debug(f"[days] update_day ignored, no day {day_number}")
            return DayMutation()

        self._days = days
        return DayMutation(day=updated)
