"""Itinerary item store - mutations over one day's custom items."""

import logging
from collections.abc import Sequence

from tripcalc.app.models.common import ItemCategory
from tripcalc.app.models.itinerary import ItemPatch, ItineraryItem
from tripcalc.app.models.plan import DayPlan
from tripcalc.app.planner.ids import IdGenerator, UuidIdGenerator

logger = logging.getLogger(__name__)


class ItemStore:
    """Mutable view over a single ``DayPlan.custom_items`` sequence.

    The store has no identity of its own; callers write ``items`` back to the
    day with ``DayPlanCollection.update_day``. Insertion order is display
    order, not time order.
    """

    def __init__(self, items: Sequence[ItineraryItem], ids: IdGenerator | None = None) -> None:
        self._items = list(items)
        self._ids = ids or UuidIdGenerator()

    @classmethod
    def for_day(cls, day: DayPlan, ids: IdGenerator | None = None) -> "ItemStore":
        return cls(day.custom_items, ids)

    @property
    def items(self) -> list[ItineraryItem]:
        return list(self._items)

    def add(self, category: ItemCategory) -> ItineraryItem:
        """Append a blank item of ``category`` and return it."""
        item = ItineraryItem(id=self._ids.new_id(), name="", category=category, amount=0, visits=1)
        self._items.append(item)
        return item

    def update(self, item_id: str, patch: ItemPatch) -> ItineraryItem | None:
        """Merge a user edit into the matching item.

        Unknown ids are ignored: late UI events can target items that were
        removed in the meantime.
        """
        for index, item in enumerate(self._items):
            if item.id == item_id:
                updated = item.apply_patch(patch)
                self._items[index] = updated
                return updated

        logger.debug(f"[item_store] update ignored, no item {item_id}")
        return None

    def delete(self, item_id: str) -> bool:
        """Remove the matching item. Returns False when nothing was removed."""
        remaining = [item for item in self._items if item.id != item_id]
        removed = len(remaining) != len(self._items)
        self._items = remaining
        return removed


def sort_by_time(items: Sequence[ItineraryItem]) -> list[ItineraryItem]:
    """Order items by start time ascending, unscheduled items last.

    Stable: items sharing a start time (or having none) keep their display
    order. The input is not modified.
    """
    return sorted(items, key=lambda item: (item.start_time is None, item.start_time or ""))


def can_reorder_manually(item: ItineraryItem, time_aware: bool) -> bool:
    """In time-aware views a timed item is ordered by time, never by dragging."""
    return not (time_aware and item.start_time is not None)
