"""Drag-and-drop move engine - turns a drag gesture into a reorder or a cross-day move.

Drop target ids follow the UI's convention:

- ``tab-<n>``: the tab of day ``n``
- ``day-<n>``: the whole-day drop zone of day ``n``
- anything else: the id of another itinerary item

Every unresolvable gesture is a no-op; nothing here raises.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from tripcalc.app.models.itinerary import ItineraryItem
from tripcalc.app.planner.days import DayPatch, DayPlanCollection
from tripcalc.app.planner.items import can_reorder_manually

logger = logging.getLogger(__name__)

TAB_PREFIX = "tab-"
DAY_ZONE_PREFIX = "day-"


class MoveKind(str, Enum):
    """What a finished gesture did."""

    noop = "noop"
    reorder = "reorder"
    move = "move"


@dataclass
class MoveOutcome:
    """Result of ``DragMoveEngine.end``."""

    kind: MoveKind
    item_id: str | None = None
    source_day: int | None = None
    target_day: int | None = None

    @property
    def applied(self) -> bool:
        return self.kind is not MoveKind.noop


NOOP = MoveOutcome(kind=MoveKind.noop)


def _parse_zone(over_id: str, prefix: str) -> int | None:
    if not over_id.startswith(prefix):
        return None
    suffix = over_id[len(prefix) :]
    return int(suffix) if suffix.isdigit() else None


def array_move(items: list[ItineraryItem], old_index: int, new_index: int) -> list[ItineraryItem]:
    """Move the element at ``old_index`` so it ends up at ``new_index``."""
    moved = list(items)
    moved.insert(new_index, moved.pop(old_index))
    return moved


class DragMoveEngine:
    """State machine over a single drag gesture: ``start`` -> ``over`` -> ``end``.

    ``active_day`` tracks the day the UI is showing; a cross-day move switches
    it to the target day.
    """

    def __init__(self, days: DayPlanCollection, time_aware: bool = False, active_day: int = 1) -> None:
        self._days = days
        self._time_aware = time_aware
        self.active_day = active_day
        self.active_id: str | None = None
        self.over_id: str | None = None

    def start(self, active_id: str) -> bool:
        """Begin a gesture. Rejected for unknown items and for timed items in time-aware views."""
        day = self._days.find_day_containing(active_id)
        if day is None:
            return False
        item = day.find_item(active_id)
        if item is None or not can_reorder_manually(item, self._time_aware):
            logger.debug(f"[drag] start rejected for {active_id}")
            return False

        self.active_id = active_id
        self.over_id = None
        return True

    def over(self, over_id: str | None) -> int | None:
        """Track the hovered target. Advisory only; returns the day it would land in."""
        self.over_id = over_id
        if over_id is None:
            return None
        return self.resolve_target_day(over_id)

    def cancel(self) -> None:
        self.active_id = None
        self.over_id = None

    def resolve_target_day(self, over_id: str) -> int | None:
        """Resolve a drop target to a day number: day tab, then day zone, then item."""
        for prefix in (TAB_PREFIX, DAY_ZONE_PREFIX):
            day_number = _parse_zone(over_id, prefix)
            if day_number is not None:
                return day_number if self._days.get_day(day_number) is not None else None

        day = self._days.find_day_containing(over_id)
        return day.day_number if day is not None else None

    def end(self, active_id: str, over_id: str | None) -> MoveOutcome:
        """Finish a gesture and apply it atomically to the collection."""
        self.cancel()
        if over_id is None:
            return NOOP

        source = self._days.find_day_containing(active_id)
        if source is None:
            return NOOP
        item = source.find_item(active_id)
        if item is None or not can_reorder_manually(item, self._time_aware):
            return NOOP

        target_number = self.resolve_target_day(over_id)
        if target_number is None:
            return NOOP

        if target_number == source.day_number:
            return self._reorder(source.day_number, active_id, over_id)
        return self._move(source.day_number, target_number, item)

    def _reorder(self, day_number: int, active_id: str, over_id: str) -> MoveOutcome:
        day = self._days.get_day(day_number)
        if day is None or active_id == over_id:
            return NOOP

        ids = [item.id for item in day.custom_items]
        if active_id not in ids or over_id not in ids:
            return NOOP

        reordered = array_move(day.custom_items, ids.index(active_id), ids.index(over_id))
        self._days.update_day(day_number, DayPatch(custom_items=reordered))
        return MoveOutcome(
            kind=MoveKind.reorder, item_id=active_id, source_day=day_number, target_day=day_number
        )

    def _move(self, source_number: int, target_number: int, item: ItineraryItem) -> MoveOutcome:
        source = self._days.get_day(source_number)
        target = self._days.get_day(target_number)
        if source is None or target is None:
            return NOOP

        remaining = [i for i in source.custom_items if i.id != item.id]
        appended = [*target.custom_items, item.model_copy()]

        # Both halves are computed before either is written
        self._days.update_day(source_number, DayPatch(custom_items=remaining))
        self._days.update_day(target_number, DayPatch(custom_items=appended))
        self.active_day = target_number

        logger.debug(f"[drag] moved {item.id} from day {source_number} to day {target_number}")
        return MoveOutcome(
            kind=MoveKind.move, item_id=item.id, source_day=source_number, target_day=target_number
        )
