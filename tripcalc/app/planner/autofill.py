"""Saved-location auto-fill propagation.

Keeps every auto-filled item in step with the saved location it was written
from. Items the user edited by hand carry ``ManualEntry`` provenance and are
never touched here. All functions are pure: they return new day lists.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from tripcalc.app.models.common import ItemCategory, TimeSlot
from tripcalc.app.models.itinerary import AutoFilledFrom, AutoFillSlot, ItineraryItem, ManualEntry
from tripcalc.app.models.plan import DayPlan
from tripcalc.app.models.saved_location import SavedLocation
from tripcalc.app.planner.ids import IdGenerator, UuidIdGenerator
from tripcalc.app.utils.geo import locations_match

DEFAULT_SLOT_TIMES: dict[AutoFillSlot, str] = {
    AutoFillSlot.check_out: "09:00",
    AutoFillSlot.check_in: "18:00",
}


def auto_fill_name(location: SavedLocation, slot: AutoFillSlot | None) -> str:
    if slot is None:
        return location.name
    return f"{slot.label}: {location.name}"


def _is_from(item: ItineraryItem, source_id: str) -> bool:
    return isinstance(item.provenance, AutoFilledFrom) and item.provenance.source_id == source_id


def _slot_of(item: ItineraryItem) -> AutoFillSlot | None:
    if isinstance(item.provenance, AutoFilledFrom):
        return item.provenance.slot
    return None


def create_slot_item(
    location: SavedLocation, slot: AutoFillSlot, item_id: str, start_time: str
) -> ItineraryItem:
    """Zero-cost accommodation item for a check-in/check-out slot."""
    return ItineraryItem(
        id=item_id,
        name=auto_fill_name(location, slot),
        category=ItemCategory.ACCOMMODATION,
        amount=0,
        visits=1,
        time_slot=TimeSlot(start_time=start_time),
        location=location.location.model_copy(),
        provenance=AutoFilledFrom(source_id=location.id, slot=slot),
    )


def autofill_day(
    day: DayPlan,
    location: SavedLocation,
    ids: IdGenerator,
    slot_times: dict[AutoFillSlot, str] | None = None,
) -> DayPlan:
    """Give a day one check-out item first and one check-in item last.

    A slot that already holds an auto-filled item is rewritten in place
    instead of receiving a second item.
    """
    times = slot_times or DEFAULT_SLOT_TIMES
    items = list(day.custom_items)

    for slot in (AutoFillSlot.check_out, AutoFillSlot.check_in):
        existing = next((i for i, item in enumerate(items) if _slot_of(item) is slot), None)
        if existing is not None:
            items[existing] = items[existing].with_auto_fill(
                auto_fill_name(location, slot), location.location, location.id, slot
            )
            continue

        item = create_slot_item(location, slot, ids.new_id(), times[slot])
        if slot is AutoFillSlot.check_out:
            items.insert(0, item)
        else:
            items.append(item)

    return day.model_copy(update={"custom_items": items})


def autofill_all_days(
    days: Sequence[DayPlan],
    location: SavedLocation,
    ids: IdGenerator | None = None,
    slot_times: dict[AutoFillSlot, str] | None = None,
) -> list[DayPlan]:
    """Bulk-write check-out/check-in items for ``location`` into every day.

    Destructive by design; callers confirm with the user first.
    """
    generator = ids or UuidIdGenerator()
    return [autofill_day(day, location, generator, slot_times) for day in days]


def update_auto_filled_items(
    days: Sequence[DayPlan], source_id: str, new_location: SavedLocation
) -> list[DayPlan]:
    """Rewrite name/location of every item auto-filled from ``source_id``.

    The items are re-pointed at ``new_location.id``; time slots, costs and
    notes are kept.
    """
    result: list[DayPlan] = []
    for day in days:
        items = [
            item.with_auto_fill(
                auto_fill_name(new_location, _slot_of(item)),
                new_location.location,
                new_location.id,
                _slot_of(item),
            )
            if _is_from(item, source_id)
            else item
            for item in day.custom_items
        ]
        result.append(day.model_copy(update={"custom_items": items}))
    return result


def remove_auto_filled_items(days: Sequence[DayPlan], source_id: str) -> list[DayPlan]:
    """Delete every item auto-filled from ``source_id``."""
    return [
        day.model_copy(
            update={"custom_items": [i for i in day.custom_items if not _is_from(i, source_id)]}
        )
        for day in days
    ]


def count_auto_filled_items(days: Sequence[DayPlan], source_id: str) -> int:
    """Number of items currently auto-filled from ``source_id``."""
    return sum(1 for day in days for item in day.custom_items if _is_from(item, source_id))


@dataclass(frozen=True)
class DisconnectedDay:
    """Day whose first location differs from the previous day's last one."""

    day_number: int
    last_location: str
    next_location: str


def detect_disconnected_days(days: Sequence[DayPlan]) -> list[DisconnectedDay]:
    """Find consecutive days whose boundary locations do not match."""
    disconnected: list[DisconnectedDay] = []
    for current, following in zip(days, days[1:]):
        if not current.custom_items or not following.custom_items:
            continue

        last = current.custom_items[-1].location
        first = following.custom_items[0].location
        if last is not None and first is not None and not locations_match(last, first):
            disconnected.append(
                DisconnectedDay(
                    day_number=following.day_number,
                    last_location=last.address,
                    next_location=first.address,
                )
            )
    return disconnected


def sync_consecutive_days(
    previous_day: DayPlan, current_day: DayPlan, mode: str = "forward"
) -> tuple[DayPlan, DayPlan]:
    """Copy a boundary location across two consecutive days.

    ``forward`` copies the previous day's last location onto the current
    day's first item; ``backward`` does the reverse. The receiving item is
    treated as manually edited.

    Raises:
        ValueError: If ``mode`` is not ``forward`` or ``backward``.
    """
    if mode not in ("forward", "backward"):
        raise ValueError(f"mode must be 'forward' or 'backward', got {mode!r}")

    prev_items = list(previous_day.custom_items)
    curr_items = list(current_day.custom_items)

    if mode == "forward":
        if prev_items and curr_items and prev_items[-1].location is not None:
            curr_items[0] = curr_items[0].model_copy(
                update={"location": prev_items[-1].location, "provenance": ManualEntry()}
            )
    else:
        if prev_items and curr_items and curr_items[0].location is not None:
            prev_items[-1] = prev_items[-1].model_copy(
                update={"location": curr_items[0].location, "provenance": ManualEntry()}
            )

    return (
        previous_day.model_copy(update={"custom_items": prev_items}),
        current_day.model_copy(update={"custom_items": curr_items}),
    )
