"""Saved location manager - primary-location transitions with user confirmation.

Bulk or destructive propagation only runs after the injected ``Confirmer``
returns True. A declined confirmation means the propagation function is never
called, so no partial state is produced.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from tripcalc.app.models.itinerary import AutoFillSlot
from tripcalc.app.models.notices import Notice, declined_notice, max_saved_locations_notice
from tripcalc.app.models.plan import DayPlan
from tripcalc.app.models.saved_location import SavedLocation
from tripcalc.app.models.trip import MAX_SAVED_LOCATIONS, TripAggregate
from tripcalc.app.planner.autofill import (
    autofill_all_days,
    count_auto_filled_items,
    remove_auto_filled_items,
    update_auto_filled_items,
)
from tripcalc.app.planner.ids import IdGenerator, UuidIdGenerator

logger = logging.getLogger(__name__)


class ConfirmationKind(str, Enum):
    """Which destructive change the user is asked about."""

    auto_fill_all_days = "auto_fill_all_days"
    change_primary = "change_primary"
    delete_primary = "delete_primary"
    delete_location = "delete_location"


@dataclass(frozen=True)
class ConfirmationRequest:
    """Question put to the user before a bulk change."""

    kind: ConfirmationKind
    message: str
    affected_items: int = 0


class Confirmer(Protocol):
    """Asks the user to accept or cancel a bulk change."""

    async def confirm(self, request: ConfirmationRequest) -> bool:
        """Return True to proceed."""
        ...


class PresetConfirmer:
    """Answers every request with a decision taken up front (e.g. a request flag)."""

    def __init__(self, decision: bool) -> None:
        self._decision = decision
        self.requests: list[ConfirmationRequest] = []

    async def confirm(self, request: ConfirmationRequest) -> bool:
        self.requests.append(request)
        return self._decision


@dataclass
class LocationChange:
    """Outcome of a saved-location action."""

    trip: TripAggregate
    applied: bool
    notice: Notice | None = None
    affected_items: int = 0


class SavedLocationManager:
    """Adds, edits, deletes and promotes saved locations on a trip."""

    def __init__(
        self,
        confirmer: Confirmer,
        ids: IdGenerator | None = None,
        max_locations: int = MAX_SAVED_LOCATIONS,
        slot_times: dict[AutoFillSlot, str] | None = None,
    ) -> None:
        self._confirmer = confirmer
        self._ids = ids or UuidIdGenerator()
        self._max_locations = max_locations
        self._slot_times = slot_times

    async def _confirm_fill(self, days: list[DayPlan], location: SavedLocation) -> list[DayPlan] | None:
        request = ConfirmationRequest(
            kind=ConfirmationKind.auto_fill_all_days,
            message="This will add check-in/check-out to all days. Continue?",
            affected_items=2 * len(days),
        )
        if not await self._confirmer.confirm(request):
            return None
        return autofill_all_days(days, location, self._ids, self._slot_times)

    async def _confirm_change(
        self, days: list[DayPlan], old_primary: SavedLocation, new_primary: SavedLocation
    ) -> list[DayPlan] | None:
        request = ConfirmationRequest(
            kind=ConfirmationKind.change_primary,
            message=(
                f"Items auto-filled from {old_primary.name} will now point to {new_primary.name}. "
                "Continue?"
            ),
            affected_items=count_auto_filled_items(days, old_primary.id),
        )
        if not await self._confirmer.confirm(request):
            return None
        return update_auto_filled_items(days, old_primary.id, new_primary)

    async def add_location(self, trip: TripAggregate, location: SavedLocation) -> LocationChange:
        """Add a location; a primary one takes over or seeds the auto-filled items.

        Raises:
            ValueError: If a location with the same id already exists.
        """
        if trip.find_location(location.id) is not None:
            raise ValueError(f"saved location {location.id} already exists")
        if len(trip.saved_locations) >= self._max_locations:
            return LocationChange(trip=trip, applied=False, notice=max_saved_locations_notice(self._max_locations))

        locations = list(trip.saved_locations)
        days = list(trip.days)

        if location.is_primary:
            old_primary = trip.primary_location
            locations = [loc.model_copy(update={"is_primary": False}) for loc in locations]
            if old_primary is not None:
                new_days = await self._confirm_change(days, old_primary, location)
            else:
                new_days = await self._confirm_fill(days, location)
            # The location itself is kept even when propagation is declined
            days = new_days if new_days is not None else days

        locations.append(location)
        updated = trip.model_copy(update={"saved_locations": locations, "days": days})
        logger.info(f"[saved_locations] added {location.id} primary={location.is_primary}")
        return LocationChange(trip=updated, applied=True)

    async def edit_location(self, trip: TripAggregate, location: SavedLocation) -> LocationChange:
        """Replace a location; keeps auto-filled items in step with a primary."""
        previous = trip.find_location(location.id)
        if previous is None:
            return LocationChange(trip=trip, applied=False)

        locations = [location if loc.id == location.id else loc for loc in trip.saved_locations]
        days = list(trip.days)

        if location.is_primary and not previous.is_primary:
            old_primary = trip.primary_location
            locations = [
                loc if loc.id == location.id else loc.model_copy(update={"is_primary": False})
                for loc in locations
            ]
            if old_primary is not None:
                new_days = await self._confirm_change(days, old_primary, location)
            else:
                new_days = await self._confirm_fill(days, location)
            days = new_days if new_days is not None else days
        elif location.is_primary and previous.is_primary:
            # Same source, new name/address: refresh without asking
            days = update_auto_filled_items(days, previous.id, location)

        updated = trip.model_copy(update={"saved_locations": locations, "days": days})
        return LocationChange(
            trip=updated,
            applied=True,
            affected_items=count_auto_filled_items(updated.days, location.id),
        )

    async def delete_location(self, trip: TripAggregate, location_id: str) -> LocationChange:
        """Delete a location and every item auto-filled from it."""
        location = trip.find_location(location_id)
        if location is None:
            return LocationChange(trip=trip, applied=False)

        count = count_auto_filled_items(trip.days, location_id)
        if location.is_primary and count > 0:
            request = ConfirmationRequest(
                kind=ConfirmationKind.delete_primary,
                message=f"Deleting {location.name} will remove {count} auto-filled items. Continue?",
                affected_items=count,
            )
        else:
            request = ConfirmationRequest(
                kind=ConfirmationKind.delete_location,
                message=f"Delete {location.name}?",
                affected_items=count,
            )

        if not await self._confirmer.confirm(request):
            return LocationChange(trip=trip, applied=False, notice=declined_notice("Delete location"))

        updated = trip.model_copy(
            update={
                "saved_locations": [loc for loc in trip.saved_locations if loc.id != location_id],
                "days": remove_auto_filled_items(trip.days, location_id),
            }
        )
        logger.info(f"[saved_locations] deleted {location_id}, removed {count} auto-filled items")
        return LocationChange(trip=updated, applied=True, affected_items=count)

    async def set_primary(self, trip: TripAggregate, location_id: str) -> LocationChange:
        """Promote a location to primary.

        An existing primary's auto-filled items are re-pointed at the new one
        rather than recreated, so their time slots and costs survive.
        """
        location = trip.find_location(location_id)
        if location is None or location.is_primary:
            return LocationChange(trip=trip, applied=False)

        promoted = location.model_copy(update={"is_primary": True})
        old_primary = trip.primary_location
        days = list(trip.days)

        if old_primary is not None:
            new_days = await self._confirm_change(days, old_primary, promoted)
        else:
            new_days = await self._confirm_fill(days, promoted)

        if new_days is None:
            return LocationChange(trip=trip, applied=False, notice=declined_notice("Set primary location"))

        locations = [
            promoted if loc.id == location_id else loc.model_copy(update={"is_primary": False})
            for loc in trip.saved_locations
        ]
        updated = trip.model_copy(update={"saved_locations": locations, "days": new_days})
        return LocationChange(
            trip=updated,
            applied=True,
            affected_items=count_auto_filled_items(new_days, location_id),
        )
