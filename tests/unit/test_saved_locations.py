"""Tests for the saved location manager."""

import pytest

from tripcalc.app.models import (
    GeoLocation,
    LocationCategory,
    NoticeKind,
    SavedLocation,
    TripAggregate,
)
from tripcalc.app.planner.autofill import count_auto_filled_items
from tripcalc.app.planner.saved_locations import (
    ConfirmationKind,
    PresetConfirmer,
    SavedLocationManager,
)


def _primary(location: SavedLocation) -> SavedLocation:
    return location.model_copy(update={"is_primary": True})


async def _trip_with_primary(hotel: SavedLocation, ids) -> TripAggregate:
    manager = SavedLocationManager(PresetConfirmer(True), ids=ids)
    change = await manager.add_location(TripAggregate.default(3), _primary(hotel))
    return change.trip


@pytest.mark.asyncio
async def test_first_primary_confirmed_fills_every_day(hotel: SavedLocation, ids) -> None:
    confirmer = PresetConfirmer(True)
    manager = SavedLocationManager(confirmer, ids=ids)

    change = await manager.add_location(TripAggregate.default(3), _primary(hotel))

    assert change.applied
    assert change.trip.primary_location is not None
    assert change.trip.primary_location.id == "L1"
    assert [r.kind for r in confirmer.requests] == [ConfirmationKind.auto_fill_all_days]
    for day in change.trip.days:
        assert [item.auto_fill_source for item in day.custom_items] == ["L1", "L1"]


@pytest.mark.asyncio
async def test_declined_fill_still_adds_location(hotel: SavedLocation, ids) -> None:
    manager = SavedLocationManager(PresetConfirmer(False), ids=ids)

    change = await manager.add_location(TripAggregate.default(2), _primary(hotel))

    assert change.applied
    assert change.trip.find_location("L1") is not None
    assert count_auto_filled_items(change.trip.days, "L1") == 0


@pytest.mark.asyncio
async def test_non_primary_add_asks_nothing(hotel: SavedLocation) -> None:
    confirmer = PresetConfirmer(True)

    change = await SavedLocationManager(confirmer).add_location(TripAggregate.default(), hotel)

    assert change.applied
    assert confirmer.requests == []
    assert all(not day.custom_items for day in change.trip.days)


@pytest.mark.asyncio
async def test_duplicate_location_id_raises(hotel: SavedLocation) -> None:
    manager = SavedLocationManager(PresetConfirmer(True))
    trip = (await manager.add_location(TripAggregate.default(), hotel)).trip

    with pytest.raises(ValueError):
        await manager.add_location(trip, hotel)


@pytest.mark.asyncio
async def test_location_capacity(hotel: SavedLocation, other_hotel: SavedLocation) -> None:
    manager = SavedLocationManager(PresetConfirmer(True), max_locations=1)
    trip = (await manager.add_location(TripAggregate.default(), hotel)).trip

    change = await manager.add_location(trip, other_hotel)

    assert not change.applied
    assert change.notice is not None
    assert change.notice.kind is NoticeKind.CAPACITY
    assert change.trip is trip


@pytest.mark.asyncio
async def test_set_primary_repoints_existing_items(
    hotel: SavedLocation, other_hotel: SavedLocation, ids
) -> None:
    trip = await _trip_with_primary(hotel, ids)
    trip = trip.model_copy(update={"saved_locations": [*trip.saved_locations, other_hotel]})
    before_ids = [item.id for day in trip.days for item in day.custom_items]
    confirmer = PresetConfirmer(True)

    change = await SavedLocationManager(confirmer, ids=ids).set_primary(trip, "L2")

    assert change.applied
    assert [r.kind for r in confirmer.requests] == [ConfirmationKind.change_primary]
    assert confirmer.requests[0].affected_items == 6
    assert [item.id for day in change.trip.days for item in day.custom_items] == before_ids
    assert count_auto_filled_items(change.trip.days, "L1") == 0
    assert count_auto_filled_items(change.trip.days, "L2") == 6
    assert [loc.id for loc in change.trip.saved_locations if loc.is_primary] == ["L2"]


@pytest.mark.asyncio
async def test_declined_set_primary_changes_nothing(
    hotel: SavedLocation, other_hotel: SavedLocation, ids
) -> None:
    trip = await _trip_with_primary(hotel, ids)
    trip = trip.model_copy(update={"saved_locations": [*trip.saved_locations, other_hotel]})

    change = await SavedLocationManager(PresetConfirmer(False)).set_primary(trip, "L2")

    assert not change.applied
    assert change.trip is trip
    assert change.notice is not None
    assert change.notice.code == "CONFIRMATION_DECLINED"


@pytest.mark.asyncio
async def test_delete_primary_removes_its_items(hotel: SavedLocation, ids) -> None:
    trip = await _trip_with_primary(hotel, ids)
    confirmer = PresetConfirmer(True)

    change = await SavedLocationManager(confirmer).delete_location(trip, "L1")

    assert change.applied
    assert change.affected_items == 6
    assert confirmer.requests[0].kind is ConfirmationKind.delete_primary
    assert change.trip.saved_locations == []
    assert all(not day.custom_items for day in change.trip.days)


@pytest.mark.asyncio
async def test_declined_delete_keeps_everything(hotel: SavedLocation, ids) -> None:
    trip = await _trip_with_primary(hotel, ids)

    change = await SavedLocationManager(PresetConfirmer(False)).delete_location(trip, "L1")

    assert not change.applied
    assert change.trip is trip
    assert count_auto_filled_items(trip.days, "L1") == 6


@pytest.mark.asyncio
async def test_editing_primary_refreshes_items_without_asking(hotel: SavedLocation, ids) -> None:
    trip = await _trip_with_primary(hotel, ids)
    confirmer = PresetConfirmer(False)
    moved = _primary(hotel).model_copy(
        update={
            "name": "Lutetia Annex",
            "location": GeoLocation(lat=48.852, lon=2.327, address="47 Bd Raspail, Paris"),
        }
    )

    change = await SavedLocationManager(confirmer).edit_location(trip, moved)

    assert change.applied
    assert confirmer.requests == []
    assert change.affected_items == 6
    first = change.trip.days[0].custom_items[0]
    assert first.name == "Check-out: Lutetia Annex"
    assert first.location is not None and first.location.address == "47 Bd Raspail, Paris"


@pytest.mark.asyncio
async def test_unknown_location_is_noop() -> None:
    manager = SavedLocationManager(PresetConfirmer(True))
    trip = TripAggregate.default()
    ghost = SavedLocation(
        id="nope",
        name="Ghost",
        category=LocationCategory.OTHER,
        location=GeoLocation(lat=0, lon=0, address="Null Island"),
    )

    assert not (await manager.set_primary(trip, "nope")).applied
    assert not (await manager.delete_location(trip, "nope")).applied
    assert not (await manager.edit_location(trip, ghost)).applied
