"""Trip endpoints - load, save and structural edits of the calculator state."""

import logging
import uuid
from typing import Annotated, Any, Literal

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError
from sqlalchemy.orm import Session

from tripcalc.app.api.auth import get_current_context
from tripcalc.app.config import Settings, get_settings
from tripcalc.app.db.context import RequestContext
from tripcalc.app.db.engine import get_session
from tripcalc.app.db.repositories import TripRepository
from tripcalc.app.db.sql_repositories import SqlTripRepository
from tripcalc.app.models.common import CamelModel, ItemCategory, TravelStyle
from tripcalc.app.models.itinerary import AutoFillSlot, ItemPatch, ItineraryItem
from tripcalc.app.models.notices import Notice, NoticeKind
from tripcalc.app.models.saved_location import SavedLocation
from tripcalc.app.models.trip import BaseCosts, StyleCosts, TripAggregate, TripCostSummary
from tripcalc.app.planner.autofill import sync_consecutive_days
from tripcalc.app.planner.costs import build_cost_summary
from tripcalc.app.planner.days import DayMutation, DayPatch, DayPlanCollection
from tripcalc.app.planner.drag import DragMoveEngine, MoveKind
from tripcalc.app.planner.ids import IdGenerator, UuidIdGenerator
from tripcalc.app.planner.items import ItemStore
from tripcalc.app.planner.saved_locations import LocationChange, PresetConfirmer, SavedLocationManager
from tripcalc.app.planner.timeline import ItineraryTimeline, build_timeline
from tripcalc.app.utils.logging import StructuredTripLogger
from tripcalc.app.utils.metrics import PrometheusTripMetrics

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trips", tags=["trips"])

_structured_logger = StructuredTripLogger()
_metrics = PrometheusTripMetrics()


def get_trip_repository(session: Annotated[Session, Depends(get_session)]) -> TripRepository:
    """Repository dependency; tests override it with the in-memory implementation."""
    return SqlTripRepository(session)


def get_id_generator() -> IdGenerator:
    return UuidIdGenerator()


Repo = Annotated[TripRepository, Depends(get_trip_repository)]
Ctx = Annotated[RequestContext, Depends(get_current_context)]
Ids = Annotated[IdGenerator, Depends(get_id_generator)]
AppSettings = Annotated[Settings, Depends(get_settings)]


class CreateTripRequest(CamelModel):
    """Request body for POST /trips."""

    name: str = "My trip"
    travel_style: TravelStyle = TravelStyle.mid_range
    day_count: int | None = None


class TripResponse(CamelModel):
    """A trip and its persisted state."""

    trip_id: str
    trip: dict[str, Any]


class TripListEntry(CamelModel):
    trip_id: str
    name: str
    travel_style: TravelStyle
    day_count: int


class MutationResponse(CamelModel):
    """Result of a day or item edit. ``applied=False`` means nothing matched."""

    applied: bool
    day_number: int | None = None
    item: ItineraryItem | None = None
    trip: dict[str, Any]


class MoveRequest(CamelModel):
    """A finished drag gesture."""

    active_id: str
    over_id: str | None = None
    time_aware: bool = False
    active_day: int = 1


class MoveResponse(CamelModel):
    kind: MoveKind
    applied: bool
    item_id: str | None = None
    source_day: int | None = None
    target_day: int | None = None
    active_day: int
    trip: dict[str, Any]


class AddItemRequest(CamelModel):
    category: ItemCategory


class SummaryRequest(CamelModel):
    """Either explicit base costs, or per-style costs plus an optional style."""

    base_costs: BaseCosts | None = None
    style_costs: StyleCosts | None = None
    travel_style: TravelStyle | None = None


class LocationChangeResponse(CamelModel):
    applied: bool
    notice: Notice | None = None
    affected_items: int = 0
    trip: dict[str, Any]


def _record(
    ctx: RequestContext,
    trip_id: uuid.UUID,
    operation: str,
    outcome: str,
    notice: Notice | None = None,
) -> None:
    _metrics.record_mutation(operation, outcome)
    _structured_logger.log_mutation(
        ctx, trip_id, operation, outcome, notice_code=notice.code if notice else None
    )


def _load_or_404(repo: TripRepository, trip_id: uuid.UUID, ctx: RequestContext) -> TripAggregate:
    trip = repo.load(trip_id, ctx)
    if trip is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trip not found")
    return trip


def _save_or_404(
    repo: TripRepository, trip_id: uuid.UUID, trip: TripAggregate, ctx: RequestContext
) -> None:
    if not repo.save(trip_id, trip, ctx):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Trip not found")


def _reject(notice: Notice) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=notice.model_dump(mode="json"))


def _collection(trip: TripAggregate, ids: IdGenerator, settings: Settings) -> DayPlanCollection:
    return DayPlanCollection(trip.days, ids=ids, max_days=settings.max_trip_days)


def _apply_day_mutation(
    repo: TripRepository,
    trip_id: uuid.UUID,
    ctx: RequestContext,
    trip: TripAggregate,
    days: DayPlanCollection,
    mutation: DayMutation,
    operation: str,
) -> MutationResponse:
    if mutation.notice is not None:
        _record(ctx, trip_id, operation, "rejected", mutation.notice)
        raise _reject(mutation.notice)

    if not mutation.applied:
        _record(ctx, trip_id, operation, "noop")
        return MutationResponse(applied=False, trip=trip.to_payload())

    updated = trip.model_copy(update={"days": days.days})
    _save_or_404(repo, trip_id, updated, ctx)
    _record(ctx, trip_id, operation, "applied")
    return MutationResponse(
        applied=True,
        day_number=mutation.day.day_number if mutation.day else None,
        trip=updated.to_payload(),
    )


@router.post("", response_model=TripResponse, status_code=status.HTTP_201_CREATED)
def create_trip(
    request: CreateTripRequest, ctx: Ctx, repo: Repo, settings: AppSettings
) -> TripResponse:
    """Create a trip with default days."""
    day_count = request.day_count or settings.default_trip_days
    if not 1 <= day_count <= settings.max_trip_days:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"dayCount must be between 1 and {settings.max_trip_days}",
        )

    trip = TripAggregate.default(day_count)
    trip_id = repo.create_trip(trip, ctx, name=request.name, travel_style=request.travel_style)
    logger.info(f"[trips] created {trip_id} with {day_count} days")
    return TripResponse(trip_id=str(trip_id), trip=trip.to_payload())


@router.get("", response_model=list[TripListEntry])
def list_trips(
    ctx: Ctx, repo: Repo, limit: Annotated[int, Query(ge=1, le=100)] = 10
) -> list[TripListEntry]:
    """List the caller's most recently updated trips."""
    return [
        TripListEntry(
            trip_id=str(summary.trip_id),
            name=summary.name,
            travel_style=summary.travel_style,
            day_count=summary.day_count,
        )
        for summary in repo.list_trips(ctx, limit=limit)
    ]


@router.get("/{trip_id}", response_model=TripResponse)
def get_trip(trip_id: uuid.UUID, ctx: Ctx, repo: Repo) -> TripResponse:
    """Load a trip, normalizing legacy stored state."""
    trip = _load_or_404(repo, trip_id, ctx)
    return TripResponse(trip_id=str(trip_id), trip=trip.to_payload())


@router.put("/{trip_id}", response_model=TripResponse)
def save_trip(
    trip_id: uuid.UUID,
    payload: Annotated[dict[str, Any] | list[Any], Body()],
    ctx: Ctx,
    repo: Repo,
) -> TripResponse:
    """Explicit save: replaces the stored state wholesale."""
    try:
        trip = TripAggregate.from_payload(payload)
    except ValidationError as e:
        raise HTTPException(
            status_code=422,
            detail=e.errors(include_url=False, include_context=False),
        ) from e

    _save_or_404(repo, trip_id, trip, ctx)
    _metrics.record_save()
    logger.info(f"[trips] saved {trip_id} ({len(trip.days)} days)")
    return TripResponse(trip_id=str(trip_id), trip=trip.to_payload())


@router.post("/{trip_id}/days", response_model=MutationResponse)
def add_day(
    trip_id: uuid.UUID, ctx: Ctx, repo: Repo, ids: Ids, settings: AppSettings
) -> MutationResponse:
    """Append a default day (409 at the day ceiling)."""
    trip = _load_or_404(repo, trip_id, ctx)
    days = _collection(trip, ids, settings)
    return _apply_day_mutation(repo, trip_id, ctx, trip, days, days.add_day(), "add_day")


@router.delete("/{trip_id}/days/{day_number}", response_model=MutationResponse)
def remove_day(
    trip_id: uuid.UUID, day_number: int, ctx: Ctx, repo: Repo, ids: Ids, settings: AppSettings
) -> MutationResponse:
    """Remove a day and renumber the rest (409 for the last day)."""
    trip = _load_or_404(repo, trip_id, ctx)
    days = _collection(trip, ids, settings)
    return _apply_day_mutation(
        repo, trip_id, ctx, trip, days, days.remove_day(day_number), "remove_day"
    )


@router.post("/{trip_id}/days/{day_number}/duplicate", response_model=MutationResponse)
def duplicate_day(
    trip_id: uuid.UUID, day_number: int, ctx: Ctx, repo: Repo, ids: Ids, settings: AppSettings
) -> MutationResponse:
    """Append a copy of a day with fresh item ids (409 at the day ceiling)."""
    trip = _load_or_404(repo, trip_id, ctx)
    days = _collection(trip, ids, settings)
    return _apply_day_mutation(
        repo, trip_id, ctx, trip, days, days.duplicate_day(day_number), "duplicate_day"
    )


@router.patch("/{trip_id}/days/{day_number}", response_model=MutationResponse)
def update_day(
    trip_id: uuid.UUID,
    day_number: int,
    patch: DayPatch,
    ctx: Ctx,
    repo: Repo,
    ids: Ids,
    settings: AppSettings,
) -> MutationResponse:
    """Merge a partial day update (toggles, date, name)."""
    trip = _load_or_404(repo, trip_id, ctx)
    days = _collection(trip, ids, settings)
    return _apply_day_mutation(
        repo, trip_id, ctx, trip, days, days.update_day(day_number, patch), "update_day"
    )


def _edit_items(
    repo: TripRepository,
    trip_id: uuid.UUID,
    ctx: RequestContext,
    day_number: int,
    ids: IdGenerator,
    settings: Settings,
) -> tuple[TripAggregate, DayPlanCollection, ItemStore]:
    trip = _load_or_404(repo, trip_id, ctx)
    days = _collection(trip, ids, settings)
    day = days.get_day(day_number)
    if day is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Day not found")
    return trip, days, ItemStore.for_day(day, ids)


def _commit_items(
    repo: TripRepository,
    trip_id: uuid.UUID,
    ctx: RequestContext,
    trip: TripAggregate,
    days: DayPlanCollection,
    day_number: int,
    store: ItemStore,
) -> TripAggregate:
    days.update_day(day_number, DayPatch(custom_items=store.items))
    updated = trip.model_copy(update={"days": days.days})
    _save_or_404(repo, trip_id, updated, ctx)
    return updated


@router.post(
    "/{trip_id}/days/{day_number}/items",
    response_model=MutationResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_item(
    trip_id: uuid.UUID,
    day_number: int,
    request: AddItemRequest,
    ctx: Ctx,
    repo: Repo,
    ids: Ids,
    settings: AppSettings,
) -> MutationResponse:
    """Append a blank item of the given category to a day."""
    trip, days, store = _edit_items(repo, trip_id, ctx, day_number, ids, settings)
    item = store.add(request.category)
    updated = _commit_items(repo, trip_id, ctx, trip, days, day_number, store)
    _record(ctx, trip_id, "add_item", "applied")
    return MutationResponse(applied=True, day_number=day_number, item=item, trip=updated.to_payload())


@router.patch("/{trip_id}/days/{day_number}/items/{item_id}", response_model=MutationResponse)
def update_item(
    trip_id: uuid.UUID,
    day_number: int,
    item_id: str,
    patch: ItemPatch,
    ctx: Ctx,
    repo: Repo,
    ids: Ids,
    settings: AppSettings,
) -> MutationResponse:
    """Merge a user edit into an item; unknown item ids are a no-op."""
    trip, days, store = _edit_items(repo, trip_id, ctx, day_number, ids, settings)
    item = store.update(item_id, patch)
    if item is None:
        _record(ctx, trip_id, "update_item", "noop")
        return MutationResponse(applied=False, day_number=day_number, trip=trip.to_payload())

    updated = _commit_items(repo, trip_id, ctx, trip, days, day_number, store)
    _record(ctx, trip_id, "update_item", "applied")
    return MutationResponse(applied=True, day_number=day_number, item=item, trip=updated.to_payload())


@router.delete("/{trip_id}/days/{day_number}/items/{item_id}", response_model=MutationResponse)
def delete_item(
    trip_id: uuid.UUID,
    day_number: int,
    item_id: str,
    ctx: Ctx,
    repo: Repo,
    ids: Ids,
    settings: AppSettings,
) -> MutationResponse:
    """Remove an item; unknown item ids are a no-op."""
    trip, days, store = _edit_items(repo, trip_id, ctx, day_number, ids, settings)
    if not store.delete(item_id):
        _record(ctx, trip_id, "delete_item", "noop")
        return MutationResponse(applied=False, day_number=day_number, trip=trip.to_payload())

    updated = _commit_items(repo, trip_id, ctx, trip, days, day_number, store)
    _record(ctx, trip_id, "delete_item", "applied")
    return MutationResponse(applied=True, day_number=day_number, trip=updated.to_payload())


@router.post("/{trip_id}/moves", response_model=MoveResponse)
def move_item(
    trip_id: uuid.UUID,
    request: MoveRequest,
    ctx: Ctx,
    repo: Repo,
    ids: Ids,
    settings: AppSettings,
) -> MoveResponse:
    """Apply the end of a drag gesture: reorder within a day or move across days."""
    trip = _load_or_404(repo, trip_id, ctx)
    days = _collection(trip, ids, settings)
    engine = DragMoveEngine(days, time_aware=request.time_aware, active_day=request.active_day)
    outcome = engine.end(request.active_id, request.over_id)

    if not outcome.applied:
        _record(ctx, trip_id, "move", "noop")
        return MoveResponse(
            kind=outcome.kind, applied=False, active_day=engine.active_day, trip=trip.to_payload()
        )

    updated = trip.model_copy(update={"days": days.days})
    _save_or_404(repo, trip_id, updated, ctx)
    _record(ctx, trip_id, "move", "applied")
    return MoveResponse(
        kind=outcome.kind,
        applied=True,
        item_id=outcome.item_id,
        source_day=outcome.source_day,
        target_day=outcome.target_day,
        active_day=engine.active_day,
        trip=updated.to_payload(),
    )


@router.post("/{trip_id}/summary", response_model=TripCostSummary)
def cost_summary(
    trip_id: uuid.UUID, request: SummaryRequest, ctx: Ctx, repo: Repo
) -> TripCostSummary:
    """Read-only cost view for exporters."""
    trip = _load_or_404(repo, trip_id, ctx)

    if request.base_costs is not None:
        base_costs = request.base_costs
    elif request.style_costs is not None:
        style = request.travel_style or repo.get_travel_style(trip_id, ctx) or TravelStyle.mid_range
        base_costs = request.style_costs.for_style(style)
    else:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Either baseCosts or styleCosts is required",
        )

    return build_cost_summary(trip, base_costs)


@router.get("/{trip_id}/itinerary", response_model=ItineraryTimeline)
def itinerary_timeline(trip_id: uuid.UUID, ctx: Ctx, repo: Repo) -> ItineraryTimeline:
    """Time-ordered view of every day with walking legs and day-connection warnings."""
    return build_timeline(_load_or_404(repo, trip_id, ctx).days)


@router.post("/{trip_id}/days/{day_number}/sync", response_model=MutationResponse)
def sync_day(
    trip_id: uuid.UUID,
    day_number: int,
    ctx: Ctx,
    repo: Repo,
    ids: Ids,
    settings: AppSettings,
    mode: Literal["forward", "backward"] = "forward",
) -> MutationResponse:
    """Copy the boundary location between a day and the day before it.

    ``forward`` moves the previous day's last location onto this day's first
    item; ``backward`` the reverse.
    """
    trip = _load_or_404(repo, trip_id, ctx)
    days = _collection(trip, ids, settings)
    previous = days.get_day(day_number - 1)
    current = days.get_day(day_number)
    if previous is None or current is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Day not found")

    synced_previous, synced_current = sync_consecutive_days(previous, current, mode)
    if synced_previous == previous and synced_current == current:
        return _apply_day_mutation(repo, trip_id, ctx, trip, days, DayMutation(), "sync_days")

    days.update_day(previous.day_number, DayPatch(custom_items=synced_previous.custom_items))
    mutation = days.update_day(
        current.day_number, DayPatch(custom_items=synced_current.custom_items)
    )
    return _apply_day_mutation(repo, trip_id, ctx, trip, days, mutation, "sync_days")


def _location_manager(confirm: bool, ids: IdGenerator, settings: Settings) -> SavedLocationManager:
    return SavedLocationManager(
        PresetConfirmer(confirm),
        ids=ids,
        max_locations=settings.max_saved_locations,
        slot_times={
            AutoFillSlot.check_out: settings.autofill_check_out_time,
            AutoFillSlot.check_in: settings.autofill_check_in_time,
        },
    )


def _apply_location_change(
    repo: TripRepository,
    trip_id: uuid.UUID,
    ctx: RequestContext,
    change: LocationChange,
    operation: str,
) -> LocationChangeResponse:
    if change.notice is not None and change.notice.kind is NoticeKind.CAPACITY:
        _record(ctx, trip_id, operation, "rejected", change.notice)
        raise _reject(change.notice)

    if change.applied:
        _save_or_404(repo, trip_id, change.trip, ctx)
        _record(ctx, trip_id, operation, "applied")
    else:
        _record(ctx, trip_id, operation, "declined" if change.notice else "noop", change.notice)

    return LocationChangeResponse(
        applied=change.applied,
        notice=change.notice,
        affected_items=change.affected_items,
        trip=change.trip.to_payload(),
    )


@router.post("/{trip_id}/saved-locations", response_model=LocationChangeResponse)
async def add_saved_location(
    trip_id: uuid.UUID,
    location: SavedLocation,
    ctx: Ctx,
    repo: Repo,
    ids: Ids,
    settings: AppSettings,
    confirm: bool = False,
) -> LocationChangeResponse:
    """Add a saved location. ``confirm`` answers the auto-fill prompt for a primary."""
    trip = await run_in_threadpool(_load_or_404, repo, trip_id, ctx)
    try:
        change = await _location_manager(confirm, ids, settings).add_location(trip, location)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    return await run_in_threadpool(
        _apply_location_change, repo, trip_id, ctx, change, "add_location"
    )


@router.put("/{trip_id}/saved-locations/{location_id}", response_model=LocationChangeResponse)
async def edit_saved_location(
    trip_id: uuid.UUID,
    location_id: str,
    location: SavedLocation,
    ctx: Ctx,
    repo: Repo,
    ids: Ids,
    settings: AppSettings,
    confirm: bool = False,
) -> LocationChangeResponse:
    """Replace a saved location, keeping its auto-filled items in step."""
    if location.id != location_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Location id does not match path"
        )
    trip = await run_in_threadpool(_load_or_404, repo, trip_id, ctx)
    change = await _location_manager(confirm, ids, settings).edit_location(trip, location)
    return await run_in_threadpool(
        _apply_location_change, repo, trip_id, ctx, change, "edit_location"
    )


@router.delete("/{trip_id}/saved-locations/{location_id}", response_model=LocationChangeResponse)
async def delete_saved_location(
    trip_id: uuid.UUID,
    location_id: str,
    ctx: Ctx,
    repo: Repo,
    ids: Ids,
    settings: AppSettings,
    confirm: bool = False,
) -> LocationChangeResponse:
    """Delete a saved location and the items auto-filled from it."""
    trip = await run_in_threadpool(_load_or_404, repo, trip_id, ctx)
    change = await _location_manager(confirm, ids, settings).delete_location(trip, location_id)
    return await run_in_threadpool(
        _apply_location_change, repo, trip_id, ctx, change, "delete_location"
    )


@router.post(
    "/{trip_id}/saved-locations/{location_id}/primary", response_model=LocationChangeResponse
)
async def set_primary_location(
    trip_id: uuid.UUID,
    location_id: str,
    ctx: Ctx,
    repo: Repo,
    ids: Ids,
    settings: AppSettings,
    confirm: bool = False,
) -> LocationChangeResponse:
    """Promote a saved location to primary; declined confirmation changes nothing."""
    trip = await run_in_threadpool(_load_or_404, repo, trip_id, ctx)
    change = await _location_manager(confirm, ids, settings).set_primary(trip, location_id)
    return await run_in_threadpool(
        _apply_location_change, repo, trip_id, ctx, change, "set_primary"
    )
