"""Time-aware itinerary view - items in time order with walking legs between them."""

from collections.abc import Sequence

from tripcalc.app.models.common import CamelModel
from tripcalc.app.models.itinerary import ItineraryItem
from tripcalc.app.models.plan import DayPlan
from tripcalc.app.planner.autofill import detect_disconnected_days
from tripcalc.app.planner.costs import itinerary_stats
from tripcalc.app.planner.items import sort_by_time
from tripcalc.app.utils.geo import (
    estimate_walking_minutes,
    format_distance,
    google_maps_directions_url,
    haversine_km,
    locations_match,
)


class Leg(CamelModel):
    """Straight-line hop between two consecutive located items."""

    from_item_id: str
    to_item_id: str
    distance_km: float
    distance_label: str
    walking_minutes: int
    directions_url: str


class TimelineDay(CamelModel):
    day_number: int
    date: str | None = None
    day_name: str | None = None
    items: list[ItineraryItem]
    legs: list[Leg]


class ConnectionWarning(CamelModel):
    """Day whose first stop is not where the previous day ended."""

    day_number: int
    last_location: str
    next_location: str


class ItineraryTimeline(CamelModel):
    days: list[TimelineDay]
    stats: dict[str, float | int]
    disconnected_days: list[ConnectionWarning]


def walking_legs(items: Sequence[ItineraryItem]) -> list[Leg]:
    """Legs between neighbouring items that both have a location.

    Items without a location are skipped rather than breaking the chain;
    neighbours at the same place produce no leg.
    """
    located = [item for item in items if item.location is not None]
    legs: list[Leg] = []
    for origin, destination in zip(located, located[1:]):
        a, b = origin.location, destination.location
        if a is None or b is None or locations_match(a, b):
            continue
        km = haversine_km(a.lat, a.lon, b.lat, b.lon)
        legs.append(
            Leg(
                from_item_id=origin.id,
                to_item_id=destination.id,
                distance_km=round(km, 3),
                distance_label=format_distance(km),
                walking_minutes=estimate_walking_minutes(km),
                directions_url=google_maps_directions_url(a, b),
            )
        )
    return legs


def build_timeline(days: Sequence[DayPlan]) -> ItineraryTimeline:
    """Read-only itinerary view; stored item order is left untouched."""
    timeline_days = []
    for day in days:
        ordered = sort_by_time(day.custom_items)
        timeline_days.append(
            TimelineDay(
                day_number=day.day_number,
                date=day.date,
                day_name=day.day_name,
                items=ordered,
                legs=walking_legs(ordered),
            )
        )

    return ItineraryTimeline(
        days=timeline_days,
        stats=itinerary_stats(days),
        disconnected_days=[
            ConnectionWarning(
                day_number=d.day_number,
                last_location=d.last_location,
                next_location=d.next_location,
            )
            for d in detect_disconnected_days(days)
        ],
    )
