"""Cost model - pure functions rolling item and base costs up to day and trip totals.

All amounts are integer cents. Base estimates arrive already converted to
cents (see ``BaseCosts.from_major_units``), so no unit mixing happens here;
conversion to major units is left to presentation via ``cents_to_major``.
"""

from collections.abc import Sequence

from tripcalc.app.models.common import BUDGETED_CATEGORIES, UNBUDGETED_CATEGORIES, ItemCategory
from tripcalc.app.models.itinerary import ItineraryItem
from tripcalc.app.models.plan import DayPlan
from tripcalc.app.models.trip import (
    BaseCosts,
    CategoryCost,
    DayCost,
    TripAggregate,
    TripCostSummary,
)


def items_total(items: Sequence[ItineraryItem], category: ItemCategory) -> int:
    """Sum ``amount * visits`` over items of one category."""
    return sum(item.total_cents for item in items if item.category is category)


def category_total(day: DayPlan, category: ItemCategory, base_costs: BaseCosts) -> int:
    """Cost of a budgeted category for one day.

    Zero when the category is excluded for the day. Otherwise the base
    estimate (if ``include_base`` is on) plus every custom item in the
    category; the two are additive.

    Raises:
        ValueError: If ``category`` has no base estimate (SHOPPING, OTHER).
    """
    if not day.included.is_on(category):
        return 0

    base = base_costs.for_category(category) if day.include_base.is_on(category) else 0
    return base + items_total(day.custom_items, category)


def day_cost(day: DayPlan, base_costs: BaseCosts) -> int:
    """Total cost of one day.

    The four budgeted categories honour the day's toggles; SHOPPING and
    OTHER items have no toggle and always count in full.
    """
    total = sum(category_total(day, category, base_costs) for category in BUDGETED_CATEGORIES)
    total += sum(items_total(day.custom_items, category) for category in UNBUDGETED_CATEGORIES)
    return total


def trip_total(days: Sequence[DayPlan], base_costs: BaseCosts) -> int:
    """Total cost of the trip."""
    return sum(day_cost(day, base_costs) for day in days)


def cost_breakdown(day: DayPlan, base_costs: BaseCosts) -> DayCost:
    """Per-category totals for one day (all six categories) plus the day total."""
    categories: list[CategoryCost] = []
    for category in ItemCategory:
        if category.has_base_estimate:
            total = category_total(day, category, base_costs)
        else:
            total = items_total(day.custom_items, category)
        categories.append(CategoryCost(category=category, total_cents=total))

    return DayCost(
        day_number=day.day_number,
        categories=categories,
        total_cents=sum(c.total_cents for c in categories),
    )


def build_cost_summary(trip: TripAggregate, base_costs: BaseCosts) -> TripCostSummary:
    """Build the read-only ``{days, costs, tripTotal}`` view for exporters."""
    costs = [cost_breakdown(day, base_costs) for day in trip.days]
    return TripCostSummary(
        days=[day.model_copy(deep=True) for day in trip.days],
        costs=costs,
        trip_total_cents=sum(c.total_cents for c in costs),
    )


def itinerary_stats(days: Sequence[DayPlan]) -> dict[str, float | int]:
    """Usage statistics of itinerary features across a trip."""
    total_activities = 0
    with_time = 0
    with_location = 0
    with_booking = 0
    ai_suggestions = 0
    days_with_itinerary = 0

    for day in days:
        total_activities += len(day.custom_items)
        day_has_itinerary = False
        for item in day.custom_items:
            if item.start_time:
                with_time += 1
                day_has_itinerary = True
            if item.location is not None:
                with_location += 1
                day_has_itinerary = True
            if item.booking_required:
                with_booking += 1
            if item.is_ai_suggestion:
                ai_suggestions += 1
        if day_has_itinerary:
            days_with_itinerary += 1

    return {
        "total_activities": total_activities,
        "activities_with_time": with_time,
        "activities_with_location": with_location,
        "activities_with_booking": with_booking,
        "ai_suggestions": ai_suggestions,
        "days_with_itinerary": days_with_itinerary,
        "average_activities_per_day": total_activities / len(days) if days else 0,
    }
