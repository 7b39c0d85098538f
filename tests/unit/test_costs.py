"""Tests for the cost model."""

from decimal import Decimal

import pytest

from tripcalc.app.models import (
    BaseCosts,
    CategoryToggles,
    DayPlan,
    ItemCategory,
    TripAggregate,
    cents_to_major,
    major_to_cents,
)
from tripcalc.app.planner.costs import (
    build_cost_summary,
    category_total,
    cost_breakdown,
    day_cost,
    itinerary_stats,
    trip_total,
)


@pytest.fixture
def base_costs() -> BaseCosts:
    return BaseCosts.from_major_units(accommodation=120, food=50, transport=15, activities=30)


def test_category_total_adds_base_and_items(make_item, base_costs: BaseCosts) -> None:
    """Base 50.00 plus one 20.00 item visited twice is 90.00."""
    day = DayPlan(
        day_number=1,
        custom_items=[make_item("f1", ItemCategory.FOOD, amount=2000, visits=2)],
    )

    total = category_total(day, ItemCategory.FOOD, base_costs)

    assert total == 9000
    assert cents_to_major(total) == Decimal("90.00")


def test_excluded_category_is_zero_regardless_of_items(make_item, base_costs: BaseCosts) -> None:
    day = DayPlan(
        day_number=1,
        included=CategoryToggles(food=False),
        custom_items=[make_item("f1", ItemCategory.FOOD, amount=99999, visits=3)],
    )

    assert category_total(day, ItemCategory.FOOD, base_costs) == 0


def test_include_base_off_counts_items_only(make_item, base_costs: BaseCosts) -> None:
    day = DayPlan(
        day_number=1,
        include_base=CategoryToggles(food=False),
        custom_items=[make_item("f1", ItemCategory.FOOD, amount=2000, visits=2)],
    )

    assert category_total(day, ItemCategory.FOOD, base_costs) == 4000


def test_category_total_rejects_unbudgeted_category(base_costs: BaseCosts) -> None:
    with pytest.raises(ValueError):
        category_total(DayPlan(day_number=1), ItemCategory.SHOPPING, base_costs)


def test_day_cost_always_counts_shopping_and_other(make_item, base_costs: BaseCosts) -> None:
    all_off = CategoryToggles(accommodation=False, food=False, transport=False, activities=False)
    day = DayPlan(
        day_number=1,
        included=all_off,
        custom_items=[
            make_item("s1", ItemCategory.SHOPPING, amount=1500),
            make_item("o1", ItemCategory.OTHER, amount=250, visits=2),
            make_item("f1", ItemCategory.FOOD, amount=1000),
        ],
    )

    assert day_cost(day, base_costs) == 2000


def test_empty_day_costs_base_estimates_only(base_costs: BaseCosts) -> None:
    assert day_cost(DayPlan(day_number=1), base_costs) == 12000 + 5000 + 1500 + 3000


def test_cost_breakdown_lists_every_category(make_item, base_costs: BaseCosts) -> None:
    day = DayPlan(
        day_number=2,
        custom_items=[make_item("s1", ItemCategory.SHOPPING, amount=700)],
    )

    breakdown = cost_breakdown(day, base_costs)

    assert [c.category for c in breakdown.categories] == list(ItemCategory)
    assert breakdown.day_number == 2
    assert breakdown.total_cents == day_cost(day, base_costs)


def test_trip_total_sums_days(base_costs: BaseCosts) -> None:
    trip = TripAggregate.default(4)

    assert trip_total(trip.days, base_costs) == 4 * day_cost(trip.days[0], base_costs)


def test_cost_summary_is_a_detached_copy(make_item, base_costs: BaseCosts) -> None:
    trip = TripAggregate(
        days=[DayPlan(day_number=1, custom_items=[make_item("a1", amount=500)])]
    )

    summary = build_cost_summary(trip, base_costs)
    summary.days[0].custom_items.clear()

    assert summary.trip_total_cents == sum(c.total_cents for c in summary.costs)
    assert len(trip.days[0].custom_items) == 1


def test_summary_serializes_camel_case(base_costs: BaseCosts) -> None:
    summary = build_cost_summary(TripAggregate.default(1), base_costs)

    payload = summary.model_dump(mode="json", by_alias=True)

    assert "tripTotalCents" in payload
    assert payload["costs"][0]["dayNumber"] == 1
    assert payload["costs"][0]["categories"][0]["totalCents"] == 12000


def test_major_to_cents_rounds_half_up() -> None:
    assert major_to_cents("12.345") == 1235
    assert major_to_cents(0.1) == 10
    assert major_to_cents(50) == 5000


def test_itinerary_stats(make_item) -> None:
    days = [
        DayPlan(day_number=1, custom_items=[make_item("a", start_time="10:00"), make_item("b")]),
        DayPlan(day_number=2),
    ]

    stats = itinerary_stats(days)

    assert stats["total_activities"] == 2
    assert stats["activities_with_time"] == 1
    assert stats["days_with_itinerary"] == 1
    assert stats["average_activities_per_day"] == 1
