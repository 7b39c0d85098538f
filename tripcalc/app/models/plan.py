"""Day plan models - one calendar day of the trip."""

from typing import Any

from pydantic import Field, model_validator

from tripcalc.app.models.common import CamelModel, ItemCategory, toggle_field
from tripcalc.app.models.itinerary import ItineraryItem


class CategoryToggles(CamelModel):
    """Per-category booleans keyed by the lowercase budget category."""

    accommodation: bool = True
    food: bool = True
    transport: bool = True
    activities: bool = True

    def is_on(self, category: ItemCategory) -> bool:
        """Look up the toggle for a budgeted category."""
        return bool(getattr(self, toggle_field(category)))


class DayPlan(CamelModel):
    """Plan for a single day.

    ``day_number`` is the ordering key, not an identity; the collection
    renumbers it on every structural change.
    """

    day_number: int = Field(..., ge=1)
    date: str | None = None
    day_name: str | None = None
    included: CategoryToggles = Field(default_factory=CategoryToggles)
    include_base: CategoryToggles = Field(default_factory=CategoryToggles)
    custom_items: list[ItineraryItem] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def drop_legacy_custom_costs(cls, data: Any) -> Any:
        """Older payloads carry a deprecated ``customCosts`` block; ignore it."""
        if isinstance(data, dict) and "customCosts" in data:
            data = {k: v for k, v in data.items() if k != "customCosts"}
        return data

    def find_item(self, item_id: str) -> ItineraryItem | None:
        for item in self.custom_items:
            if item.id == item_id:
                return item
        return None

    def has_itinerary_data(self) -> bool:
        """True if any item has a time slot or a location."""
        return any(item.time_slot is not None or item.location is not None for item in self.custom_items)


def create_default_day(day_number: int) -> DayPlan:
    """Create an empty day with every category and base estimate included."""
    return DayPlan(day_number=day_number)
