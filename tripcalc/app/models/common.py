"""Common types and enums shared across all models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for persisted models: camelCase on the wire, snake_case in code."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class GeoLocation(CamelModel):
    """Geocoded point (WGS84) with a display address."""

    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)
    address: str = Field(..., min_length=1)
    place_id: str | None = None


class TimeSlot(CamelModel):
    """Time slot in local 24h time. Absence of start_time means unscheduled."""

    start_time: str | None = Field(None, pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    end_time: str | None = Field(None, pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    duration: int | None = Field(None, ge=0)


class ItemCategory(str, Enum):
    """Canonical cost category of an itinerary item."""

    ACCOMMODATION = "ACCOMMODATION"
    FOOD = "FOOD"
    TRANSPORT = "TRANSPORT"
    ACTIVITIES = "ACTIVITIES"
    SHOPPING = "SHOPPING"
    OTHER = "OTHER"

    @property
    def has_base_estimate(self) -> bool:
        """True for the four categories that carry a base estimate and a day toggle."""
        return self in TOGGLE_FIELDS


# Explicit mapping from canonical category to the lowercase key of the toggle records
# (`included`, `includeBase`) and of the base-cost record.
TOGGLE_FIELDS: dict[ItemCategory, str] = {
    ItemCategory.ACCOMMODATION: "accommodation",
    ItemCategory.FOOD: "food",
    ItemCategory.TRANSPORT: "transport",
    ItemCategory.ACTIVITIES: "activities",
}

BUDGETED_CATEGORIES: tuple[ItemCategory, ...] = tuple(TOGGLE_FIELDS)
UNBUDGETED_CATEGORIES: tuple[ItemCategory, ...] = (ItemCategory.SHOPPING, ItemCategory.OTHER)


def toggle_field(category: ItemCategory) -> str:
    """Return the toggle/base-cost key for a budgeted category.

    Raises:
        ValueError: If the category has no base estimate (SHOPPING, OTHER).
    """
    try:
        return TOGGLE_FIELDS[category]
    except KeyError:
        raise ValueError(f"category {category.value} has no base estimate") from None


class LocationCategory(str, Enum):
    """Category of a saved location."""

    ACCOMMODATION = "ACCOMMODATION"
    RESTAURANT = "RESTAURANT"
    LANDMARK = "LANDMARK"
    TRANSPORT_HUB = "TRANSPORT_HUB"
    OTHER = "OTHER"


LOCATION_CATEGORY_ICONS: dict[LocationCategory, str] = {
    LocationCategory.ACCOMMODATION: "\U0001f3e8",
    LocationCategory.RESTAURANT: "\U0001f37d️",
    LocationCategory.LANDMARK: "\U0001f4cd",
    LocationCategory.TRANSPORT_HUB: "\U0001f689",
    LocationCategory.OTHER: "\U0001f4cc",
}


class TravelStyle(str, Enum):
    """Trip style selecting the base-cost record."""

    budget = "budget"
    mid_range = "midRange"
    luxury = "luxury"
