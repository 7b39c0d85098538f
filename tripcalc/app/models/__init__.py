"""Models package - re-exports for convenience."""

from tripcalc.app.models.common import (
    BUDGETED_CATEGORIES,
    UNBUDGETED_CATEGORIES,
    GeoLocation,
    ItemCategory,
    LocationCategory,
    TimeSlot,
    TravelStyle,
)
from tripcalc.app.models.itinerary import (
    AutoFilledFrom,
    AutoFillSlot,
    ItemPatch,
    ItineraryItem,
    ManualEntry,
)
from tripcalc.app.models.notices import Notice, NoticeKind, NoticeSeverity
from tripcalc.app.models.plan import CategoryToggles, DayPlan, create_default_day
from tripcalc.app.models.saved_location import SavedLocation
from tripcalc.app.models.trip import (
    BaseCosts,
    CategoryCost,
    DayCost,
    StyleCosts,
    TripAggregate,
    TripCostSummary,
    cents_to_major,
    major_to_cents,
)

__all__ = [
    # Common
    "GeoLocation",
    "TimeSlot",
    "ItemCategory",
    "LocationCategory",
    "TravelStyle",
    "BUDGETED_CATEGORIES",
    "UNBUDGETED_CATEGORIES",
    # Itinerary
    "ItineraryItem",
    "ItemPatch",
    "ManualEntry",
    "AutoFilledFrom",
    "AutoFillSlot",
    # Plan
    "DayPlan",
    "CategoryToggles",
    "create_default_day",
    # Saved locations
    "SavedLocation",
    # Notices
    "Notice",
    "NoticeKind",
    "NoticeSeverity",
    # Trip
    "TripAggregate",
    "BaseCosts",
    "StyleCosts",
    "CategoryCost",
    "DayCost",
    "TripCostSummary",
    "cents_to_major",
    "major_to_cents",
]
