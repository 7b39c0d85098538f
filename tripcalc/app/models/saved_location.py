"""Saved location models - reusable points of interest for quick itinerary filling."""

from datetime import UTC, datetime

from pydantic import Field

from tripcalc.app.models.common import (
    LOCATION_CATEGORY_ICONS,
    CamelModel,
    GeoLocation,
    LocationCategory,
)


class SavedLocation(CamelModel):
    """Named, reusable point of interest (hotel, favourite restaurant, station...)."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    category: LocationCategory
    location: GeoLocation
    is_primary: bool = False
    icon: str | None = Field(None, max_length=4)
    notes: str | None = Field(None, max_length=500)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def effective_icon(self) -> str:
        """Explicit icon, or the default for the category."""
        return self.icon or LOCATION_CATEGORY_ICONS[self.category]
