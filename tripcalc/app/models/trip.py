"""Trip aggregate models - the persisted unit and its read-only cost view."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from pydantic import BaseModel, Field, field_validator

from tripcalc.app.models.common import CamelModel, ItemCategory, TravelStyle, toggle_field
from tripcalc.app.models.plan import DayPlan, create_default_day
from tripcalc.app.models.saved_location import SavedLocation

MAX_TRIP_DAYS = 30
DEFAULT_TRIP_DAYS = 3
MAX_SAVED_LOCATIONS = 50

_CENT = Decimal("0.01")


def major_to_cents(amount: Decimal | float | int | str) -> int:
    """Convert a major-unit amount to integer cents, rounding half-up."""
    return int((Decimal(str(amount)) * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def cents_to_major(cents: int) -> Decimal:
    """Convert integer cents to a major-unit Decimal (presentation boundary only)."""
    return (Decimal(cents) / 100).quantize(_CENT)


class BaseCosts(BaseModel):
    """Daily base estimate per budgeted category, in cents."""

    accommodation: int = Field(0, ge=0)
    food: int = Field(0, ge=0)
    transport: int = Field(0, ge=0)
    activities: int = Field(0, ge=0)

    @classmethod
    def from_major_units(
        cls,
        accommodation: Decimal | float | int = 0,
        food: Decimal | float | int = 0,
        transport: Decimal | float | int = 0,
        activities: Decimal | float | int = 0,
    ) -> "BaseCosts":
        """Build from decimal major-unit amounts (e.g. city style defaults)."""
        return cls(
            accommodation=major_to_cents(accommodation),
            food=major_to_cents(food),
            transport=major_to_cents(transport),
            activities=major_to_cents(activities),
        )

    def for_category(self, category: ItemCategory) -> int:
        return int(getattr(self, toggle_field(category)))


class StyleCosts(CamelModel):
    """City base costs for each travel style."""

    budget: BaseCosts
    mid_range: BaseCosts
    luxury: BaseCosts

    def for_style(self, style: TravelStyle) -> BaseCosts:
        if style is TravelStyle.budget:
            return self.budget
        if style is TravelStyle.mid_range:
            return self.mid_range
        return self.luxury


class TripAggregate(CamelModel):
    """The persisted unit: ``{days, savedLocations}``."""

    days: list[DayPlan] = Field(..., min_length=1, max_length=MAX_TRIP_DAYS)
    saved_locations: list[SavedLocation] = Field(
        default_factory=list, max_length=MAX_SAVED_LOCATIONS
    )

    @field_validator("days")
    @classmethod
    def validate_day_numbers(cls, v: list[DayPlan]) -> list[DayPlan]:
        """Ensure day numbers are exactly 1..N in order."""
        numbers = [d.day_number for d in v]
        if numbers != list(range(1, len(v) + 1)):
            raise ValueError(f"day numbers must be 1..{len(v)}, got {numbers}")
        return v

    @field_validator("saved_locations")
    @classmethod
    def validate_single_primary(cls, v: list[SavedLocation]) -> list[SavedLocation]:
        """Ensure at most one primary saved location."""
        primaries = [loc.id for loc in v if loc.is_primary]
        if len(primaries) > 1:
            raise ValueError(f"at most one primary saved location allowed, got {primaries}")
        return v

    @classmethod
    def default(cls, day_count: int = DEFAULT_TRIP_DAYS) -> "TripAggregate":
        """Fresh trip with empty default days."""
        return cls(days=[create_default_day(n) for n in range(1, day_count + 1)])

    @classmethod
    def from_payload(cls, payload: Any) -> "TripAggregate":
        """Load persisted state, normalizing legacy shapes.

        Accepts ``None`` (defaults), a bare ``days`` list (legacy), or the
        ``{days, savedLocations}`` object.

        Raises:
            pydantic.ValidationError: If the payload is malformed.
        """
        if payload is None:
            return cls.default()
        if isinstance(payload, list):
            payload = {"days": payload, "savedLocations": []}
        if isinstance(payload, dict):
            days = payload.get("days") or cls.default().to_payload()["days"]
            # Positions are authoritative; stale numbering from older clients is repaired
            days = [
                {**day, "dayNumber": n} if isinstance(day, dict) else day
                for n, day in enumerate(days, start=1)
            ]
            payload = {**payload, "days": days}
        return cls.model_validate(payload)

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the persisted JSON shape."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @property
    def primary_location(self) -> SavedLocation | None:
        for loc in self.saved_locations:
            if loc.is_primary:
                return loc
        return None

    def find_location(self, location_id: str) -> SavedLocation | None:
        for loc in self.saved_locations:
            if loc.id == location_id:
                return loc
        return None


class CategoryCost(CamelModel):
    """Cost of one category for one day, in cents."""

    category: ItemCategory
    total_cents: int


class DayCost(CamelModel):
    """Cost breakdown of one day."""

    day_number: int
    categories: list[CategoryCost]
    total_cents: int


class TripCostSummary(CamelModel):
    """Read-only view consumed by exporters (PDF, iCalendar)."""

    days: list[DayPlan]
    costs: list[DayCost]
    trip_total_cents: int
    currency_disclaimer: str = "Amounts are estimates in the trip currency; no conversion applied."
