"""Itinerary item models - one costed unit of a day, with its provenance."""

from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import (
    Field,
    SerializationInfo,
    SerializerFunctionWrapHandler,
    field_validator,
    model_serializer,
    model_validator,
)

from tripcalc.app.models.common import CamelModel, GeoLocation, ItemCategory, TimeSlot


class AutoFillSlot(str, Enum):
    """Position an auto-filled item occupies within its day."""

    check_out = "checkOut"
    check_in = "checkIn"

    @property
    def label(self) -> str:
        return "Check-out" if self is AutoFillSlot.check_out else "Check-in"


class ManualEntry(CamelModel):
    """Item name/location were last written by the user."""

    kind: Literal["manual"] = "manual"


class AutoFilledFrom(CamelModel):
    """Item name/location were last written from a saved location."""

    kind: Literal["auto_filled"] = "auto_filled"
    source_id: str = Field(..., min_length=1)
    slot: AutoFillSlot | None = None


Provenance = Annotated[ManualEntry | AutoFilledFrom, Field(discriminator="kind")]

# Wire keys for the flattened provenance
_IS_AUTO_FILLED = "isAutoFilled"
_AUTO_FILL_SOURCE = "autoFillSource"
_AUTO_FILL_SLOT = "autoFillSlot"


class ItineraryItem(CamelModel):
    """Single bookable/costed unit of a day.

    Provenance is held as a tagged union and flattened to
    ``isAutoFilled`` / ``autoFillSource`` / ``autoFillSlot`` on the wire.
    """

    id: str = Field(..., min_length=1)
    name: str = ""
    category: ItemCategory
    amount: int = Field(0, ge=0)  # cents per visit
    visits: int = Field(1, ge=1, le=50)
    currency: str = Field("USD", min_length=3, max_length=3)
    notes: str = ""
    time_slot: TimeSlot | None = None
    location: GeoLocation | None = None
    booking_required: bool = False
    booking_url: str | None = None
    is_one_time: bool = False
    is_ai_suggestion: bool = Field(False, alias="isAISuggestion")
    provenance: Provenance = Field(default_factory=ManualEntry, exclude=True)

    @model_validator(mode="before")
    @classmethod
    def lift_provenance(cls, data: Any) -> Any:
        """Turn the flat wire fields into a provenance variant."""
        if not isinstance(data, dict) or "provenance" in data:
            return data

        data = dict(data)
        is_auto = data.pop(_IS_AUTO_FILLED, data.pop("is_auto_filled", False))
        source = data.pop(_AUTO_FILL_SOURCE, data.pop("auto_fill_source", None))
        slot = data.pop(_AUTO_FILL_SLOT, data.pop("auto_fill_slot", None))

        if is_auto and source:
            data["provenance"] = AutoFilledFrom(source_id=source, slot=slot)
        else:
            data["provenance"] = ManualEntry()
        return data

    @model_serializer(mode="wrap")
    def flatten_provenance(
        self, handler: SerializerFunctionWrapHandler, info: SerializationInfo
    ) -> dict[str, Any]:
        """Write provenance back as the flat wire fields."""
        data = handler(self)
        by_alias = info.by_alias
        auto_key = _IS_AUTO_FILLED if by_alias else "is_auto_filled"
        source_key = _AUTO_FILL_SOURCE if by_alias else "auto_fill_source"
        slot_key = _AUTO_FILL_SLOT if by_alias else "auto_fill_slot"

        if isinstance(self.provenance, AutoFilledFrom):
            data[auto_key] = True
            data[source_key] = self.provenance.source_id
            if self.provenance.slot is not None:
                data[slot_key] = self.provenance.slot.value
        else:
            data[auto_key] = False
        return data

    @property
    def is_auto_filled(self) -> bool:
        return isinstance(self.provenance, AutoFilledFrom)

    @property
    def auto_fill_source(self) -> str | None:
        if isinstance(self.provenance, AutoFilledFrom):
            return self.provenance.source_id
        return None

    @property
    def start_time(self) -> str | None:
        return self.time_slot.start_time if self.time_slot else None

    @property
    def total_cents(self) -> int:
        return self.amount * self.visits

    def apply_patch(self, patch: "ItemPatch") -> "ItineraryItem":
        """Return a copy with a user edit applied.

        Editing ``name`` or ``location`` clears any auto-fill provenance.
        """
        changes = patch.model_dump(exclude_unset=True)
        updated = self.model_copy(update={k: getattr(patch, k) for k in changes})
        if "name" in changes or "location" in changes:
            updated = updated.model_copy(update={"provenance": ManualEntry()})
        return ItineraryItem.model_validate(updated.model_dump(by_alias=True))

    def with_auto_fill(
        self, name: str, location: GeoLocation, source_id: str, slot: AutoFillSlot | None
    ) -> "ItineraryItem":
        """Return a copy whose name/location were written by the auto-fill propagator."""
        return self.model_copy(
            update={
                "name": name,
                "location": location.model_copy(),
                "provenance": AutoFilledFrom(source_id=source_id, slot=slot),
            }
        )


class ItemPatch(CamelModel):
    """Partial user edit of an item. Has no provenance field by construction."""

    name: str | None = None
    category: ItemCategory | None = None
    amount: int | None = Field(None, ge=0)
    visits: int | None = Field(None, ge=1, le=50)
    currency: str | None = Field(None, min_length=3, max_length=3)
    notes: str | None = None
    time_slot: TimeSlot | None = None
    location: GeoLocation | None = None
    booking_required: bool | None = None
    booking_url: str | None = None

    @field_validator(
        "name", "category", "amount", "visits", "currency", "notes", "booking_required"
    )
    @classmethod
    def reject_null(cls, v: Any) -> Any:
        """Only ``time_slot``, ``location`` and ``booking_url`` can be cleared with null."""
        if v is None:
            raise ValueError("field cannot be null; omit it to leave it unchanged")
        return v
