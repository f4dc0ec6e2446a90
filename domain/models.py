"""Domain models using Pydantic v2 for the table reservation system."""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .enums import ReservationStatus


EDITABLE_FIELDS = (
    "guest_name",
    "guest_email",
    "guest_phone",
    "arrival_time",
    "table_size",
    "notes",
)

CLEARABLE_FIELDS = {"notes"}


class Reservation(BaseModel):
    """Stored reservation record. Owned by the storage layer, read-only here."""

    id: str = Field(..., min_length=1)
    guest_name: str
    guest_email: str
    guest_phone: str
    arrival_time: datetime
    table_size: int
    status: ReservationStatus = ReservationStatus.REQUESTED
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    updated_by: Optional[str] = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        frozen=True,
    )


class ReservationDraft(BaseModel):
    """
    Unvalidated input for a new reservation.

    Fields are deliberately untyped: malformed values must reach the
    validators so they can be reported, not fail at construction.
    """

    guest_name: Any = None
    guest_email: Any = None
    guest_phone: Any = None
    arrival_time: Any = None
    table_size: Any = None
    notes: Any = None
    status: Any = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )


class ReservationPatch(BaseModel):
    """
    Partial update of an existing reservation.

    Omitted fields and None leave the stored value unchanged, except for
    notes: passing ``notes=None`` explicitly clears them.
    """

    guest_name: Any = None
    guest_email: Any = None
    guest_phone: Any = None
    arrival_time: Any = None
    table_size: Any = None
    notes: Any = None
    updated_by: Optional[str] = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    def provided(self) -> Dict[str, Any]:
        """Editable fields the caller actually supplied."""
        return {
            name: getattr(self, name)
            for name in EDITABLE_FIELDS
            if getattr(self, name) is not None or name in CLEARABLE_FIELDS & self.model_fields_set
        }

    def apply_to(self, current: Reservation) -> ReservationDraft:
        """Unchanged fields of ``current`` overlaid with the patched ones."""
        merged = {name: getattr(current, name) for name in EDITABLE_FIELDS}
        merged.update(self.provided())
        return ReservationDraft(**merged)
