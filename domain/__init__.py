"""Domain layer for the table reservation system."""

from .enums import (
    ReservationStatus,
    Actor,
    ErrorCode,
)
from .models import (
    Reservation,
    ReservationDraft,
    ReservationPatch,
)
from .results import (
    ValidationError,
    ValidationResult,
)

__all__ = [
    # Enums
    "ReservationStatus",
    "Actor",
    "ErrorCode",
    # Models
    "Reservation",
    "ReservationDraft",
    "ReservationPatch",
    # Results
    "ValidationError",
    "ValidationResult",
]
