"""
Capacity conflict detection.

The storage layer supplies the reservations near a proposed arrival; this
module only decides whether seating one more party there would exceed the
capacity ceiling.
"""

import logging
from datetime import datetime
from typing import Iterable, Optional, Tuple

from core.restaurant_config import RestaurantConfig
from domain.enums import ErrorCode, ReservationStatus
from domain.models import Reservation
from domain.results import ValidationResult


logger = logging.getLogger(__name__)

SLOT_UNAVAILABLE_MESSAGE = "The requested time slot is not available. Please choose a different time."


class ConflictDetector:
    """Sums non-cancelled party sizes inside the conflict window and compares to the ceiling."""

    def __init__(self, config: RestaurantConfig):
        self.config = config
        self.rules = config.booking_rules

    def window_bounds(self, arrival: datetime) -> Tuple[datetime, datetime]:
        """Inclusive time span the storage layer must search around ``arrival``."""
        window = self.rules.conflict_window
        return arrival - window, arrival + window

    def in_window(self, arrival: datetime, other: datetime) -> bool:
        return abs(self.config.local(other) - arrival) <= self.rules.conflict_window

    def seats_taken(
        self,
        arrival: datetime,
        existing: Iterable[Reservation],
        exclude_id: Optional[str] = None
    ) -> int:
        """
        Seats already committed around ``arrival``.

        Cancelled reservations never count, and neither does the reservation
        being rescheduled.
        """
        return sum(
            reservation.table_size
            for reservation in existing
            if reservation.status is not ReservationStatus.CANCELLED
            and (exclude_id is None or reservation.id != exclude_id)
            and self.in_window(arrival, reservation.arrival_time)
        )

    def check(
        self,
        arrival: datetime,
        table_size: int,
        existing: Iterable[Reservation],
        exclude_id: Optional[str] = None
    ) -> ValidationResult:
        """
        Check whether a party of ``table_size`` fits at ``arrival``.

        Args:
            arrival: Proposed arrival time (timezone-aware)
            table_size: Proposed party size
            existing: Candidate reservations from storage
            exclude_id: Id of the reservation being modified, if any

        Returns:
            ValidationResult with at most one aggregate capacity error
        """
        result = ValidationResult()
        taken = self.seats_taken(arrival, existing, exclude_id)

        if taken + table_size > self.rules.capacity_ceiling:
            logger.info(
                "Time slot conflict detected",
                extra={
                    "arrival_time": arrival.isoformat(),
                    "table_size": table_size,
                    "seats_taken": taken,
                    "capacity_ceiling": self.rules.capacity_ceiling,
                },
            )
            # One aggregate error; guests never learn which bookings are in the way
            result.add_error("arrivalTime", SLOT_UNAVAILABLE_MESSAGE, ErrorCode.POTENTIAL_CONFLICT)

        return result
