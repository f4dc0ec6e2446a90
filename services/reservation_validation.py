"""
Reservation admission engine.

Composes field validation, temporal policy, capacity conflict detection and
the status lifecycle into one verdict per create, update or status change.
Rule violations are always returned as a ValidationResult, never raised.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Iterable, Optional, Tuple, Union

from core.restaurant_config import RestaurantConfig
from core.utils_datetime import get_current_datetime, parse_arrival_time
from domain.enums import Actor, ReservationStatus
from domain.models import Reservation, ReservationDraft, ReservationPatch
from domain.results import ValidationResult
from services.conflict_detection import ConflictDetector
from services.field_validation import validate_fields, validate_initial_status
from services.status_transitions import validate_transition
from services.temporal_policy import (
    validate_cancellation_allowed,
    validate_modification_allowed,
    validate_temporal_policy,
)


logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class AdmissionEngine:
    """
    Stateless admission decisions for reservations.

    Holds only its configuration and a clock, so one instance can be shared
    by any number of concurrent callers.
    """

    def __init__(
        self,
        config: RestaurantConfig,
        clock: Optional[Clock] = None,
        conflict_detector: Optional[ConflictDetector] = None
    ):
        """
        Initialize the engine.

        Args:
            config: Restaurant configuration holding every threshold
            clock: Returns the current time (restaurant timezone by default)
            conflict_detector: Capacity checker (built from config if omitted)
        """
        self.config = config
        self._clock = clock or (lambda: get_current_datetime(config.tz))
        self.conflict_detector = conflict_detector or ConflictDetector(config)

    def now(self) -> datetime:
        return self.config.local(self._clock())

    def conflict_window(self, arrival: Any) -> Tuple[datetime, datetime]:
        """Time span the storage layer must query for a proposed arrival."""
        parsed = parse_arrival_time(arrival, self.config.tz)
        if parsed is None:
            raise ValueError(f"Cannot compute a conflict window for arrival time {arrival!r}")
        return self.conflict_detector.window_bounds(parsed)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def validate_for_create(
        self,
        draft: ReservationDraft,
        existing: Iterable[Reservation] = ()
    ) -> ValidationResult:
        """
        Validate a new reservation before it is persisted.

        Field and temporal checks always run; the capacity check runs only
        once both pass. An unparsable arrival time skips the temporal and
        capacity stages, since nothing time-based can be judged against it.

        Args:
            draft: Proposed reservation
            existing: Reservations near the proposed arrival, from storage

        Returns:
            ValidationResult with every violation found
        """
        now = self.now()
        result = validate_fields(draft, self.config)
        result.extend(validate_initial_status(draft.status))

        arrival = self._parsed_arrival(draft, result)
        if arrival is not None:
            result.extend(validate_temporal_policy(arrival, draft.table_size, self.config, now))

            if result.is_valid:
                result.extend(self.conflict_detector.check(arrival, draft.table_size, existing))

        self._log_outcome("create", result)
        return result

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def validate_for_update(
        self,
        current: Reservation,
        patch: ReservationPatch,
        is_staff_action: bool = False,
        existing: Iterable[Reservation] = ()
    ) -> ValidationResult:
        """
        Validate a change to an existing reservation.

        Modification rights are checked first; if the reservation may not be
        changed, nothing else is evaluated. Otherwise the merged view of
        unchanged and patched fields is validated, the temporal policy is
        applied when the booked slot moves, and capacity is rechecked with
        the reservation itself excluded. A cancelled reservation takes no
        seats, so staff edits to one skip the capacity check.

        Args:
            current: Stored reservation
            patch: Requested changes
            is_staff_action: Staff bypass the guest cutoffs
            existing: Reservations near the new arrival, from storage

        Returns:
            ValidationResult with every violation found
        """
        now = self.now()
        modification = validate_modification_allowed(current, is_staff_action, self.config, now)
        if not modification.is_valid:
            self._log_outcome("update", modification, reservation_id=current.id)
            return modification

        merged = patch.apply_to(current)
        result = validate_fields(merged, self.config)

        arrival = self._parsed_arrival(merged, result)
        if arrival is not None and self._slot_changed(current, patch, arrival):
            result.extend(validate_temporal_policy(arrival, merged.table_size, self.config, now))

            # Cancelled reservations hold no seats, wherever staff move them
            if result.is_valid and current.status is not ReservationStatus.CANCELLED:
                result.extend(
                    self.conflict_detector.check(arrival, merged.table_size, existing, exclude_id=current.id)
                )

        self._log_outcome("update", result, reservation_id=current.id)
        return result

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def validate_status_change(
        self,
        current: Union[Reservation, ReservationStatus],
        requested: ReservationStatus,
        actor: Actor = Actor.STAFF
    ) -> ValidationResult:
        """Lifecycle check only; a pure status change does not move the booked slot."""
        current_status = current.status if isinstance(current, Reservation) else current
        result = validate_transition(current_status, requested)

        if not result.is_valid:
            logger.warning(
                "Invalid status transition attempted",
                extra={
                    "current_status": str(getattr(current_status, "value", current_status)),
                    "requested_status": str(getattr(requested, "value", requested)),
                    "actor": actor.value,
                },
            )
        return result

    def validate_cancellation(self, current: Reservation, actor: Actor) -> ValidationResult:
        """Cancellation is a status change plus the guest cancellation cutoff."""
        result = self.validate_status_change(current, ReservationStatus.CANCELLED, actor)
        result.extend(validate_cancellation_allowed(current, actor, self.config, self.now()))
        self._log_outcome("cancel", result, reservation_id=current.id)
        return result

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _parsed_arrival(self, draft: ReservationDraft, fields: ValidationResult) -> Optional[datetime]:
        if fields.has_error("arrivalTime"):
            return None
        return parse_arrival_time(draft.arrival_time, self.config.tz)

    def _slot_changed(self, current: Reservation, patch: ReservationPatch, arrival: datetime) -> bool:
        if patch.arrival_time is not None and arrival != self.config.local(current.arrival_time):
            return True
        return patch.table_size is not None and patch.table_size != current.table_size

    @staticmethod
    def _log_outcome(operation: str, result: ValidationResult, reservation_id: Optional[str] = None):
        if result.is_valid:
            return
        logger.warning(
            f"Reservation {operation} rejected with {len(result.errors)} error(s)",
            extra={
                "operation": operation,
                "reservation_id": reservation_id,
                "error_codes": [code.value for code in result.codes()],
            },
        )
