"""
Reservation Service for managing restaurant reservations.
Wires the admission engine to storage and closes the check-then-act race
by holding slot locks around fetch, validate and persist.
"""
import logging
import uuid
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, Optional

from sqlalchemy.orm import sessionmaker

from core.utils_datetime import parse_arrival_time
from db.repository import ReservationRepository
from db.session import session_scope
from domain.enums import Actor, ReservationStatus
from domain.models import Reservation, ReservationDraft, ReservationPatch
from domain.results import ValidationResult
from services.field_validation import normalize_phone
from services.reservation_validation import AdmissionEngine
from services.slot_locks import SlotLockRegistry


logger = logging.getLogger(__name__)

BASE36_DIGITS = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"


class ReservationNotFoundError(LookupError):
    """No live reservation has the requested id."""

    def __init__(self, reservation_id: str):
        super().__init__(f"Reservation {reservation_id} not found")
        self.reservation_id = reservation_id


class ReservationRejectedError(Exception):
    """The admission engine refused the operation; ``result`` says why."""

    def __init__(self, result: ValidationResult):
        super().__init__("; ".join(result.get_error_messages()))
        self.result = result


def to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


class ReservationService:
    """Service for managing restaurant reservations."""

    def __init__(
        self,
        session_factory: sessionmaker,
        engine: AdmissionEngine,
        locks: Optional[SlotLockRegistry] = None
    ):
        """
        Initialize ReservationService.

        Args:
            session_factory: Factory producing SQLAlchemy sessions
            engine: Admission engine deciding every mutation
            locks: Slot lock table (one per conflict window if omitted)
        """
        self.session_factory = session_factory
        self.engine = engine
        self.locks = locks or SlotLockRegistry(engine.config.booking_rules.conflict_window)

    @contextmanager
    def _admission_scope(self, arrival: datetime) -> Iterator[ReservationRepository]:
        with self.locks.hold(arrival), session_scope(self.session_factory) as session:
            yield ReservationRepository(session)

    def _log_audit(
        self,
        action: str,
        reservation: Reservation,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        logger.info(
            f"Audit log: {action} for reservation {reservation.id}",
            extra={
                "action": action,
                "reservation_id": reservation.id,
                "status": reservation.status.value,
                "user": reservation.updated_by or "system",
                "details": details or {},
            },
        )

    def _generate_reservation_id(self) -> str:
        """Generate unique reservation ID, e.g. RES_MGH3K2QX_9F2A61C4."""
        millis = int(self.engine.now().timestamp() * 1000)
        return f"RES_{to_base36(millis)}_{uuid.uuid4().hex[:8].upper()}"

    @staticmethod
    def _require(repo: ReservationRepository, reservation_id: str) -> Reservation:
        reservation = repo.get(reservation_id)
        if reservation is None:
            raise ReservationNotFoundError(reservation_id)
        return reservation

    def _normalized_changes(self, patch: ReservationPatch) -> Dict[str, Any]:
        """Patch values in their stored form."""
        changes = patch.provided()
        if "guest_name" in changes:
            changes["guest_name"] = changes["guest_name"].strip()
        if "guest_email" in changes:
            changes["guest_email"] = changes["guest_email"].strip()
        if "guest_phone" in changes:
            changes["guest_phone"] = normalize_phone(changes["guest_phone"], self.engine.config.booking_rules)
        if "arrival_time" in changes:
            changes["arrival_time"] = parse_arrival_time(changes["arrival_time"], self.engine.config.tz)
        return changes

    def _target_arrival(self, current: Reservation, patch: ReservationPatch) -> Optional[datetime]:
        if patch.arrival_time is None:
            return current.arrival_time
        return parse_arrival_time(patch.arrival_time, self.engine.config.tz)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def get_reservation(self, reservation_id: str) -> Reservation:
        """
        Get reservation by ID.

        Raises:
            ReservationNotFoundError: if no live reservation has this id
        """
        with session_scope(self.session_factory) as session:
            return self._require(ReservationRepository(session), reservation_id)

    def create_reservation(self, draft: ReservationDraft, created_by: Optional[str] = None) -> Reservation:
        """
        Admit and persist a new reservation.

        Args:
            draft: Proposed reservation
            created_by: Who is creating it (guest id, staff member, ...)

        Returns:
            The stored reservation, status Requested

        Raises:
            ReservationRejectedError: if any admission rule fails
        """
        config = self.engine.config
        arrival = parse_arrival_time(draft.arrival_time, config.tz)
        if arrival is None:
            # Nothing to lock or query against; fields alone decide
            raise ReservationRejectedError(self.engine.validate_for_create(draft))

        with self._admission_scope(arrival) as repo:
            start, end = self.engine.conflict_window(arrival)
            existing = repo.find_overlapping(start, end)

            result = self.engine.validate_for_create(draft, existing)
            if not result.is_valid:
                raise ReservationRejectedError(result)

            now = self.engine.now()
            reservation = repo.add(
                Reservation(
                    id=self._generate_reservation_id(),
                    guest_name=draft.guest_name.strip(),
                    guest_email=draft.guest_email.strip(),
                    guest_phone=normalize_phone(draft.guest_phone, config.booking_rules),
                    arrival_time=arrival,
                    table_size=draft.table_size,
                    status=ReservationStatus.REQUESTED,
                    notes=draft.notes,
                    created_at=now,
                    updated_at=now,
                    updated_by=created_by,
                )
            )

        self._log_audit(
            "create",
            reservation,
            details={
                "arrival_time": reservation.arrival_time.isoformat(),
                "table_size": reservation.table_size,
            },
        )
        return reservation

    def update_reservation(
        self,
        reservation_id: str,
        patch: ReservationPatch,
        is_staff_action: bool = False
    ) -> Reservation:
        """
        Apply a partial update to an existing reservation.

        Args:
            reservation_id: ID of reservation to update
            patch: Requested changes
            is_staff_action: Staff bypass the guest modification cutoff

        Returns:
            The updated reservation

        Raises:
            ReservationNotFoundError: if the reservation does not exist
            ReservationRejectedError: if any admission rule fails
        """
        current = self.get_reservation(reservation_id)

        while True:
            target = self._target_arrival(current, patch)
            if target is None:
                raise ReservationRejectedError(self.engine.validate_for_update(current, patch, is_staff_action))

            with self._admission_scope(target) as repo:
                current = self._require(repo, reservation_id)
                if self._target_arrival(current, patch) != target:
                    # Moved by a concurrent update; lock its new slot instead
                    continue

                start, end = self.engine.conflict_window(target)
                existing = repo.find_overlapping(start, end)

                result = self.engine.validate_for_update(current, patch, is_staff_action, existing)
                if not result.is_valid:
                    raise ReservationRejectedError(result)

                changes = self._normalized_changes(patch)
                updated = repo.apply_changes(reservation_id, changes, patch.updated_by, self.engine.now())

            self._log_audit("update", updated, details={"fields": sorted(changes)})
            return updated

    def change_status(
        self,
        reservation_id: str,
        status: Any,
        actor: Actor = Actor.STAFF,
        updated_by: Optional[str] = None
    ) -> Reservation:
        """
        Move a reservation along its lifecycle.

        Raises:
            ReservationNotFoundError: if the reservation does not exist
            ReservationRejectedError: if the transition is not allowed
        """
        if status == ReservationStatus.CANCELLED:
            return self.cancel_reservation(reservation_id, actor, updated_by)

        current = self.get_reservation(reservation_id)
        with self._admission_scope(current.arrival_time) as repo:
            current = self._require(repo, reservation_id)

            result = self.engine.validate_status_change(current, status, actor)
            if not result.is_valid:
                raise ReservationRejectedError(result)

            updated = repo.set_status(reservation_id, ReservationStatus(status), updated_by, self.engine.now())

        self._log_audit(
            "status_change",
            updated,
            details={"from": current.status.value, "to": updated.status.value, "actor": actor.value},
        )
        return updated

    def cancel_reservation(
        self,
        reservation_id: str,
        actor: Actor = Actor.GUEST,
        updated_by: Optional[str] = None
    ) -> Reservation:
        """
        Cancel a reservation.

        Raises:
            ReservationNotFoundError: if the reservation does not exist
            ReservationRejectedError: if it is already closed or, for guests,
                too close to arrival
        """
        current = self.get_reservation(reservation_id)
        with self._admission_scope(current.arrival_time) as repo:
            current = self._require(repo, reservation_id)

            result = self.engine.validate_cancellation(current, actor)
            if not result.is_valid:
                raise ReservationRejectedError(result)

            cancelled = repo.set_status(
                reservation_id, ReservationStatus.CANCELLED, updated_by, self.engine.now()
            )

        self._log_audit("cancel", cancelled, details={"actor": actor.value})
        return cancelled
