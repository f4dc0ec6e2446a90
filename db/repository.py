"""Reservation repository: the storage collaborator of the admission engine."""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from domain.enums import ReservationStatus
from domain.models import Reservation
from .models_sqlalchemy import ReservationRow


logger = logging.getLogger(__name__)


class ReservationRepository:
    """Reads and writes reservations within the caller's session/transaction."""

    def __init__(self, session: Session):
        self.session = session

    def _row(self, reservation_id: str) -> Optional[ReservationRow]:
        row = self.session.get(ReservationRow, reservation_id)
        if row is None or row.deleted:
            return None
        return row

    def get(self, reservation_id: str) -> Optional[Reservation]:
        row = self._row(reservation_id)
        return row.to_domain() if row else None

    def find_overlapping(
        self,
        start: datetime,
        end: datetime
    ) -> List[Reservation]:
        """
        Non-deleted reservations arriving within [start, end].

        Args:
            start: Window start (inclusive)
            end: Window end (inclusive)

        Returns:
            Reservations ordered by arrival time, cancelled ones included
        """
        query = (
            select(ReservationRow)
            .where(
                ReservationRow.deleted.is_(False),
                ReservationRow.arrival_time >= start,
                ReservationRow.arrival_time <= end,
            )
            .order_by(ReservationRow.arrival_time)
        )
        rows = self.session.scalars(query).all()
        logger.debug(f"Found {len(rows)} reservations between {start} and {end}")
        return [row.to_domain() for row in rows]

    def add(self, reservation: Reservation) -> Reservation:
        row = ReservationRow(
            id=reservation.id,
            guest_name=reservation.guest_name,
            guest_email=reservation.guest_email,
            guest_phone=reservation.guest_phone,
            arrival_time=reservation.arrival_time,
            table_size=reservation.table_size,
            status=reservation.status.value,
            notes=reservation.notes,
            updated_by=reservation.updated_by,
        )
        # Unset timestamps fall back to the column defaults
        if reservation.created_at is not None:
            row.created_at = reservation.created_at
        if reservation.updated_at is not None:
            row.updated_at = reservation.updated_at
        self.session.add(row)
        self.session.flush()
        return row.to_domain()

    def apply_changes(
        self,
        reservation_id: str,
        changes: Dict[str, Any],
        updated_by: Optional[str],
        updated_at: datetime
    ) -> Reservation:
        row = self._require(reservation_id)
        for name, value in changes.items():
            setattr(row, name, value)
        row.updated_by = updated_by
        row.updated_at = updated_at
        self.session.flush()
        return row.to_domain()

    def set_status(
        self,
        reservation_id: str,
        status: ReservationStatus,
        updated_by: Optional[str],
        updated_at: datetime
    ) -> Reservation:
        return self.apply_changes(reservation_id, {"status": status.value}, updated_by, updated_at)

    def _require(self, reservation_id: str) -> ReservationRow:
        row = self._row(reservation_id)
        if row is None:
            raise LookupError(f"Reservation {reservation_id} not found")
        return row
