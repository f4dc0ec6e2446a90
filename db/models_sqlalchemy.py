"""SQLAlchemy models for the reservation store."""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, TimestampMixin, UTCDateTime
from domain.enums import ReservationStatus
from domain.models import Reservation


class ReservationRow(Base, TimestampMixin):
    """Reservation table model."""

    __tablename__ = "reservations"

    id: Mapped[str] = mapped_column(
        String(40),
        primary_key=True,
        nullable=False,
    )

    guest_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
    )

    guest_email: Mapped[str] = mapped_column(
        String(254),
        nullable=False,
        index=True,
    )

    guest_phone: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )

    arrival_time: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
        index=True,
    )

    table_size: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ReservationStatus.REQUESTED.value,
        index=True,
    )

    notes: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )

    updated_by: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
    )

    # Soft delete; deleted rows never reach the admission engine
    deleted: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    __table_args__ = (
        Index("ix_reservations_status_arrival", "status", "arrival_time"),
    )

    def to_domain(self) -> Reservation:
        """Immutable domain view of this row."""
        return Reservation(
            id=self.id,
            guest_name=self.guest_name,
            guest_email=self.guest_email,
            guest_phone=self.guest_phone,
            arrival_time=self.arrival_time,
            table_size=self.table_size,
            status=ReservationStatus(self.status),
            notes=self.notes,
            created_at=self.created_at,
            updated_at=self.updated_at,
            updated_by=self.updated_by,
        )

    def __repr__(self) -> str:
        """String representation of ReservationRow."""
        return (
            f"<ReservationRow(id={self.id}, name='{self.guest_name}', "
            f"arrival={self.arrival_time}, size={self.table_size}, "
            f"status='{self.status}')>"
        )
