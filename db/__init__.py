"""Database layer for the table reservation system."""

from .base import Base, TimestampMixin, UTCDateTime
from .models_sqlalchemy import ReservationRow
from .repository import ReservationRepository
from .session import (
    create_engine,
    create_session_factory,
    session_scope,
    init_db,
    drop_db,
)

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "UTCDateTime",
    # Models
    "ReservationRow",
    "ReservationRepository",
    # Session
    "create_engine",
    "create_session_factory",
    "session_scope",
    "init_db",
    "drop_db",
]
