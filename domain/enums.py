"""Domain enums for the table reservation system."""

from enum import Enum


class ReservationStatus(str, Enum):
    """Reservation status enumeration."""

    REQUESTED = "REQUESTED"
    APPROVED = "APPROVED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class Actor(str, Enum):
    """Who is asking for a change."""

    GUEST = "guest"
    STAFF = "staff"


class ErrorCode(str, Enum):
    """Stable machine-readable validation error codes."""

    REQUIRED_FIELD = "REQUIRED_FIELD"
    MIN_LENGTH = "MIN_LENGTH"
    MAX_LENGTH = "MAX_LENGTH"
    INVALID_FORMAT = "INVALID_FORMAT"
    MIN_VALUE = "MIN_VALUE"
    MAX_VALUE = "MAX_VALUE"
    INVALID_TYPE = "INVALID_TYPE"
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"
    OUTSIDE_BUSINESS_HOURS = "OUTSIDE_BUSINESS_HOURS"
    CLOSED_DAY = "CLOSED_DAY"
    TOO_FAR_FUTURE = "TOO_FAR_FUTURE"
    ADVANCE_NOTICE_REQUIRED = "ADVANCE_NOTICE_REQUIRED"
    SPECIAL_APPROVAL_REQUIRED = "SPECIAL_APPROVAL_REQUIRED"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    RESERVATION_CANCELLED = "RESERVATION_CANCELLED"
    RESERVATION_COMPLETED = "RESERVATION_COMPLETED"
    TOO_CLOSE_TO_ARRIVAL = "TOO_CLOSE_TO_ARRIVAL"
    POTENTIAL_CONFLICT = "POTENTIAL_CONFLICT"
