"""
Reservation status lifecycle.

    REQUESTED -> APPROVED | CANCELLED
    APPROVED  -> COMPLETED | CANCELLED
    CANCELLED, COMPLETED are terminal.
"""

from typing import Any, Dict, FrozenSet

from domain.enums import ErrorCode, ReservationStatus
from domain.results import ValidationResult


INITIAL_STATUS = ReservationStatus.REQUESTED

STATUS_TRANSITIONS: Dict[ReservationStatus, FrozenSet[ReservationStatus]] = {
    ReservationStatus.REQUESTED: frozenset({ReservationStatus.APPROVED, ReservationStatus.CANCELLED}),
    ReservationStatus.APPROVED: frozenset({ReservationStatus.COMPLETED, ReservationStatus.CANCELLED}),
    ReservationStatus.CANCELLED: frozenset(),
    ReservationStatus.COMPLETED: frozenset(),
}


def allowed_transitions(current: ReservationStatus) -> FrozenSet[ReservationStatus]:
    return STATUS_TRANSITIONS[ReservationStatus(current)]


def is_terminal(status: ReservationStatus) -> bool:
    return not allowed_transitions(status)


def can_transition(current: Any, requested: Any) -> bool:
    """Pure check of one edge of the lifecycle graph. Unknown states never transition."""
    try:
        current = ReservationStatus(current)
        requested = ReservationStatus(requested)
    except ValueError:
        return False
    return requested in STATUS_TRANSITIONS[current]


def validate_transition(current: Any, requested: Any) -> ValidationResult:
    """Same as can_transition, reported as a ValidationResult naming both states."""
    result = ValidationResult()

    if not can_transition(current, requested):
        result.add_error(
            "status",
            f"Cannot change status from {_label(current)} to {_label(requested)}",
            ErrorCode.INVALID_STATUS_TRANSITION,
        )

    return result


def _label(status: Any) -> str:
    return status.value if isinstance(status, ReservationStatus) else str(status)
