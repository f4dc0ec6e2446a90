"""
Restaurant operating policy checks, independent of capacity.

Covers operating hours, closed days, advance-notice windows, large party
rules and the guest self-service cutoffs for edits and cancellations.
"""

from datetime import datetime
from typing import Any

from core.restaurant_config import RestaurantConfig
from domain.enums import Actor, ErrorCode, ReservationStatus
from domain.models import Reservation
from domain.results import ValidationResult
from services.field_validation import is_whole_number


# ============================================================================
# Arrival time policy
# ============================================================================

def validate_arrival_policy(
    arrival: datetime,
    config: RestaurantConfig,
    now: datetime
) -> ValidationResult:
    """
    Validate an arrival time against hours, closed days and advance windows.

    Args:
        arrival: Parsed, timezone-aware arrival time
        config: Restaurant configuration
        now: Current time

    Returns:
        ValidationResult with any policy violations
    """
    result = ValidationResult()
    rules = config.booking_rules
    local_arrival = config.local(arrival)

    if local_arrival <= now:
        result.add_error(
            "arrivalTime",
            "Arrival time must be in the future",
            ErrorCode.INVALID_DATE_RANGE,
        )
    elif local_arrival <= now + rules.minimum_lead_time:
        result.add_error(
            "arrivalTime",
            f"Reservations must be made at least {rules.minimum_lead_time_minutes} minutes in advance",
            ErrorCode.ADVANCE_NOTICE_REQUIRED,
        )

    if local_arrival > now + rules.maximum_horizon:
        result.add_error(
            "arrivalTime",
            f"Reservations can only be made up to {rules.maximum_horizon_days} days in advance",
            ErrorCode.TOO_FAR_FUTURE,
        )

    if config.is_closed_on(local_arrival.date()):
        result.add_error(
            "arrivalTime",
            f"Restaurant is closed on {local_arrival.strftime('%A %d %B')}",
            ErrorCode.CLOSED_DAY,
        )

    hours = config.hours
    if not hours.is_open_at(local_arrival.time()):
        result.add_error(
            "arrivalTime",
            f"Reservations are only available between {hours.open_time.strftime('%H:%M')} "
            f"and {hours.close_time.strftime('%H:%M')}",
            ErrorCode.OUTSIDE_BUSINESS_HOURS,
        )

    return result


# ============================================================================
# Party size policy
# ============================================================================

def validate_party_policy(
    table_size: int,
    arrival: datetime,
    config: RestaurantConfig,
    now: datetime
) -> ValidationResult:
    """Large parties need extra notice; very large ones must go through staff."""
    result = ValidationResult()
    rules = config.booking_rules

    if rules.is_large_party(table_size) and arrival < now + rules.large_party_lead_time:
        result.add_error(
            "tableSize",
            f"Large parties ({rules.large_party_threshold}+ people) require at least "
            f"{rules.large_party_lead_time_hours} hours advance notice",
            ErrorCode.ADVANCE_NOTICE_REQUIRED,
        )

    if rules.requires_special_approval(table_size):
        result.add_error(
            "tableSize",
            f"Parties larger than {rules.special_approval_threshold} people require special approval. "
            "Please call the restaurant.",
            ErrorCode.SPECIAL_APPROVAL_REQUIRED,
        )

    return result


def validate_temporal_policy(
    arrival: datetime,
    table_size: Any,
    config: RestaurantConfig,
    now: datetime
) -> ValidationResult:
    """
    Full temporal policy for one booked slot.

    Party rules are skipped when the party size is not a usable number;
    the field validator already reports that.
    """
    result = validate_arrival_policy(arrival, config, now)
    if is_whole_number(table_size):
        result.extend(validate_party_policy(table_size, arrival, config, now))
    return result


# ============================================================================
# Self-service cutoffs
# ============================================================================

def validate_modification_allowed(
    current: Reservation,
    is_staff_action: bool,
    config: RestaurantConfig,
    now: datetime
) -> ValidationResult:
    """
    Decide whether an existing reservation may still be edited.

    Staff may edit anything except a completed reservation. Guests may not
    edit cancelled or completed reservations, nor anything inside the
    modification cutoff.
    """
    result = ValidationResult()

    if current.status is ReservationStatus.COMPLETED:
        result.add_error(
            "status",
            "Completed reservations cannot be modified",
            ErrorCode.RESERVATION_COMPLETED,
        )

    if is_staff_action:
        return result

    if current.status is ReservationStatus.CANCELLED:
        result.add_error(
            "status",
            "Cancelled reservations cannot be modified",
            ErrorCode.RESERVATION_CANCELLED,
        )

    cutoff = config.booking_rules.modification_cutoff
    if config.local(current.arrival_time) <= now + cutoff:
        result.add_error(
            "arrivalTime",
            f"Reservations cannot be modified within {_describe(cutoff.total_seconds())} of arrival time",
            ErrorCode.TOO_CLOSE_TO_ARRIVAL,
        )

    return result


def validate_cancellation_allowed(
    current: Reservation,
    actor: Actor,
    config: RestaurantConfig,
    now: datetime
) -> ValidationResult:
    """
    Decide whether a reservation may still be cancelled.

    Cancelled and completed reservations are closed for everyone. Otherwise
    guests cannot cancel inside the cancellation cutoff; staff always can.
    """
    result = ValidationResult()

    if current.status is ReservationStatus.CANCELLED:
        result.add_error(
            "status",
            "Reservation is already cancelled",
            ErrorCode.RESERVATION_CANCELLED,
        )
    elif current.status is ReservationStatus.COMPLETED:
        result.add_error(
            "status",
            "Completed reservations cannot be cancelled",
            ErrorCode.RESERVATION_COMPLETED,
        )

    if actor is Actor.STAFF or not result.is_valid:
        return result

    cutoff = config.booking_rules.cancellation_cutoff
    if config.local(current.arrival_time) <= now + cutoff:
        result.add_error(
            "arrivalTime",
            f"Reservations cannot be cancelled within {_describe(cutoff.total_seconds())} of arrival time",
            ErrorCode.TOO_CLOSE_TO_ARRIVAL,
        )

    return result


def _describe(seconds: float) -> str:
    minutes = int(seconds // 60)
    if minutes % 60 == 0 and minutes >= 60:
        hours = minutes // 60
        return f"{hours} hour{'s' if hours != 1 else ''}"
    return f"{minutes} minutes"
