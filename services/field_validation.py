"""
Structural validation of a single reservation's fields.
Pure and stateless: every violation is collected, nothing short-circuits.
"""

import math
import re
from typing import Any, Optional

from core.restaurant_config import BookingRules, RestaurantConfig
from core.utils_datetime import parse_arrival_time
from domain.enums import ErrorCode, ReservationStatus
from domain.models import ReservationDraft
from domain.results import ValidationResult


# ============================================================================
# Patterns
# ============================================================================

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')

# Formatting characters people type into phone numbers
PHONE_SEPARATORS = re.compile(r'[\s\-\(\)\.]')

# "+" then a country code that cannot start with 0
INTERNATIONAL_PHONE_PATTERN = re.compile(r'^\+[1-9]\d*$')
LOCAL_PHONE_PATTERN = re.compile(r'^\d+$')


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


# ============================================================================
# Guest name & email
# ============================================================================

def validate_guest_name(name: Any, rules: BookingRules) -> ValidationResult:
    """Name is required and its trimmed length must fall within the configured bounds."""
    result = ValidationResult()

    if _is_blank(name):
        result.add_error("guestName", "Guest name is required", ErrorCode.REQUIRED_FIELD)
        return result

    if not isinstance(name, str):
        result.add_error("guestName", "Guest name must be text", ErrorCode.INVALID_TYPE)
        return result

    length = len(name.strip())
    if length < rules.name_min_length:
        result.add_error(
            "guestName",
            f"Guest name must be at least {rules.name_min_length} characters long",
            ErrorCode.MIN_LENGTH,
        )
    elif length > rules.name_max_length:
        result.add_error(
            "guestName",
            f"Guest name must not exceed {rules.name_max_length} characters",
            ErrorCode.MAX_LENGTH,
        )

    return result


def validate_guest_email(email: Any, rules: BookingRules) -> ValidationResult:
    result = ValidationResult()

    if _is_blank(email):
        result.add_error("guestEmail", "Email is required", ErrorCode.REQUIRED_FIELD)
        return result

    if not isinstance(email, str):
        result.add_error("guestEmail", "Email must be text", ErrorCode.INVALID_TYPE)
        return result

    email = email.strip()
    if not EMAIL_PATTERN.match(email):
        result.add_error("guestEmail", "Invalid email format", ErrorCode.INVALID_FORMAT)
    elif len(email) > rules.email_max_length:
        result.add_error(
            "guestEmail",
            f"Email must not exceed {rules.email_max_length} characters",
            ErrorCode.MAX_LENGTH,
        )

    return result


# ============================================================================
# Phone
# ============================================================================

def normalize_phone(phone: str, rules: Optional[BookingRules] = None) -> Optional[str]:
    """
    Normalize a phone number by stripping formatting characters.

    Args:
        phone: Raw phone number input
        rules: Booking rules holding the digit-count bounds

    Returns:
        "+<digits>" for international numbers, "<digits>" for local ones,
        or None if the number is not acceptable
    """
    rules = rules or BookingRules()
    cleaned = PHONE_SEPARATORS.sub('', phone.strip())

    if cleaned.startswith('+'):
        if not INTERNATIONAL_PHONE_PATTERN.match(cleaned):
            return None
        digits = cleaned[1:]
    else:
        # A leading 0 marks a trunk prefix we do not accept for local numbers
        if not LOCAL_PHONE_PATTERN.match(cleaned) or cleaned.startswith('0'):
            return None
        digits = cleaned

    if not rules.phone_min_digits <= len(digits) <= rules.phone_max_digits:
        return None

    return cleaned


def validate_guest_phone(phone: Any, rules: BookingRules) -> ValidationResult:
    result = ValidationResult()

    if _is_blank(phone):
        result.add_error("guestPhone", "Phone number is required", ErrorCode.REQUIRED_FIELD)
        return result

    if not isinstance(phone, str):
        result.add_error("guestPhone", "Phone number must be text", ErrorCode.INVALID_TYPE)
        return result

    if normalize_phone(phone, rules) is None:
        result.add_error(
            "guestPhone",
            "Invalid phone number format. Use international format (+1234567890) "
            "or local format (1234567890) without a leading 0",
            ErrorCode.INVALID_FORMAT,
        )

    return result


# ============================================================================
# Party size, arrival time, notes
# ============================================================================

def is_whole_number(value: Any) -> bool:
    """True for ints, excluding bools."""
    return isinstance(value, int) and not isinstance(value, bool)


def validate_table_size(table_size: Any, rules: BookingRules) -> ValidationResult:
    result = ValidationResult()

    if table_size is None:
        result.add_error("tableSize", "Table size is required", ErrorCode.REQUIRED_FIELD)
    elif not is_whole_number(table_size):
        result.add_error("tableSize", "Table size must be a whole number", ErrorCode.INVALID_TYPE)
    elif table_size < rules.min_party_size:
        result.add_error(
            "tableSize",
            f"Table size must be at least {rules.min_party_size}",
            ErrorCode.MIN_VALUE,
        )
    elif table_size > rules.max_party_size:
        result.add_error(
            "tableSize",
            f"Table size cannot exceed {rules.max_party_size} people",
            ErrorCode.MAX_VALUE,
        )

    return result


def validate_arrival_time(arrival_time: Any, config: RestaurantConfig) -> ValidationResult:
    """Arrival time must be present and parse to a real instant."""
    result = ValidationResult()

    if arrival_time is None or (isinstance(arrival_time, str) and not arrival_time.strip()):
        result.add_error("arrivalTime", "Arrival time is required", ErrorCode.REQUIRED_FIELD)
    elif isinstance(arrival_time, float) and math.isnan(arrival_time):
        result.add_error("arrivalTime", "Invalid date format", ErrorCode.INVALID_FORMAT)
    elif parse_arrival_time(arrival_time, config.tz) is None:
        result.add_error("arrivalTime", "Invalid date format", ErrorCode.INVALID_FORMAT)

    return result


def validate_notes(notes: Any, rules: BookingRules) -> ValidationResult:
    result = ValidationResult()

    if notes is None:
        return result

    if not isinstance(notes, str):
        result.add_error("notes", "Notes must be text", ErrorCode.INVALID_TYPE)
    elif len(notes) > rules.notes_max_length:
        result.add_error(
            "notes",
            f"Notes must not exceed {rules.notes_max_length} characters",
            ErrorCode.MAX_LENGTH,
        )

    return result


def validate_initial_status(status: Any) -> ValidationResult:
    """New reservations may only start out as Requested."""
    result = ValidationResult()

    if status is None:
        return result

    try:
        status = ReservationStatus(status)
    except ValueError:
        result.add_error("status", f"Unknown reservation status: {status}", ErrorCode.INVALID_FORMAT)
        return result

    if status is not ReservationStatus.REQUESTED:
        result.add_error(
            "status",
            f"New reservations must start as {ReservationStatus.REQUESTED.value}, not {status.value}",
            ErrorCode.INVALID_STATUS_TRANSITION,
        )

    return result


# ============================================================================
# Complete field validation
# ============================================================================

def validate_fields(draft: ReservationDraft, config: RestaurantConfig) -> ValidationResult:
    """
    Run every structural check against a draft.

    Args:
        draft: Reservation draft (create path, or the merged update view)
        config: Restaurant configuration

    Returns:
        ValidationResult with every field violation found
    """
    rules = config.booking_rules

    return ValidationResult.combine(
        validate_guest_name(draft.guest_name, rules),
        validate_guest_email(draft.guest_email, rules),
        validate_guest_phone(draft.guest_phone, rules),
        validate_arrival_time(draft.arrival_time, config),
        validate_table_size(draft.table_size, rules),
        validate_notes(draft.notes, rules),
    )
