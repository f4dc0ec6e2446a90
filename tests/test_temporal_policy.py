"""
Tests for restaurant operating policy: hours, closed days, advance windows,
large parties and the guest self-service cutoffs.
"""

import pytest
from datetime import date, datetime, timedelta

import pytz

from core.restaurant_config import RestaurantConfig
from domain.enums import Actor, ErrorCode, ReservationStatus
from services.temporal_policy import (
    validate_arrival_policy,
    validate_cancellation_allowed,
    validate_modification_allowed,
    validate_party_policy,
    validate_temporal_policy,
)

from tests.conftest import NOW, local_time


# ============================================================================
# Arrival Time Policy Tests
# ============================================================================

@pytest.mark.unit
class TestArrivalPolicy:
    """Tests for hours, closed days and the booking horizon."""

    def test_valid_arrival(self, restaurant_config):
        """Test a Wednesday dinner booking the day before."""
        assert validate_arrival_policy(local_time(21, 19), restaurant_config, NOW).is_valid

    def test_past_arrival(self, restaurant_config):
        """Test that a past arrival is a date-range error, not an advance-notice one."""
        result = validate_arrival_policy(local_time(18, 19), restaurant_config, NOW)
        assert result.codes() == [ErrorCode.INVALID_DATE_RANGE]

    def test_minimum_lead_time_is_exclusive(self, restaurant_config):
        """Test that arrival must be strictly after now plus one hour."""
        now = local_time(20, 12)

        at_boundary = validate_arrival_policy(local_time(20, 13), restaurant_config, now)
        assert at_boundary.codes() == [ErrorCode.ADVANCE_NOTICE_REQUIRED]

        just_after = validate_arrival_policy(local_time(20, 13, 1), restaurant_config, now)
        assert just_after.is_valid

    def test_too_far_in_future(self, restaurant_config):
        """Test rejection beyond the thirty day horizon."""
        result = validate_arrival_policy(local_time(20, 19, month=11), restaurant_config, NOW)
        assert result.codes() == [ErrorCode.TOO_FAR_FUTURE]

    def test_closed_monday(self, restaurant_config):
        """Test that any arrival on Monday is a closed-day error."""
        result = validate_arrival_policy(local_time(26, 19), restaurant_config, NOW)
        assert result.codes() == [ErrorCode.CLOSED_DAY]
        assert result.errors[0].field == "arrivalTime"

    def test_closed_holiday(self):
        """Test that configured closed dates are rejected."""
        config = RestaurantConfig(closed_dates={date(2026, 10, 22)})
        result = validate_arrival_policy(local_time(22, 19), config, NOW)
        assert result.codes() == [ErrorCode.CLOSED_DAY]

    @pytest.mark.parametrize("hour,minute,is_open", [
        (8, 0, False),
        (10, 59, False),
        (11, 0, True),
        (21, 59, True),
        (22, 0, False),
        (23, 30, False),
    ])
    def test_business_hours(self, restaurant_config, hour, minute, is_open):
        """Test the 11:00-22:00 arrival window, close time exclusive."""
        result = validate_arrival_policy(local_time(21, hour, minute), restaurant_config, NOW)
        if is_open:
            assert result.is_valid
        else:
            assert result.codes() == [ErrorCode.OUTSIDE_BUSINESS_HOURS]

    def test_hours_judged_in_restaurant_timezone(self, restaurant_config):
        """Test that a UTC instant is checked against local wall clock time."""
        # 23:00 UTC is 19:00 in New York during daylight saving time
        arrival = pytz.utc.localize(datetime(2026, 10, 21, 23, 0))
        assert validate_arrival_policy(arrival, restaurant_config, NOW).is_valid

        # 03:00 UTC Thursday is 23:00 Wednesday in New York
        late = pytz.utc.localize(datetime(2026, 10, 22, 3, 0))
        assert validate_arrival_policy(late, restaurant_config, NOW).codes() == [
            ErrorCode.OUTSIDE_BUSINESS_HOURS
        ]

    def test_errors_accumulate(self, restaurant_config):
        """Test that one arrival can break several rules at once."""
        result = validate_arrival_policy(local_time(26, 8), restaurant_config, NOW)
        assert set(result.codes()) == {ErrorCode.CLOSED_DAY, ErrorCode.OUTSIDE_BUSINESS_HOURS}


# ============================================================================
# Party Size Policy Tests
# ============================================================================

@pytest.mark.unit
class TestPartyPolicy:
    """Tests for large-party notice and the special approval threshold."""

    def test_large_party_needs_a_day_of_notice(self, restaurant_config):
        """Test that nine guests twelve hours out need more notice."""
        result = validate_party_policy(9, NOW + timedelta(hours=12), restaurant_config, NOW)
        assert result.codes() == [ErrorCode.ADVANCE_NOTICE_REQUIRED]
        assert result.errors[0].field == "tableSize"

    def test_large_party_with_enough_notice(self, restaurant_config):
        """Test that nine guests a day and more out are fine."""
        assert validate_party_policy(9, NOW + timedelta(hours=25), restaurant_config, NOW).is_valid

    def test_below_large_party_threshold(self, restaurant_config):
        """Test that eight guests need only the normal notice."""
        assert validate_party_policy(8, NOW + timedelta(hours=12), restaurant_config, NOW).is_valid

    def test_special_approval_threshold(self, restaurant_config):
        """Test that only parties above ten must go through staff."""
        far = NOW + timedelta(days=3)
        assert validate_party_policy(10, far, restaurant_config, NOW).is_valid

        result = validate_party_policy(11, far, restaurant_config, NOW)
        assert result.codes() == [ErrorCode.SPECIAL_APPROVAL_REQUIRED]

    def test_both_party_rules(self, restaurant_config):
        """Test that a short-notice twelve-top gets both errors."""
        result = validate_party_policy(12, NOW + timedelta(hours=12), restaurant_config, NOW)
        assert result.codes() == [ErrorCode.ADVANCE_NOTICE_REQUIRED, ErrorCode.SPECIAL_APPROVAL_REQUIRED]

    def test_party_rules_skipped_for_unusable_size(self, restaurant_config):
        """Test that a non-numeric size leaves only arrival rules."""
        result = validate_temporal_policy(local_time(21, 19), "twelve", restaurant_config, NOW)
        assert result.is_valid


# ============================================================================
# Self-Service Cutoff Tests
# ============================================================================

@pytest.mark.unit
class TestModificationAllowed:
    """Tests for who may still edit a reservation."""

    def test_guest_edit_well_ahead(self, make_reservation, restaurant_config):
        """Test that guests may edit more than two hours out."""
        reservation = make_reservation(arrival_time=local_time(20, 11, 1))
        assert validate_modification_allowed(reservation, False, restaurant_config, NOW).is_valid

    def test_guest_edit_inside_cutoff(self, make_reservation, restaurant_config):
        """Test that guests may not edit at or inside the two hour cutoff."""
        reservation = make_reservation(arrival_time=local_time(20, 11))
        result = validate_modification_allowed(reservation, False, restaurant_config, NOW)
        assert result.codes() == [ErrorCode.TOO_CLOSE_TO_ARRIVAL]
        assert "2 hours" in result.errors[0].message

    def test_staff_bypass_cutoff(self, make_reservation, restaurant_config):
        """Test that staff edits ignore the cutoff."""
        reservation = make_reservation(arrival_time=local_time(20, 9, 30))
        assert validate_modification_allowed(reservation, True, restaurant_config, NOW).is_valid

    def test_guest_cannot_edit_cancelled(self, make_reservation, restaurant_config):
        """Test that cancelled reservations are closed to guests."""
        reservation = make_reservation(status=ReservationStatus.CANCELLED)
        result = validate_modification_allowed(reservation, False, restaurant_config, NOW)
        assert result.codes() == [ErrorCode.RESERVATION_CANCELLED]

    def test_staff_can_edit_cancelled(self, make_reservation, restaurant_config):
        """Test that staff may still correct a cancelled reservation."""
        reservation = make_reservation(status=ReservationStatus.CANCELLED)
        assert validate_modification_allowed(reservation, True, restaurant_config, NOW).is_valid

    @pytest.mark.parametrize("is_staff_action", [True, False])
    def test_nobody_edits_completed(self, make_reservation, restaurant_config, is_staff_action):
        """Test that completed reservations are frozen for everyone."""
        reservation = make_reservation(status=ReservationStatus.COMPLETED)
        result = validate_modification_allowed(reservation, is_staff_action, restaurant_config, NOW)
        assert result.codes() == [ErrorCode.RESERVATION_COMPLETED]


@pytest.mark.unit
class TestCancellationAllowed:
    """Tests for the guest cancellation cutoff."""

    def test_guest_cancel_ahead_of_cutoff(self, make_reservation, restaurant_config):
        """Test that guests may cancel more than thirty minutes out."""
        reservation = make_reservation(arrival_time=local_time(20, 9, 31))
        assert validate_cancellation_allowed(reservation, Actor.GUEST, restaurant_config, NOW).is_valid

    def test_guest_cancel_inside_cutoff(self, make_reservation, restaurant_config):
        """Test that guests may not cancel inside thirty minutes."""
        reservation = make_reservation(arrival_time=local_time(20, 9, 20))
        result = validate_cancellation_allowed(reservation, Actor.GUEST, restaurant_config, NOW)
        assert result.codes() == [ErrorCode.TOO_CLOSE_TO_ARRIVAL]
        assert "30 minutes" in result.errors[0].message

    def test_staff_cancel_any_time(self, make_reservation, restaurant_config):
        """Test that staff cancellations have no cutoff."""
        reservation = make_reservation(arrival_time=local_time(20, 9, 5))
        assert validate_cancellation_allowed(reservation, Actor.STAFF, restaurant_config, NOW).is_valid

    @pytest.mark.parametrize("status,code", [
        (ReservationStatus.CANCELLED, ErrorCode.RESERVATION_CANCELLED),
        (ReservationStatus.COMPLETED, ErrorCode.RESERVATION_COMPLETED),
    ])
    @pytest.mark.parametrize("actor", [Actor.GUEST, Actor.STAFF])
    def test_closed_reservation(self, make_reservation, restaurant_config, status, code, actor):
        """Test that closed reservations name their status, even inside the guest cutoff."""
        reservation = make_reservation(status=status, arrival_time=local_time(20, 9, 20))
        result = validate_cancellation_allowed(reservation, actor, restaurant_config, NOW)
        assert result.codes() == [code]
