"""Tests for capacity conflict detection."""

import pytest
from datetime import timedelta

from core.restaurant_config import BookingRules, RestaurantConfig
from domain.enums import ErrorCode, ReservationStatus
from services.conflict_detection import SLOT_UNAVAILABLE_MESSAGE, ConflictDetector

from tests.conftest import TOMORROW_EVENING


@pytest.fixture
def detector(restaurant_config):
    """Conflict detector with the default forty-seat ceiling."""
    return ConflictDetector(restaurant_config)


@pytest.mark.unit
class TestConflictDetector:
    """Tests for summing seats around a proposed arrival."""

    def test_no_existing_reservations(self, detector):
        """Test that an empty slot always fits."""
        assert detector.check(TOMORROW_EVENING, 12, []).is_valid

    def test_fifteen_fours_plus_eight_exceeds_ceiling(self, detector, make_reservation):
        """Test a saturated slot yields one aggregate error."""
        existing = [make_reservation(table_size=4) for _ in range(15)]

        result = detector.check(TOMORROW_EVENING, 8, existing)

        assert not result.is_valid
        assert len(result.errors) == 1
        assert result.errors[0].code == ErrorCode.POTENTIAL_CONFLICT
        assert result.errors[0].field == "arrivalTime"
        assert result.errors[0].message == SLOT_UNAVAILABLE_MESSAGE

    def test_filling_exactly_to_ceiling(self, detector, make_reservation):
        """Test that reaching the ceiling is allowed and passing it is not."""
        existing = [make_reservation(table_size=4) for _ in range(9)]

        assert detector.check(TOMORROW_EVENING, 4, existing).is_valid
        assert not detector.check(TOMORROW_EVENING, 5, existing).is_valid

    def test_cancelled_reservations_never_count(self, detector, make_reservation):
        """Test that cancelled bookings free their seats."""
        existing = [make_reservation(table_size=4) for _ in range(9)]
        existing += [make_reservation(table_size=4, status=ReservationStatus.CANCELLED) for _ in range(6)]

        assert detector.seats_taken(TOMORROW_EVENING, existing) == 36
        assert detector.check(TOMORROW_EVENING, 4, existing).is_valid

    @pytest.mark.parametrize("status", [ReservationStatus.REQUESTED, ReservationStatus.APPROVED, ReservationStatus.COMPLETED])
    def test_live_statuses_count(self, detector, make_reservation, status):
        """Test that every non-cancelled status holds seats."""
        existing = [make_reservation(table_size=6, status=status)]
        assert detector.seats_taken(TOMORROW_EVENING, existing) == 6

    def test_window_is_inclusive(self, detector, make_reservation):
        """Test that reservations exactly two hours away still count."""
        existing = [
            make_reservation(table_size=5, arrival_time=TOMORROW_EVENING - timedelta(minutes=120)),
            make_reservation(table_size=5, arrival_time=TOMORROW_EVENING + timedelta(minutes=120)),
            make_reservation(table_size=7, arrival_time=TOMORROW_EVENING + timedelta(minutes=121)),
        ]
        assert detector.seats_taken(TOMORROW_EVENING, existing) == 10

    def test_excluded_reservation(self, detector, make_reservation):
        """Test that a reservation never conflicts with itself."""
        own = make_reservation(table_size=40)
        assert detector.check(TOMORROW_EVENING, 40, [own], exclude_id=own.id).is_valid
        assert not detector.check(TOMORROW_EVENING, 40, [own]).is_valid

    def test_window_bounds(self, detector):
        """Test the span storage must search."""
        start, end = detector.window_bounds(TOMORROW_EVENING)
        assert start == TOMORROW_EVENING - timedelta(hours=2)
        assert end == TOMORROW_EVENING + timedelta(hours=2)

    def test_configured_ceiling(self, small_config, make_reservation):
        """Test that the ceiling comes from configuration."""
        detector = ConflictDetector(small_config)
        existing = [make_reservation(table_size=6)]

        assert detector.check(TOMORROW_EVENING, 4, existing).is_valid
        assert not detector.check(TOMORROW_EVENING, 5, existing).is_valid

    def test_configured_window(self, make_reservation):
        """Test that a narrower window ignores farther bookings."""
        config = RestaurantConfig(booking_rules=BookingRules(conflict_window_minutes=60, capacity_ceiling=10))
        detector = ConflictDetector(config)
        existing = [make_reservation(table_size=10, arrival_time=TOMORROW_EVENING + timedelta(minutes=90))]

        assert detector.check(TOMORROW_EVENING, 10, existing).is_valid

    def test_conflict_logged(self, detector, make_reservation, caplog):
        """Test that rejections are logged with the seat count."""
        existing = [make_reservation(table_size=40)]

        with caplog.at_level("INFO", logger="services.conflict_detection"):
            detector.check(TOMORROW_EVENING, 2, existing)

        record = caplog.records[-1]
        assert record.getMessage() == "Time slot conflict detected"
        assert record.seats_taken == 40
        assert record.capacity_ceiling == 40
