"""Pytest configuration and fixtures for reservation admission tests."""
import pytest
from datetime import datetime, timedelta

import pytz

from core.restaurant_config import BookingRules, RestaurantConfig
from db.session import create_engine, create_session_factory, drop_db, init_db
from domain.enums import ReservationStatus
from domain.models import Reservation, ReservationDraft
from services.reservation_service import ReservationService
from services.reservation_validation import AdmissionEngine


NEW_YORK = pytz.timezone("America/New_York")


def local_time(day: int, hour: int, minute: int = 0, month: int = 10) -> datetime:
    """Restaurant-local wall clock time in 2026."""
    return NEW_YORK.localize(datetime(2026, month, day, hour, minute))


# Tuesday morning; Monday 19 Oct and Monday 26 Oct are closed days
NOW = local_time(20, 9)
TOMORROW_EVENING = local_time(21, 19)


class FrozenClock:
    """Settable clock injected into the admission engine."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture(scope="function")
def clock():
    """Clock frozen at Tuesday 20 Oct 2026, 09:00 New York time."""
    return FrozenClock(NOW)


@pytest.fixture(scope="function")
def restaurant_config():
    """Default configuration: 11:00-22:00, closed Mondays, 40 seats per window."""
    return RestaurantConfig()


@pytest.fixture(scope="function")
def small_config():
    """Configuration with a ten-seat ceiling for capacity tests."""
    return RestaurantConfig(booking_rules=BookingRules(capacity_ceiling=10))


@pytest.fixture(scope="function")
def admission_engine(restaurant_config, clock):
    """Admission engine on the default configuration and the frozen clock."""
    return AdmissionEngine(restaurant_config, clock=clock)


@pytest.fixture(scope="function")
def sample_draft_data():
    """Provide a draft that passes every rule."""
    return {
        "guest_name": "Jane Smith",
        "guest_email": "jane.smith@example.com",
        "guest_phone": "+1 (555) 123-4567",
        "arrival_time": TOMORROW_EVENING,
        "table_size": 4,
        "notes": "Window seat preferred",
    }


@pytest.fixture(scope="function")
def make_draft(sample_draft_data):
    """Factory fixture to build drafts with overrides."""
    def _make(**kwargs):
        data = sample_draft_data.copy()
        data.update(kwargs)
        return ReservationDraft(**data)
    return _make


@pytest.fixture(scope="function")
def make_reservation():
    """Factory fixture to build stored reservations with overrides."""
    counter = {"n": 0}

    def _make(**kwargs):
        counter["n"] += 1
        data = {
            "id": f"RES_TEST_{counter['n']}",
            "guest_name": f"Guest {counter['n']}",
            "guest_email": f"guest{counter['n']}@example.com",
            "guest_phone": "+15551234567",
            "arrival_time": TOMORROW_EVENING,
            "table_size": 4,
            "status": ReservationStatus.REQUESTED,
        }
        data.update(kwargs)
        return Reservation(**data)
    return _make


@pytest.fixture(scope="function")
def db_engine(tmp_path):
    """File-backed SQLite engine so worker threads share one database."""
    engine = create_engine(f"sqlite:///{tmp_path / 'reservations.db'}")
    init_db(engine)
    yield engine
    drop_db(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory bound to the test database."""
    return create_session_factory(db_engine)


@pytest.fixture(scope="function")
def reservation_service(session_factory, admission_engine):
    """Create a reservation service instance for testing."""
    return ReservationService(session_factory, admission_engine)
