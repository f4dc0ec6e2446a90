"""
Restaurant configuration for business rules, hours, closed days, and booking policies.
Timezone-aware; all thresholds used by the admission engine live here.
"""

from dataclasses import dataclass, field
from datetime import date, time, datetime, timedelta
from typing import FrozenSet, Optional, Set
from enum import Enum
import pytz

from core.settings import Settings


class ConfigurationError(Exception):
    """Raised when restaurant configuration is missing or inconsistent."""
    pass


class DayOfWeek(Enum):
    """Days of the week (values match date.weekday())."""
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @classmethod
    def from_name(cls, name: str) -> "DayOfWeek":
        try:
            return cls[name.strip().upper()]
        except KeyError:
            raise ConfigurationError(f"Unknown weekday: {name!r}") from None


@dataclass(frozen=True)
class TimeRange:
    """Time range with opening and closing times."""
    open_time: time
    close_time: time

    def is_open_at(self, check_time: time) -> bool:
        """Check if the restaurant takes arrivals at this time."""
        return self.open_time <= check_time < self.close_time


@dataclass(frozen=True)
class BookingRules:
    """Booking rules and constraints."""
    # Party size settings
    min_party_size: int = 1
    max_party_size: int = 12
    large_party_threshold: int = 9  # Parties >= this need extra notice
    large_party_lead_time_hours: int = 24
    special_approval_threshold: int = 10  # Parties > this must call the restaurant

    # Lead time settings
    minimum_lead_time_minutes: int = 60
    maximum_horizon_days: int = 30

    # Guest self-service cutoffs
    modification_cutoff_minutes: int = 120
    cancellation_cutoff_minutes: int = 30

    # Capacity settings
    conflict_window_minutes: int = 120
    capacity_ceiling: int = 40

    # Field limits
    name_min_length: int = 2
    name_max_length: int = 100
    email_max_length: int = 254
    notes_max_length: int = 500
    phone_min_digits: int = 7
    phone_max_digits: int = 15

    @property
    def minimum_lead_time(self) -> timedelta:
        return timedelta(minutes=self.minimum_lead_time_minutes)

    @property
    def maximum_horizon(self) -> timedelta:
        return timedelta(days=self.maximum_horizon_days)

    @property
    def large_party_lead_time(self) -> timedelta:
        return timedelta(hours=self.large_party_lead_time_hours)

    @property
    def modification_cutoff(self) -> timedelta:
        return timedelta(minutes=self.modification_cutoff_minutes)

    @property
    def cancellation_cutoff(self) -> timedelta:
        return timedelta(minutes=self.cancellation_cutoff_minutes)

    @property
    def conflict_window(self) -> timedelta:
        return timedelta(minutes=self.conflict_window_minutes)

    def is_large_party(self, party_size: int) -> bool:
        return party_size >= self.large_party_threshold

    def requires_special_approval(self, party_size: int) -> bool:
        return party_size > self.special_approval_threshold


@dataclass
class RestaurantConfig:
    """Complete restaurant configuration."""

    name: str = "My Restaurant"
    timezone: str = "America/New_York"

    # One canonical window for every day the restaurant is open
    hours: TimeRange = field(default_factory=lambda: TimeRange(time(11, 0), time(22, 0)))

    closed_weekdays: FrozenSet[DayOfWeek] = frozenset({DayOfWeek.MONDAY})

    # Holiday dates that are closed
    closed_dates: Set[date] = field(default_factory=set)

    booking_rules: BookingRules = field(default_factory=BookingRules)

    def __post_init__(self):
        """Reject configurations the engine cannot evaluate against."""
        try:
            self._tz = pytz.timezone(self.timezone)
        except pytz.UnknownTimeZoneError:
            raise ConfigurationError(f"Unknown timezone: {self.timezone!r}") from None

        if self.hours.open_time >= self.hours.close_time:
            raise ConfigurationError(
                f"Opening time {self.hours.open_time} must be before closing time {self.hours.close_time}"
            )

        rules = self.booking_rules
        if rules.min_party_size < 1 or rules.max_party_size < rules.min_party_size:
            raise ConfigurationError(
                f"Invalid party size bounds [{rules.min_party_size}, {rules.max_party_size}]"
            )
        if rules.capacity_ceiling < 1:
            raise ConfigurationError("capacity_ceiling must be positive")
        if rules.conflict_window_minutes < 1:
            raise ConfigurationError("conflict_window_minutes must be positive")
        if rules.maximum_horizon <= rules.minimum_lead_time:
            raise ConfigurationError("maximum_horizon_days must exceed the minimum lead time")

    @property
    def tz(self) -> pytz.BaseTzInfo:
        """Get the timezone object."""
        return self._tz

    def is_closed_on(self, check_date: date) -> bool:
        """Check if the restaurant is closed for the whole day."""
        if check_date in self.closed_dates:
            return True
        return DayOfWeek(check_date.weekday()) in self.closed_weekdays

    def local(self, dt: datetime) -> datetime:
        """Convert a datetime to restaurant-local time."""
        if dt.tzinfo is None:
            return self._tz.localize(dt)
        return dt.astimezone(self._tz)

    @classmethod
    def from_settings(cls, settings: Settings) -> "RestaurantConfig":
        """Build the configuration from environment-backed settings."""
        try:
            open_time = time.fromisoformat(settings.restaurant_hours_open)
            close_time = time.fromisoformat(settings.restaurant_hours_close)
        except ValueError as e:
            raise ConfigurationError(f"Invalid restaurant hours: {e}") from e

        booking_rules = BookingRules(
            min_party_size=settings.min_party_size,
            max_party_size=settings.max_party_size,
            large_party_threshold=settings.large_party_threshold,
            large_party_lead_time_hours=settings.large_party_lead_time_hours,
            special_approval_threshold=settings.special_approval_threshold,
            minimum_lead_time_minutes=settings.minimum_lead_time_minutes,
            maximum_horizon_days=settings.maximum_horizon_days,
            modification_cutoff_minutes=settings.modification_cutoff_minutes,
            cancellation_cutoff_minutes=settings.cancellation_cutoff_minutes,
            conflict_window_minutes=settings.conflict_window_minutes,
            capacity_ceiling=settings.capacity_ceiling,
        )

        return cls(
            name=settings.restaurant_name,
            timezone=settings.restaurant_timezone,
            hours=TimeRange(open_time=open_time, close_time=close_time),
            closed_weekdays=frozenset(DayOfWeek.from_name(d) for d in settings.closed_weekdays_list),
            booking_rules=booking_rules,
        )


def get_default_restaurant_config() -> RestaurantConfig:
    """Get the default restaurant configuration."""
    return RestaurantConfig()
