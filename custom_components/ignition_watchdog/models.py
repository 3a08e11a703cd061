"""Data models for Ignition Watchdog."""
import math
from dataclasses import dataclass
from datetime import datetime, timedelta

from .const import (
    ATTR_CYCLE_COUNT,
    ATTR_HISTORY_SIZE,
    ATTR_IGNITION_STARTED_AT,
    ATTR_LAST_CYCLE_AT,
    ATTR_LAST_WORKING_STATE,
    ATTR_MAX_CYCLES,
    ProductType,
    WatchdogState,
)


@dataclass(frozen=True)
class Sample:
    """Single temperature reading kept for trend detection."""

    captured_at: datetime
    temperature: float
    setpoint: float


@dataclass(frozen=True)
class Device:
    """A device known to the gateway."""

    nickname: str
    product_type: ProductType
    mac: str
    product_model: str


@dataclass(frozen=True)
class ThermostatStatus:
    """Thermostat reading as reported by the gateway."""

    working_state: str
    temperature: float
    heat_setpoint: float


class Timer:
    """A grace period timer that is either armed at an instant or not running."""

    def __init__(self) -> None:
        """Initialize an unarmed timer."""
        self._started_at: datetime | None = None

    @property
    def is_armed(self) -> bool:
        """Return True if the timer has been started."""
        return self._started_at is not None

    @property
    def started_at(self) -> datetime | None:
        """Return the instant the timer was armed, if any."""
        return self._started_at

    def arm(self, now: datetime) -> None:
        """Start (or restart) the timer at now."""
        self._started_at = now

    def remaining(self, now: datetime, duration: timedelta) -> timedelta:
        """Return the time left before duration has elapsed.

        An unarmed timer has nothing left to wait for.
        """
        if self._started_at is None:
            return timedelta(0)

        return max(duration - (now - self._started_at), timedelta(0))

    def has_expired(self, now: datetime, duration: timedelta) -> bool:
        """Return True once at least duration has elapsed since arming."""
        return self.remaining(now, duration) <= timedelta(0)

    @staticmethod
    def minutes(value: timedelta) -> int:
        """Round a remaining time up to whole minutes for display."""
        return math.ceil(value.total_seconds() / 60)


@dataclass(frozen=True)
class WatchdogSnapshot:
    """Read-only view of the watchdog published after every tick."""

    state: WatchdogState
    cycle_count: int
    max_cycles: int
    history_size: int
    last_working_state: str | None
    ignition_started_at: datetime | None
    last_cycle_at: datetime | None

    @property
    def intervention_required(self) -> bool:
        """Return True while the watchdog has given up on power cycling."""
        return self.state == WatchdogState.FAILED

    def to_dict(self) -> dict:
        """Convert to dictionary for entity attributes."""
        return {
            "state": self.state.value,
            ATTR_CYCLE_COUNT: self.cycle_count,
            ATTR_MAX_CYCLES: self.max_cycles,
            ATTR_HISTORY_SIZE: self.history_size,
            ATTR_LAST_WORKING_STATE: self.last_working_state,
            ATTR_IGNITION_STARTED_AT: self.ignition_started_at.isoformat() if self.ignition_started_at else None,
            ATTR_LAST_CYCLE_AT: self.last_cycle_at.isoformat() if self.last_cycle_at else None,
        }
