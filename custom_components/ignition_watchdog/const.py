"""Constants for the Ignition Watchdog integration."""
from datetime import timedelta
from enum import StrEnum

DOMAIN = "ignition_watchdog"

# Configuration keys
CONF_THERMOSTAT_NAME = "thermostat_name"
CONF_PLUG_NAME = "plug_name"
CONF_CHECK_INTERVAL = "check_interval"
CONF_CYCLE_WAIT = "cycle_wait"
CONF_POWER_OFF_DURATION = "power_off_duration"
CONF_TEMP_THRESHOLD = "temp_threshold"
CONF_MAX_CYCLES = "max_cycles"
CONF_PLUG_ON_ATTEMPTS = "plug_on_attempts"

# Defaults
DEFAULT_CHECK_INTERVAL = 60  # seconds
DEFAULT_CYCLE_WAIT = 10 * 60  # seconds
DEFAULT_POWER_OFF_DURATION = 10  # seconds
DEFAULT_TEMP_THRESHOLD = 2.0  # degrees below setpoint
DEFAULT_MAX_CYCLES = 3
DEFAULT_PLUG_ON_ATTEMPTS = 3

# Trend detection
HISTORY_SIZE = 10  # samples kept
TREND_LOOKBACK = 2  # samples back from the latest, ~2 check intervals
DECLINE_THRESHOLD = 1.0  # degrees, debounces sensor noise

# Gateway
WORKING_STATE_HEATING = "heating"
PLUG_ON_RETRY_DELAY = timedelta(seconds=2)

# Attributes
ATTR_CYCLE_COUNT = "cycle_count"
ATTR_MAX_CYCLES = "max_cycles"
ATTR_HISTORY_SIZE = "history_size"
ATTR_LAST_WORKING_STATE = "last_working_state"
ATTR_IGNITION_STARTED_AT = "ignition_started_at"
ATTR_LAST_CYCLE_AT = "last_cycle_at"

COORDINATOR = "coordinator"


class WatchdogState(StrEnum):
    """States of the watchdog state machine."""

    MONITORING = "monitoring"
    WAITING_FOR_IGNITION = "waiting_for_ignition"
    WAITING_AFTER_CYCLE = "waiting_after_cycle"
    FAILED = "failed"


class ProductType(StrEnum):
    """Device kinds the gateway can report."""

    PLUG = "Plug"
    THERMOSTAT = "Thermostat"
