"""Ignition watchdog state machine."""
from collections.abc import Awaitable, Callable
from datetime import datetime, timedelta
import logging

from .const import WORKING_STATE_HEATING, ProductType, WatchdogState
from .gateway import DeviceGateway, GatewayError, async_find_device
from .history import TemperatureHistory
from .models import ThermostatStatus, Timer, WatchdogSnapshot
from .power_cycle import PowerCycler
from .trend import TrendDetector

_LOGGER = logging.getLogger(__name__)


class IgnitionWatchdog:
    """Watches a heating appliance and power cycles it when ignition fails.

    All mutable state lives here and is only changed by async_tick, which the
    coordinator never runs concurrently with itself.
    """

    def __init__(
        self,
        gateway: DeviceGateway,
        power_cycler: PowerCycler,
        thermostat_name: str,
        temp_threshold: float,
        max_cycles: int,
        cycle_wait: timedelta,
        trend_detector: TrendDetector | None = None,
    ) -> None:
        """Initialize the watchdog in MONITORING with no history."""
        self.gateway = gateway
        self.power_cycler = power_cycler
        self.thermostat_name = thermostat_name
        self.temp_threshold = temp_threshold
        self.max_cycles = max_cycles
        self.cycle_wait = cycle_wait
        self.trend_detector = trend_detector or TrendDetector()

        self.state = WatchdogState.MONITORING
        self.cycle_count = 0
        self.history = TemperatureHistory()
        self.ignition_timer = Timer()
        self.cycle_timer = Timer()
        self.last_working_state: str | None = None

        self._handlers: dict[WatchdogState, Callable[[datetime], Awaitable[None]]] = {
            WatchdogState.MONITORING: self._async_handle_monitoring,
            WatchdogState.WAITING_FOR_IGNITION: self._async_handle_waiting_for_ignition,
            WatchdogState.WAITING_AFTER_CYCLE: self._async_handle_waiting_after_cycle,
            WatchdogState.FAILED: self._async_handle_failed,
        }

    @property
    def snapshot(self) -> WatchdogSnapshot:
        """Return the current state for publishing."""
        return WatchdogSnapshot(
            state=self.state,
            cycle_count=self.cycle_count,
            max_cycles=self.max_cycles,
            history_size=len(self.history),
            last_working_state=self.last_working_state,
            ignition_started_at=self.ignition_timer.started_at,
            last_cycle_at=self.cycle_timer.started_at,
        )

    async def async_tick(self, now: datetime) -> None:
        """Run the handler for the current state once.

        A gateway failure aborts the tick without touching state or counters;
        the next tick starts over.
        """
        try:
            await self._handlers[self.state](now)
        except GatewayError as err:
            _LOGGER.error("Tick failed: %s", err)

    async def _async_read_thermostat(self) -> ThermostatStatus | None:
        thermostat = await async_find_device(self.gateway, self.thermostat_name, ProductType.THERMOSTAT)
        if thermostat is None:
            _LOGGER.error("Could not find thermostat: %s", self.thermostat_name)
            return None

        return await self.gateway.async_get_thermostat(thermostat.mac)

    def _transition(self, state: WatchdogState) -> None:
        _LOGGER.debug("Watchdog state %s -> %s", self.state, state)
        self.state = state

    async def _async_handle_monitoring(self, now: datetime) -> None:
        status = await self._async_read_thermostat()
        if status is None:
            return

        temp_diff = status.heat_setpoint - status.temperature
        is_heating = status.working_state == WORKING_STATE_HEATING
        is_below_threshold = temp_diff >= self.temp_threshold

        # Give the appliance time to light before judging the trend
        if is_heating and self.last_working_state != WORKING_STATE_HEATING:
            _LOGGER.info(
                "Heating started - waiting %d minutes for ignition",
                Timer.minutes(self.cycle_wait),
            )
            self.ignition_timer.arm(now)
            self.history.clear()
            self.last_working_state = status.working_state
            self._transition(WatchdogState.WAITING_FOR_IGNITION)
            return

        self.last_working_state = status.working_state
        self.history.record(status.temperature, status.heat_setpoint, now)
        is_declining = self.trend_detector.is_declining(self.history)

        _LOGGER.info(
            "Status: %s° (setpoint: %s°, diff: %.1f°) | workingState: %s | cycles: %d/%d",
            status.temperature,
            status.heat_setpoint,
            temp_diff,
            status.working_state,
            self.cycle_count,
            self.max_cycles,
        )

        if self.cycle_count > 0 and (not is_heating or not is_below_threshold):
            _LOGGER.info("Heating successful - resetting cycle count")
            self.cycle_count = 0

        if not (is_heating and is_below_threshold and is_declining):
            return

        _LOGGER.warning(
            "PROBLEM DETECTED: Heating but temperature declining and %.1f° below setpoint",
            temp_diff,
        )

        if self.cycle_count >= self.max_cycles:
            _LOGGER.error(
                "Max cycles (%d) reached. Entering FAILED state. >>> USER INTERVENTION REQUIRED <<<",
                self.max_cycles,
            )
            self._transition(WatchdogState.FAILED)
            return

        if not await self.power_cycler.async_cycle():
            _LOGGER.error("Power cycle failed, will retry on the next check")
            return

        self.cycle_count += 1
        self.cycle_timer.arm(now)
        self._transition(WatchdogState.WAITING_AFTER_CYCLE)
        _LOGGER.info(
            "Power cycle %d/%d complete. Waiting %d minutes before next check.",
            self.cycle_count,
            self.max_cycles,
            Timer.minutes(self.cycle_wait),
        )

    async def _async_handle_waiting_for_ignition(self, now: datetime) -> None:
        if not self._grace_period_over(self.ignition_timer, now, "Waiting for ignition"):
            return

        _LOGGER.info("Ignition wait complete. Resuming monitoring.")
        self.history.clear()
        self._transition(WatchdogState.MONITORING)

    async def _async_handle_waiting_after_cycle(self, now: datetime) -> None:
        if not self._grace_period_over(self.cycle_timer, now, "Waiting after cycle"):
            return

        _LOGGER.info("Wait period complete. Resuming monitoring.")
        # Pre-cycle samples must not feed the trend detector
        self.history.clear()
        self._transition(WatchdogState.MONITORING)

    def _grace_period_over(self, timer: Timer, now: datetime, label: str) -> bool:
        if not timer.is_armed:
            _LOGGER.warning("%s without a running timer, resuming monitoring", label)
            return True

        remaining = timer.remaining(now, self.cycle_wait)
        if remaining > timedelta(0):
            _LOGGER.info("%s... %d minutes remaining", label, Timer.minutes(remaining))
            return False

        return True

    async def _async_handle_failed(self, now: datetime) -> None:
        status = await self._async_read_thermostat()
        if status is None:
            return

        temp_diff = status.heat_setpoint - status.temperature
        is_heating = status.working_state == WORKING_STATE_HEATING
        is_below_threshold = temp_diff >= self.temp_threshold

        _LOGGER.info(
            "FAILED STATE: %s° (diff: %.1f°) | workingState: %s | Waiting...",
            status.temperature,
            temp_diff,
            status.working_state,
        )

        if is_heating and is_below_threshold:
            return

        _LOGGER.info(
            "Appliance recovered - %s. Resetting cycle count and resuming monitoring.",
            "heating stopped" if not is_heating else "temperature within threshold",
        )
        self.cycle_count = 0
        self.history.clear()
        self._transition(WatchdogState.MONITORING)
