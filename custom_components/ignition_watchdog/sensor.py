"""Sensor platform for Ignition Watchdog."""
from __future__ import annotations

from typing import Any

from homeassistant.components.sensor import SensorDeviceClass, SensorEntity
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import COORDINATOR, DOMAIN, WatchdogState
from .coordinator import IgnitionWatchdogCoordinator


async def async_setup_platform(
    hass: HomeAssistant,
    config: dict,
    async_add_entities: AddEntitiesCallback,
    discovery_info: dict | None = None,
) -> None:
    """Set up the sensor platform."""
    if discovery_info is None:
        return

    coordinator: IgnitionWatchdogCoordinator = hass.data[DOMAIN][COORDINATOR]
    async_add_entities([WatchdogStateSensor(coordinator)])


class WatchdogStateSensor(CoordinatorEntity[IgnitionWatchdogCoordinator], SensorEntity):
    """Current state of the ignition watchdog."""

    _attr_name = "Ignition watchdog state"
    _attr_unique_id = f"{DOMAIN}_state"
    _attr_icon = "mdi:fire-alert"
    _attr_device_class = SensorDeviceClass.ENUM
    _attr_options = [state.value for state in WatchdogState]

    @property
    def native_value(self) -> str | None:
        """Return the watchdog state."""
        if self.coordinator.data is None:
            return None

        return self.coordinator.data.state.value

    @property
    def extra_state_attributes(self) -> dict[str, Any]:
        """Return counters and timers of the watchdog."""
        snapshot = self.coordinator.data
        if snapshot is None:
            return {}

        attributes = snapshot.to_dict()
        attributes.pop("state")
        return attributes
