"""Binary sensor platform for Ignition Watchdog."""
from __future__ import annotations

from homeassistant.components.binary_sensor import BinarySensorDeviceClass, BinarySensorEntity
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import COORDINATOR, DOMAIN
from .coordinator import IgnitionWatchdogCoordinator


async def async_setup_platform(
    hass: HomeAssistant,
    config: dict,
    async_add_entities: AddEntitiesCallback,
    discovery_info: dict | None = None,
) -> None:
    """Set up the binary sensor platform."""
    if discovery_info is None:
        return

    coordinator: IgnitionWatchdogCoordinator = hass.data[DOMAIN][COORDINATOR]
    async_add_entities([InterventionRequiredBinarySensor(coordinator)])


class InterventionRequiredBinarySensor(CoordinatorEntity[IgnitionWatchdogCoordinator], BinarySensorEntity):
    """On while the watchdog has run out of power cycles."""

    _attr_name = "Ignition watchdog intervention required"
    _attr_unique_id = f"{DOMAIN}_intervention_required"
    _attr_device_class = BinarySensorDeviceClass.PROBLEM

    @property
    def is_on(self) -> bool | None:
        """Return True if the appliance needs manual attention."""
        if self.coordinator.data is None:
            return None

        return self.coordinator.data.intervention_required
