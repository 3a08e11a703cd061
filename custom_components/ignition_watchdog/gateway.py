"""Device gateway for Ignition Watchdog."""
from __future__ import annotations

from abc import ABC, abstractmethod
import asyncio
import logging

from homeassistant.components.climate import (
    ATTR_CURRENT_TEMPERATURE,
    ATTR_HVAC_ACTION,
    ATTR_TARGET_TEMP_LOW,
    DOMAIN as CLIMATE_DOMAIN,
)
from homeassistant.components.input_boolean import DOMAIN as INPUT_BOOLEAN_DOMAIN
from homeassistant.components.switch import DOMAIN as SWITCH_DOMAIN
from homeassistant.const import (
    ATTR_ENTITY_ID,
    ATTR_TEMPERATURE,
    SERVICE_TURN_OFF,
    SERVICE_TURN_ON,
    STATE_OFF,
    STATE_ON,
    STATE_UNAVAILABLE,
    STATE_UNKNOWN,
)
from homeassistant.core import HomeAssistant, State
from homeassistant.exceptions import HomeAssistantError

from .const import DEFAULT_PLUG_ON_ATTEMPTS, PLUG_ON_RETRY_DELAY, ProductType
from .models import Device, ThermostatStatus

_LOGGER = logging.getLogger(__name__)

PLUG_DOMAINS = (SWITCH_DOMAIN, INPUT_BOOLEAN_DOMAIN)


class GatewayError(HomeAssistantError):
    """A gateway call could not be completed."""


class AuthenticationError(GatewayError):
    """The gateway refused or could not establish a session."""


class DeviceNotFoundError(GatewayError):
    """No device matches the configured name."""


class DeviceGateway(ABC):
    """The device capabilities the watchdog depends on.

    Reads raise GatewayError when they cannot be answered. Commands report
    failure by returning False.
    """

    @abstractmethod
    async def async_login(self) -> None:
        """Establish a session; raises AuthenticationError on failure."""

    @abstractmethod
    async def async_list_devices(self) -> list[Device]:
        """Return all devices known to the gateway."""

    @abstractmethod
    async def async_get_thermostat(self, mac: str) -> ThermostatStatus:
        """Return the current thermostat status."""

    @abstractmethod
    async def async_plug_off(self, mac: str, model: str) -> bool:
        """Switch the plug off."""

    @abstractmethod
    async def async_plug_on(self, mac: str, model: str) -> bool:
        """Switch the plug on."""

    @abstractmethod
    async def async_is_plug_on(self, mac: str, model: str) -> bool:
        """Return True if the plug is currently on."""


async def async_find_device(gateway: DeviceGateway, name: str, product_type: ProductType) -> Device | None:
    """Return the device with the given nickname and type, if any."""
    for device in await gateway.async_list_devices():
        if device.nickname == name and device.product_type == product_type:
            return device

    return None


class HomeAssistantGateway(DeviceGateway):
    """Gateway backed by Home Assistant climate and switch entities.

    The entity id stands in for the device address and the entity domain for
    the product model, so commands go to the matching service domain.
    """

    def __init__(self, hass: HomeAssistant, plug_on_attempts: int = DEFAULT_PLUG_ON_ATTEMPTS) -> None:
        """Initialize the gateway."""
        self.hass = hass
        self.plug_on_attempts = plug_on_attempts

    async def async_login(self) -> None:
        """Check that Home Assistant can serve thermostat reads and plug commands."""
        if CLIMATE_DOMAIN not in self.hass.config.components:
            raise AuthenticationError("The climate integration is not loaded")

        for domain in PLUG_DOMAINS:
            if self.hass.services.has_service(domain, SERVICE_TURN_ON) and self.hass.services.has_service(
                domain, SERVICE_TURN_OFF
            ):
                return

        raise AuthenticationError("No switch services are available")

    async def async_list_devices(self) -> list[Device]:
        """Return climate entities as thermostats and switch entities as plugs."""
        devices = []
        for state in self.hass.states.async_all([CLIMATE_DOMAIN, *PLUG_DOMAINS]):
            product_type = ProductType.THERMOSTAT if state.domain == CLIMATE_DOMAIN else ProductType.PLUG
            devices.append(
                Device(
                    nickname=state.name,
                    product_type=product_type,
                    mac=state.entity_id,
                    product_model=state.domain,
                )
            )

        return devices

    async def async_get_thermostat(self, mac: str) -> ThermostatStatus:
        """Read working state, temperature and heat setpoint from a climate entity."""
        state = self._get_available_state(mac)

        setpoint = state.attributes.get(ATTR_TEMPERATURE)
        if setpoint is None:
            setpoint = state.attributes.get(ATTR_TARGET_TEMP_LOW)

        try:
            temperature = float(state.attributes[ATTR_CURRENT_TEMPERATURE])
            heat_setpoint = float(setpoint)
        except (KeyError, TypeError, ValueError) as err:
            raise GatewayError(f"Thermostat {mac} reports no usable temperature: {err}") from err

        return ThermostatStatus(
            working_state=str(state.attributes.get(ATTR_HVAC_ACTION)),
            temperature=temperature,
            heat_setpoint=heat_setpoint,
        )

    async def async_plug_off(self, mac: str, model: str) -> bool:
        """Switch the plug off and confirm it reports off."""
        if not await self._async_call(model, SERVICE_TURN_OFF, mac):
            return False

        try:
            return self._get_available_state(mac).state == STATE_OFF
        except GatewayError as err:
            _LOGGER.error("Could not confirm plug %s is off: %s", mac, err)
            return False

    async def async_plug_on(self, mac: str, model: str) -> bool:
        """Switch the plug on, retrying until it reports on."""
        for attempt in range(1, self.plug_on_attempts + 1):
            if await self._async_call(model, SERVICE_TURN_ON, mac):
                try:
                    if await self.async_is_plug_on(mac, model):
                        return True
                except GatewayError as err:
                    _LOGGER.warning("Could not read plug %s after turning it on: %s", mac, err)

            _LOGGER.warning("Plug %s did not turn on (attempt %d/%d)", mac, attempt, self.plug_on_attempts)
            if attempt < self.plug_on_attempts:
                await asyncio.sleep(PLUG_ON_RETRY_DELAY.total_seconds())

        return False

    async def async_is_plug_on(self, mac: str, model: str) -> bool:
        """Return True if the plug entity is on."""
        return self._get_available_state(mac).state == STATE_ON

    def _get_available_state(self, entity_id: str) -> State:
        state = self.hass.states.get(entity_id)
        if state is None or state.state in (STATE_UNKNOWN, STATE_UNAVAILABLE):
            raise GatewayError(f"Entity {entity_id} is unavailable")

        return state

    async def _async_call(self, domain: str, service: str, entity_id: str) -> bool:
        try:
            await self.hass.services.async_call(domain, service, {ATTR_ENTITY_ID: entity_id}, blocking=True)
        except HomeAssistantError as err:
            _LOGGER.error("Calling %s.%s for %s failed: %s", domain, service, entity_id, err)
            return False

        return True
