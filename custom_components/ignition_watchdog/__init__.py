"""The Ignition Watchdog integration."""
from datetime import timedelta
import logging

import voluptuous as vol
from homeassistant.const import EVENT_HOMEASSISTANT_STARTED, EVENT_HOMEASSISTANT_STOP, Platform
from homeassistant.core import CoreState, Event, HomeAssistant
from homeassistant.helpers import config_validation as cv
from homeassistant.helpers.discovery import async_load_platform
from homeassistant.helpers.typing import ConfigType

from .const import (
    CONF_CHECK_INTERVAL,
    CONF_CYCLE_WAIT,
    CONF_MAX_CYCLES,
    CONF_PLUG_NAME,
    CONF_PLUG_ON_ATTEMPTS,
    CONF_POWER_OFF_DURATION,
    CONF_TEMP_THRESHOLD,
    CONF_THERMOSTAT_NAME,
    COORDINATOR,
    DEFAULT_CHECK_INTERVAL,
    DEFAULT_CYCLE_WAIT,
    DEFAULT_MAX_CYCLES,
    DEFAULT_PLUG_ON_ATTEMPTS,
    DEFAULT_POWER_OFF_DURATION,
    DEFAULT_TEMP_THRESHOLD,
    DOMAIN,
    ProductType,
)
from .coordinator import IgnitionWatchdogCoordinator
from .gateway import (
    AuthenticationError,
    DeviceGateway,
    GatewayError,
    HomeAssistantGateway,
    async_find_device,
)
from .power_cycle import PowerCycler
from .watchdog import IgnitionWatchdog

_LOGGER = logging.getLogger(__name__)

PLATFORMS = [Platform.SENSOR, Platform.BINARY_SENSOR]

CONFIG_SCHEMA = vol.Schema(
    {
        DOMAIN: vol.Schema(
            {
                vol.Required(CONF_THERMOSTAT_NAME): cv.string,
                vol.Required(CONF_PLUG_NAME): cv.string,
                vol.Optional(
                    CONF_CHECK_INTERVAL, default=DEFAULT_CHECK_INTERVAL
                ): cv.positive_int,
                vol.Optional(
                    CONF_CYCLE_WAIT, default=DEFAULT_CYCLE_WAIT
                ): cv.positive_int,
                vol.Optional(
                    CONF_POWER_OFF_DURATION, default=DEFAULT_POWER_OFF_DURATION
                ): cv.positive_int,
                vol.Optional(
                    CONF_TEMP_THRESHOLD, default=DEFAULT_TEMP_THRESHOLD
                ): vol.Coerce(float),
                vol.Optional(
                    CONF_MAX_CYCLES, default=DEFAULT_MAX_CYCLES
                ): vol.All(vol.Coerce(int), vol.Range(min=0)),
                vol.Optional(
                    CONF_PLUG_ON_ATTEMPTS, default=DEFAULT_PLUG_ON_ATTEMPTS
                ): vol.All(vol.Coerce(int), vol.Range(min=1)),
            }
        )
    },
    extra=vol.ALLOW_EXTRA,
)


async def async_setup(hass: HomeAssistant, config: ConfigType) -> bool:
    """Set up the Ignition Watchdog component."""
    if DOMAIN not in config:
        return True

    conf = config[DOMAIN]
    gateway = HomeAssistantGateway(hass, conf[CONF_PLUG_ON_ATTEMPTS])

    if hass.state is CoreState.running:
        return await async_start_watchdog(hass, conf, gateway, config)

    # Devices are only resolvable once every integration has created its entities
    async def handle_started(event: Event) -> None:
        if not await async_start_watchdog(hass, conf, gateway, config):
            _LOGGER.error("Ignition watchdog could not be started")

    hass.bus.async_listen_once(EVENT_HOMEASSISTANT_STARTED, handle_started)
    return True


async def async_start_watchdog(
    hass: HomeAssistant, conf: dict, gateway: DeviceGateway, config: ConfigType
) -> bool:
    """Run the startup safety checks and start ticking.

    Returns False when the watchdog cannot run at all. A plug that is off at
    startup means maintenance or vacation mode: setup succeeds but nothing is
    started and no further device call is made.
    """
    _LOGGER.info(
        "Ignition watchdog starting: check every %ds, cycle wait %dmin, threshold %s°, max cycles %d",
        conf[CONF_CHECK_INTERVAL],
        conf[CONF_CYCLE_WAIT] // 60,
        conf[CONF_TEMP_THRESHOLD],
        conf[CONF_MAX_CYCLES],
    )

    try:
        await gateway.async_login()
    except AuthenticationError as err:
        _LOGGER.error("Gateway login failed: %s", err)
        return False

    thermostat = await async_find_device(gateway, conf[CONF_THERMOSTAT_NAME], ProductType.THERMOSTAT)
    if thermostat is None:
        _LOGGER.error('Thermostat "%s" not found', conf[CONF_THERMOSTAT_NAME])
        return False

    plug = await async_find_device(gateway, conf[CONF_PLUG_NAME], ProductType.PLUG)
    if plug is None:
        _LOGGER.error('Plug "%s" not found', conf[CONF_PLUG_NAME])
        return False

    _LOGGER.info("Found thermostat: %s", thermostat.mac)
    _LOGGER.info("Found plug: %s", plug.mac)

    try:
        plug_is_on = await gateway.async_is_plug_on(plug.mac, plug.product_model)
    except GatewayError as err:
        _LOGGER.error("Could not read plug state: %s", err)
        return False

    if not plug_is_on:
        _LOGGER.info("Plug is OFF at startup - assuming maintenance/vacation mode, not monitoring")
        return True

    _LOGGER.info("Plug is ON - starting monitoring loop")

    power_cycler = PowerCycler(
        gateway,
        conf[CONF_PLUG_NAME],
        timedelta(seconds=conf[CONF_POWER_OFF_DURATION]),
    )
    watchdog = IgnitionWatchdog(
        gateway,
        power_cycler,
        thermostat_name=conf[CONF_THERMOSTAT_NAME],
        temp_threshold=conf[CONF_TEMP_THRESHOLD],
        max_cycles=conf[CONF_MAX_CYCLES],
        cycle_wait=timedelta(seconds=conf[CONF_CYCLE_WAIT]),
    )
    coordinator = IgnitionWatchdogCoordinator(hass, watchdog, conf[CONF_CHECK_INTERVAL])

    # Initial check
    await coordinator.async_refresh()

    hass.data.setdefault(DOMAIN, {})
    hass.data[DOMAIN][COORDINATOR] = coordinator

    async def handle_stop(event: Event) -> None:
        """Let the running tick finish before stopping."""
        await coordinator.async_shutdown()

    hass.bus.async_listen_once(EVENT_HOMEASSISTANT_STOP, handle_stop)

    for platform in PLATFORMS:
        hass.async_create_task(
            async_load_platform(hass, platform, DOMAIN, {}, config)
        )

    return True
