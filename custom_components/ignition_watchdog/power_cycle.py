"""Power cycling for Ignition Watchdog."""
import asyncio
from datetime import timedelta
import logging

from .const import ProductType
from .gateway import DeviceGateway, GatewayError, async_find_device

_LOGGER = logging.getLogger(__name__)


class PowerCycler:
    """Switches the appliance's plug off and back on through the gateway."""

    def __init__(self, gateway: DeviceGateway, plug_name: str, power_off_duration: timedelta) -> None:
        """Initialize the power cycler.

        Args:
            gateway: Gateway used to reach the plug
            plug_name: Nickname of the plug feeding the appliance
            power_off_duration: How long the plug stays off
        """
        self.gateway = gateway
        self.plug_name = plug_name
        self.power_off_duration = power_off_duration

    async def async_cycle(self) -> bool:
        """Run one OFF, wait, ON cycle.

        Returns:
            True only if the plug was confirmed on at the end
        """
        _LOGGER.info('Cycling power on "%s" plug...', self.plug_name)

        plug = await async_find_device(self.gateway, self.plug_name, ProductType.PLUG)
        if plug is None:
            _LOGGER.error("Could not find plug: %s", self.plug_name)
            return False

        _LOGGER.info("Turning OFF plug (%s)...", plug.mac)
        if not await self.gateway.async_plug_off(plug.mac, plug.product_model):
            _LOGGER.error("Failed to turn off plug %s", plug.mac)
            return False

        _LOGGER.info("Waiting %d seconds...", self.power_off_duration.total_seconds())
        await asyncio.sleep(self.power_off_duration.total_seconds())

        # From here on the appliance is unpowered until the plug is confirmed on
        _LOGGER.info("Turning ON plug...")
        try:
            switched_on = await self.gateway.async_plug_on(plug.mac, plug.product_model)
            confirmed = switched_on and await self.gateway.async_is_plug_on(plug.mac, plug.product_model)
        except GatewayError as err:
            _LOGGER.critical("Failed to turn on plug %s, appliance may be without power: %s", plug.mac, err)
            return False

        if not switched_on:
            _LOGGER.critical("Failed to turn on plug %s, appliance may be without power", plug.mac)
            return False

        if not confirmed:
            _LOGGER.critical("Plug %s accepted ON but does not report on, appliance may be without power", plug.mac)
            return False

        _LOGGER.info("Power cycle complete (plug verified ON)")
        return True
