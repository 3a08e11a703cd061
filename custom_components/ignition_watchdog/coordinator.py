"""Data coordinator for Ignition Watchdog."""
import asyncio
from datetime import timedelta
import logging

from homeassistant.core import CALLBACK_TYPE, HomeAssistant
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed
from homeassistant.util import dt as dt_util

from .const import DOMAIN
from .models import WatchdogSnapshot
from .watchdog import IgnitionWatchdog

_LOGGER = logging.getLogger(__name__)


class IgnitionWatchdogCoordinator(DataUpdateCoordinator[WatchdogSnapshot]):
    """Runs one watchdog tick per update interval."""

    def __init__(self, hass: HomeAssistant, watchdog: IgnitionWatchdog, update_interval: int) -> None:
        """Initialize the coordinator."""
        super().__init__(
            hass,
            _LOGGER,
            name=DOMAIN,
            update_interval=timedelta(seconds=update_interval),
        )

        self.watchdog = watchdog
        self._tick_lock = asyncio.Lock()

        # Refreshes are only scheduled while a listener is registered, so this
        # no-op one keeps the watchdog polling before and without entities
        self._unsub_keepalive: CALLBACK_TYPE | None = self.async_add_listener(lambda: None)

    async def _async_update_data(self) -> WatchdogSnapshot:
        """Run a watchdog tick and publish its outcome."""
        async with self._tick_lock:
            try:
                await self.watchdog.async_tick(dt_util.utcnow())
            except Exception as err:
                _LOGGER.error("Error running ignition watchdog tick: %s", err)
                raise UpdateFailed(f"Error running tick: {err}") from err

            return self.watchdog.snapshot

    async def async_shutdown(self) -> None:
        """Stop ticking once the tick in progress, if any, has finished."""
        async with self._tick_lock:
            if self._unsub_keepalive is None:
                return

            self._unsub_keepalive()
            self._unsub_keepalive = None
            await super().async_shutdown()

        _LOGGER.info("Ignition watchdog stopped")
