"""Shared helpers for the tests."""
from datetime import datetime, timedelta, timezone

from custom_components.ignition_watchdog.const import ProductType
from custom_components.ignition_watchdog.gateway import AuthenticationError, DeviceGateway, GatewayError
from custom_components.ignition_watchdog.models import Device, ThermostatStatus
from custom_components.ignition_watchdog.power_cycle import PowerCycler
from custom_components.ignition_watchdog.watchdog import IgnitionWatchdog

NAME = "Living Room"
THERMOSTAT_MAC = "7C78B2000001"
PLUG_MAC = "7C78B2000002"
PLUG_MODEL = "WLPP1CFH"

START = datetime(2026, 1, 15, 6, 0, tzinfo=timezone.utc)
CYCLE_WAIT = timedelta(minutes=10)


class FakeGateway(DeviceGateway):
    """In-memory gateway recording every call made to it."""

    def __init__(self) -> None:
        self.devices = [
            Device(nickname=NAME, product_type=ProductType.THERMOSTAT, mac=THERMOSTAT_MAC, product_model="CO_EA1"),
            Device(nickname=NAME, product_type=ProductType.PLUG, mac=PLUG_MAC, product_model=PLUG_MODEL),
        ]
        self.thermostat = ThermostatStatus(working_state="idle", temperature=70.0, heat_setpoint=70.0)
        self.plug_is_on = True
        self.calls: list[str] = []

        self.login_fails = False
        self.read_error: GatewayError | None = None
        self.plug_off_fails = False
        self.plug_on_fails = False
        self.plug_on_ignored = False

    def set_thermostat(self, working_state: str, temperature: float, heat_setpoint: float) -> None:
        self.thermostat = ThermostatStatus(
            working_state=working_state,
            temperature=temperature,
            heat_setpoint=heat_setpoint,
        )

    @property
    def commands(self) -> list[str]:
        return [call for call in self.calls if call in ("plug_off", "plug_on")]

    async def async_login(self) -> None:
        self.calls.append("login")
        if self.login_fails:
            raise AuthenticationError("invalid credentials")

    async def async_list_devices(self) -> list[Device]:
        self.calls.append("list_devices")
        return list(self.devices)

    async def async_get_thermostat(self, mac: str) -> ThermostatStatus:
        self.calls.append("get_thermostat")
        if self.read_error is not None:
            raise self.read_error

        return self.thermostat

    async def async_plug_off(self, mac: str, model: str) -> bool:
        self.calls.append("plug_off")
        if self.plug_off_fails:
            return False

        self.plug_is_on = False
        return True

    async def async_plug_on(self, mac: str, model: str) -> bool:
        self.calls.append("plug_on")
        if self.plug_on_fails:
            return False

        if not self.plug_on_ignored:
            self.plug_is_on = True

        return True

    async def async_is_plug_on(self, mac: str, model: str) -> bool:
        self.calls.append("is_plug_on")
        return self.plug_is_on


def make_watchdog(gateway: DeviceGateway, max_cycles: int = 3, temp_threshold: float = 2.0) -> IgnitionWatchdog:
    return IgnitionWatchdog(
        gateway,
        PowerCycler(gateway, NAME, timedelta(0)),
        thermostat_name=NAME,
        temp_threshold=temp_threshold,
        max_cycles=max_cycles,
        cycle_wait=CYCLE_WAIT,
    )
