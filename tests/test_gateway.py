"""Tests for the Home Assistant backed gateway."""
from unittest.mock import AsyncMock, patch

import pytest
from homeassistant.components import climate, input_boolean
from homeassistant.const import STATE_UNAVAILABLE
from homeassistant.core import HomeAssistant, ServiceCall
from homeassistant.setup import async_setup_component

from custom_components.ignition_watchdog.const import ProductType
from custom_components.ignition_watchdog.gateway import (
    AuthenticationError,
    GatewayError,
    HomeAssistantGateway,
    async_find_device,
)

THERMOSTAT = "climate.living_room"
PLUG = "input_boolean.living_room"


@pytest.fixture
async def devices(hass: HomeAssistant) -> None:
    assert await async_setup_component(hass, climate.DOMAIN, {})
    assert await async_setup_component(
        hass,
        input_boolean.DOMAIN,
        {input_boolean.DOMAIN: {"living_room": {"name": "Living Room", "initial": True}}},
    )

    hass.states.async_set(
        THERMOSTAT,
        "heat",
        {
            "friendly_name": "Living Room",
            "hvac_action": "heating",
            "current_temperature": 65.5,
            "temperature": 70,
        },
    )
    await hass.async_block_till_done()


async def test_login(hass: HomeAssistant, devices):
    await HomeAssistantGateway(hass).async_login()


async def test_login_without_climate(hass: HomeAssistant):
    with pytest.raises(AuthenticationError):
        await HomeAssistantGateway(hass).async_login()


async def test_list_devices(hass: HomeAssistant, devices):
    gateway = HomeAssistantGateway(hass)

    thermostat = await async_find_device(gateway, "Living Room", ProductType.THERMOSTAT)
    plug = await async_find_device(gateway, "Living Room", ProductType.PLUG)

    assert thermostat.mac == THERMOSTAT
    assert thermostat.product_model == climate.DOMAIN
    assert plug.mac == PLUG
    assert plug.product_model == input_boolean.DOMAIN
    assert await async_find_device(gateway, "Kitchen", ProductType.PLUG) is None


async def test_get_thermostat(hass: HomeAssistant, devices):
    status = await HomeAssistantGateway(hass).async_get_thermostat(THERMOSTAT)

    assert status.working_state == "heating"
    assert status.temperature == 65.5
    assert status.heat_setpoint == 70.0


async def test_get_thermostat_heat_cool_setpoint(hass: HomeAssistant, devices):
    hass.states.async_set(
        THERMOSTAT,
        "heat_cool",
        {"hvac_action": "idle", "current_temperature": 71, "target_temp_low": 68, "target_temp_high": 76},
    )

    status = await HomeAssistantGateway(hass).async_get_thermostat(THERMOSTAT)

    assert status.working_state == "idle"
    assert status.heat_setpoint == 68.0


async def test_get_thermostat_unavailable(hass: HomeAssistant, devices):
    hass.states.async_set(THERMOSTAT, STATE_UNAVAILABLE)

    with pytest.raises(GatewayError):
        await HomeAssistantGateway(hass).async_get_thermostat(THERMOSTAT)


async def test_get_thermostat_without_temperature(hass: HomeAssistant, devices):
    hass.states.async_set(THERMOSTAT, "heat", {"hvac_action": "heating", "temperature": 70})

    with pytest.raises(GatewayError):
        await HomeAssistantGateway(hass).async_get_thermostat(THERMOSTAT)


async def test_plug_off_and_on(hass: HomeAssistant, devices):
    gateway = HomeAssistantGateway(hass)
    assert await gateway.async_is_plug_on(PLUG, input_boolean.DOMAIN)

    assert await gateway.async_plug_off(PLUG, input_boolean.DOMAIN)
    assert hass.states.get(PLUG).state == "off"
    assert not await gateway.async_is_plug_on(PLUG, input_boolean.DOMAIN)

    assert await gateway.async_plug_on(PLUG, input_boolean.DOMAIN)
    assert hass.states.get(PLUG).state == "on"


async def test_plug_command_to_unknown_service(hass: HomeAssistant, devices, caplog):
    gateway = HomeAssistantGateway(hass, plug_on_attempts=1)

    assert await gateway.async_plug_off(PLUG, "light") is False
    assert await gateway.async_plug_on(PLUG, "light") is False
    assert "did not turn on (attempt 1/1)" in caplog.text


async def test_plug_on_retries_through_unavailable_read(hass: HomeAssistant, caplog):
    calls = []

    async def turn_on(call: ServiceCall) -> None:
        calls.append(call)
        hass.states.async_set("switch.stove", STATE_UNAVAILABLE if len(calls) == 1 else "on")

    hass.services.async_register("switch", "turn_on", turn_on)
    hass.states.async_set("switch.stove", "off")

    with patch("custom_components.ignition_watchdog.gateway.asyncio.sleep", new=AsyncMock()):
        assert await HomeAssistantGateway(hass).async_plug_on("switch.stove", "switch") is True

    assert len(calls) == 2
    assert "after turning it on" in caplog.text


async def test_plug_on_gives_up_when_never_readable(hass: HomeAssistant):
    async def turn_on(call: ServiceCall) -> None:
        hass.states.async_set("switch.stove", STATE_UNAVAILABLE)

    hass.services.async_register("switch", "turn_on", turn_on)

    with patch("custom_components.ignition_watchdog.gateway.asyncio.sleep", new=AsyncMock()):
        assert await HomeAssistantGateway(hass, plug_on_attempts=2).async_plug_on("switch.stove", "switch") is False


async def test_plug_off_unreadable_afterwards(hass: HomeAssistant, caplog):
    async def turn_off(call: ServiceCall) -> None:
        hass.states.async_set("switch.stove", STATE_UNAVAILABLE)

    hass.services.async_register("switch", "turn_off", turn_off)
    hass.states.async_set("switch.stove", "on")

    assert await HomeAssistantGateway(hass).async_plug_off("switch.stove", "switch") is False
    assert "Could not confirm plug switch.stove is off" in caplog.text
