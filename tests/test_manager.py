"""
Tests for the device manager: pairing, routing and shutdown.
"""

import pytest

from hubitat_bridge.devices.drivers import ColorLightRuntime, FanRuntime
from hubitat_bridge.devices.manager import (
    DeviceManager,
    get_device_manager,
    reset_device_manager,
    set_device_manager,
)
from hubitat_bridge.devices.models import CapabilityKey as K
from hubitat_bridge.devices.models import DriverType, ReconcileOutcome
from hubitat_bridge.exceptions import ValidationError

from conftest import FakeHubClient, device_payload


@pytest.fixture
def populated_hub() -> FakeHubClient:
    return FakeHubClient([
        device_payload("1", "Desk Lamp", ["Switch", "SwitchLevel", "ColorControl"], {
            "switch": "on",
            "level": "80",
            "hue": "10",
            "saturation": "90",
        }),
        device_payload("2", "Ceiling Fan", ["Switch", "FanControl"], {
            "switch": "on",
            "speed": "medium",
        }),
        device_payload("3", "Hall Bulb", ["Switch", "SwitchLevel", "ColorControl"]),
        device_payload("4", "Bridge", ["Refresh"]),
    ])


@pytest.fixture
def manager(populated_hub, sync, clock) -> DeviceManager:
    return DeviceManager(populated_hub, sync=sync, clock=clock)


class TestPairing:

    @pytest.mark.asyncio
    async def test_list_pairable_devices(self, manager):
        devices = await manager.list_pairable_devices(DriverType.COLOR_LIGHT)
        assert devices == [
            {"name": "Desk Lamp", "stable_id": "1"},
            {"name": "Hall Bulb", "stable_id": "3"},
        ]
        assert await manager.list_pairable_devices(DriverType.LOCK) == []

    @pytest.mark.asyncio
    async def test_pair_classifies_and_polls(self, manager):
        runtime = await manager.pair("2")

        assert isinstance(runtime, FanRuntime)
        assert runtime.name == "Ceiling Fan"
        assert runtime.state.get(K.FAN_SPEED) == 0.6
        assert runtime.state.get(K.ONOFF) is True
        await manager.shutdown()

    @pytest.mark.asyncio
    async def test_pair_with_explicit_type(self, manager):
        runtime = await manager.pair("1", name="Lamp", driver_type=DriverType.COLOR_LIGHT, start=False)
        assert isinstance(runtime, ColorLightRuntime)
        assert runtime.name == "Lamp"
        assert manager.get("1") is runtime

    @pytest.mark.asyncio
    async def test_pairing_twice_returns_existing_runtime(self, manager):
        first = await manager.pair("1", driver_type=DriverType.COLOR_LIGHT, start=False)
        second = await manager.pair("1", driver_type=DriverType.DIMMER, start=False)
        assert second is first

    @pytest.mark.asyncio
    async def test_unclassifiable_device_is_rejected(self, manager):
        with pytest.raises(ValidationError):
            await manager.pair("4")
        assert manager.get("4") is None

    @pytest.mark.asyncio
    async def test_remove_stops_the_runtime(self, manager):
        runtime = await manager.pair("1")
        assert runtime.is_running

        assert await manager.remove("1") is True
        assert not runtime.is_running
        assert manager.get("1") is None
        assert await manager.remove("1") is False


class TestObservations:

    @pytest.mark.asyncio
    async def test_routes_to_paired_device(self, manager):
        runtime = await manager.pair("1", driver_type=DriverType.COLOR_LIGHT, start=False)

        outcome = await manager.handle_observation(1, "switch", "off")

        assert outcome == ReconcileOutcome.APPLIED
        assert runtime.state.get(K.ONOFF) is False

    @pytest.mark.asyncio
    async def test_unknown_device_returns_none(self, manager):
        assert await manager.handle_observation("99", "switch", "on") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("device_id,attribute,value", [
        (None, "switch", "on"),
        ("1", "", "on"),
        ("1", "switch", None),
    ])
    async def test_missing_fields_are_rejected(self, manager, device_id, attribute, value):
        await manager.pair("1", driver_type=DriverType.COLOR_LIGHT, start=False)
        outcome = await manager.handle_observation(device_id, attribute, value)
        assert outcome == ReconcileOutcome.REJECTED


class TestWrites:

    @pytest.mark.asyncio
    async def test_write_capability(self, manager, populated_hub):
        await manager.pair("1", driver_type=DriverType.COLOR_LIGHT, start=False)

        result = await manager.write_capability("1", K.DIM, 0.25)

        assert result.success
        assert populated_hub.commands == [("1", "setLevel", [25])]
        assert manager.get_state("1")["state"]["dim"] == 0.25
        await manager.shutdown()

    @pytest.mark.asyncio
    async def test_transport_failure_becomes_failed_result(self, manager, populated_hub):
        await manager.pair("1", driver_type=DriverType.COLOR_LIGHT, start=False)
        populated_hub.fail_commands = True

        result = await manager.write_capability("1", K.ONOFF, False)

        assert not result.success
        assert result.error == "TRANSPORT_ERROR"

    @pytest.mark.asyncio
    async def test_unknown_device(self, manager):
        result = await manager.write_capability("99", K.ONOFF, True)
        assert result.error == "DEVICE_NOT_FOUND"
        assert manager.get_state("99") is None


class TestHub:

    @pytest.mark.asyncio
    async def test_connectivity(self, manager, populated_hub):
        assert await manager.test_connectivity() is True
        populated_hub.fail_fetch = 1
        assert await manager.test_connectivity() is False

    @pytest.mark.asyncio
    async def test_shutdown_closes_all_runtimes(self, manager):
        lamp = await manager.pair("1")
        fan = await manager.pair("2")

        await manager.shutdown()

        assert not lamp.is_running
        assert not fan.is_running
        assert manager.list_devices() == []


class TestSingleton:

    def test_set_and_reset(self, manager):
        set_device_manager(manager)
        assert get_device_manager() is manager
        reset_device_manager()
        assert get_device_manager() is not manager
        reset_device_manager()
