"""
Shared fixtures: a controllable clock and an in-memory hub.
"""

from typing import Any, Optional, Sequence

import pytest

from hubitat_bridge.config import SyncConfig
from hubitat_bridge.devices.models import DeviceDescriptor
from hubitat_bridge.exceptions import TransportError


class FakeClock:
    """Monotonic clock the test moves by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: float) -> None:
        self.now += ms / 1000


class FakeHubClient:
    """HubClient backed by a dict of Maker API style payloads."""

    def __init__(self, devices: Optional[list[dict[str, Any]]] = None):
        self.devices: dict[str, dict[str, Any]] = {str(d["id"]): d for d in devices or []}
        self.commands: list[tuple[str, str, list]] = []
        self.fetch_calls = 0
        self.fail_fetch = 0
        self.fail_commands = False

    def set_attribute(self, device_id: str, name: str, value: Any) -> None:
        attrs = self.devices[device_id]["attributes"]
        for attr in attrs:
            if attr["name"] == name:
                attr["currentValue"] = value
                return
        attrs.append({"name": name, "currentValue": value})

    async def fetch_all_devices(self) -> list[DeviceDescriptor]:
        if self.fail_fetch:
            self.fail_fetch -= 1
            raise TransportError("Hubitat API error: 500 Internal Server Error", status_code=500)
        return [DeviceDescriptor.from_dict(d) for d in self.devices.values()]

    async def fetch_device(self, device_id: str) -> DeviceDescriptor:
        self.fetch_calls += 1
        if self.fail_fetch:
            self.fail_fetch -= 1
            raise TransportError("Hubitat API error: 500 Internal Server Error", status_code=500)
        if device_id not in self.devices:
            raise TransportError("Hubitat API error: 404 Not Found", status_code=404)
        return DeviceDescriptor.from_dict(self.devices[device_id])

    async def send_command(self, device_id: str, command: str, params: Sequence[Any] = ()) -> Any:
        self.commands.append((device_id, command, list(params)))
        if self.fail_commands:
            raise TransportError("HTTP request failed: connection refused")
        return {}

    async def close(self) -> None:
        pass

    def command_names(self) -> list[str]:
        return [c[1] for c in self.commands]


def device_payload(
    device_id: str,
    label: str,
    capabilities: list[str],
    attributes: Optional[dict[str, Any]] = None,
    type: str = "Generic Device",
) -> dict[str, Any]:
    """Build a /devices/{id} style payload."""
    return {
        "id": device_id,
        "name": type,
        "label": label,
        "type": type,
        "capabilities": capabilities,
        "attributes": [
            {"name": name, "currentValue": value}
            for name, value in (attributes or {}).items()
        ],
    }


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sync() -> SyncConfig:
    # Long poll and re-poll delays keep background polls out of the way
    return SyncConfig(
        cooldown_ms=2000,
        poll_interval_seconds=3600,
        repoll_delay_ms=60_000,
        debounce_ms=20,
        fan_speed_tolerance=0.05,
    )


@pytest.fixture
def hub() -> FakeHubClient:
    return FakeHubClient()
