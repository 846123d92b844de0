"""
Binary actuators: plain switches, valves and locks.
"""

from typing import Any, Optional

from ..dispatcher import CommandPlan
from ..models import CapabilityKey, DriverType
from ..runtime import DeviceRuntime, require_bool


class SwitchRuntime(DeviceRuntime):
    """On/off switch or outlet."""

    driver_type = DriverType.SWITCH
    WRITABLE = frozenset({CapabilityKey.ONOFF})

    def build_command(self, key: CapabilityKey, value: Any) -> Optional[CommandPlan]:
        on = require_bool(key, value)
        return CommandPlan.single(key, on, "on" if on else "off")


class ValveRuntime(DeviceRuntime):
    """Water or gas valve; onoff means open."""

    driver_type = DriverType.VALVE
    WRITABLE = frozenset({CapabilityKey.ONOFF})

    def build_command(self, key: CapabilityKey, value: Any) -> Optional[CommandPlan]:
        is_open = require_bool(key, value)
        return CommandPlan.single(key, is_open, "open" if is_open else "close")


class LockRuntime(DeviceRuntime):
    driver_type = DriverType.LOCK
    WRITABLE = frozenset({CapabilityKey.LOCKED})

    def build_command(self, key: CapabilityKey, value: Any) -> Optional[CommandPlan]:
        locked = require_bool(key, value)
        return CommandPlan.single(key, locked, "lock" if locked else "unlock")
