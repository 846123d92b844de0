"""
Read-only devices: sensors and buttons.

None of these accept capability writes; their state comes entirely from
polls and webhooks.
"""

import logging
from typing import Any, Optional

from ..dispatcher import CommandPlan
from ..models import ButtonEvent, CapabilityKey, DriverType
from ..runtime import DeviceRuntime

logger = logging.getLogger("hubitat.devices.drivers.sensors")


class SensorRuntime(DeviceRuntime):
    """Base for devices with no writable capabilities."""

    WRITABLE = frozenset()

    def build_command(self, key: CapabilityKey, value: Any) -> Optional[CommandPlan]:
        return None


class ContactSensorRuntime(SensorRuntime):
    driver_type = DriverType.CONTACT_SENSOR


class MotionSensorRuntime(SensorRuntime):
    driver_type = DriverType.MOTION_SENSOR


class PresenceSensorRuntime(SensorRuntime):
    driver_type = DriverType.PRESENCE_SENSOR


class LeakSensorRuntime(SensorRuntime):
    driver_type = DriverType.LEAK_SENSOR


class TemperatureSensorRuntime(SensorRuntime):
    """Temperature, and humidity where the sensor reports it."""

    driver_type = DriverType.TEMPERATURE_SENSOR


class ButtonRuntime(SensorRuntime):
    """
    Pushable/holdable button.

    Button attributes are events, not state: each webhook delivery becomes a
    ButtonEvent for the registered event listeners.
    """

    driver_type = DriverType.BUTTON

    def emit(self, attribute: str, value: Any) -> None:
        event = ButtonEvent(device_id=self.id, action=attribute, button=value)
        logger.info("[%s] Button %d %s", self.id, event.button, event.action)
        self._notify_event(event)
