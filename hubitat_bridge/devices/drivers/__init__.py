"""
Driver runtimes, one class per driver type.
"""

from ...exceptions import ConfigurationError
from ..models import DriverType
from ..runtime import DeviceRuntime
from .climate import ThermostatRuntime
from .covers import WindowCoveringRuntime
from .fans import FanRuntime
from .lights import ColorLightRuntime, ColorTempLightRuntime, DimmerRuntime
from .sensors import (
    ButtonRuntime,
    ContactSensorRuntime,
    LeakSensorRuntime,
    MotionSensorRuntime,
    PresenceSensorRuntime,
    TemperatureSensorRuntime,
)
from .switches import LockRuntime, SwitchRuntime, ValveRuntime

RUNTIME_CLASSES: dict[DriverType, type[DeviceRuntime]] = {
    cls.driver_type: cls
    for cls in (
        ThermostatRuntime,
        SwitchRuntime,
        DimmerRuntime,
        ColorLightRuntime,
        ColorTempLightRuntime,
        LockRuntime,
        FanRuntime,
        ValveRuntime,
        WindowCoveringRuntime,
        ButtonRuntime,
        ContactSensorRuntime,
        MotionSensorRuntime,
        PresenceSensorRuntime,
        LeakSensorRuntime,
        TemperatureSensorRuntime,
    )
}


def runtime_class(driver_type: DriverType) -> type[DeviceRuntime]:
    return RUNTIME_CLASSES[driver_type]


def verify_driver_tables() -> None:
    """Fail fast if any driver type has no runtime class."""
    missing = [d.value for d in DriverType if d not in RUNTIME_CLASSES]
    if missing:
        raise ConfigurationError(missing, subject="Driver runtimes")


__all__ = [
    "RUNTIME_CLASSES",
    "runtime_class",
    "verify_driver_tables",
    "ButtonRuntime",
    "ColorLightRuntime",
    "ColorTempLightRuntime",
    "ContactSensorRuntime",
    "DimmerRuntime",
    "FanRuntime",
    "LeakSensorRuntime",
    "LockRuntime",
    "MotionSensorRuntime",
    "PresenceSensorRuntime",
    "SwitchRuntime",
    "TemperatureSensorRuntime",
    "ThermostatRuntime",
    "ValveRuntime",
    "WindowCoveringRuntime",
]
