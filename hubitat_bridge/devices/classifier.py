"""
Device classification.

Maps a hub device descriptor to exactly one driver type. Capability sets
overlap (a dimmable colour bulb declares SwitchLevel and ColorControl), so
rules are evaluated most specific first and the first match wins.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .models import DeviceDescriptor, DriverType

logger = logging.getLogger("hubitat.devices.classifier")


def _has_any(*capabilities: str) -> Callable[[DeviceDescriptor], bool]:
    wanted = frozenset(capabilities)
    return lambda d: not wanted.isdisjoint(d.capabilities)


def _color_temperature_only(d: DeviceDescriptor) -> bool:
    return "ColorTemperature" in d.capabilities and "ColorControl" not in d.capabilities


def _is_valve(d: DeviceDescriptor) -> bool:
    if "Valve" in d.capabilities:
        return True
    name = (d.label or d.name).lower()
    return "valve" in d.type.lower() or "valve" in name


@dataclass(frozen=True)
class ClassificationRule:
    """A predicate paired with the driver type it selects."""
    driver_type: DriverType
    matches: Callable[[DeviceDescriptor], bool]


# Ordered by specificity. Do not reorder.
CLASSIFICATION_RULES: tuple[ClassificationRule, ...] = (
    ClassificationRule(DriverType.THERMOSTAT, _has_any("Thermostat")),
    ClassificationRule(DriverType.LOCK, _has_any("Lock")),
    ClassificationRule(DriverType.FAN, _has_any("FanControl", "FanSpeed")),
    ClassificationRule(DriverType.WINDOW_COVERING, _has_any("WindowShade")),
    ClassificationRule(
        DriverType.BUTTON,
        _has_any("PushableButton", "HoldableButton", "DoubleTapableButton"),
    ),
    ClassificationRule(DriverType.COLOR_LIGHT, _has_any("ColorControl")),
    ClassificationRule(DriverType.COLOR_TEMP_LIGHT, _color_temperature_only),
    ClassificationRule(DriverType.VALVE, _is_valve),
    ClassificationRule(DriverType.DIMMER, _has_any("SwitchLevel")),
    ClassificationRule(DriverType.SWITCH, _has_any("Switch")),
    ClassificationRule(DriverType.CONTACT_SENSOR, _has_any("ContactSensor")),
    ClassificationRule(DriverType.MOTION_SENSOR, _has_any("MotionSensor")),
    ClassificationRule(DriverType.PRESENCE_SENSOR, _has_any("PresenceSensor")),
    ClassificationRule(DriverType.LEAK_SENSOR, _has_any("WaterSensor")),
    ClassificationRule(DriverType.TEMPERATURE_SENSOR, _has_any("TemperatureMeasurement")),
)


def classify(descriptor: DeviceDescriptor) -> Optional[DriverType]:
    """
    Return the driver type for a device, or None if it is unclassifiable.

    Pure and deterministic: the result depends only on the descriptor's
    capabilities, type string and label/name.
    """
    for rule in CLASSIFICATION_RULES:
        if rule.matches(descriptor):
            return rule.driver_type

    logger.debug(
        "Unclassifiable device %s (%s): %s",
        descriptor.id,
        descriptor.display_name,
        sorted(descriptor.capabilities),
    )
    return None
