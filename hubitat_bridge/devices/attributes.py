"""
Static attribute tables, one per driver type.

Each table maps a hub attribute name to the normalized capability key it
feeds and the translator that converts the raw value. Table order is the
order in which a poll snapshot is reconciled.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional

from ..exceptions import ConfigurationError
from . import translators as t
from .models import CapabilityKey, DriverType
from .store import HEATING_SETPOINT, COOLING_SETPOINT, NUMBER_OF_BUTTONS


def _identity(raw: Any) -> Any:
    return raw


@dataclass(frozen=True)
class AttributeBinding:
    """
    How one hub attribute is reconciled.

    key=None marks an attribute that is recognised but does not feed
    CapabilityState: it is either ignored, written to the derived store
    (store_key) or emitted as an event (event=True).
    """
    key: Optional[CapabilityKey]
    translate: Callable[[Any], Any] = _identity
    continuous: bool = False
    store_key: Optional[str] = None
    event: bool = False


K = CapabilityKey

_SWITCH = {"switch": AttributeBinding(K.ONOFF, t.enum_to_bool("on"))}
_LEVEL = {"level": AttributeBinding(K.DIM, t.percent_to_unit)}

ATTRIBUTE_TABLES: dict[DriverType, dict[str, AttributeBinding]] = {
    DriverType.SWITCH: {**_SWITCH},
    DriverType.DIMMER: {**_SWITCH, **_LEVEL},
    DriverType.COLOR_LIGHT: {
        **_SWITCH,
        **_LEVEL,
        "hue": AttributeBinding(K.LIGHT_HUE, t.percent_to_unit),
        "saturation": AttributeBinding(K.LIGHT_SATURATION, t.percent_to_unit),
        "colorTemperature": AttributeBinding(K.LIGHT_TEMPERATURE, t.full_color_kelvin_to_unit),
        "colorMode": AttributeBinding(K.LIGHT_MODE, t.color_mode_to_light_mode),
        "colorName": AttributeBinding(None),
    },
    DriverType.COLOR_TEMP_LIGHT: {
        **_SWITCH,
        **_LEVEL,
        "colorTemperature": AttributeBinding(K.LIGHT_TEMPERATURE, t.color_temp_kelvin_to_unit),
    },
    DriverType.FAN: {
        **_SWITCH,
        "speed": AttributeBinding(K.FAN_SPEED, t.fan_speed_to_unit, continuous=True),
    },
    DriverType.THERMOSTAT: {
        "temperature": AttributeBinding(K.MEASURE_TEMPERATURE, t.to_float),
        "thermostatMode": AttributeBinding(K.THERMOSTAT_MODE, t.thermostat_mode),
        "heatingSetpoint": AttributeBinding(
            K.TARGET_TEMPERATURE, t.to_float, store_key=HEATING_SETPOINT,
        ),
        "coolingSetpoint": AttributeBinding(
            K.TARGET_TEMPERATURE, t.to_float, store_key=COOLING_SETPOINT,
        ),
    },
    DriverType.LOCK: {
        "lock": AttributeBinding(K.LOCKED, t.enum_to_bool("locked")),
    },
    DriverType.VALVE: {
        "valve": AttributeBinding(K.ONOFF, t.enum_to_bool("open")),
    },
    DriverType.WINDOW_COVERING: {
        "position": AttributeBinding(K.WINDOWCOVERINGS_SET, t.percent_to_unit),
        "windowShade": AttributeBinding(K.WINDOWCOVERINGS_STATE, t.window_shade_to_state),
    },
    DriverType.BUTTON: {
        "numberOfButtons": AttributeBinding(None, t.to_int, store_key=NUMBER_OF_BUTTONS),
        "pushed": AttributeBinding(None, t.to_button_number, event=True),
        "held": AttributeBinding(None, t.to_button_number, event=True),
        "released": AttributeBinding(None, t.to_button_number, event=True),
        "doubleTapped": AttributeBinding(None, t.to_button_number, event=True),
    },
    DriverType.CONTACT_SENSOR: {
        "contact": AttributeBinding(K.ALARM_CONTACT, t.enum_to_bool("open")),
    },
    DriverType.MOTION_SENSOR: {
        "motion": AttributeBinding(K.ALARM_MOTION, t.enum_to_bool("active")),
    },
    DriverType.PRESENCE_SENSOR: {
        "presence": AttributeBinding(K.ALARM_PRESENCE, t.enum_to_bool("present")),
    },
    DriverType.LEAK_SENSOR: {
        "water": AttributeBinding(K.ALARM_WATER, t.enum_to_bool("wet")),
    },
    DriverType.TEMPERATURE_SENSOR: {
        "temperature": AttributeBinding(K.MEASURE_TEMPERATURE, t.to_float),
        "humidity": AttributeBinding(K.MEASURE_HUMIDITY, t.to_float),
    },
}


def attribute_table(driver_type: DriverType) -> dict[str, AttributeBinding]:
    return ATTRIBUTE_TABLES[driver_type]


def verify_attribute_tables() -> None:
    """Fail fast if any driver type has no attribute table."""
    missing = [d.value for d in DriverType if d not in ATTRIBUTE_TABLES]
    if missing:
        raise ConfigurationError(missing, subject="Attribute tables")
