"""
Data model for hub devices and their normalized capability state.

DeviceDescriptor is the hub's view of a device; CapabilityState is the
controller's view, always held in the normalized domain.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

logger = logging.getLogger("hubitat.devices.models")


class DriverType(str, Enum):
    """Device category that decides which runtime owns a device."""
    THERMOSTAT = "thermostat"
    SWITCH = "switch"
    DIMMER = "dimmer"
    COLOR_LIGHT = "color-light"
    COLOR_TEMP_LIGHT = "color-temp-light"
    LOCK = "lock"
    FAN = "fan"
    VALVE = "valve"
    WINDOW_COVERING = "window-covering"
    BUTTON = "button"
    CONTACT_SENSOR = "contact-sensor"
    MOTION_SENSOR = "motion-sensor"
    PRESENCE_SENSOR = "presence-sensor"
    LEAK_SENSOR = "leak-sensor"
    TEMPERATURE_SENSOR = "temperature-sensor"


class CapabilityKey(str, Enum):
    """Normalized capability keys held in CapabilityState."""
    ONOFF = "onoff"
    DIM = "dim"
    LIGHT_HUE = "light_hue"
    LIGHT_SATURATION = "light_saturation"
    LIGHT_TEMPERATURE = "light_temperature"
    LIGHT_MODE = "light_mode"
    FAN_SPEED = "fan_speed"
    TARGET_TEMPERATURE = "target_temperature"
    THERMOSTAT_MODE = "thermostat_mode"
    MEASURE_TEMPERATURE = "measure_temperature"
    MEASURE_HUMIDITY = "measure_humidity"
    LOCKED = "locked"
    WINDOWCOVERINGS_STATE = "windowcoverings_state"
    WINDOWCOVERINGS_SET = "windowcoverings_set"
    ALARM_CONTACT = "alarm_contact"
    ALARM_MOTION = "alarm_motion"
    ALARM_PRESENCE = "alarm_presence"
    ALARM_WATER = "alarm_water"


class ObservationSource(str, Enum):
    """Where an observed attribute value came from."""
    POLL = "poll"
    WEBHOOK = "webhook"


class ReconcileOutcome(str, Enum):
    """Result of feeding one observation through the reconciliation engine."""
    APPLIED = "applied"
    SUPPRESSED = "suppressed"
    UNMAPPED = "unmapped"
    IGNORED = "ignored"
    REJECTED = "rejected"
    UNCHANGED = "unchanged"
    STORED = "stored"
    EMITTED = "emitted"


@dataclass(frozen=True)
class Attribute:
    """A single hub attribute reading."""
    name: str
    current_value: Any = None


@dataclass(frozen=True)
class DeviceDescriptor:
    """Hub-reported device snapshot. Replaced wholesale on every fetch."""
    id: str
    name: str = ""
    label: str = ""
    type: str = ""
    capabilities: frozenset[str] = frozenset()
    attributes: tuple[Attribute, ...] = ()

    @property
    def display_name(self) -> str:
        return self.label or self.name

    def attribute(self, name: str) -> Optional[Attribute]:
        """Return the named attribute, or None if the hub did not report it."""
        for attr in self.attributes:
            if attr.name == name:
                return attr
        return None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DeviceDescriptor":
        """
        Parse a Maker API device payload.

        /devices/all reports attributes as a name -> value mapping while
        /devices/{id} reports a list of {name, currentValue} entries and may
        mix non-string entries into the capability list.
        """
        raw_caps = data.get("capabilities") or []
        capabilities = frozenset(c for c in raw_caps if isinstance(c, str))

        raw_attrs = data.get("attributes") or []
        if isinstance(raw_attrs, dict):
            attributes = tuple(Attribute(name, value) for name, value in raw_attrs.items())
        else:
            attributes = tuple(
                Attribute(a["name"], a.get("currentValue"))
                for a in raw_attrs
                if isinstance(a, dict) and a.get("name")
            )

        return cls(
            id=str(data.get("id", "")),
            name=data.get("name") or "",
            label=data.get("label") or "",
            type=data.get("type") or "",
            capabilities=capabilities,
            attributes=attributes,
        )


@dataclass(frozen=True)
class ButtonEvent:
    """A button action reported by the hub."""
    device_id: str
    action: str   # pushed, held, released, doubleTapped
    button: int = 1


StateListener = Callable[[CapabilityKey, Any], None]


class CapabilityState:
    """
    Per-device normalized capability values.

    Listeners are notified after every change; listener errors are logged
    and do not interrupt the caller.
    """

    def __init__(self, initial: Optional[dict[CapabilityKey, Any]] = None):
        self._values: dict[CapabilityKey, Any] = dict(initial or {})
        self._listeners: list[StateListener] = []

    def get(self, key: CapabilityKey, default: Any = None) -> Any:
        return self._values.get(key, default)

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __getitem__(self, key: CapabilityKey) -> Any:
        return self._values[key]

    def set(self, key: CapabilityKey, value: Any) -> None:
        """Store a normalized value and notify listeners."""
        self._values[key] = value
        for listener in self._listeners:
            try:
                listener(key, value)
            except Exception as e:
                logger.warning("State listener error for %s: %s", key.value, e)

    def add_listener(self, callback: StateListener) -> None:
        self._listeners.append(callback)

    def remove_listener(self, callback: StateListener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def to_dict(self) -> dict[str, Any]:
        return {key.value: value for key, value in self._values.items()}


@dataclass
class ActionResult:
    """Result of writing a capability."""
    success: bool
    message: str
    data: dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "data": self.data,
            "error": self.error,
        }
