"""
Value translators between hub-native encodings and normalized domains.

The hub reports integer percentages, literal Kelvin, named fan speeds and
string enums. The controller works with 0-1 floats, booleans and a small set
of enum strings. Every function here is pure.
"""

import math
from typing import Any, Callable, Optional

from ..exceptions import UnrecognizedValueError

# Full-colour bulbs: 0 = warmest end of the hub range
FULL_COLOR_KELVIN_MIN = 2200
FULL_COLOR_KELVIN_MAX = 6500

# Tunable-white bulbs: normalized 0 = coldest, 1 = warmest (inverted)
COLOR_TEMP_KELVIN_MIN = 2700
COLOR_TEMP_KELVIN_MAX = 6500

# Named fan speeds the hub accepts, in ascending order
FAN_SPEED_RUNGS: dict[str, float] = {
    "low": 0.2,
    "medium-low": 0.4,
    "medium": 0.6,
    "medium-high": 0.8,
    "high": 1.0,
}

# Inbound only; never sent to the hub
_INBOUND_ONLY_FAN_SPEEDS: dict[str, float] = {
    "off": 0.0,
    "auto": 0.5,
    "on": 0.5,
}

DEFAULT_FAN_SPEED = "medium"


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def _to_number(raw: Any, attribute: str) -> float:
    if isinstance(raw, bool):
        raise UnrecognizedValueError(attribute, raw)
    if isinstance(raw, (int, float)):
        number = float(raw)
    else:
        try:
            number = float(str(raw).strip())
        except (TypeError, ValueError):
            raise UnrecognizedValueError(attribute, raw) from None
    # float() accepts "nan" and "inf"; neither is a reading
    if not math.isfinite(number):
        raise UnrecognizedValueError(attribute, raw)
    return number


# --- Percentages ---


def percent_to_unit(raw: Any) -> float:
    """Hub 0-100 integer percentage -> 0.0-1.0."""
    return _to_number(raw, "percentage") / 100


def unit_to_percent(value: float) -> int:
    """0.0-1.0 -> hub 0-100 integer percentage."""
    return round_half_up(value * 100)


# --- Colour temperature ---


def full_color_kelvin_to_unit(raw: Any) -> float:
    kelvin = _to_number(raw, "colorTemperature")
    span = FULL_COLOR_KELVIN_MAX - FULL_COLOR_KELVIN_MIN
    return clamp01((kelvin - FULL_COLOR_KELVIN_MIN) / span)


def unit_to_full_color_kelvin(value: float) -> int:
    span = FULL_COLOR_KELVIN_MAX - FULL_COLOR_KELVIN_MIN
    return round_half_up(FULL_COLOR_KELVIN_MIN + value * span)


def color_temp_kelvin_to_unit(raw: Any) -> float:
    """Literal Kelvin -> inverted 0 (6500K, cold) .. 1 (2700K, warm)."""
    kelvin = _to_number(raw, "colorTemperature")
    span = COLOR_TEMP_KELVIN_MAX - COLOR_TEMP_KELVIN_MIN
    return clamp01((COLOR_TEMP_KELVIN_MAX - kelvin) / span)


def unit_to_color_temp_kelvin(value: float) -> int:
    span = COLOR_TEMP_KELVIN_MAX - COLOR_TEMP_KELVIN_MIN
    return round_half_up(COLOR_TEMP_KELVIN_MAX - value * span)


# --- Fan speed ---


def fan_speed_to_unit(raw: Any) -> float:
    """
    Hub fan speed -> 0.0-1.0.

    Accepts a numeric percentage or a named speed (case-insensitive).
    Unknown names raise UnrecognizedValueError rather than falling back to a
    default, so the caller can drop the observation.
    """
    text = str(raw).strip().lower()
    if text in FAN_SPEED_RUNGS:
        return FAN_SPEED_RUNGS[text]
    if text in _INBOUND_ONLY_FAN_SPEEDS:
        return _INBOUND_ONLY_FAN_SPEEDS[text]
    return clamp01(_to_number(raw, "speed") / 100)


def unit_to_fan_speed(value: float) -> str:
    """0.0-1.0 -> one of the named rungs, or "off" for exactly 0%."""
    percentage = round_half_up(value * 100)
    if percentage == 0:
        return "off"
    if percentage <= 20:
        return "low"
    if percentage <= 40:
        return "medium-low"
    if percentage <= 60:
        return "medium"
    if percentage <= 80:
        return "medium-high"
    return "high"


def named_fan_speed(raw: Any) -> Optional[str]:
    """Return the canonical rung name if raw names a concrete speed, else None."""
    if not isinstance(raw, str):
        return None
    text = raw.strip().lower()
    return text if text in FAN_SPEED_RUNGS else None


# --- Enums ---


def enum_to_bool(true_value: str) -> Callable[[Any], bool]:
    """Build a translator that maps one hub enum string to True, anything else to False."""
    def translate(raw: Any) -> bool:
        return str(raw).strip().lower() == true_value
    translate.__name__ = f"is_{true_value}"
    return translate


def window_shade_to_state(raw: Any) -> str:
    """Hub windowShade -> up / down / idle."""
    value = str(raw).strip().lower()
    if value in ("open", "opening"):
        return "up"
    if value in ("closed", "closing"):
        return "down"
    return "idle"


def color_mode_to_light_mode(raw: Any) -> str:
    return "temperature" if str(raw).strip() == "CT" else "color"


def thermostat_mode(raw: Any) -> str:
    return str(raw).strip()


def to_float(raw: Any) -> float:
    """Measurements and setpoints are reported as numeric strings."""
    return _to_number(raw, "measurement")


def to_button_number(raw: Any) -> int:
    """Button events carry the button number; default to button 1."""
    try:
        number = int(float(str(raw).strip()))
    except (TypeError, ValueError):
        return 1
    return number or 1


def to_int(raw: Any) -> int:
    return int(_to_number(raw, "integer"))
