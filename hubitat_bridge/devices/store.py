"""
Device-scoped scalar store.

Holds values that cannot be recovered from the normalized state, such as the
last named fan speed before the fan was turned off.
"""

from typing import Any, Optional

LAST_SPEED_NAME = "last_speed_name"
HEATING_SETPOINT = "heating_setpoint"
COOLING_SETPOINT = "cooling_setpoint"
NUMBER_OF_BUTTONS = "number_of_buttons"


class DerivedStore:
    """In-memory key/value store owned by one device runtime."""

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self._values: dict[str, Any] = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def to_dict(self) -> dict[str, Any]:
        return dict(self._values)
