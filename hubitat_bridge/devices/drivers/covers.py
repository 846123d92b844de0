"""
Window coverings: blinds, shades and curtains.
"""

from typing import Any, Optional

from ...exceptions import ValidationError
from .. import translators as t
from ..dispatcher import CommandPlan
from ..models import CapabilityKey, DriverType
from ..runtime import DeviceRuntime, require_unit

K = CapabilityKey

SHADE_COMMANDS = {
    "up": "open",
    "down": "close",
    "idle": "stopPositionChange",
}


class WindowCoveringRuntime(DeviceRuntime):
    driver_type = DriverType.WINDOW_COVERING
    WRITABLE = frozenset({K.WINDOWCOVERINGS_STATE, K.WINDOWCOVERINGS_SET})

    def build_command(self, key: CapabilityKey, value: Any) -> Optional[CommandPlan]:
        if key == K.WINDOWCOVERINGS_STATE:
            command = SHADE_COMMANDS.get(value)
            if command is None:
                raise ValidationError(
                    f"{key.value} expects one of {sorted(SHADE_COMMANDS)}, got {value!r}"
                )
            return CommandPlan.single(key, value, command)

        if key == K.WINDOWCOVERINGS_SET:
            position = require_unit(key, value)
            return CommandPlan.single(key, position, "setPosition", t.unit_to_percent(position))

        return None
