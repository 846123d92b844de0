"""
Fan runtime.

The hub models a fan as a named speed plus a switch; onoff and fan_speed are
linked. Turning the fan back on restores the last named speed the fan ran
at, which is kept in the derived store because 0.0 cannot carry it.
"""

import logging
from typing import Any, Optional

from .. import translators as t
from ..attributes import AttributeBinding
from ..dispatcher import CommandPlan
from ..models import CapabilityKey, DriverType
from ..runtime import DeviceRuntime, require_bool, require_unit
from ..store import LAST_SPEED_NAME

logger = logging.getLogger("hubitat.devices.drivers.fans")

K = CapabilityKey


class FanRuntime(DeviceRuntime):
    driver_type = DriverType.FAN
    WRITABLE = frozenset({K.ONOFF, K.FAN_SPEED})

    # --- Observations ---

    def derive(
        self,
        attribute: str,
        binding: AttributeBinding,
        raw_value: Any,
        value: Any,
    ) -> dict[CapabilityKey, Any]:
        if attribute == "speed":
            return {K.FAN_SPEED: value, K.ONOFF: value > 0}

        if attribute == "switch":
            # A running speed wins over a stale switch report
            current_speed = self.state.get(K.FAN_SPEED)
            if not current_speed or value is False:
                return {K.ONOFF: value}
            logger.debug(
                "[%s] Keeping onoff from speed %.2f over switch=%r",
                self.id, current_speed, raw_value,
            )
            return {}

        return super().derive(attribute, binding, raw_value, value)

    def after_apply(
        self,
        attribute: str,
        binding: AttributeBinding,
        raw_value: Any,
        value: Any,
    ) -> None:
        if attribute != "speed":
            return
        name = t.named_fan_speed(raw_value)
        if name:
            self.store.set(LAST_SPEED_NAME, name)

    # --- Writes ---

    def build_command(self, key: CapabilityKey, value: Any) -> Optional[CommandPlan]:
        if key == K.ONOFF:
            return self._onoff_plan(require_bool(key, value))
        if key == K.FAN_SPEED:
            return self._speed_plan(require_unit(key, value))
        return None

    def _onoff_plan(self, on: bool) -> CommandPlan:
        touched = (K.ONOFF, K.FAN_SPEED)
        if not on:
            return CommandPlan.single(
                K.ONOFF, False, "setSpeed", "off",
                touched=touched,
                local_updates={K.ONOFF: False, K.FAN_SPEED: 0.0},
            )

        name = self.store.get(LAST_SPEED_NAME) or t.DEFAULT_FAN_SPEED
        speed = t.FAN_SPEED_RUNGS.get(name, t.FAN_SPEED_RUNGS[t.DEFAULT_FAN_SPEED])
        logger.info("[%s] Restoring fan speed %s", self.id, name)
        return CommandPlan.single(
            K.ONOFF, True, "setSpeed", name,
            touched=touched,
            local_updates={K.ONOFF: True, K.FAN_SPEED: speed},
        )

    def _speed_plan(self, speed: float) -> CommandPlan:
        name = t.unit_to_fan_speed(speed)
        plan = CommandPlan.single(
            K.FAN_SPEED, speed, "setSpeed", name,
            local_updates={K.FAN_SPEED: speed, K.ONOFF: name != "off"},
        )
        if name != "off":
            plan.store_updates[LAST_SPEED_NAME] = name
        return plan
