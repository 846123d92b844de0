"""
Thermostat runtime.

The hub reports separate heating and cooling setpoints; the controller shows
a single target temperature. Which setpoint the target follows depends on
the thermostat mode: heat and cool follow their own setpoint, every other
mode shows the midpoint of the two.
"""

import logging
from typing import Any, Optional

from ..attributes import AttributeBinding
from ..dispatcher import CommandPlan, HubCommand
from ..models import CapabilityKey, DriverType
from ..runtime import DeviceRuntime, require_number
from ..store import COOLING_SETPOINT, HEATING_SETPOINT

logger = logging.getLogger("hubitat.devices.drivers.climate")

K = CapabilityKey

# Half-width of the heating/cooling band written in auto modes
AUTO_BAND = 1.0


def derive_target(mode: Optional[str], heating: Optional[float], cooling: Optional[float]) -> Optional[float]:
    """Target temperature for a mode and the known setpoints, or None."""
    if mode == "heat" and heating is not None:
        return heating
    if mode == "cool" and cooling is not None:
        return cooling
    if heating is not None and cooling is not None:
        return (heating + cooling) / 2
    return None


class ThermostatRuntime(DeviceRuntime):
    driver_type = DriverType.THERMOSTAT
    WRITABLE = frozenset({K.TARGET_TEMPERATURE, K.THERMOSTAT_MODE})

    def _target_for(self, mode: Optional[str]) -> Optional[float]:
        return derive_target(
            mode,
            self.store.get(HEATING_SETPOINT),
            self.store.get(COOLING_SETPOINT),
        )

    def derive(
        self,
        attribute: str,
        binding: AttributeBinding,
        raw_value: Any,
        value: Any,
    ) -> dict[CapabilityKey, Any]:
        if attribute in ("heatingSetpoint", "coolingSetpoint"):
            target = self._target_for(self.state.get(K.THERMOSTAT_MODE))
            if target is None:
                return {}
            return {K.TARGET_TEMPERATURE: target}

        if attribute == "thermostatMode":
            updates = {K.THERMOSTAT_MODE: value}
            target = self._target_for(value)
            if target is not None:
                updates[K.TARGET_TEMPERATURE] = target
            return updates

        return super().derive(attribute, binding, raw_value, value)

    def build_command(self, key: CapabilityKey, value: Any) -> Optional[CommandPlan]:
        if key == K.TARGET_TEMPERATURE:
            return self._target_plan(require_number(key, value))
        if key == K.THERMOSTAT_MODE:
            return CommandPlan.single(key, value, "setThermostatMode", str(value))
        return None

    def _target_plan(self, target: float) -> CommandPlan:
        mode = self.state.get(K.THERMOSTAT_MODE)
        plan = CommandPlan(
            key=K.TARGET_TEMPERATURE,
            value=target,
            touched=frozenset({K.TARGET_TEMPERATURE}),
            local_updates={K.TARGET_TEMPERATURE: target},
        )

        if mode == "heat":
            plan.commands.append(HubCommand("setHeatingSetpoint", (target,)))
            plan.store_updates[HEATING_SETPOINT] = target
        elif mode == "cool":
            plan.commands.append(HubCommand("setCoolingSetpoint", (target,)))
            plan.store_updates[COOLING_SETPOINT] = target
        else:
            heating, cooling = target - AUTO_BAND, target + AUTO_BAND
            plan.commands.append(HubCommand("setHeatingSetpoint", (heating,)))
            plan.commands.append(HubCommand("setCoolingSetpoint", (cooling,)))
            plan.store_updates[HEATING_SETPOINT] = heating
            plan.store_updates[COOLING_SETPOINT] = cooling

        logger.debug("[%s] Target %.1f in mode %s", self.id, target, mode)
        return plan
