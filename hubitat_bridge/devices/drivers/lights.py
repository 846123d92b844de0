"""
Light runtimes: dimmers, full-colour bulbs and tunable-white bulbs.
"""

import json
import logging
from typing import Any, Optional

from ...exceptions import ValidationError
from .. import translators as t
from ..dispatcher import CommandPlan, HubCommand
from ..models import CapabilityKey, DriverType
from ..runtime import DeviceRuntime, require_bool, require_unit

logger = logging.getLogger("hubitat.devices.drivers.lights")

K = CapabilityKey


class DimmerRuntime(DeviceRuntime):
    """Light with on/off and brightness."""

    driver_type = DriverType.DIMMER
    WRITABLE = frozenset({K.ONOFF, K.DIM})

    def build_command(self, key: CapabilityKey, value: Any) -> Optional[CommandPlan]:
        if key == K.ONOFF:
            on = require_bool(key, value)
            return CommandPlan.single(key, on, "on" if on else "off")
        if key == K.DIM:
            level = require_unit(key, value)
            return CommandPlan.single(key, level, "setLevel", t.unit_to_percent(level))
        return None


class ColorTempLightRuntime(DimmerRuntime):
    """Tunable-white light; warm is 1.0."""

    driver_type = DriverType.COLOR_TEMP_LIGHT
    WRITABLE = frozenset({K.ONOFF, K.DIM, K.LIGHT_TEMPERATURE})

    def build_command(self, key: CapabilityKey, value: Any) -> Optional[CommandPlan]:
        if key == K.LIGHT_TEMPERATURE:
            temperature = require_unit(key, value)
            kelvin = t.unit_to_color_temp_kelvin(temperature)
            return CommandPlan.single(key, temperature, "setColorTemperature", kelvin)
        return super().build_command(key, value)


class ColorLightRuntime(DimmerRuntime):
    """
    Full-colour light.

    Hue and saturation are sent together as one setColor command. Rapid
    writes to either are coalesced by a debounce timer; only the last
    hue/saturation pair reaches the hub.
    """

    driver_type = DriverType.COLOR_LIGHT
    WRITABLE = frozenset({
        K.ONOFF,
        K.DIM,
        K.LIGHT_HUE,
        K.LIGHT_SATURATION,
        K.LIGHT_TEMPERATURE,
        K.LIGHT_MODE,
    })

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._pending_color: dict[CapabilityKey, float] = {}
        self._color_debouncer = self._add_debouncer(self._send_color, "setColor")

    def build_command(self, key: CapabilityKey, value: Any) -> Optional[CommandPlan]:
        if key in (K.LIGHT_HUE, K.LIGHT_SATURATION):
            self._queue_color(key, require_unit(key, value))
            return None

        if key == K.LIGHT_TEMPERATURE:
            temperature = require_unit(key, value)
            kelvin = t.unit_to_full_color_kelvin(temperature)
            return CommandPlan.single(
                key, temperature, "setColorTemperature", kelvin,
                local_updates={key: temperature, K.LIGHT_MODE: "temperature"},
            )

        if key == K.LIGHT_MODE:
            if value not in ("color", "temperature"):
                raise ValidationError(f"light_mode expects 'color' or 'temperature', got {value!r}")
            self.state.set(key, value)
            return None

        return super().build_command(key, value)

    def _queue_color(self, key: CapabilityKey, value: float) -> None:
        # Hue and saturation are suppressed together from the first write
        self.suppression.mark((K.LIGHT_HUE, K.LIGHT_SATURATION))
        self._pending_color[key] = value
        logger.info("[%s] User adjusting %s to %s", self.id, key.value, value)
        self._color_debouncer.trigger()

    def color_plan(self) -> CommandPlan:
        """Build the combined setColor plan from pending and current values."""
        hue = self._pending_color.get(K.LIGHT_HUE, self.state.get(K.LIGHT_HUE) or 0.0)
        saturation = self._pending_color.get(
            K.LIGHT_SATURATION, self.state.get(K.LIGHT_SATURATION) or 0.0
        )
        level = self.state.get(K.DIM)
        payload = json.dumps({
            "hue": t.unit_to_percent(hue),
            "saturation": t.unit_to_percent(saturation),
            "level": t.unit_to_percent(level if level is not None else 1.0),
        }, separators=(",", ":"))
        return CommandPlan(
            key=K.LIGHT_HUE,
            value={"hue": hue, "saturation": saturation},
            commands=[HubCommand("setColor", (payload,))],
            touched=frozenset({K.LIGHT_HUE, K.LIGHT_SATURATION}),
            local_updates={K.LIGHT_HUE: hue, K.LIGHT_SATURATION: saturation, K.LIGHT_MODE: "color"},
            repoll=False,
        )

    async def _send_color(self) -> None:
        plan = self.color_plan()
        self._pending_color.clear()
        logger.info("[%s] Sending colour %s", self.id, plan.commands[0].params[0])
        await self.dispatcher.dispatch(plan)
        self._apply_local(plan)
