"""
State reconciliation for one device.

Every observed (attribute, value) pair, whether it comes from a poll or a
webhook, passes through the same steps:

1. map the hub attribute to a capability key via the driver's table
2. drop it if the key is inside a command suppression window
3. translate the raw value (unrecognized values are dropped)
4. apply the small-delta tolerance for continuous keys
5. write CapabilityState and any linked keys

reconcile() is synchronous on purpose: the read-decide-write sequence on the
state never yields to another task.
"""

import logging
from typing import Any, Optional, Protocol

from ..exceptions import ValidationError
from .attributes import AttributeBinding
from .models import (
    CapabilityKey,
    CapabilityState,
    DeviceDescriptor,
    ObservationSource,
    ReconcileOutcome,
)
from .store import DerivedStore
from .suppression import CommandTimestampTable

logger = logging.getLogger("hubitat.devices.reconcile")


class LinkedAttributes(Protocol):
    """Driver hooks for attributes that affect more than their own key."""

    def derive(
        self,
        attribute: str,
        binding: AttributeBinding,
        raw_value: Any,
        value: Any,
    ) -> dict[CapabilityKey, Any]:
        """Return the capability updates implied by an accepted observation."""
        ...

    def after_apply(
        self,
        attribute: str,
        binding: AttributeBinding,
        raw_value: Any,
        value: Any,
    ) -> None:
        """Called once the updates have been written."""
        ...

    def emit(self, attribute: str, value: Any) -> None:
        """Publish an event-only attribute (e.g. a button press)."""
        ...


class DirectMapping:
    """Default hooks: each attribute feeds exactly its own key."""

    def derive(self, attribute, binding, raw_value, value):
        return {binding.key: value}

    def after_apply(self, attribute, binding, raw_value, value):
        pass

    def emit(self, attribute, value):
        logger.debug("No event handler for %s=%s", attribute, value)


class ReconciliationEngine:
    """Decides acceptance or suppression for observations of one device."""

    def __init__(
        self,
        device_id: str,
        table: dict[str, AttributeBinding],
        state: CapabilityState,
        suppression: CommandTimestampTable,
        store: DerivedStore,
        hooks: Optional[LinkedAttributes] = None,
        fan_speed_tolerance: float = 0.05,
    ):
        self._device_id = device_id
        self._table = table
        self._state = state
        self._suppression = suppression
        self._store = store
        self._hooks = hooks or DirectMapping()
        self._tolerance = fan_speed_tolerance

    def reconcile(
        self,
        attribute: str,
        raw_value: Any,
        source: ObservationSource,
    ) -> ReconcileOutcome:
        """Feed one observation through the pipeline. Never raises on bad input."""
        binding = self._table.get(attribute)
        if binding is None:
            logger.info(
                "[%s] Unmapped attribute from %s: %s=%r",
                self._device_id, source.value, attribute, raw_value,
            )
            return ReconcileOutcome.UNMAPPED

        if binding.key is None:
            return self._reconcile_unkeyed(attribute, binding, raw_value, source)

        if self._suppression.is_suppressed(binding.key):
            elapsed = self._suppression.elapsed(binding.key) or 0.0
            logger.info(
                "[%s] Ignoring %s %s=%r (%.0fms since command, cooldown %.0fms)",
                self._device_id, source.value, attribute, raw_value,
                elapsed * 1000, self._suppression.cooldown_seconds * 1000,
            )
            return ReconcileOutcome.SUPPRESSED

        try:
            value = binding.translate(raw_value)
        except ValidationError as e:
            logger.warning("[%s] Dropping %s observation: %s", self._device_id, source.value, e)
            return ReconcileOutcome.REJECTED

        if binding.store_key:
            self._store.set(binding.store_key, value)

        updates = self._hooks.derive(attribute, binding, raw_value, value)
        if not updates:
            logger.debug("[%s] %s=%r implies no change", self._device_id, attribute, raw_value)
            return ReconcileOutcome.UNCHANGED

        primary = binding.key
        if binding.continuous and primary in updates and primary in self._state:
            current = self._state.get(primary) or 0.0
            diff = round(abs(updates[primary] - current), 9)
            if diff <= self._tolerance:
                logger.debug(
                    "[%s] Not updating %s: difference %.3f within tolerance %.3f",
                    self._device_id, primary.value, diff, self._tolerance,
                )
                return ReconcileOutcome.UNCHANGED

        for key, new_value in updates.items():
            if key != primary and self._suppression.is_suppressed(key):
                logger.debug("[%s] Linked key %s suppressed", self._device_id, key.value)
                continue
            self._state.set(key, new_value)
            logger.debug(
                "[%s] %s %s=%r -> %s=%r",
                self._device_id, source.value, attribute, raw_value, key.value, new_value,
            )

        self._hooks.after_apply(attribute, binding, raw_value, value)
        return ReconcileOutcome.APPLIED

    def _reconcile_unkeyed(
        self,
        attribute: str,
        binding: AttributeBinding,
        raw_value: Any,
        source: ObservationSource,
    ) -> ReconcileOutcome:
        if not binding.event and not binding.store_key:
            logger.debug("[%s] Ignoring %s=%r", self._device_id, attribute, raw_value)
            return ReconcileOutcome.IGNORED

        try:
            value = binding.translate(raw_value)
        except ValidationError as e:
            logger.warning("[%s] Dropping %s observation: %s", self._device_id, source.value, e)
            return ReconcileOutcome.REJECTED

        if binding.store_key:
            self._store.set(binding.store_key, value)
        if binding.event:
            self._hooks.emit(attribute, value)
            return ReconcileOutcome.EMITTED
        return ReconcileOutcome.STORED

    def reconcile_descriptor(
        self,
        descriptor: DeviceDescriptor,
        source: ObservationSource = ObservationSource.POLL,
    ) -> dict[str, ReconcileOutcome]:
        """
        Reconcile a full snapshot in attribute-table order.

        Event attributes are skipped: a snapshot carries the last button
        press, not a new one.
        """
        outcomes: dict[str, ReconcileOutcome] = {}
        for name, binding in self._table.items():
            if binding.event:
                continue
            attr = descriptor.attribute(name)
            if attr is None or attr.current_value is None:
                continue
            outcomes[name] = self.reconcile(name, attr.current_value, source)
        return outcomes
