"""
Per-device runtime.

One runtime exists for every paired device. It owns the device's capability
state, suppression table and derived store, plus the asyncio tasks that
keep them fresh: the periodic poll, post-command re-polls and debounce
timers. All of them are cancelled by close(); use the runtime as an async
context manager to guarantee that.
"""

import asyncio
import logging
import time
from typing import Any, Callable, ClassVar, Optional

from ..config import SyncConfig, settings
from ..exceptions import ValidationError
from ..hub.base import HubClient
from .attributes import AttributeBinding, attribute_table
from .dispatcher import CommandDispatcher, CommandPlan, Debouncer
from .models import (
    ActionResult,
    ButtonEvent,
    CapabilityKey,
    CapabilityState,
    DriverType,
    ObservationSource,
    ReconcileOutcome,
)
from .reconcile import ReconciliationEngine
from .store import DerivedStore
from .suppression import Clock, CommandTimestampTable

logger = logging.getLogger("hubitat.devices.runtime")

EventListener = Callable[[ButtonEvent], None]


class DeviceRuntime:
    """
    Base class for driver runtimes.

    Subclasses set driver_type and WRITABLE and implement build_command().
    Drivers with linked attributes override derive()/after_apply().
    """

    driver_type: ClassVar[DriverType]
    WRITABLE: ClassVar[frozenset[CapabilityKey]] = frozenset()

    def __init__(
        self,
        device_id: str,
        name: str,
        client: HubClient,
        sync: Optional[SyncConfig] = None,
        store: Optional[DerivedStore] = None,
        clock: Clock = time.monotonic,
    ):
        self._id = str(device_id)
        self._name = name
        self._client = client
        self._sync = sync or settings.sync

        self.state = CapabilityState()
        self.store = store or DerivedStore()
        self.suppression = CommandTimestampTable(self._sync.cooldown_ms, clock)
        self.dispatcher = CommandDispatcher(self._id, client, self.suppression)
        self.engine = ReconciliationEngine(
            self._id,
            attribute_table(self.driver_type),
            self.state,
            self.suppression,
            self.store,
            hooks=self,
            fan_speed_tolerance=self._sync.fan_speed_tolerance,
        )

        self._poll_task: Optional[asyncio.Task] = None
        self._repoll_tasks: set[asyncio.Task] = set()
        self._debouncers: list[Debouncer] = []
        self._event_listeners: list[EventListener] = []
        self._closed = False

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def is_running(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "driver_type": self.driver_type.value,
            "writable": sorted(k.value for k in self.WRITABLE),
            "state": self.state.to_dict(),
            "store": self.store.to_dict(),
        }

    # --- Lifecycle ---

    async def start(self, initial_poll: bool = True) -> None:
        """Fetch initial state and start the periodic poll."""
        if self._closed:
            raise RuntimeError(f"Runtime for device {self._id} is closed")
        if initial_poll:
            await self._poll_safely()
        if not self.is_running:
            self._poll_task = asyncio.create_task(self._poll_loop())
        logger.info("%s device %s (%s) started", self.driver_type.value, self._id, self._name)

    async def close(self) -> None:
        """Cancel the poll loop, pending re-polls and debounce timers."""
        self._closed = True
        tasks = list(self._repoll_tasks)
        if self._poll_task is not None:
            tasks.append(self._poll_task)
            self._poll_task = None
        for debouncer in self._debouncers:
            debouncer.cancel()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._repoll_tasks.clear()
        logger.info("%s device %s (%s) stopped", self.driver_type.value, self._id, self._name)

    async def __aenter__(self) -> "DeviceRuntime":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # --- Polling ---

    async def poll(self) -> dict[str, ReconcileOutcome]:
        """Fetch the device from the hub and reconcile every known attribute."""
        descriptor = await self._client.fetch_device(self._id)
        return self.engine.reconcile_descriptor(descriptor, ObservationSource.POLL)

    async def _poll_safely(self) -> bool:
        try:
            await self.poll()
            return True
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error("Error polling device %s (%s): %s", self._id, self._name, e)
            return False

    async def _poll_loop(self) -> None:
        while True:
            await asyncio.sleep(self._sync.poll_interval_seconds)
            await self._poll_safely()

    def schedule_repoll(self) -> None:
        """Poll again shortly after a command to converge faster than the poll cycle."""
        if self._closed:
            return
        task = asyncio.create_task(self._delayed_poll(self._sync.repoll_delay_ms / 1000))
        self._repoll_tasks.add(task)
        task.add_done_callback(self._repoll_tasks.discard)

    async def _delayed_poll(self, delay: float) -> None:
        await asyncio.sleep(delay)
        await self._poll_safely()

    # --- Observations ---

    async def handle_observation(self, attribute: str, raw_value: Any) -> ReconcileOutcome:
        """Entry point for webhook deliveries."""
        return self.engine.reconcile(attribute, raw_value, ObservationSource.WEBHOOK)

    def derive(
        self,
        attribute: str,
        binding: AttributeBinding,
        raw_value: Any,
        value: Any,
    ) -> dict[CapabilityKey, Any]:
        return {binding.key: value}

    def after_apply(
        self,
        attribute: str,
        binding: AttributeBinding,
        raw_value: Any,
        value: Any,
    ) -> None:
        pass

    def emit(self, attribute: str, value: Any) -> None:
        logger.debug("[%s] Event %s=%r has no handler", self._id, attribute, value)

    def add_event_listener(self, callback: EventListener) -> None:
        self._event_listeners.append(callback)

    def remove_event_listener(self, callback: EventListener) -> None:
        if callback in self._event_listeners:
            self._event_listeners.remove(callback)

    def _notify_event(self, event: ButtonEvent) -> None:
        for listener in self._event_listeners:
            try:
                listener(event)
            except Exception as e:
                logger.warning("Event listener error for %s: %s", self._id, e)

    # --- Capability writes ---

    async def set_capability(self, key: CapabilityKey, value: Any) -> ActionResult:
        """
        Write a capability.

        Unsupported keys and invalid values return a failed ActionResult.
        Transport failures are raised; the suppression window opened for
        the write stays in effect either way.
        """
        if key not in self.WRITABLE:
            return ActionResult(
                success=False,
                message=f"{self.name} does not support {key.value}",
                error="UNSUPPORTED_CAPABILITY",
            )

        try:
            plan = self.build_command(key, value)
        except ValidationError as e:
            return ActionResult(success=False, message=str(e), error="INVALID_VALUE")

        if plan is None:
            return ActionResult(success=True, message=f"{self.name} {key.value} updated")

        for store_key, store_value in plan.store_updates.items():
            self.store.set(store_key, store_value)

        result = await self.dispatcher.dispatch(plan)
        self._apply_local(plan)
        if plan.repoll:
            self.schedule_repoll()
        return result

    def build_command(self, key: CapabilityKey, value: Any) -> Optional[CommandPlan]:
        """
        Translate a normalized write into a command plan.

        Return None when the write is handled locally (or deferred, e.g.
        debounced). Raise ValidationError for values outside the domain.
        """
        raise NotImplementedError

    def _apply_local(self, plan: CommandPlan) -> None:
        for key, value in plan.local_updates.items():
            self.state.set(key, value)

    def _add_debouncer(self, callback, name: str) -> Debouncer:
        debouncer = Debouncer(self._sync.debounce_ms / 1000, callback, name=f"[{self._id}] {name}")
        self._debouncers.append(debouncer)
        return debouncer


def require_bool(key: CapabilityKey, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"{key.value} expects a boolean, got {value!r}")
    return value


def require_unit(key: CapabilityKey, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0 <= value <= 1:
        raise ValidationError(f"{key.value} expects a number between 0 and 1, got {value!r}")
    return float(value)


def require_number(key: CapabilityKey, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{key.value} expects a number, got {value!r}")
    return float(value)
