"""
Outbound command dispatch.

A driver turns a normalized capability write into a CommandPlan: the hub
commands to send, the capability keys the write touches, and the local
effects to apply once the hub accepts it. The dispatcher opens suppression
windows for every touched key *before* the first outbound call, so a webhook
arriving during network latency is already ignored.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, Optional

from ..exceptions import TransportError
from ..hub.base import CommandParam, HubClient
from .models import ActionResult, CapabilityKey
from .suppression import CommandTimestampTable

logger = logging.getLogger("hubitat.devices.dispatcher")


@dataclass(frozen=True)
class HubCommand:
    """One Maker API command invocation."""
    name: str
    params: tuple[CommandParam, ...] = ()


@dataclass
class CommandPlan:
    """Everything needed to carry out one capability write."""
    key: CapabilityKey
    value: Any
    commands: list[HubCommand] = field(default_factory=list)
    touched: frozenset[CapabilityKey] = frozenset()
    local_updates: dict[CapabilityKey, Any] = field(default_factory=dict)
    store_updates: dict[str, Any] = field(default_factory=dict)
    repoll: bool = True

    @classmethod
    def single(
        cls,
        key: CapabilityKey,
        value: Any,
        command: str,
        *params: CommandParam,
        touched: Optional[Iterable[CapabilityKey]] = None,
        local_updates: Optional[dict[CapabilityKey, Any]] = None,
    ) -> "CommandPlan":
        """Plan for the common case of one command touching one key."""
        return cls(
            key=key,
            value=value,
            commands=[HubCommand(command, tuple(params))],
            touched=frozenset(touched) if touched is not None else frozenset({key}),
            local_updates=local_updates if local_updates is not None else {key: value},
        )


class CommandDispatcher:
    """Sends command plans for one device through the hub client."""

    def __init__(
        self,
        device_id: str,
        client: HubClient,
        suppression: CommandTimestampTable,
    ):
        self._device_id = device_id
        self._client = client
        self._suppression = suppression

    async def dispatch(self, plan: CommandPlan) -> ActionResult:
        """
        Send a plan's commands in order.

        Suppression is recorded first and is never rolled back: a failed
        command may still have partially applied on the hub. Failures are
        raised to the caller.
        """
        self._suppression.mark(plan.touched)
        logger.debug(
            "[%s] Suppressing %s for %s",
            self._device_id,
            sorted(k.value for k in plan.touched),
            plan.key.value,
        )

        sent = []
        for command in plan.commands:
            try:
                await self._client.send_command(self._device_id, command.name, list(command.params))
            except TransportError as e:
                logger.error(
                    "[%s] Error sending %s for %s: %s",
                    self._device_id, command.name, plan.key.value, e,
                )
                raise
            sent.append({"command": command.name, "params": list(command.params)})

        return ActionResult(
            success=True,
            message=f"Set {plan.key.value} to {plan.value}",
            data={"commands": sent},
        )


class Debouncer:
    """
    Coalesces rapid calls into one after a quiet period.

    Every trigger() restarts the timer; the callback runs once the timer
    fires without being reset. A callback that is already running is never
    cancelled by a later trigger.
    """

    def __init__(
        self,
        delay_seconds: float,
        callback: Callable[[], Awaitable[None]],
        name: str = "debounce",
    ):
        self._delay = delay_seconds
        self._callback = callback
        self._name = name
        self._task: Optional[asyncio.Task] = None
        self._inflight: set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def trigger(self) -> None:
        """Reset the timer."""
        if self.pending:
            self._task.cancel()
        self._task = asyncio.create_task(self._delayed())

    async def _delayed(self) -> None:
        try:
            await asyncio.sleep(self._delay)
        except asyncio.CancelledError:
            return

        # Detach so a trigger() during the callback starts a fresh timer
        current = asyncio.current_task()
        if self._task is current:
            self._task = None
        self._inflight.add(current)
        try:
            await self._callback()
        except Exception as e:
            logger.error("%s callback failed: %s", self._name, e)
        finally:
            self._inflight.discard(current)

    def cancel(self) -> None:
        """Drop a pending callback. A callback already sending is left to finish."""
        if self.pending:
            self._task.cancel()
        self._task = None
