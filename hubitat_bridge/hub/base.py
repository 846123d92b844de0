"""
Base protocol for the hub REST client.
"""

from typing import Any, Protocol, Sequence, Union, runtime_checkable

from ..devices.models import DeviceDescriptor

CommandParam = Union[str, int, float]


@runtime_checkable
class HubClient(Protocol):
    """
    Protocol for talking to the hub.

    Implementations raise TransportError on non-success status codes,
    connection failures and malformed bodies, and ConfigurationError when
    connection parameters are missing.
    """

    async def fetch_all_devices(self) -> list[DeviceDescriptor]:
        """Return every device the hub exposes."""
        ...

    async def fetch_device(self, device_id: str) -> DeviceDescriptor:
        """Return the current snapshot of one device."""
        ...

    async def send_command(
        self,
        device_id: str,
        command: str,
        params: Sequence[CommandParam] = (),
    ) -> Any:
        """
        Invoke a hub command.

        Args:
            device_id: Hub device identifier
            command: Hub command name, e.g. "setLevel"
            params: Ordered command parameters

        Returns:
            The hub's response, which callers treat as opaque
        """
        ...
