"""
Device manager.

Owns every paired device runtime and routes webhook observations and
capability writes to them by hub device id.
"""

import logging
import time
from typing import Any, Optional

from ..config import SyncConfig, settings
from ..exceptions import BridgeError, ConfigurationError, TransportError, ValidationError
from ..hub.base import HubClient
from .attributes import verify_attribute_tables
from .classifier import classify
from .drivers import runtime_class, verify_driver_tables
from .models import ActionResult, CapabilityKey, DriverType, ReconcileOutcome
from .runtime import DeviceRuntime
from .suppression import Clock

logger = logging.getLogger("hubitat.devices.manager")


class DeviceManager:
    """
    Registry of paired devices.

    Each device id maps to exactly one runtime, whose driver type is fixed
    at pairing.
    """

    def __init__(
        self,
        client: HubClient,
        sync: Optional[SyncConfig] = None,
        clock: Clock = time.monotonic,
    ):
        verify_attribute_tables()
        verify_driver_tables()
        self._client = client
        self._sync = sync or settings.sync
        self._clock = clock
        self._runtimes: dict[str, DeviceRuntime] = {}

    @property
    def client(self) -> HubClient:
        return self._client

    def get(self, device_id: str) -> Optional[DeviceRuntime]:
        return self._runtimes.get(str(device_id))

    def list_devices(self) -> list[DeviceRuntime]:
        return list(self._runtimes.values())

    # --- Pairing ---

    async def list_pairable_devices(self, driver_type: DriverType) -> list[dict[str, str]]:
        """Hub devices the classifier assigns to driver_type."""
        devices = await self._client.fetch_all_devices()
        return [
            {"name": d.display_name, "stable_id": d.id}
            for d in devices
            if classify(d) == driver_type
        ]

    async def pair(
        self,
        device_id: str,
        name: Optional[str] = None,
        driver_type: Optional[DriverType] = None,
        start: bool = True,
    ) -> DeviceRuntime:
        """
        Create and start the runtime for a hub device.

        Without a driver_type the device is fetched and classified.
        Pairing an already paired id returns the existing runtime.
        """
        device_id = str(device_id)
        existing = self._runtimes.get(device_id)
        if existing is not None:
            logger.warning("Device %s already paired as %s", device_id, existing.driver_type.value)
            return existing

        if driver_type is None:
            descriptor = await self._client.fetch_device(device_id)
            driver_type = classify(descriptor)
            if driver_type is None:
                raise ValidationError(f"Device {device_id} matches no supported driver type")
            name = name or descriptor.display_name

        runtime = runtime_class(driver_type)(
            device_id,
            name or device_id,
            self._client,
            sync=self._sync,
            clock=self._clock,
        )
        self._runtimes[device_id] = runtime
        logger.info("Paired device %s (%s) as %s", device_id, runtime.name, driver_type.value)

        if start:
            await runtime.start()
        return runtime

    async def remove(self, device_id: str) -> bool:
        """Unpair a device and cancel all of its timers."""
        runtime = self._runtimes.pop(str(device_id), None)
        if runtime is None:
            return False
        await runtime.close()
        logger.info("Removed device %s (%s)", runtime.id, runtime.name)
        return True

    # --- Observations and writes ---

    async def handle_observation(
        self,
        device_id: Any,
        attribute: Any,
        raw_value: Any,
    ) -> Optional[ReconcileOutcome]:
        """
        Route a webhook observation to its device.

        Returns None when the device is not paired and REJECTED for a
        malformed observation. Never raises.
        """
        if device_id in (None, "") or not attribute or raw_value is None:
            logger.warning(
                "Invalid observation: deviceId=%r name=%r value=%r",
                device_id, attribute, raw_value,
            )
            return ReconcileOutcome.REJECTED

        runtime = self._runtimes.get(str(device_id))
        if runtime is None:
            logger.warning("Device %s not found", device_id)
            return None

        logger.info("Webhook %s=%r for device %s (%s)", attribute, raw_value, device_id, runtime.name)
        try:
            return await runtime.handle_observation(str(attribute), raw_value)
        except Exception as e:
            logger.error("Error handling %s for device %s: %s", attribute, device_id, e)
            return ReconcileOutcome.REJECTED

    async def write_capability(
        self,
        device_id: str,
        key: CapabilityKey,
        value: Any,
    ) -> ActionResult:
        """Write a capability on a paired device; failures come back as a failed result."""
        runtime = self._runtimes.get(str(device_id))
        if runtime is None:
            return ActionResult(
                success=False,
                message=f"Device {device_id} not found",
                error="DEVICE_NOT_FOUND",
            )

        try:
            return await runtime.set_capability(key, value)
        except ConfigurationError as e:
            return ActionResult(success=False, message=str(e), error="NOT_CONFIGURED")
        except TransportError as e:
            return ActionResult(success=False, message=str(e), error="TRANSPORT_ERROR")

    def get_state(self, device_id: str) -> Optional[dict[str, Any]]:
        runtime = self._runtimes.get(str(device_id))
        return runtime.to_dict() if runtime else None

    # --- Hub ---

    async def test_connectivity(self) -> bool:
        """True when the hub answers a device listing."""
        try:
            await self._client.fetch_all_devices()
        except BridgeError as e:
            logger.warning("Hub connection test failed: %s", e)
            return False
        return True

    async def shutdown(self) -> None:
        """Close every runtime and the hub client."""
        for device_id in list(self._runtimes):
            await self.remove(device_id)
        close = getattr(self._client, "close", None)
        if close is not None:
            await close()
        logger.info("Device manager shut down")


# Module-level singleton
_device_manager: Optional[DeviceManager] = None


def get_device_manager() -> DeviceManager:
    """Get or create the device manager singleton."""
    global _device_manager
    if _device_manager is None:
        from ..hub.maker_api import MakerAPIClient

        _device_manager = DeviceManager(MakerAPIClient.from_config(settings.hub))
    return _device_manager


def set_device_manager(manager: Optional[DeviceManager]) -> None:
    """Install a specific manager (application startup and tests)."""
    global _device_manager
    _device_manager = manager


def reset_device_manager() -> None:
    """Reset the device manager singleton (mainly for testing)."""
    global _device_manager
    _device_manager = None
