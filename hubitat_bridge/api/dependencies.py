"""
FastAPI dependencies for service injection.
"""

from ..devices.manager import DeviceManager, get_device_manager


def get_manager() -> DeviceManager:
    """FastAPI dependency that provides the device manager."""
    return get_device_manager()
