"""
Device state and capability write endpoints.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ...devices.manager import DeviceManager
from ...devices.models import CapabilityKey
from ..dependencies import get_manager

logger = logging.getLogger("hubitat.api.devices")

router = APIRouter()


# --- Request/Response Models ---


class DeviceInfo(BaseModel):
    """Paired device response."""
    id: str
    name: str
    driver_type: str
    writable: list[str]
    state: dict[str, Any] = {}


class CapabilityWrite(BaseModel):
    value: Any


class ActionResponse(BaseModel):
    """Result of a capability write."""
    success: bool
    message: str
    data: dict[str, Any] = {}
    error: Optional[str] = None


# --- Endpoints ---


@router.get("/", response_model=list[DeviceInfo])
async def list_devices(manager: DeviceManager = Depends(get_manager)):
    """List all paired devices with their current state."""
    return [DeviceInfo(**runtime.to_dict()) for runtime in manager.list_devices()]


@router.get("/{device_id}/state")
async def get_device_state(device_id: str, manager: DeviceManager = Depends(get_manager)):
    """Get the current normalized state of a device."""
    state = manager.get_state(device_id)
    if state is None:
        raise HTTPException(404, f"Device not found: {device_id}")
    return state


@router.post("/{device_id}/capabilities/{key}", response_model=ActionResponse)
async def write_capability(
    device_id: str,
    key: str,
    body: CapabilityWrite,
    manager: DeviceManager = Depends(get_manager),
):
    """Write a normalized capability value."""
    try:
        capability = CapabilityKey(key)
    except ValueError:
        raise HTTPException(400, f"Invalid capability: {key}")

    if manager.get(device_id) is None:
        raise HTTPException(404, f"Device not found: {device_id}")

    result = await manager.write_capability(device_id, capability, body.value)
    if not result.success:
        logger.warning("Write %s on %s failed: %s", key, device_id, result.message)
    return ActionResponse(**result.to_dict())
