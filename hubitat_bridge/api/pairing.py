"""
Pairing endpoints: list candidate hub devices and pair or unpair them.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..devices.manager import DeviceManager
from ..devices.models import DriverType
from ..exceptions import BridgeError, ValidationError
from .dependencies import get_manager

logger = logging.getLogger("hubitat.api.pairing")

router = APIRouter(prefix="/pairing", tags=["Pairing"])


class PairableDevice(BaseModel):
    name: str
    stable_id: str


class PairRequest(BaseModel):
    """Pair a hub device. Without driver_type the device is classified."""
    device_id: str
    name: Optional[str] = None
    driver_type: Optional[DriverType] = None


class PairedDevice(BaseModel):
    id: str
    name: str
    driver_type: str


@router.get("/{driver_type}", response_model=list[PairableDevice])
async def list_pairable(driver_type: str, manager: DeviceManager = Depends(get_manager)):
    """Hub devices that would pair as driver_type."""
    try:
        dt = DriverType(driver_type)
    except ValueError:
        raise HTTPException(400, f"Invalid driver type: {driver_type}")

    try:
        devices = await manager.list_pairable_devices(dt)
    except BridgeError as e:
        logger.error("Error listing devices: %s", e)
        raise HTTPException(502, "Failed to get devices from Hubitat. Please check your settings.")
    return [PairableDevice(**d) for d in devices]


@router.post("", response_model=PairedDevice)
async def pair_device(body: PairRequest, manager: DeviceManager = Depends(get_manager)):
    try:
        runtime = await manager.pair(body.device_id, name=body.name, driver_type=body.driver_type)
    except ValidationError as e:
        raise HTTPException(400, str(e))
    except BridgeError as e:
        raise HTTPException(502, str(e))
    return PairedDevice(id=runtime.id, name=runtime.name, driver_type=runtime.driver_type.value)


@router.delete("/{device_id}")
async def unpair_device(device_id: str, manager: DeviceManager = Depends(get_manager)):
    if not await manager.remove(device_id):
        raise HTTPException(404, f"Device not found: {device_id}")
    return {"success": True}
