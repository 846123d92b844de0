"""
Health check endpoints.
"""

from fastapi import APIRouter, Depends

from ..devices.manager import DeviceManager
from .dependencies import get_manager

router = APIRouter(tags=["Health"])


@router.get("/ping")
async def ping():
    """Simple endpoint to verify server is running."""
    return {"status": "ok", "message": "pong"}


@router.get("/test-connection")
async def test_connection(manager: DeviceManager = Depends(get_manager)):
    """Check that the hub answers with the configured credentials."""
    return {"success": await manager.test_connectivity()}
