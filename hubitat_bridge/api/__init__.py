"""
API routers for the Hubitat bridge.
"""

from fastapi import APIRouter

from .devices import router as devices_router
from .health import router as health_router
from .pairing import router as pairing_router
from .webhook import router as webhook_router

# Main router that aggregates all sub-routers
router = APIRouter()

router.include_router(health_router)
router.include_router(webhook_router)
router.include_router(pairing_router)
router.include_router(devices_router)
