"""
Hubitat Bridge - FastAPI application entry point.

Serves the webhook the hub posts device events to, plus pairing and
device control endpoints.
"""

# Load .env file FIRST, before any other imports
# .env.local overrides .env for machine-specific settings (hub address, token)
from pathlib import Path
from dotenv import load_dotenv
_env_root = Path(__file__).parent.parent
load_dotenv(_env_root / ".env", override=True)
load_dotenv(_env_root / ".env.local", override=True)

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .api import router as api_router
from .config import settings
from .devices.manager import DeviceManager, set_device_manager
from .hub.maker_api import MakerAPIClient

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("hubitat.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Builds the hub client and device manager on startup and closes every
    device runtime on shutdown.
    """
    logger.info("Hubitat bridge starting up...")

    manager = DeviceManager(MakerAPIClient.from_config(settings.hub), sync=settings.sync)
    set_device_manager(manager)

    if settings.hub.is_configured:
        if await manager.test_connectivity():
            logger.info("Connected to Hubitat at %s", settings.hub.host)
        else:
            logger.warning("Hubitat at %s is not reachable; polling will retry", settings.hub.host)
    else:
        logger.warning("Hubitat connection is not configured (HUBITAT_HUB_HOST/APP_ID/ACCESS_TOKEN)")

    yield

    logger.info("Hubitat bridge shutting down...")
    try:
        await manager.shutdown()
    except Exception as e:
        logger.error("Error shutting down device manager: %s", e)
    set_device_manager(None)
    logger.info("Hubitat bridge shutdown complete")


# Create the FastAPI application
app = FastAPI(
    title="Hubitat Bridge",
    description="Keeps local device state in sync with a Hubitat hub's Maker API.",
    version="0.1.0",
    lifespan=lifespan,
)

app.include_router(api_router)


def run() -> None:
    """Console entry point."""
    import uvicorn

    uvicorn.run(app, host=settings.server_host, port=settings.server_port, log_level=settings.log_level.lower())
