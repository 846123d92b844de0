"""
Webhook endpoint for Maker API event posts.

The hub posts {"content": {"deviceId", "name", "value", ...}}. Older hub
setups and manual tests send the same fields as query parameters, or as a
flat JSON body. Responses are always HTTP 200 so the hub does not retry.
"""

import logging
from typing import Any, Mapping

from fastapi import APIRouter, Depends, Request

from ..devices.manager import DeviceManager
from .dependencies import get_manager

logger = logging.getLogger("hubitat.api.webhook")

router = APIRouter(tags=["Webhook"])


def extract_webhook_fields(body: Any, query: Mapping[str, Any]) -> Mapping[str, Any]:
    """Pick the field source: body.content, else the query string, else the body."""
    if isinstance(body, dict) and isinstance(body.get("content"), dict):
        return body["content"]
    if query:
        return query
    if isinstance(body, dict):
        return body
    return {}


async def process_webhook(manager: DeviceManager, data: Mapping[str, Any]) -> dict[str, Any]:
    device_id = data.get("deviceId")
    attribute = data.get("name")
    value = data.get("value")
    logger.info("Webhook: %s=%s for device %s", attribute, value, device_id)

    if device_id in (None, "") or not attribute or value is None:
        logger.warning("Invalid webhook data: %s", dict(data))
        return {"success": False, "error": "Missing parameters", "received": dict(data)}

    outcome = await manager.handle_observation(device_id, attribute, value)
    return {
        "success": True,
        "device_found": outcome is not None,
        "outcome": outcome.value if outcome else None,
        "processed": {"deviceId": device_id, "attributeName": attribute, "attributeValue": value},
    }


@router.get("/webhook")
async def webhook_get(request: Request, manager: DeviceManager = Depends(get_manager)):
    """Webhook delivery with fields in the query string."""
    return await process_webhook(manager, dict(request.query_params))


@router.post("/webhook")
async def webhook_post(request: Request, manager: DeviceManager = Depends(get_manager)):
    """Webhook delivery from the hub's event post."""
    try:
        body = await request.json()
    except ValueError:
        body = {}
    data = extract_webhook_fields(body, dict(request.query_params))
    return await process_webhook(manager, data)
