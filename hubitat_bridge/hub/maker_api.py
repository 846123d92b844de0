"""
Hubitat Maker API client.

Talks to the hub's local REST API over HTTP. Every request carries the
access token as a query parameter; command parameters go in the URL path
(/devices/123/setLevel/75), not in the query string.
"""

import logging
from typing import Any, Optional, Sequence
from urllib.parse import quote

import httpx

from ..config import HubitatConfig
from ..devices.models import DeviceDescriptor
from ..exceptions import ConfigurationError, TransportError
from .base import CommandParam

logger = logging.getLogger("hubitat.hub.maker_api")


class MakerAPIClient:
    """Async Maker API client backed by httpx."""

    def __init__(
        self,
        host: Optional[str],
        app_id: Optional[str],
        access_token: Optional[str],
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.host = host
        self.app_id = app_id
        self.access_token = access_token
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @classmethod
    def from_config(cls, config: HubitatConfig) -> "MakerAPIClient":
        return cls(
            host=config.host,
            app_id=config.app_id,
            access_token=config.access_token,
            timeout=config.request_timeout,
        )

    @property
    def base_url(self) -> str:
        """Maker API root. Raises ConfigurationError naming missing settings."""
        missing = []
        if not self.host:
            missing.append("IP address")
        if not self.app_id:
            missing.append("App ID")
        if not self.access_token:
            missing.append("Access Token")
        if missing:
            raise ConfigurationError(missing)
        return f"http://{self.host}/apps/api/{self.app_id}"

    def _mask(self, text: str) -> str:
        if self.access_token:
            return text.replace(self.access_token, "XXXXX")
        return text

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        return self._client

    async def close(self) -> None:
        """Release the underlying HTTP connection pool."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _request(self, endpoint: str) -> Any:
        url = f"{self.base_url}{endpoint}"
        logger.debug("Making request to: %s", self._mask(url))

        try:
            resp = await self._get_client().get(url, params={"access_token": self.access_token})
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            message = self._mask(str(e))
            logger.error("HTTP request failed: %s", message)
            raise TransportError(f"HTTP request failed: {message}") from None

        logger.debug("Response status: %s", resp.status_code)
        if resp.status_code != 200:
            raise TransportError(
                f"Hubitat API error: {resp.status_code} {resp.reason_phrase}",
                status_code=resp.status_code,
            )

        try:
            return resp.json()
        except ValueError as e:
            logger.error("Failed to parse response: %s", e)
            logger.debug("Raw data: %s", resp.text[:200])
            raise TransportError(f"Failed to parse response: {e}", status_code=resp.status_code) from e

    async def fetch_all_devices(self) -> list[DeviceDescriptor]:
        """Get all devices from the hub."""
        payload = await self._request("/devices/all")
        if not isinstance(payload, list):
            raise TransportError("Malformed device list: expected a JSON array")
        return [DeviceDescriptor.from_dict(d) for d in payload if isinstance(d, dict)]

    async def fetch_device(self, device_id: str) -> DeviceDescriptor:
        """Get the details of one device."""
        payload = await self._request(f"/devices/{quote(str(device_id), safe='')}")
        if not isinstance(payload, dict):
            raise TransportError(f"Malformed device payload for {device_id}")
        return DeviceDescriptor.from_dict(payload)

    async def send_command(
        self,
        device_id: str,
        command: str,
        params: Sequence[CommandParam] = (),
    ) -> Any:
        """Send a command to a device; parameters become path segments."""
        segments = [quote(str(device_id), safe=""), quote(command, safe="")]
        segments.extend(quote(_format_param(p), safe="") for p in params)
        endpoint = "/devices/" + "/".join(segments)

        logger.info(">>> Sending command to device %s: %s %s", device_id, command, list(params))
        try:
            result = await self._request(endpoint)
        except TransportError as e:
            logger.warning("!!! Command %s failed for device %s: %s", command, device_id, e)
            raise
        logger.info("<<< Command %s successful", command)
        return result


def _format_param(param: CommandParam) -> str:
    # 72.0 -> "72"; the hub parses integral setpoints and levels either way
    if isinstance(param, float) and param.is_integer():
        return str(int(param))
    return str(param)
