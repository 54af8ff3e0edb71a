"""Async HTTP client for the HitePro hub device API.

Endpoints used:
    GET  {base}/devices/                   list all devices
    GET  {base}/devices/{id}               read device status
    PUT  {base}/devices/{id}/{value}[?q]   send a control command

Usage:
    async with HubClient(settings) as client:
        response = await client.list_devices()
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union
from urllib.parse import quote

import httpx
import structlog

from ...exceptions import TransportError
from .auth import basic_auth_header

logger = structlog.get_logger(__name__)

DEVICES_PATH = "/devices/"


@dataclass(frozen=True)
class HubResponse:
    """Status code and decoded JSON body of one hub request."""

    method: str
    url: str
    status_code: int
    body: Any = None
    text: str = ""

    @property
    def ok(self) -> bool:
        return self.status_code == 200

    @property
    def endpoint(self) -> str:
        return f"{self.method} {self.url}"


class HubClient:
    """Thin wrapper over ``httpx.AsyncClient`` with hub auth and error mapping."""

    def __init__(self, settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        """Initialize the client.

        Args:
            settings: HubSettings with base URL, credentials and request timeout
            transport: Optional httpx transport (tests plug a fake hub in here)
        """
        self.settings = settings
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self.request_count = 0

    async def __aenter__(self) -> "HubClient":
        self._client = httpx.AsyncClient(
            base_url=self.settings.base_url,
            headers={
                "Authorization": self.settings.auth_header,
                "Accept": "application/json"
            },
            timeout=httpx.Timeout(self.settings.request_timeout),
            transport=self._transport
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def url_for(self, path: str) -> str:
        return self.settings.base_url + path

    async def request(self, method: str, path: str, params: Optional[Dict[str, str]] = None) -> HubResponse:
        """Send one request and decode its JSON body.

        Raises:
            TransportError: connection failure or timeout
        """
        if self._client is None:
            raise RuntimeError("HubClient used outside 'async with'")

        url = self.url_for(path)
        self.request_count += 1
        logger.debug("Hub request", method=method, url=url, params=params)

        try:
            response = await self._client.request(method, path, params=params)
        except httpx.TimeoutException as e:
            raise TransportError(
                f"{method} {url} timed out after {self.settings.request_timeout:g}s",
                endpoint=url
            ) from e
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {url} failed: {e!r}", endpoint=url) from e

        try:
            body = response.json()
        except ValueError:
            body = None

        logger.debug("Hub response", method=method, url=str(response.url), status=response.status_code)
        return HubResponse(
            method=method,
            url=str(response.url),
            status_code=response.status_code,
            body=body,
            text=response.text
        )

    async def list_devices(self) -> HubResponse:
        return await self.request("GET", DEVICES_PATH)

    async def get_device(self, device_id: str) -> HubResponse:
        return await self.request("GET", f"{DEVICES_PATH}{quote(device_id, safe='')}")

    async def send_command(
        self,
        device_id: str,
        value: Union[int, str],
        query: Optional[Dict[str, str]] = None
    ) -> HubResponse:
        path = f"{DEVICES_PATH}{quote(device_id, safe='')}/{quote(str(value), safe='')}"
        return await self.request("PUT", path, params=query)


__all__ = [
    "DEVICES_PATH",
    "HubClient",
    "HubResponse",
    "basic_auth_header",
]
