"""One-shot fetch of the hub's device directory."""

import asyncio
from typing import Optional

import structlog

from ..exceptions import SetupError, TransportError
from ..lib.hub_client import DEVICES_PATH, HubClient
from ..models import DeviceDirectory, json_type


logger = structlog.get_logger(__name__)


class DirectoryLoader:
    """Fetches ``GET /devices/`` exactly once and caches the result.

    Concurrent callers of ``load()`` wait on the same fetch. A failed fetch is
    not cached as a directory; it raises SetupError, which aborts the run.
    """

    def __init__(self, client: HubClient):
        self.client = client
        self._directory: Optional[DeviceDirectory] = None
        self._lock = asyncio.Lock()
        self.fetch_count = 0

    @property
    def directory(self) -> Optional[DeviceDirectory]:
        return self._directory

    @property
    def is_loaded(self) -> bool:
        return self._directory is not None

    async def load(self) -> DeviceDirectory:
        """Return the directory, fetching it on first use.

        Raises:
            SetupError: fetch failed or the body is not a device array
        """
        async with self._lock:
            if self._directory is None:
                self._directory = await self._fetch()
            return self._directory

    async def _fetch(self) -> DeviceDirectory:
        self.fetch_count += 1
        endpoint = f"GET {self.client.url_for(DEVICES_PATH)}"
        logger.info("Fetching device directory", endpoint=endpoint)

        try:
            response = await self.client.list_devices()
        except TransportError as e:
            raise SetupError(f"Device directory fetch failed: {e}", endpoint=endpoint) from e

        if response.status_code != 200:
            raise SetupError(
                f"{endpoint} returned HTTP {response.status_code}, expected 200",
                endpoint=endpoint,
                status_code=response.status_code
            )

        if not isinstance(response.body, list):
            kind = "non-JSON body" if response.body is None else f"JSON {json_type(response.body)}"
            raise SetupError(
                f"{endpoint} returned {kind}, expected a JSON array of devices",
                endpoint=endpoint,
                status_code=response.status_code
            )

        try:
            directory = DeviceDirectory.from_payload(response.body)
        except ValueError as e:
            raise SetupError(
                f"{endpoint} returned a malformed device record: {e}",
                endpoint=endpoint,
                status_code=response.status_code
            ) from e

        logger.info("Device directory fetched", device_count=len(directory), types=directory.types())
        return directory
