"""Fixtures for live hub contract tests.

Missing configuration or a failed directory fetch ends the whole session
before any device is touched.
"""

import asyncio

import pytest

from hitepro_contract.exceptions import ConfigurationError, SetupError
from hitepro_contract.lib.config import load_settings
from hitepro_contract.lib.hub_client import HubClient
from hitepro_contract.services import DirectoryLoader


@pytest.fixture(scope="session")
def live_settings():
    """Settings for the live hub; aborts the session when incomplete."""
    try:
        return load_settings()
    except ConfigurationError as e:
        pytest.exit(str(e), returncode=2)


@pytest.fixture(scope="session")
def device_directory(live_settings):
    """The hub's device directory, fetched once per session."""
    async def fetch():
        async with HubClient(live_settings) as client:
            return await DirectoryLoader(client).load()

    try:
        return asyncio.run(fetch())
    except SetupError as e:
        pytest.exit(f"Device directory fetch failed: {e}", returncode=3)
