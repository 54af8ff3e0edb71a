"""Pytest configuration and fixtures."""

import asyncio
import os
from typing import Any, Dict, List, Optional
from urllib.parse import unquote

import httpx
import pytest

from hitepro_contract.lib.config import HubSettings
from hitepro_contract.lib.hub_client import basic_auth_header


HUB_URL = "http://hub.test/rest"
HUB_USER = "admin"
HUB_PASS = "s3cret"

DEFAULT_DEVICES = [
    {"id": "1", "type": "switch", "name": "Hall light"},
    {"id": "2", "type": "motion", "name": "Hall motion"},
    {"id": "3", "type": "dimmer", "name": "Living room"},
    {"id": "4", "type": "drive", "name": "Curtains"},
    {"id": "5", "type": "illumination", "name": "Lux sensor"},
    {"id": "6", "type": "temperature", "name": "Outdoor"},
    {"id": "7", "type": "humidity", "name": "Bathroom"},
    {"id": "8", "type": "checker", "name": "Front door"},
    {"id": "9", "type": "water", "name": "Kitchen leak"},
    {"id": "10", "type": "power", "name": "Mains"},
    {"id": "11", "type": "RGBW", "name": "Strip"},
]

DEFAULT_STATUSES = {
    "1": True,
    "2": False,
    "3": 50,
    "4": 2,
    "5": 73,
    "6": 21.5,
    "7": 45,
    "8": 0,
    "9": 0,
    "10": 1,
    "11": 100,
}


class FakeHub:
    """In-process stand-in for the hub's device API, served via httpx.MockTransport.

    Tests tweak the public attributes to shape responses and inspect
    ``requests`` afterwards.
    """

    def __init__(self, devices: Optional[List[Dict[str, Any]]] = None):
        self.devices: Any = list(DEFAULT_DEVICES if devices is None else devices)
        self.statuses: Dict[str, Any] = dict(DEFAULT_STATUSES)
        self.status_bodies: Dict[str, Any] = {}
        self.command_results: Dict[str, Any] = {}
        self.directory_status = 200
        self.directory_text: Optional[str] = None
        self.device_http_status: Dict[str, int] = {}
        self.unreachable: set = set()
        self.timeouts: set = set()
        self.delays: Dict[str, float] = {}
        self.requests: List[httpx.Request] = []
        self.expected_auth = basic_auth_header(HUB_USER, HUB_PASS)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def requests_for(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    @property
    def device_requests(self) -> List[httpx.Request]:
        """Everything except the directory listing."""
        return [r for r in self.requests if r.url.path != "/rest/devices/"]

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.headers.get("Authorization") != self.expected_auth:
            return httpx.Response(401, json={"error": "Unauthorized"})

        path = request.url.path
        if not path.startswith("/rest/devices/"):
            return httpx.Response(404, json={"error": "Not found"})

        parts = [unquote(p) for p in path[len("/rest/devices/"):].split("/") if p]

        if not parts and request.method == "GET":
            if self.directory_text is not None:
                return httpx.Response(self.directory_status, text=self.directory_text)
            return httpx.Response(self.directory_status, json=self.devices)

        device_id = parts[0] if parts else ""
        if device_id in self.unreachable:
            raise httpx.ConnectError("connection refused", request=request)
        if device_id in self.timeouts:
            raise httpx.ReadTimeout("read timed out", request=request)
        if device_id in self.delays:
            await asyncio.sleep(self.delays[device_id])
        if device_id in self.device_http_status:
            return httpx.Response(self.device_http_status[device_id], json={"error": "Device error"})

        if len(parts) == 1 and request.method == "GET":
            if device_id in self.status_bodies:
                body = self.status_bodies[device_id]
                if isinstance(body, str):
                    return httpx.Response(200, text=body)
                return httpx.Response(200, json=body)
            return httpx.Response(200, json={"id": device_id, "status": self.statuses.get(device_id)})

        if len(parts) == 2 and request.method == "PUT":
            result = self.command_results.get(device_id, "Command send")
            return httpx.Response(200, json={"result": result})

        return httpx.Response(405, json={"error": "Method not allowed"})


def _make_settings(**overrides) -> HubSettings:
    data = {
        "base_url": HUB_URL,
        "username": HUB_USER,
        "password": HUB_PASS,
        "request_timeout": 5.0,
        "run_timeout": 30.0,
        "concurrency": 4,
    }
    data.update(overrides)
    return HubSettings(**data)


@pytest.fixture
def fake_hub():
    """Fake hub with one device of every contracted type, all healthy."""
    return FakeHub()


@pytest.fixture
def hub_settings(tmp_path):
    return _make_settings(report_dir=tmp_path / "reports")


@pytest.fixture
def settings_factory(tmp_path):
    """Build HubSettings pointing at the fake hub, with field overrides."""
    def factory(**overrides) -> HubSettings:
        overrides.setdefault("report_dir", tmp_path / "reports")
        return _make_settings(**overrides)
    return factory


@pytest.fixture
def hub_env():
    """Environment mapping with the three required variables."""
    return {
        "HITEPRO_BASE_URL": HUB_URL,
        "HITEPRO_USER": HUB_USER,
        "HITEPRO_PASS": HUB_PASS,
    }


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Process environment without HITEPRO_* variables, cwd without a .env file."""
    for name in list(os.environ):
        if name.startswith("HITEPRO_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    return monkeypatch
