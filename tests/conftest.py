"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import httpx
import pytest

# Add package sources to Python path
repo_root = Path(__file__).parent.parent
sys.path.insert(0, str(repo_root / "src"))

from klvr_updater.config import UpdateConfig  # noqa: E402


class FakeCharger:
    """Scripted charger behind an httpx.MockTransport.

    Every request and every updater wait is appended to ``events`` so tests
    can assert on the exact call order.
    """

    def __init__(
        self,
        info: Optional[dict] = None,
        statuses: Optional[Dict[str, int]] = None,
        config: Optional[UpdateConfig] = None
    ):
        self.config = config or UpdateConfig()
        self.info = info if info is not None else {
            "deviceName": "KLVR Charger Pro",
            "firmwareVersion": "1.8.2",
            "serialNumber": "KC-000123",
        }
        self.statuses = statuses or {}
        self.events: List[str] = []
        self.calls: List[Tuple[str, httpx.Request]] = []
        self.info_after_update: Optional[dict] = None
        self.unreachable_after_update = False
        self.info_status_after_update: Optional[int] = None

    def _key(self, request: httpx.Request) -> str:
        endpoints = self.config.endpoints
        path = request.url.path

        if path == endpoints.info:
            return "info"
        if path == endpoints.firmware_charger:
            return "upload:main"
        if path == endpoints.firmware_rear:
            return "upload:rear"
        if path == endpoints.reboot:
            return f"reboot:{request.url.params.get('board')}"
        return f"unknown:{path}"

    def handler(self, request: httpx.Request) -> httpx.Response:
        key = self._key(request)
        updated = "reboot:rear" in self.events

        self.events.append(key)
        self.calls.append((key, request))

        if key == "info" and updated:
            if self.unreachable_after_update:
                raise httpx.ConnectError("Connection refused", request=request)
            if self.info_status_after_update is not None:
                return httpx.Response(self.info_status_after_update, json=self.info)
            if self.info_after_update is not None:
                return httpx.Response(200, json=self.info_after_update)

        status = self.statuses.get(key, 200)

        if key == "info":
            return httpx.Response(status, json=self.info)
        if key.startswith("unknown:"):
            return httpx.Response(404, text="Not Found")
        return httpx.Response(status, text="OK" if status == 200 else "ERROR")

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    async def sleep(self, seconds: float) -> None:
        self.events.append(f"sleep:{round(seconds * 1000)}")

    def requests_for(self, key: str) -> List[httpx.Request]:
        return [request for k, request in self.calls if k == key]


@pytest.fixture
def update_config():
    """Provide the default updater configuration."""
    return UpdateConfig()


@pytest.fixture
def fake_charger(update_config):
    """Provide a scripted charger that accepts every request."""
    return FakeCharger(config=update_config)


@pytest.fixture
def firmware_dir(tmp_path):
    """Provide a firmware directory with two releases per board."""
    firmware_dir = tmp_path / "firmware"
    firmware_dir.mkdir()

    (firmware_dir / "main_20230101.signed.bin").write_bytes(b"\x01" * 16)
    (firmware_dir / "main_20230215.signed.bin").write_bytes(b"\x02" * 32)
    (firmware_dir / "rear_20230101.signed.bin").write_bytes(b"\x03" * 8)
    (firmware_dir / "rear_20230301.signed.bin").write_bytes(b"\x04" * 24)
    (firmware_dir / "README.txt").write_text("release notes")

    return firmware_dir


# Markers for test categories
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
