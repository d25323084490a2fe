"""Data types shared by the locator, device client and updater."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional

from klvr_updater.config import Endpoints

UNKNOWN_SERIAL = "Unknown"


class Board(str, Enum):
    """Board designation used in upload routing and reboot requests."""

    MAIN = "main"
    REAR = "rear"

    def upload_path(self, endpoints: Endpoints) -> str:
        """Get the firmware upload path for this board."""
        if self is Board.MAIN:
            return endpoints.firmware_charger
        return endpoints.firmware_rear


@dataclass(frozen=True)
class FirmwareBundle:
    """Resolved pair of firmware images to flash."""

    main_path: Path
    rear_path: Path

    def path_for(self, board: Board) -> Path:
        return self.main_path if board is Board.MAIN else self.rear_path


@dataclass(frozen=True)
class DeviceIdentity:
    """Snapshot of a charger's identity taken from its info endpoint."""

    ip: str
    device_name: str
    firmware_version: Optional[str]
    serial_number: str = UNKNOWN_SERIAL

    @staticmethod
    def device_name_from(info: Mapping[str, Any]) -> Optional[str]:
        """Extract the device name, preferring ``deviceName`` over ``name``."""
        return info.get("deviceName") or info.get("name")

    @classmethod
    def from_info(cls, ip: str, info: Mapping[str, Any]) -> "DeviceIdentity":
        """Build an identity from a parsed info response.

        The serial number falls back to the MAC address reported under
        ``ip.macAddress`` and then to ``"Unknown"``.
        """
        network = info.get("ip")
        mac_address = network.get("macAddress") if isinstance(network, Mapping) else None

        return cls(
            ip=ip,
            device_name=cls.device_name_from(info) or "",
            firmware_version=info.get("firmwareVersion"),
            serial_number=info.get("serialNumber") or mac_address or UNKNOWN_SERIAL,
        )


@dataclass(frozen=True)
class HttpOutcome:
    """Result of a single device HTTP call."""

    status: int
    status_text: str
    body: str

    @property
    def ok(self) -> bool:
        """True only for HTTP 200; any other status is a failed outcome."""
        return self.status == 200


class UpdateStep(str, Enum):
    """Update sequence states, in the order they are reached."""

    START = "start"
    INFO_FETCHED = "info_fetched"
    MAIN_UPLOADED = "main_uploaded"
    MAIN_PROCESSING_WAITED = "main_processing_waited"
    MAIN_REBOOTED = "main_rebooted"
    REBOOT_SIGNAL_WAITED = "reboot_signal_waited"
    REAR_UPLOADED = "rear_uploaded"
    REAR_PROCESSING_WAITED = "rear_processing_waited"
    REAR_REBOOTED = "rear_rebooted"
    FINAL_WAIT_COMPLETE = "final_wait_complete"
    DONE = "done"


@dataclass
class UpdateResult:
    """Outcome of a completed update run."""

    ip: str
    previous_version: Optional[str]
    new_version: Optional[str] = None
    step: UpdateStep = UpdateStep.START
