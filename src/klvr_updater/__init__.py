"""Firmware updater for KLVR chargers.

Provides firmware update capabilities over the charger's local HTTP API:
- Locating the latest signed main and rear board images
- Probing a device to confirm it is a KLVR charger
- Uploading and rebooting each board in the required order
"""

from klvr_updater.client import DeviceClient
from klvr_updater.config import UpdateConfig
from klvr_updater.locator import locate_firmware
from klvr_updater.models import Board, DeviceIdentity, FirmwareBundle, HttpOutcome
from klvr_updater.updater import FirmwareUpdater

__all__ = [
    "Board",
    "DeviceClient",
    "DeviceIdentity",
    "FirmwareBundle",
    "FirmwareUpdater",
    "HttpOutcome",
    "UpdateConfig",
    "locate_firmware",
]
