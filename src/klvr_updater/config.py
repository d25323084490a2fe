"""Updater configuration.

All values are fixed for the life of the process. The wait durations were
tuned against real charger firmware and must not be shortened.
"""

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_DEVICE_IP = "10.110.73.155"
DEFAULT_FIRMWARE_DIR = "firmware"


class Endpoints(BaseModel):
    """HTTP paths exposed by the charger."""

    model_config = ConfigDict(frozen=True)

    firmware_charger: str = "/api/v2/device/firmware_charger"
    firmware_rear: str = "/api/v2/device/firmware_rear"
    reboot: str = "/api/v2/device/reboot"
    info: str = "/api/v2/device/info"


class UpdateConfig(BaseModel):
    """Configuration for a single firmware update run."""

    model_config = ConfigDict(frozen=True)

    port: int = Field(
        default=8000,
        description="Device HTTP API port",
        ge=1,
        le=65535
    )

    # Wait intervals (milliseconds)
    firmware_processing_wait_ms: int = Field(
        default=7000,
        description="Wait after each firmware upload before rebooting the board",
        ge=0
    )

    send_reboot_wait_ms: int = Field(
        default=1500,
        description="Wait after the main board reboot signal",
        ge=0
    )

    rear_board_reboot_wait_ms: int = Field(
        default=20000,
        description="Wait for the rear board to complete its reboot",
        ge=0
    )

    # Discovery
    probe_timeout_sec: float = Field(
        default=3.0,
        description="Timeout for the discovery probe",
        gt=0
    )

    vendor_marker: str = Field(
        default="klvr",
        description="Lowercase substring identifying a supported device name",
        min_length=1
    )

    endpoints: Endpoints = Field(default_factory=Endpoints)

    def base_url(self, ip: str) -> str:
        """Build the device base URL for the given IP address."""
        return f"http://{ip}:{self.port}"
