"""Error types raised by the updater."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from klvr_updater.models import HttpOutcome, UpdateStep


class UpdaterError(Exception):
    """Base error for the firmware updater."""


class FirmwareNotFoundError(UpdaterError, FileNotFoundError):
    """No firmware image matched an expected category."""


class FirmwareAccessError(UpdaterError, OSError):
    """A selected firmware image exists but cannot be read."""


class DeviceNetworkError(UpdaterError):
    """Connection to the device failed during a required call."""


class DeviceResponseError(UpdaterError):
    """The device returned a body that could not be parsed."""


class DeviceProtocolError(UpdaterError):
    """The device answered a required step with a non-200 status."""

    def __init__(
        self, step: "UpdateStep", description: str, outcome: "HttpOutcome"
    ) -> None:
        super().__init__(f"{description} failed: {outcome.status}")
        self.step = step
        self.description = description
        self.outcome = outcome
