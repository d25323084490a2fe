"""Firmware update sequence for KLVR chargers.

The main board is always flashed and rebooted before the rear board upload
starts. Each HTTP step must return 200; the first failure aborts the run
with no retry and no rollback.
"""

import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable

from klvr_updater.client import DeviceClient
from klvr_updater.config import UpdateConfig
from klvr_updater.errors import DeviceProtocolError, FirmwareAccessError, UpdaterError
from klvr_updater.models import (
    Board,
    FirmwareBundle,
    HttpOutcome,
    UpdateResult,
    UpdateStep,
)

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


def _read_firmware(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as e:
        raise FirmwareAccessError(f"Cannot read firmware file {path}: {e}") from e


class FirmwareUpdater:
    """Drives a charger through the two-board update sequence.

    Steps:
    - Fetch device info and log the current version
    - Upload main firmware, wait, reboot main board, wait
    - Upload rear firmware, wait, reboot rear board, wait for full reboot
    - Best-effort fetch of the new version
    """

    def __init__(
        self,
        client: DeviceClient,
        config: UpdateConfig,
        sleep: SleepFunc = asyncio.sleep
    ) -> None:
        """Initialize firmware updater.

        Args:
            client: Device API client
            config: Updater configuration
            sleep: Coroutine used for the fixed waits (seconds)
        """
        self.client = client
        self.config = config
        self._sleep = sleep

    async def _wait(self, duration_ms: int, message: str) -> None:
        logger.info(message)
        await self._sleep(duration_ms / 1000)

    @staticmethod
    def _require_ok(outcome: HttpOutcome, step: UpdateStep, description: str) -> None:
        if not outcome.ok:
            raise DeviceProtocolError(step, description, outcome)

    async def perform_update(self, ip: str, bundle: FirmwareBundle) -> UpdateResult:
        """Run the full update sequence against one device.

        Args:
            ip: Device IP address
            bundle: Firmware images to flash

        Returns:
            Result with the versions seen before and after the update

        Raises:
            UpdaterError: A required step failed
        """
        result = UpdateResult(ip=ip, previous_version=None)

        def advance(step: UpdateStep) -> None:
            result.step = step
            logger.debug(f"Update step reached: {step.value}")

        try:
            info = await self.client.fetch_info(ip)
            result.previous_version = info.get("firmwareVersion")
            logger.info(f"Current firmware version: {result.previous_version}")
            advance(UpdateStep.INFO_FETCHED)

            logger.info("Reading firmware files...")
            main_firmware = _read_firmware(bundle.path_for(Board.MAIN))
            rear_firmware = _read_firmware(bundle.path_for(Board.REAR))

            # Main board
            logger.info("Starting main board update...")
            outcome = await self.client.upload_firmware(ip, main_firmware, Board.MAIN)
            self._require_ok(outcome, UpdateStep.MAIN_UPLOADED, "Main board firmware upload")
            advance(UpdateStep.MAIN_UPLOADED)

            await self._wait(
                self.config.firmware_processing_wait_ms,
                "Waiting for main board firmware processing..."
            )
            advance(UpdateStep.MAIN_PROCESSING_WAITED)

            logger.info("Rebooting main board...")
            outcome = await self.client.reboot(ip, Board.MAIN)
            self._require_ok(outcome, UpdateStep.MAIN_REBOOTED, "Main board reboot")
            advance(UpdateStep.MAIN_REBOOTED)

            await self._wait(
                self.config.send_reboot_wait_ms,
                "Waiting for reboot message to propagate..."
            )
            advance(UpdateStep.REBOOT_SIGNAL_WAITED)

            # Rear board
            logger.info("Starting rear board update...")
            outcome = await self.client.upload_firmware(ip, rear_firmware, Board.REAR)
            self._require_ok(outcome, UpdateStep.REAR_UPLOADED, "Rear board firmware upload")
            advance(UpdateStep.REAR_UPLOADED)

            await self._wait(
                self.config.firmware_processing_wait_ms,
                "Waiting for rear board firmware processing..."
            )
            advance(UpdateStep.REAR_PROCESSING_WAITED)

            logger.info("Rebooting rear board...")
            outcome = await self.client.reboot(ip, Board.REAR)
            self._require_ok(outcome, UpdateStep.REAR_REBOOTED, "Rear board reboot")
            advance(UpdateStep.REAR_REBOOTED)

            await self._wait(
                self.config.rear_board_reboot_wait_ms,
                "Waiting for rear board to complete reboot..."
            )
            advance(UpdateStep.FINAL_WAIT_COMPLETE)

        except UpdaterError as e:
            logger.error(f"Update failed: {e}")
            raise

        logger.info("Firmware update completed successfully!")

        try:
            new_info = await self.client.fetch_info(ip)
        except UpdaterError as e:
            logger.info(f"Device still rebooting, cannot get new firmware version yet ({e})")
        else:
            result.new_version = new_info.get("firmwareVersion")
            logger.info(f"New firmware version: {result.new_version}")

        advance(UpdateStep.DONE)
        return result
