"""CLI for the KLVR charger firmware updater.

Finds the latest firmware images, checks that a charger answers at the
target IP and flashes both boards.
"""

import asyncio
import logging
import sys
from pathlib import Path

import click

from klvr_updater.client import DeviceClient
from klvr_updater.config import DEFAULT_DEVICE_IP, DEFAULT_FIRMWARE_DIR, UpdateConfig
from klvr_updater.errors import UpdaterError
from klvr_updater.locator import locate_firmware
from klvr_updater.models import FirmwareBundle
from klvr_updater.updater import FirmwareUpdater

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool) -> None:
    """Configure console logging."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


async def run_update(ip: str, bundle: FirmwareBundle, config: UpdateConfig) -> int:
    """Probe the device and run the update.

    Returns:
        Process exit code
    """
    async with DeviceClient(config) as client:
        logger.info(f"Testing connection to device at {ip}...")
        identity = await client.probe(ip)

        if not identity:
            logger.error(f"Failed to connect to device at {ip}")
            click.echo(
                "Make sure the device is powered on and accessible at this IP address",
                err=True
            )
            return 1

        logger.info(
            f"Successfully connected to device: {identity.device_name} at {ip} "
            f"(serial: {identity.serial_number}, firmware: {identity.firmware_version})"
        )

        updater = FirmwareUpdater(client, config)

        try:
            result = await updater.perform_update(ip, bundle)
        except UpdaterError as e:
            logger.error(f"Error: {e}")
            click.echo(f"✗ Firmware update failed: {e}", err=True)
            return 1

    click.echo(f"✓ Successfully updated device: {identity.device_name} at {ip}")
    if result.new_version:
        click.echo(f"  Firmware: {result.previous_version} -> {result.new_version}")

    return 0


@click.command()
@click.argument("ip", default=DEFAULT_DEVICE_IP)
@click.option(
    "--firmware-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=DEFAULT_FIRMWARE_DIR,
    envvar="KLVR_FIRMWARE_DIR",
    show_default=True,
    help="Directory containing main_*.signed.bin and rear_*.signed.bin"
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable debug logging"
)
def main(ip, firmware_dir, verbose):
    """Update main and rear board firmware on the charger at IP."""
    configure_logging(verbose)
    config = UpdateConfig()

    try:
        bundle = locate_firmware(firmware_dir)
    except UpdaterError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)

    logger.info("Firmware files validated:")
    logger.info(f"Main firmware: {bundle.main_path.name}")
    logger.info(f"Rear firmware: {bundle.rear_path.name}")

    exit_code = asyncio.run(run_update(ip, bundle, config))
    if exit_code == 0:
        logger.info("Update process completed")
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
