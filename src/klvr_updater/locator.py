"""Firmware image discovery.

Picks the newest ``main_*.signed.bin`` and ``rear_*.signed.bin`` images in a
directory. "Newest" means lexicographically greatest filename, which relies
on the date/version tokens embedded in the release filenames.
"""

import logging
import os
from pathlib import Path
from typing import List, Union

from klvr_updater.errors import FirmwareAccessError, FirmwareNotFoundError
from klvr_updater.models import Board, FirmwareBundle

logger = logging.getLogger(__name__)

FIRMWARE_SUFFIX = ".signed.bin"


def _matching_files(names: List[str], board: Board) -> List[str]:
    """Filter and sort names for a board, latest first."""
    prefix = f"{board.value}_"
    return sorted(
        (name for name in names if name.startswith(prefix) and name.endswith(FIRMWARE_SUFFIX)),
        reverse=True
    )


def _verify_readable(path: Path) -> None:
    """Open the file once to make sure it can be read."""
    try:
        with open(path, "rb"):
            pass
    except OSError as e:
        raise FirmwareAccessError(f"Cannot read firmware file {path}: {e}") from e


def locate_firmware(firmware_dir: Union[str, Path]) -> FirmwareBundle:
    """Find the latest main and rear firmware images.

    Args:
        firmware_dir: Directory holding the signed firmware images

    Returns:
        Bundle with absolute paths to the selected images

    Raises:
        FirmwareNotFoundError: Directory missing or a category has no images
        FirmwareAccessError: A selected image cannot be read
    """
    firmware_dir = Path(firmware_dir).resolve()

    try:
        names = os.listdir(firmware_dir)
    except FileNotFoundError as e:
        raise FirmwareNotFoundError(f"Firmware directory not found: {firmware_dir}") from e
    except OSError as e:
        raise FirmwareAccessError(f"Cannot list firmware directory {firmware_dir}: {e}") from e

    selected = {}
    for board in Board:
        candidates = _matching_files(names, board)
        if not candidates:
            raise FirmwareNotFoundError(
                f"No {board.value} firmware files found in {firmware_dir}"
            )
        selected[board] = firmware_dir / candidates[0]

    for path in selected.values():
        _verify_readable(path)

    logger.info(f"Found latest main firmware: {selected[Board.MAIN].name}")
    logger.info(f"Found latest rear firmware: {selected[Board.REAR].name}")

    return FirmwareBundle(main_path=selected[Board.MAIN], rear_path=selected[Board.REAR])
