"""HTTP client for the charger's local device API.

Every call is awaited before the next one is issued; the device firmware
cannot handle overlapping requests.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from klvr_updater.config import UpdateConfig
from klvr_updater.errors import DeviceNetworkError, DeviceProtocolError, DeviceResponseError
from klvr_updater.models import Board, DeviceIdentity, HttpOutcome, UpdateStep

logger = logging.getLogger(__name__)


class DeviceClient:
    """Client for a charger's firmware and reboot endpoints.

    Example:
        >>> async with DeviceClient(UpdateConfig()) as client:
        ...     identity = await client.probe("10.0.0.5")
    """

    def __init__(
        self,
        config: UpdateConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> None:
        """Initialize device client.

        Args:
            config: Updater configuration
            transport: Optional httpx transport override
        """
        self.config = config

        # Only the discovery probe is time-limited
        self._client = httpx.AsyncClient(timeout=None, transport=transport)

    async def __aenter__(self) -> "DeviceClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def _url(self, ip: str, path: str) -> str:
        return f"{self.config.base_url(ip)}{path}"

    async def probe(self, ip: str) -> Optional[DeviceIdentity]:
        """Check whether a supported charger answers at the given IP.

        Never raises: unreachable hosts, timeouts, malformed responses and
        devices from another vendor all return None.

        Args:
            ip: Candidate device IP address

        Returns:
            Device identity or None if no supported device was found
        """
        try:
            response = await self._client.get(
                self._url(ip, self.config.endpoints.info),
                timeout=self.config.probe_timeout_sec
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.debug(f"No response from {ip}: {e!r}")
            return None

        try:
            info = response.json()
            if not isinstance(info, dict):
                raise ValueError(f"expected a JSON object, got {type(info).__name__}")
        except (ValueError, RecursionError) as e:
            logger.info(f"Failed to parse response from {ip}: {e}")
            return None

        device_name = DeviceIdentity.device_name_from(info)
        if not isinstance(device_name, str) or self.config.vendor_marker not in device_name.lower():
            logger.info(
                f'Device at {ip} has name "{device_name}" - not a '
                f"{self.config.vendor_marker.upper()} device"
            )
            return None

        return DeviceIdentity.from_info(ip, info)

    async def fetch_info(self, ip: str) -> Dict[str, Any]:
        """Fetch the device info document.

        Args:
            ip: Device IP address

        Returns:
            Parsed info response

        Raises:
            DeviceNetworkError: Request failed
            DeviceProtocolError: Device answered with a non-200 status
            DeviceResponseError: Response body is not a JSON object
        """
        logger.info(f"Getting device info from {ip}...")

        try:
            response = await self._client.get(self._url(ip, self.config.endpoints.info))
        except httpx.HTTPError as e:
            logger.error(f"Device info error: {e!r}")
            raise DeviceNetworkError(f"Failed to get device info from {ip}: {e}") from e

        outcome = HttpOutcome(
            status=response.status_code,
            status_text=response.reason_phrase,
            body=response.text
        )
        if not outcome.ok:
            raise DeviceProtocolError(UpdateStep.INFO_FETCHED, "Device info", outcome)

        try:
            info = response.json()
        except (ValueError, RecursionError) as e:
            raise DeviceResponseError("Failed to parse device info response") from e

        if not isinstance(info, dict):
            raise DeviceResponseError("Failed to parse device info response")

        return info

    async def upload_firmware(self, ip: str, firmware: bytes, board: Board) -> HttpOutcome:
        """Upload a firmware image to one board.

        Args:
            ip: Device IP address
            firmware: Raw firmware image
            board: Target board

        Returns:
            Outcome of the upload request (non-200 is not raised)

        Raises:
            DeviceNetworkError: Request failed
        """
        url = self._url(ip, board.upload_path(self.config.endpoints))
        headers = {"Content-Length": str(len(firmware))}

        logger.info(
            f"Uploading {board.value} firmware to: {ip}, size: {len(firmware)} bytes"
        )

        try:
            async with self._client.stream(
                "POST", url, content=firmware, headers=headers
            ) as response:
                logger.info(f"Upload response status: {response.status_code}")

                chunks = []
                async for chunk in response.aiter_text():
                    chunks.append(chunk)
                    logger.debug(f"Upload response chunk: {chunk}")

        except httpx.HTTPError as e:
            logger.error(f"Upload error: {e!r}")
            raise DeviceNetworkError(
                f"Failed to upload {board.value} firmware to {ip}: {e}"
            ) from e

        body = "".join(chunks)
        logger.info(f"Upload complete: {body}")

        return HttpOutcome(
            status=response.status_code,
            status_text=response.reason_phrase,
            body=body
        )

    async def reboot(self, ip: str, board: Board) -> HttpOutcome:
        """Reboot one board.

        The board name goes in both the ``board`` query parameter and the
        request body.

        Args:
            ip: Device IP address
            board: Board to reboot

        Returns:
            Outcome of the reboot request (non-200 is not raised)

        Raises:
            DeviceNetworkError: Request failed
        """
        body = board.value.encode()
        headers = {"Content-Length": str(len(body))}

        logger.info(f"Rebooting {board.value} board on device: {ip}")

        try:
            response = await self._client.post(
                self._url(ip, self.config.endpoints.reboot),
                params={"board": board.value},
                content=body,
                headers=headers
            )
        except httpx.HTTPError as e:
            logger.error(f"Reboot error: {e!r}")
            raise DeviceNetworkError(
                f"Failed to reboot {board.value} board on {ip}: {e}"
            ) from e

        return HttpOutcome(
            status=response.status_code,
            status_text=response.reason_phrase,
            body=response.text
        )

    async def close(self) -> None:
        """Close HTTP client."""
        await self._client.aclose()
