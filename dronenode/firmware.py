"""Firmware update: pull a new image from a file server into a local file."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO

from .clock import Clock, ManualClock
from .messages import (
    BeginFirmwareUpdateResponse,
    FileReadRequest,
    FileReadResponse,
)
from .transport import BROADCAST_NODE_ID, TRANSFER_ID_MODULO

log = logging.getLogger(__name__)

FIRMWARE_IMAGE_PATH = "newfirmware.bin"
READ_RETRY_MS = 750
_MILLIS_MASK = 0xFFFFFFFF


class FirmwareUpdater:
    """Downloads a firmware image in chunks and writes it to a local file.

    The update is started by a BeginFirmwareUpdate request. The node then
    issues file read requests to the requesting server, one chunk at a time,
    until a chunk shorter than the maximum length arrives.
    """

    def __init__(
        self,
        clock: Clock | ManualClock | None = None,
        *,
        image_path: str | Path = FIRMWARE_IMAGE_PATH,
    ) -> None:
        self.clock = clock if clock is not None else Clock()
        self.image_path = Path(image_path)
        self.node_id = BROADCAST_NODE_ID
        self.remote_path = ""
        self.offset = 0
        self.transfer_id = 0
        self.last_read_ms = 0
        self._file: BinaryIO | None = None

    @property
    def active(self) -> bool:
        """Whether an update is in progress."""
        return self.node_id != BROADCAST_NODE_ID

    @property
    def pending_transfer_id(self) -> int:
        """Transfer ID of the most recently issued read request."""
        return (self.transfer_id - 1) % TRANSFER_ID_MODULO

    def begin(self, source_node_id: int, remote_path: str) -> BeginFirmwareUpdateResponse | None:
        """Start an update from ``source_node_id``.

        Returns the response to send, or ``None`` when the request repeats the
        update already running or the image file cannot be opened.
        """
        if (
            self.node_id == source_node_id
            and self._file is not None
            and self.remote_path.startswith(remote_path)
        ):
            return None

        self.close()
        try:
            self._file = open(self.image_path, "wb")
        except OSError:
            log.warning("Open of %s failed", self.image_path)
            return None

        self.offset = 0
        self.node_id = source_node_id
        self.remote_path = remote_path
        log.info("Started firmware update")
        return BeginFirmwareUpdateResponse(error=BeginFirmwareUpdateResponse.ERROR_OK)

    def next_read_request(self) -> FileReadRequest | None:
        """The next chunk request to send to the server, or ``None`` if not due yet."""
        if not self.active:
            return None
        now = self.clock.millis()
        if (now - self.last_read_ms) & _MILLIS_MASK < READ_RETRY_MS:
            return None
        self.last_read_ms = now
        self.transfer_id = (self.transfer_id + 1) % TRANSFER_ID_MODULO
        return FileReadRequest(offset=self.offset, path=self.remote_path)

    def handle_read_response(
        self, source_node_id: int, transfer_id: int, response: FileReadResponse
    ) -> bool:
        """Store a received chunk; return whether the response was accepted."""
        if (
            (transfer_id + 1) % TRANSFER_ID_MODULO != self.transfer_id
            or source_node_id != self.node_id
            or not self.active
        ):
            log.info(
                "Firmware update: not for us id=%u/%u", transfer_id, self.transfer_id
            )
            return False

        if response.error != FileReadResponse.ERROR_OK:
            self.node_id = BROADCAST_NODE_ID
            log.warning("Firmware update read failure")
            return False

        data = bytes(response.data)
        if self._file is not None:
            self._file.write(data)

        if len(data) < FileReadResponse.MAX_DATA_LENGTH:
            self.close()
            self.node_id = BROADCAST_NODE_ID
            log.info("Firmware update complete")
            return True

        self.offset += len(data)
        # Ask for the next chunk straight away.
        self.last_read_ms = 0
        return True

    def vendor_status_code(self) -> int | None:
        """Progress in kilobytes while updating, otherwise ``None``."""
        if not self.active:
            return None
        return self.offset // 1024

    def close(self) -> None:
        """Close the image file if it is open."""
        if self._file is not None:
            self._file.close()
            self._file = None