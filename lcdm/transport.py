"""
LCDM Transport Layer.

Handles the two handshakes that make the half-duplex link reliable:

    Write: host sends a command frame and waits for a single ACK byte,
           resending the frame up to WRITE_ATTEMPTS times.
    Read:  host reads a response frame, verifies its BCC and answers ACK,
           or NAK to make the device resend, up to READ_ATTEMPTS times.
"""

import logging
import time

from .codec import append_bcc, response_frame_size, verify_bcc
from .constants import (
    ACK,
    ACK_WAIT_S,
    NAK,
    READ_ATTEMPTS,
    WRITE_ATTEMPTS,
)
from .core.exceptions import TransportError
from .core.interfaces import ByteChannel


logger = logging.getLogger(__name__)


def _hex(data: bytes) -> str:
    return ' '.join(f'{b:02X}' for b in data)


class TransportSession:
    """
    Transport layer for the LCDM protocol.

    Owns the byte channel. Not thread-safe: only the dispatcher worker
    may use it.

    Attributes:
        channel: Underlying byte channel.
    """

    def __init__(
        self,
        channel: ByteChannel,
        write_attempts: int = WRITE_ATTEMPTS,
        read_attempts: int = READ_ATTEMPTS,
        ack_wait: float = ACK_WAIT_S,
    ) -> None:
        """
        Initialize transport session.

        Args:
            channel: Byte channel connected to the device.
            write_attempts: Frame writes before giving up on ACK.
            read_attempts: Frame reads before giving up on a valid response.
            ack_wait: Delay between writing a frame and reading ACK.
        """
        self._channel = channel
        self._write_attempts = write_attempts
        self._read_attempts = read_attempts
        self._ack_wait = ack_wait

    @property
    def channel(self) -> ByteChannel:
        """Get byte channel."""
        return self._channel

    def send_and_ack(self, envelope: bytes) -> None:
        """
        Send a command frame and wait for the device to acknowledge it.

        Args:
            envelope: Command frame from EOT through ETX, without BCC.
                The BCC is always appended here.

        Raises:
            TransportError: If no ACK arrives within the allowed attempts.
            ChannelError: If the channel fails.
        """
        frame = append_bcc(envelope)

        for attempt in range(1, self._write_attempts + 1):
            logger.debug(f"TX: {_hex(frame)}")
            self._channel.write(frame)
            time.sleep(self._ack_wait)

            reply = self._channel.read(1)
            if reply and reply[0] == ACK:
                return

            logger.warning(
                f"No ACK for command frame "
                f"(attempt {attempt}/{self._write_attempts}, got {_hex(reply) or 'nothing'})"
            )

        raise TransportError(
            "Failed to write command to serial port",
            details={"attempts": self._write_attempts},
        )

    def receive_and_ack(self, data_size: int) -> bytes:
        """
        Read a response frame and acknowledge it.

        Args:
            data_size: Expected response data size (envelope excluded).

        Returns:
            Complete response frame including BCC.

        Raises:
            TransportError: If no valid frame arrives within the allowed attempts.
            ChannelError: If the channel fails.
        """
        frame_size = response_frame_size(data_size)

        for attempt in range(1, self._read_attempts + 1):
            frame = self._channel.read(frame_size)
            logger.debug(f"RX: {_hex(frame)}")

            if len(frame) != frame_size:
                logger.warning(
                    f"Incomplete response: expected {frame_size}, got {len(frame)} "
                    f"(attempt {attempt}/{self._read_attempts})"
                )
                self._channel.write(bytes([NAK]))
                continue

            if not verify_bcc(frame):
                logger.warning(
                    f"Response BCC mismatch (attempt {attempt}/{self._read_attempts})"
                )
                self._channel.write(bytes([NAK]))
                continue

            self._channel.write(bytes([ACK]))
            return frame

        raise TransportError(
            "Failed to read response from serial port",
            details={"attempts": self._read_attempts},
        )
