"""
LCDM frame codec.

Builds outgoing command frames and validates incoming response frames.

Frame Structure:
    Command:  EOT (0x04) | ID (0x50) | STX (0x02) | CMD | DATA | ETX (0x03) | BCC
    Response: SOH (0x01) | ID (0x50) | STX (0x02) | DATA | ETX (0x03) | BCC

Where:
    - DATA of a response starts with the echoed command code
    - BCC: XOR of every preceding byte of the frame
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .constants import (
    CONTROL_CHARACTERS_COUNT,
    DEVICE_ID,
    EOT,
    ETX,
    SOH,
    STX,
)
from .core.exceptions import ChecksumError, FramingError


logger = logging.getLogger(__name__)


def calculate_bcc(data: bytes) -> int:
    """
    Calculate the block check character of a frame.

    Args:
        data: Frame bytes without BCC.

    Returns:
        XOR of all bytes.

    Example:
        >>> calculate_bcc(bytes([0x04, 0x50, 0x02, 0x44, 0x03]))
        17
    """
    bcc = 0
    for byte in data:
        bcc ^= byte
    return bcc


def verify_bcc(frame: bytes) -> bool:
    """
    Verify the trailing BCC of a complete frame.

    Args:
        frame: Frame including BCC.

    Returns:
        True if the last byte is the XOR of all others.
    """
    if len(frame) < 2:
        return False
    return calculate_bcc(frame[:-1]) == frame[-1]


def append_bcc(data: bytes) -> bytes:
    """Append BCC to frame bytes."""
    return bytes(data) + bytes([calculate_bcc(data)])


def _build_envelope(start: int, data: bytes) -> bytes:
    return bytes([start, DEVICE_ID, STX]) + bytes(data) + bytes([ETX])


def encode_command_envelope(command: int, data: bytes = b"") -> bytes:
    """
    Build a command frame up to and including ETX, without BCC.

    Args:
        command: Command code byte.
        data: Optional command data.

    Returns:
        Envelope bytes; the transport appends the BCC when sending.
    """
    return _build_envelope(EOT, bytes([command]) + bytes(data))


def encode_command(command: int, data: bytes = b"") -> bytes:
    """
    Build a complete command frame.

    Args:
        command: Command code byte.
        data: Optional command data.

    Returns:
        Frame bytes with BCC.
    """
    return append_bcc(encode_command_envelope(command, data))


def encode_response(data: bytes) -> bytes:
    """
    Build a complete response frame as the device sends it.

    Args:
        data: Response data, starting with the echoed command code.

    Returns:
        Frame bytes with BCC.
    """
    return append_bcc(_build_envelope(SOH, data))


def response_frame_size(data_size: int) -> int:
    """Get total response frame size for a data size, BCC included."""
    return data_size + CONTROL_CHARACTERS_COUNT + 1


@dataclass(frozen=True)
class DecodedFrame:
    """
    Outcome of response frame validation.

    Attributes:
        data: Bytes between STX and ETX (empty on error).
        error: Validation failure, None if the frame is valid.
    """
    data: bytes = b""
    error: Optional[FramingError] = None

    @property
    def is_valid(self) -> bool:
        """Check if the frame passed validation."""
        return self.error is None


def decode_response(frame: bytes, data_size: int) -> DecodedFrame:
    """
    Validate a response frame and strip its envelope.

    Args:
        frame: Raw response frame including BCC.
        data_size: Declared response data size.

    Returns:
        Decoded frame holding either the data or the validation error.
    """
    expected_size = response_frame_size(data_size)
    if len(frame) != expected_size:
        return DecodedFrame(error=FramingError(
            f"Incorrect frame size: expected {expected_size}, got {len(frame)}"
        ))

    if frame[0] != SOH:
        return DecodedFrame(error=FramingError(f"Invalid SOH byte: 0x{frame[0]:02X}"))
    if frame[1] != DEVICE_ID:
        return DecodedFrame(error=FramingError(f"Invalid ID byte: 0x{frame[1]:02X}"))
    if frame[2] != STX:
        return DecodedFrame(error=FramingError(f"Invalid STX byte: 0x{frame[2]:02X}"))
    if frame[-2] != ETX:
        return DecodedFrame(error=FramingError(f"Invalid ETX byte: 0x{frame[-2]:02X}"))

    expected_bcc = calculate_bcc(frame[:-1])
    if expected_bcc != frame[-1]:
        return DecodedFrame(error=ChecksumError(
            "BCC verification failed",
            expected=expected_bcc,
            received=frame[-1],
        ))

    return DecodedFrame(data=bytes(frame[3:-2]))
