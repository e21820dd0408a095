"""
Interfaces (Protocols) for the LCDM driver.

Defines the contract of the byte channel the protocol engine talks
through, using Protocol for structural subtyping.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class ByteChannel(Protocol):
    """
    Duplex byte stream connected to the dispenser.

    Both calls block. ``read`` returns fewer bytes than requested when the
    channel timeout expires first. Failures raise ChannelError.
    """

    def write(self, data: bytes) -> int:
        """
        Write bytes to the device.

        Args:
            data: Bytes to write.

        Returns:
            Number of bytes written.
        """
        ...

    def read(self, size: int) -> bytes:
        """
        Read up to ``size`` bytes from the device.

        Args:
            size: Number of bytes expected.

        Returns:
            Bytes read, possibly short on timeout.
        """
        ...

    def close(self) -> None:
        """Release the channel."""
        ...
