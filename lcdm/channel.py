"""
Serial byte channel for LCDM communication.

Thin pyserial wrapper providing blocking read/write with a port-level
timeout, as required by the transport session.
"""

import logging
from typing import Optional

import serial

from .core.exceptions import ChannelError
from .settings import SerialPortSettings


logger = logging.getLogger(__name__)


class SerialChannel:
    """
    Serial port handler for LCDM communication.

    Attributes:
        settings: Serial port configuration.
    """

    def __init__(self, settings: Optional[SerialPortSettings] = None) -> None:
        self.settings = settings or SerialPortSettings()
        self._serial: Optional[serial.Serial] = None

    @property
    def is_open(self) -> bool:
        """Check if serial port is open and ready."""
        return self._serial is not None and self._serial.is_open

    def open(self) -> None:
        """
        Open the serial port.

        Raises:
            ChannelError: If the port cannot be opened.
        """
        self.close()
        try:
            self._serial = serial.Serial(
                port=self.settings.port,
                baudrate=self.settings.baudrate,
                bytesize=self.settings.bytesize,
                parity=self.settings.parity,
                stopbits=self.settings.stopbits,
                timeout=self.settings.timeout,
                xonxoff=False,
                rtscts=False,
            )
        except serial.SerialException as e:
            raise ChannelError(
                f"Failed to open {self.settings.port}: {e}",
                details={"port": self.settings.port},
            ) from e
        logger.info(f"Serial port {self.settings.port} opened")

    def close(self) -> None:
        """Close the serial port."""
        if self._serial is not None:
            try:
                self._serial.close()
            except serial.SerialException as e:
                logger.debug(f"Close error (ignored): {e}")
        self._serial = None

    def write(self, data: bytes) -> int:
        """
        Write data to serial port.

        Args:
            data: Bytes to write.

        Returns:
            Number of bytes written.
        """
        if not self.is_open:
            raise ChannelError("Port not open")
        try:
            written = self._serial.write(data)
            self._serial.flush()
            return written
        except serial.SerialException as e:
            raise ChannelError(f"Serial write failed: {e}") from e

    def read(self, size: int) -> bytes:
        """
        Read data from serial port.

        Blocks until ``size`` bytes arrive or the port timeout expires.

        Args:
            size: Number of bytes expected.

        Returns:
            Bytes read, short on timeout.
        """
        if not self.is_open:
            raise ChannelError("Port not open")
        try:
            return bytes(self._serial.read(size))
        except serial.SerialException as e:
            raise ChannelError(f"Serial read failed: {e}") from e
