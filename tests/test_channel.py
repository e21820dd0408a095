"""
Tests for the pyserial channel, with the port mocked out.
"""

from unittest.mock import patch

import pytest
import serial

from lcdm.channel import SerialChannel
from lcdm.core.exceptions import ChannelError
from lcdm.settings import SerialPortSettings


@pytest.fixture
def serial_class():
    with patch("lcdm.channel.serial.Serial") as mock_class:
        mock_class.return_value.is_open = True
        yield mock_class


@pytest.fixture
def channel(serial_class):
    channel = SerialChannel(SerialPortSettings(port="/dev/ttyUSB0"))
    channel.open()
    return channel


class TestSerialChannel:
    """Tests for SerialChannel."""

    def test_open(self, channel, serial_class):
        """Test port is opened 9600 8N1 without flow control."""
        serial_class.assert_called_once_with(
            port="/dev/ttyUSB0",
            baudrate=9600,
            bytesize=8,
            parity="N",
            stopbits=1,
            timeout=3.0,
            xonxoff=False,
            rtscts=False,
        )
        assert channel.is_open

    def test_open_failure(self, serial_class):
        """Test port error is wrapped in ChannelError."""
        serial_class.side_effect = serial.SerialException("could not open port")
        channel = SerialChannel(SerialPortSettings(port="/dev/missing"))

        with pytest.raises(ChannelError) as exc_info:
            channel.open()

        assert exc_info.value.details["port"] == "/dev/missing"
        assert not channel.is_open

    def test_write(self, channel, serial_class):
        """Test write flushes the port."""
        port = serial_class.return_value
        port.write.return_value = 6

        assert channel.write(b"\x04P\x02D\x03\x11") == 6
        port.write.assert_called_once_with(b"\x04P\x02D\x03\x11")
        port.flush.assert_called_once()

    def test_read(self, channel, serial_class):
        """Test read returns bytes, short on timeout."""
        serial_class.return_value.read.return_value = bytearray(b"\x06")

        assert channel.read(7) == b"\x06"
        serial_class.return_value.read.assert_called_once_with(7)

    def test_io_error(self, channel, serial_class):
        """Test port errors during I/O become ChannelError."""
        serial_class.return_value.read.side_effect = serial.SerialException("gone")

        with pytest.raises(ChannelError):
            channel.read(1)

    def test_closed(self, channel, serial_class):
        """Test I/O on a closed channel is rejected."""
        channel.close()
        channel.close()

        serial_class.return_value.close.assert_called_once()
        assert not channel.is_open
        with pytest.raises(ChannelError):
            channel.write(b"\x06")
        with pytest.raises(ChannelError):
            channel.read(1)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
