"""
Tests for settings, logging setup and driver construction from settings.
"""

import logging
from logging.handlers import RotatingFileHandler
from unittest.mock import MagicMock, patch

import httpx
import pytest

from lcdm import LcdmDispenser
from lcdm.constants import ACK_WAIT_S, IDLE_WAIT_S, READ_ATTEMPTS, WRITE_ATTEMPTS
from lcdm.loggers import LokiHandler, get_logger, send_to_loki
from lcdm.settings import (
    LoggingSettings,
    ProtocolSettings,
    SerialPortSettings,
    Settings,
    get_settings,
)

from conftest import FAST_PROTOCOL


# =============================================================================
# Settings Tests
# =============================================================================


class TestSettings:
    """Tests for driver settings."""

    def test_serial_defaults(self):
        """Test serial link defaults to 9600 8N1."""
        serial = SerialPortSettings()

        assert serial.baudrate == 9600
        assert serial.bytesize == 8
        assert serial.parity == "N"
        assert serial.stopbits == 1

    def test_protocol_defaults(self):
        """Test retry policy defaults."""
        protocol = ProtocolSettings()

        assert protocol.write_attempts == WRITE_ATTEMPTS == 3
        assert protocol.read_attempts == READ_ATTEMPTS == 3
        assert protocol.ack_wait == ACK_WAIT_S == 0.7
        assert protocol.idle_wait == IDLE_WAIT_S == 0.2

    def test_logging_defaults(self):
        """Test no file or remote output by default."""
        settings = LoggingSettings()

        assert settings.log_file is None
        assert settings.loki_url is None

    def test_get_settings_singleton(self):
        """Test get_settings returns the same instance."""
        assert get_settings() is get_settings()
        assert isinstance(get_settings().serial, SerialPortSettings)


# =============================================================================
# Logger Tests
# =============================================================================


@pytest.fixture
def logger_name(request):
    """Unique logger name, handlers removed after the test."""
    name = f"lcdm-test.{request.node.name}"
    yield name
    test_logger = logging.getLogger(name)
    for handler in list(test_logger.handlers):
        handler.close()
        test_logger.removeHandler(handler)


class TestGetLogger:
    """Tests for get_logger."""

    def test_console_only(self, logger_name):
        """Test console handler is attached by default."""
        test_logger = get_logger(name=logger_name, level=logging.INFO)

        assert test_logger.level == logging.INFO
        assert len(test_logger.handlers) == 1
        assert isinstance(test_logger.handlers[0], logging.StreamHandler)

    def test_file_and_loki(self, logger_name, tmp_path):
        """Test optional file and Loki handlers."""
        log_file = tmp_path / "lcdm.log"

        test_logger = get_logger(
            name=logger_name,
            log_file=str(log_file),
            loki_url="http://loki:3100/loki/api/v1/push",
        )

        kinds = [type(handler) for handler in test_logger.handlers]
        assert RotatingFileHandler in kinds
        assert LokiHandler in kinds

    def test_repeated_calls(self, logger_name):
        """Test handlers are not duplicated."""
        get_logger(name=logger_name)
        test_logger = get_logger(name=logger_name)

        assert len(test_logger.handlers) == 1

    def test_file_output(self, logger_name, tmp_path):
        """Test records reach the log file."""
        log_file = tmp_path / "lcdm.log"
        test_logger = get_logger(name=logger_name, log_file=str(log_file))

        test_logger.info("dispensed 5 bills")
        for handler in test_logger.handlers:
            handler.flush()

        text = log_file.read_text(encoding="utf-8")
        assert "dispensed 5 bills" in text
        assert "MainThread" in text


class TestLoki:
    """Tests for Loki integration."""

    def test_handler_emit(self):
        """Test handler forwards formatted records."""
        handler = LokiHandler("http://loki/push", "kiosk")
        record = logging.LogRecord("lcdm", logging.ERROR, __file__, 1, "jam", None, None)

        with patch("lcdm.loggers.send_to_loki") as send:
            handler.emit(record)

        send.assert_called_once_with("http://loki/push", "ERROR", "jam", "kiosk")

    def test_send_to_loki(self):
        """Test push payload carries level and app labels."""
        with patch("lcdm.loggers.httpx.Client") as client_class:
            client = client_class.return_value.__enter__.return_value
            send_to_loki("http://loki/push", "INFO", "purge ok", "kiosk")

        client.post.assert_called_once()
        payload = client.post.call_args.kwargs["json"]
        stream = payload["streams"][0]
        assert stream["stream"] == {"level": "INFO", "app": "kiosk"}
        assert stream["values"][0][1] == "purge ok"

    def test_send_to_loki_error(self, capsys):
        """Test unreachable Loki does not raise."""
        with patch("lcdm.loggers.httpx.Client") as client_class:
            client = client_class.return_value.__enter__.return_value
            client.post.side_effect = httpx.ConnectError("refused")
            send_to_loki("http://loki/push", "INFO", "purge ok", "kiosk")

        assert "Loki send error" in capsys.readouterr().out


# =============================================================================
# Driver From Settings Tests
# =============================================================================


class TestFromSettings:
    """Tests for LcdmDispenser.from_settings."""

    def test_from_settings(self):
        """Test port is opened and logging configured from settings."""
        settings = Settings(
            serial=SerialPortSettings(port="/dev/ttyUSB0"),
            protocol=FAST_PROTOCOL,
            logging=LoggingSettings(app="kiosk", loki_url="http://loki/push"),
        )

        with patch("lcdm.driver.SerialChannel") as channel_class, \
                patch("lcdm.driver.get_logger") as configure_logger:
            channel = channel_class.return_value
            dispenser = LcdmDispenser.from_settings(settings)
            try:
                assert dispenser.is_running
                assert dispenser.channel is channel
            finally:
                dispenser.close()

        channel_class.assert_called_once_with(settings.serial)
        channel.open.assert_called_once()
        channel.close.assert_called_once()
        configure_logger.assert_called_once_with(
            name="lcdm",
            app="kiosk",
            log_file=None,
            level=logging.INFO,
            loki_url="http://loki/push",
        )

    def test_open_failure(self):
        """Test port error propagates and no worker is left running."""
        from lcdm.core.exceptions import ChannelError

        with patch("lcdm.driver.SerialChannel") as channel_class, \
                patch("lcdm.driver.get_logger"):
            channel_class.return_value.open.side_effect = ChannelError("no port")
            with pytest.raises(ChannelError):
                LcdmDispenser.from_settings(Settings(protocol=FAST_PROTOCOL))

    def test_mock_channel_satisfies_protocol(self):
        """Test any object with write/read/close is accepted as a channel."""
        from lcdm.core.interfaces import ByteChannel

        assert isinstance(MagicMock(spec=["write", "read", "close"]), ByteChannel)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
