"""
LCDM driver settings.

Provides typed configuration for the serial link, the protocol retry
policy and logging.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from .constants import (
    ACK_WAIT_S,
    IDLE_WAIT_S,
    READ_ATTEMPTS,
    WRITE_ATTEMPTS,
)


# =============================================================================
# Configuration Classes
# =============================================================================


@dataclass(frozen=True)
class SerialPortSettings:
    """Serial port configuration (9600 8N1, no flow control)."""

    port: str = "/dev/ttyS1"
    baudrate: int = 9600
    bytesize: int = 8
    parity: str = "N"
    stopbits: int = 1
    timeout: float = 3.0


@dataclass(frozen=True)
class ProtocolSettings:
    """Handshake retry policy and dispatcher timing."""

    write_attempts: int = WRITE_ATTEMPTS
    read_attempts: int = READ_ATTEMPTS
    ack_wait: float = ACK_WAIT_S
    idle_wait: float = IDLE_WAIT_S
    join_timeout: Optional[float] = 30.0


@dataclass(frozen=True)
class LoggingSettings:
    """Logging outputs."""

    level: int = logging.INFO
    app: str = "lcdm"
    log_file: Optional[str] = None
    loki_url: Optional[str] = None


# =============================================================================
# Main Settings
# =============================================================================


@dataclass
class Settings:
    """
    Main driver settings.

    Aggregates all configuration sections.
    """

    serial: SerialPortSettings = field(default_factory=SerialPortSettings)
    protocol: ProtocolSettings = field(default_factory=ProtocolSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)


# =============================================================================
# Settings Singleton
# =============================================================================


_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get driver settings singleton.

    Returns:
        Settings instance.
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
