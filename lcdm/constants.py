"""
LCDM Protocol Constants and Enumerations.

Control characters, command codes and timing values of the Puloon LCDM
dispenser protocol. Commands are defined as IntEnum for type safety.
"""

from enum import IntEnum
from typing import Final


# Control characters
SOH: Final[int] = 0x01  # Start of heading (device -> host)
STX: Final[int] = 0x02  # Start of text
ETX: Final[int] = 0x03  # End of text
EOT: Final[int] = 0x04  # End of transmission (host -> device)
ACK: Final[int] = 0x06  # Acknowledge
NAK: Final[int] = 0x15  # Negative acknowledge
DEVICE_ID: Final[int] = 0x50

# SOH/EOT + ID + STX + ETX
CONTROL_CHARACTERS_COUNT: Final[int] = 4

# Retry policy
WRITE_ATTEMPTS: Final[int] = 3
READ_ATTEMPTS: Final[int] = 3
ACK_WAIT_S: Final[float] = 0.7  # Delay between frame write and ACK read
IDLE_WAIT_S: Final[float] = 0.2  # Dispatcher wait on an empty queue

# Dispense limits
MAX_DISPENSABLE_BILLS: Final[int] = 60  # Per cassette, per command

# Response data sizes (command echo included, envelope excluded)
PURGE_RESPONSE_SIZE: Final[int] = 2
SINGLE_CASSETTE_RESPONSE_SIZE: Final[int] = 9
DOUBLE_CASSETTE_RESPONSE_SIZE: Final[int] = 16


class Command(IntEnum):
    """
    LCDM command codes.

    Only PURGE and the three dispense commands are driven by operations;
    the rest are declared for completeness.
    """
    PURGE = 0x44
    UPPER_DISPENSE = 0x45
    STATUS = 0x46
    ROM_VERSION = 0x47
    LOWER_DISPENSE = 0x55
    UPPER_LOWER_DISPENSE = 0x56
    UPPER_TEST_DISPENSE = 0x76
    LOWER_TEST_DISPENSE = 0x77


COMMAND_NAMES: dict[int, str] = {
    command.value: command.name for command in Command
}


def get_command_name(code: int | None) -> str:
    """Get human-readable command name from command code."""
    if code is None:
        return "UNKNOWN"
    return COMMAND_NAMES.get(code, f"UNKNOWN(0x{code:02X})")
