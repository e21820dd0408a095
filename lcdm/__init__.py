"""
LCDM Protocol Driver Package.

Threaded driver for Puloon LCDM dual-cassette bill dispensers.

Example:
    from lcdm import Cassette, LcdmDispenser, get_settings

    with LcdmDispenser.from_settings(get_settings()) as dispenser:
        status = dispenser.purge().result()
        result = dispenser.dispense({Cassette.UPPER: 75}).result()
        print(f"Dispensed {result.total_dispensed} bills: {result.status}")
"""

from .constants import (
    Command,
    DEVICE_ID,
    MAX_DISPENSABLE_BILLS,
    get_command_name,
)
from .core import (
    BillQuantityByCassette,
    ByteChannel,
    Cassette,
    ChannelError,
    ChecksumError,
    CommandRequest,
    DispenseResult,
    DispenserClosedError,
    FramingError,
    InvalidRequestError,
    LcdmError,
    OperationCompletedError,
    OperationStatus,
    TransportError,
    UnknownStatusCodeError,
)
from .codec import (
    DecodedFrame,
    calculate_bcc,
    decode_response,
    encode_command,
    encode_command_envelope,
    encode_response,
    verify_bcc,
)
from .status import (
    STATUS_CODES,
    get_status_description,
    lookup_status,
)
from .channel import SerialChannel
from .transport import TransportSession
from .operations import (
    DispenseOperation,
    Operation,
    PurgeOperation,
)
from .dispatcher import (
    Dispatcher,
    OperationQueue,
)
from .driver import LcdmDispenser
from .adapter import AsyncLcdmDispenser
from .settings import Settings, get_settings


__all__ = [
    # Main driver
    'LcdmDispenser',
    'AsyncLcdmDispenser',
    'Settings',
    'get_settings',

    # Constants and enums
    'Command',
    'Cassette',
    'OperationStatus',
    'DEVICE_ID',
    'MAX_DISPENSABLE_BILLS',
    'STATUS_CODES',

    # Value objects
    'BillQuantityByCassette',
    'CommandRequest',
    'DispenseResult',
    'DecodedFrame',

    # Utility functions
    'get_command_name',
    'get_status_description',
    'lookup_status',
    'calculate_bcc',
    'verify_bcc',
    'encode_command',
    'encode_command_envelope',
    'encode_response',
    'decode_response',

    # Protocol components
    'ByteChannel',
    'SerialChannel',
    'TransportSession',
    'Operation',
    'PurgeOperation',
    'DispenseOperation',
    'OperationQueue',
    'Dispatcher',

    # Exceptions
    'LcdmError',
    'InvalidRequestError',
    'DispenserClosedError',
    'OperationCompletedError',
    'FramingError',
    'ChecksumError',
    'TransportError',
    'ChannelError',
    'UnknownStatusCodeError',
]

__version__ = '1.0.0'
