"""
Core module - Foundation layer with no external dependencies.

Contains:
- Exceptions
- Interfaces (Protocols)
- Value Objects
"""

from .exceptions import (
    LcdmError,
    InvalidRequestError,
    DispenserClosedError,
    OperationCompletedError,
    FramingError,
    ChecksumError,
    TransportError,
    ChannelError,
    UnknownStatusCodeError,
)
from .interfaces import ByteChannel
from .value_objects import (
    BillQuantityByCassette,
    Cassette,
    CommandRequest,
    DispenseResult,
    OperationStatus,
)


__all__ = [
    # Exceptions
    "LcdmError",
    "InvalidRequestError",
    "DispenserClosedError",
    "OperationCompletedError",
    "FramingError",
    "ChecksumError",
    "TransportError",
    "ChannelError",
    "UnknownStatusCodeError",
    # Interfaces
    "ByteChannel",
    # Value Objects
    "BillQuantityByCassette",
    "Cassette",
    "CommandRequest",
    "DispenseResult",
    "OperationStatus",
]
