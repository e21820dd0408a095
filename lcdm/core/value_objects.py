"""
Value Objects for the LCDM driver.

Immutable objects that represent values in the dispensing domain.
Value objects are compared by value, not by identity.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any


# =============================================================================
# Enums
# =============================================================================


class Cassette(IntEnum):
    """Physical note cassettes, numbered as the device numbers them."""

    UPPER = 0
    LOWER = 1


class OperationStatus(Enum):
    """Terminal outcome of a device operation."""

    GOOD = "good"
    NORMAL_STOP = "normal_stop"
    PICKUP_ERROR = "pickup_error"
    JAM = "jam"
    OVERFLOW_BILL = "overflow_bill"
    BILL_END = "bill_end"
    NOTE_REQUEST_ERROR = "note_request_error"
    COUNTING_ERROR = "counting_error"
    TIMEOUT = "timeout"
    OVER_REJECT = "over_reject"
    DEVICE_ERROR = "device_error"
    CONNECTION_ERROR = "connection_error"

    @property
    def is_success(self) -> bool:
        """Check if the status allows the operation to go on."""
        return self in (OperationStatus.GOOD, OperationStatus.NORMAL_STOP)


BillQuantityByCassette = dict[Cassette, int]


# =============================================================================
# Command Request
# =============================================================================


@dataclass(frozen=True)
class CommandRequest:
    """
    One command round trip as produced by an operation.

    Attributes:
        code: Command code byte.
        data: Command data bytes (without envelope).
        response_size: Expected response data size, command echo included.
    """

    code: int
    data: bytes = b""
    response_size: int = 0


# =============================================================================
# Dispense Result
# =============================================================================


@dataclass(frozen=True)
class DispenseResult:
    """
    Result of a dispense operation.

    Both cassettes are always present in the count mappings, even when
    only one of them was requested.

    Attributes:
        dispensed_bills: Notes that passed the exit sensor, per cassette.
        rejected_bills: Notes diverted to the reject tray, per cassette.
        status: Terminal device status.
    """

    dispensed_bills: BillQuantityByCassette = field(
        default_factory=lambda: {Cassette.UPPER: 0, Cassette.LOWER: 0}
    )
    rejected_bills: BillQuantityByCassette = field(
        default_factory=lambda: {Cassette.UPPER: 0, Cassette.LOWER: 0}
    )
    status: OperationStatus = OperationStatus.GOOD

    @property
    def is_success(self) -> bool:
        """Check if the dispense finished without a device fault."""
        return self.status.is_success

    @property
    def total_dispensed(self) -> int:
        """Get number of notes dispensed from all cassettes."""
        return sum(self.dispensed_bills.values())

    @property
    def total_rejected(self) -> int:
        """Get number of notes rejected from all cassettes."""
        return sum(self.rejected_bills.values())

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "success": self.is_success,
            "status": self.status.value,
            "dispensed": {
                cassette.name.lower(): count
                for cassette, count in self.dispensed_bills.items()
            },
            "rejected": {
                cassette.name.lower(): count
                for cassette, count in self.rejected_bills.items()
            },
        }
