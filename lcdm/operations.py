"""
LCDM operations.

An operation turns one logical request into one or more command round
trips. The dispatcher asks it for the next command, feeds back the
response data, and stops once the operation reports completion. The
operation resolves its future exactly once, either with a result or,
on a connection failure, through ``mark_error``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from concurrent.futures import Future
from typing import Any, Generic, Optional, TypeVar

from .constants import (
    Command,
    DOUBLE_CASSETTE_RESPONSE_SIZE,
    MAX_DISPENSABLE_BILLS,
    PURGE_RESPONSE_SIZE,
    SINGLE_CASSETTE_RESPONSE_SIZE,
    get_command_name,
)
from .core.exceptions import (
    FramingError,
    InvalidRequestError,
    LcdmError,
    OperationCompletedError,
    UnknownStatusCodeError,
)
from .core.value_objects import (
    BillQuantityByCassette,
    Cassette,
    CommandRequest,
    DispenseResult,
    OperationStatus,
)
from .status import get_status_description, lookup_status


logger = logging.getLogger(__name__)

T = TypeVar("T")


# =============================================================================
# Two-digit count encoding
# =============================================================================


def read_bills_count(data: bytes, offset: int) -> Optional[int]:
    """
    Read a two-digit ASCII count (tens, units) from response data.

    Args:
        data: Response data.
        offset: Position of the tens digit.

    Returns:
        The count, or None if either byte is not an ASCII digit.
    """
    digits = data[offset:offset + 2]
    if len(digits) != 2 or not all(0x30 <= byte <= 0x39 for byte in digits):
        return None
    return (digits[0] - 0x30) * 10 + (digits[1] - 0x30)


def write_bills_count(count: int) -> bytes:
    """Encode a count as two ASCII digits, clamped to the per-command maximum."""
    tens, units = divmod(min(count, MAX_DISPENSABLE_BILLS), 10)
    return bytes([0x30 + tens, 0x30 + units])


# =============================================================================
# Base Operation
# =============================================================================


class Operation(ABC, Generic[T]):
    """
    Abstract base class for device operations.

    Subclasses track their own progress; this class owns the future and
    guarantees it is resolved at most once.
    """

    def __init__(self) -> None:
        self._future: Future[T] = Future()
        self._completed = False

    @property
    def future(self) -> Future[T]:
        """Get the result handle returned to the caller."""
        return self._future

    @property
    def is_completed(self) -> bool:
        """Check if no further round trips are needed."""
        return self._completed

    @abstractmethod
    def next_command(self) -> CommandRequest:
        """
        Get the command for the next round trip.

        Raises:
            OperationCompletedError: If the operation has completed.
        """
        ...

    @abstractmethod
    def handle_response(self, data: bytes) -> Optional[LcdmError]:
        """
        Consume the data of a validated response frame.

        Args:
            data: Response data between STX and ETX.

        Returns:
            None if the response was consumed, or the error describing
            why it could not be.
        """
        ...

    @abstractmethod
    def mark_error(self) -> None:
        """Complete the operation after a connection failure."""
        ...

    def _ensure_active(self) -> None:
        if self._completed:
            raise OperationCompletedError(
                f"{self.__class__.__name__} is completed"
            )

    def _resolve(self, value: T) -> None:
        self._completed = True
        if self._future.done():
            logger.warning(f"{self.__class__.__name__} result already delivered")
            return
        self._future.set_result(value)

    def _fail(self, error: BaseException) -> None:
        self._completed = True
        if self._future.done():
            logger.warning(f"{self.__class__.__name__} result already delivered")
            return
        self._future.set_exception(error)


# =============================================================================
# Purge
# =============================================================================


class PurgeOperation(Operation[OperationStatus]):
    """Clear notes left in the transport path. One round trip."""

    def next_command(self) -> CommandRequest:
        self._ensure_active()
        return CommandRequest(Command.PURGE, b"", PURGE_RESPONSE_SIZE)

    def handle_response(self, data: bytes) -> Optional[LcdmError]:
        self._ensure_active()

        if len(data) != PURGE_RESPONSE_SIZE:
            return FramingError(
                f"Incorrect purge response size: {len(data)}"
            )
        if data[0] != Command.PURGE:
            return FramingError(
                f"Unexpected command echo: {get_command_name(data[0])}"
            )

        status = lookup_status(data[1])
        if status is None:
            logger.error(f"Purge returned unknown status 0x{data[1]:02X}")
            self._fail(UnknownStatusCodeError(data[1]))
            return None

        logger.info(f"Purge finished: {get_status_description(data[1])}")
        self._resolve(status)
        return None

    def mark_error(self) -> None:
        self._resolve(OperationStatus.CONNECTION_ERROR)


# =============================================================================
# Dispense
# =============================================================================


class DispenseOperation(Operation[DispenseResult]):
    """
    Dispense notes from one or both cassettes.

    A single command moves at most MAX_DISPENSABLE_BILLS notes per
    cassette, so larger requests, and requests the device only partly
    served, take several round trips.

    Command data:
        [upper tens, upper units,] [lower tens, lower units]

    Response data (single cassette, 9 bytes):
        0: command echo, 3-4: exit count, 5: status, 7-8: rejected count

    Response data (both cassettes, 16 bytes):
        0: command echo, 3-4: upper exit, 7-8: lower exit, 9: status,
        12-13: upper rejected, 14-15: lower rejected
    """

    def __init__(self, requested_bills: Mapping[Any, int]) -> None:
        """
        Initialize dispense operation.

        Zero counts are treated as if the cassette were not named.

        Args:
            requested_bills: Notes to dispense per cassette.

        Raises:
            InvalidRequestError: If the request names no positive count
                or contains an unknown cassette or invalid count.
        """
        super().__init__()
        self._remaining = self._validate_request(requested_bills)
        self._dispensed: BillQuantityByCassette = {Cassette.UPPER: 0, Cassette.LOWER: 0}
        self._rejected: BillQuantityByCassette = {Cassette.UPPER: 0, Cassette.LOWER: 0}
        self._last_command: Optional[CommandRequest] = None

    @staticmethod
    def _validate_request(requested_bills: Mapping[Any, int]) -> BillQuantityByCassette:
        if not isinstance(requested_bills, Mapping):
            raise InvalidRequestError("Dispense request must be a mapping")

        remaining: BillQuantityByCassette = {Cassette.UPPER: 0, Cassette.LOWER: 0}
        named: set[Cassette] = set()
        for key, count in requested_bills.items():
            try:
                cassette = Cassette[key.upper()] if isinstance(key, str) else Cassette(key)
            except (KeyError, ValueError):
                raise InvalidRequestError(
                    f"Unknown cassette: {key!r}",
                    details={"cassette": repr(key)},
                ) from None
            if isinstance(count, bool) or not isinstance(count, int) or count < 0:
                raise InvalidRequestError(
                    f"Invalid bill count for {cassette.name}: {count!r}",
                    details={"cassette": cassette.name, "count": repr(count)},
                )
            if cassette in named:
                raise InvalidRequestError(
                    f"Cassette {cassette.name} requested more than once",
                    details={"cassette": cassette.name},
                )
            named.add(cassette)
            remaining[cassette] = count

        if not any(remaining.values()):
            raise InvalidRequestError("Invalid dispense request: no bills requested")
        return remaining

    @property
    def remaining(self) -> BillQuantityByCassette:
        """Get notes still to dispense per cassette."""
        return dict(self._remaining)

    @property
    def is_completed(self) -> bool:
        return self._completed or not any(self._remaining.values())

    def next_command(self) -> CommandRequest:
        self._ensure_active()
        upper = self._remaining[Cassette.UPPER]
        lower = self._remaining[Cassette.LOWER]

        if upper > 0 and lower > 0:
            command = CommandRequest(
                Command.UPPER_LOWER_DISPENSE,
                write_bills_count(upper) + write_bills_count(lower),
                DOUBLE_CASSETTE_RESPONSE_SIZE,
            )
        elif upper > 0:
            command = CommandRequest(
                Command.UPPER_DISPENSE,
                write_bills_count(upper),
                SINGLE_CASSETTE_RESPONSE_SIZE,
            )
        elif lower > 0:
            command = CommandRequest(
                Command.LOWER_DISPENSE,
                write_bills_count(lower),
                SINGLE_CASSETTE_RESPONSE_SIZE,
            )
        else:
            raise OperationCompletedError("No bills left to dispense")

        self._last_command = command
        return command

    def handle_response(self, data: bytes) -> Optional[LcdmError]:
        self._ensure_active()
        issued = self._last_command.code if self._last_command else None

        if len(data) == SINGLE_CASSETTE_RESPONSE_SIZE:
            if data[0] != issued or issued not in (Command.UPPER_DISPENSE, Command.LOWER_DISPENSE):
                return FramingError(
                    f"Unexpected command echo: {get_command_name(data[0])}, "
                    f"issued {get_command_name(issued)}"
                )
            cassette = Cassette.UPPER if issued == Command.UPPER_DISPENSE else Cassette.LOWER
            counts = {cassette: (read_bills_count(data, 3), read_bills_count(data, 7))}
            status_code = data[5]

        elif len(data) == DOUBLE_CASSETTE_RESPONSE_SIZE:
            if data[0] != Command.UPPER_LOWER_DISPENSE or issued != Command.UPPER_LOWER_DISPENSE:
                return FramingError(
                    f"Unexpected command echo: {get_command_name(data[0])}, "
                    f"issued {get_command_name(issued)}"
                )
            counts = {
                Cassette.UPPER: (read_bills_count(data, 3), read_bills_count(data, 12)),
                Cassette.LOWER: (read_bills_count(data, 7), read_bills_count(data, 14)),
            }
            status_code = data[9]

        else:
            return FramingError(f"Incorrect dispense response size: {len(data)}")

        if any(value is None for pair in counts.values() for value in pair):
            return FramingError("Bill count is not a two-digit number")

        progressed = False
        for cassette, (exited, rejected) in counts.items():
            if exited > self._remaining[cassette]:
                logger.warning(
                    f"{cassette.name} reported {exited} bills, "
                    f"only {self._remaining[cassette]} requested"
                )
            self._remaining[cassette] = max(0, self._remaining[cassette] - exited)
            self._dispensed[cassette] += exited
            self._rejected[cassette] += rejected
            progressed = progressed or exited + rejected > 0

        logger.info(
            f"{get_command_name(issued)}: dispensed={self._dispensed}, "
            f"rejected={self._rejected}, status={get_status_description(status_code)}"
        )

        status = lookup_status(status_code)
        if status is None:
            logger.error(f"Dispense returned unknown status 0x{status_code:02X}")
            self._fail(UnknownStatusCodeError(
                status_code,
                result=self._build_result(OperationStatus.DEVICE_ERROR),
            ))
        elif not status.is_success:
            self._resolve(self._build_result(status))
        elif not any(self._remaining.values()):
            self._resolve(self._build_result(status))
        elif not progressed:
            logger.warning(
                f"No bills picked, stopping with {self._remaining} left"
            )
            self._resolve(self._build_result(OperationStatus.DEVICE_ERROR))
        return None

    def mark_error(self) -> None:
        self._resolve(self._build_result(OperationStatus.CONNECTION_ERROR))

    def _build_result(self, status: OperationStatus) -> DispenseResult:
        return DispenseResult(
            dispensed_bills=dict(self._dispensed),
            rejected_bills=dict(self._rejected),
            status=status,
        )
