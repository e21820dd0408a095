"""
Custom exceptions for the LCDM driver.

Provides a hierarchy of typed exceptions for better error handling
and more informative error messages.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from .value_objects import DispenseResult


class LcdmError(Exception):
    """Base exception for all LCDM driver errors."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Human-readable error message.
            code: Optional error code for programmatic handling.
            details: Optional additional error details.
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# =============================================================================
# Request Errors
# =============================================================================


class InvalidRequestError(LcdmError):
    """Malformed caller input, rejected before queueing."""

    pass


class DispenserClosedError(LcdmError):
    """Operation submitted to a dispenser that has been closed."""

    pass


class OperationCompletedError(LcdmError):
    """An operation was driven after it had already completed."""

    pass


# =============================================================================
# Protocol Errors
# =============================================================================


class FramingError(LcdmError):
    """Response frame has a bad envelope, size or command echo."""

    pass


class ChecksumError(FramingError):
    """Response frame block check character does not match."""

    def __init__(
        self,
        message: str,
        expected: int = 0,
        received: int = 0,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.details["expected"] = expected
        self.details["received"] = received


class TransportError(LcdmError):
    """Write or read handshake could not be completed."""

    pass


class ChannelError(TransportError):
    """Underlying byte channel failed."""

    pass


# =============================================================================
# Device Errors
# =============================================================================


class UnknownStatusCodeError(LcdmError):
    """Device reported a status byte missing from the status table."""

    def __init__(
        self,
        status_code: int,
        result: Optional[DispenseResult] = None,
        **kwargs: Any,
    ) -> None:
        """
        Initialize the exception.

        Args:
            status_code: The raw status byte.
            result: Partial dispense result accumulated so far, if any.
        """
        super().__init__(f"Unknown operation status: 0x{status_code:02X}", **kwargs)
        self.status_code = status_code
        self.result = result
        self.details["status_code"] = status_code
        if result is not None:
            self.details["result"] = result.to_dict()
