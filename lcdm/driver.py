"""
LCDM Bill Dispenser Driver (Application Layer).

High-level driver for Puloon LCDM dual-cassette dispensers. This is the
main entry point for application code.

Example:
    from lcdm import Cassette, LcdmDispenser, get_settings

    with LcdmDispenser.from_settings(get_settings()) as dispenser:
        dispenser.purge().result()
        result = dispenser.dispense({Cassette.UPPER: 3}).result()
        print(result.dispensed_bills, result.status)
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from concurrent.futures import Future
from typing import Any, Optional

from .channel import SerialChannel
from .core.exceptions import DispenserClosedError
from .core.interfaces import ByteChannel
from .core.value_objects import DispenseResult, OperationStatus
from .dispatcher import Dispatcher
from .loggers import get_logger
from .operations import DispenseOperation, Operation, PurgeOperation
from .settings import ProtocolSettings, Settings
from .transport import TransportSession


logger = logging.getLogger(__name__)


class LcdmDispenser:
    """
    Puloon LCDM dispenser driver.

    Every call returns a future immediately; requests are executed one at
    a time by a dedicated worker thread, in submission order.

    Attributes:
        channel: Byte channel connected to the device.
    """

    def __init__(
        self,
        channel: ByteChannel,
        protocol: Optional[ProtocolSettings] = None,
        autostart: bool = True,
    ) -> None:
        """
        Initialize the driver.

        Args:
            channel: Open byte channel connected to the device.
            protocol: Retry and timing settings.
            autostart: Start the worker thread right away (default True).
        """
        self.channel = channel
        self._protocol = protocol or ProtocolSettings()
        session = TransportSession(
            channel,
            write_attempts=self._protocol.write_attempts,
            read_attempts=self._protocol.read_attempts,
            ack_wait=self._protocol.ack_wait,
        )
        self._dispatcher = Dispatcher(session, idle_wait=self._protocol.idle_wait)
        self._closed = False
        self._lock = threading.Lock()

        if autostart:
            self.start()

    @classmethod
    def from_settings(cls, settings: Settings) -> LcdmDispenser:
        """
        Open the configured serial port and create a running driver.

        Also attaches the configured log handlers to the package logger.

        Args:
            settings: Driver settings.

        Returns:
            Started driver.

        Raises:
            ChannelError: If the serial port cannot be opened.
        """
        get_logger(
            name="lcdm",
            app=settings.logging.app,
            log_file=settings.logging.log_file,
            level=settings.logging.level,
            loki_url=settings.logging.loki_url,
        )
        channel = SerialChannel(settings.serial)
        channel.open()
        return cls(channel, settings.protocol)

    @property
    def is_running(self) -> bool:
        """Check if the worker thread is running."""
        return self._dispatcher.is_running

    @property
    def is_closed(self) -> bool:
        """Check if the driver has been closed."""
        return self._closed

    def start(self) -> None:
        """Start processing queued operations."""
        if self._closed:
            raise DispenserClosedError("Dispenser is closed")
        self._dispatcher.start()

    def close(self) -> None:
        """
        Stop the worker and close the channel.

        An operation in flight finishes first; operations still queued are
        cancelled.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._dispatcher.stop(self._protocol.join_timeout)
        self.channel.close()
        logger.info("Dispenser closed")

    def __enter__(self) -> LcdmDispenser:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def purge(self) -> Future[OperationStatus]:
        """
        Clear notes left in the transport path.

        Returns:
            Future resolved with the device status, CONNECTION_ERROR on
            link failure, or UnknownStatusCodeError.
        """
        return self._submit(PurgeOperation())

    def dispense(self, requested_bills: Mapping[Any, int]) -> Future[DispenseResult]:
        """
        Dispense notes from the cassettes.

        Args:
            requested_bills: Notes per cassette, e.g. ``{Cassette.UPPER: 5}``.

        Returns:
            Future resolved with the dispense result; counts are accurate
            up to the point of any failure.

        Raises:
            InvalidRequestError: If the request is malformed.
            DispenserClosedError: If the driver has been closed.
        """
        return self._submit(DispenseOperation(requested_bills))

    def _submit(self, operation: Operation[Any]) -> Future[Any]:
        with self._lock:
            if self._closed:
                raise DispenserClosedError("Dispenser is closed")
            self._dispatcher.submit(operation)
        logger.debug(f"Queued {operation.__class__.__name__}")
        return operation.future
