"""
Operation queue and dispatcher.

A single worker thread owns the transport session and runs queued
operations one at a time, strictly in submission order. The device
accepts one outstanding command, so operations never interleave.
"""

import logging
import queue
import threading
from typing import Any, Optional

from .codec import decode_response, encode_command_envelope
from .constants import IDLE_WAIT_S, get_command_name
from .core.exceptions import LcdmError, TransportError
from .operations import Operation
from .transport import TransportSession


logger = logging.getLogger(__name__)


class OperationQueue:
    """Thread-safe FIFO of operations waiting for the dispatcher."""

    def __init__(self) -> None:
        self._queue: queue.Queue[Operation[Any]] = queue.Queue()

    def __len__(self) -> int:
        return self._queue.qsize()

    def put(self, operation: Operation[Any]) -> None:
        """Append an operation."""
        self._queue.put(operation)

    def get(self, timeout: float) -> Optional[Operation[Any]]:
        """
        Take the oldest operation.

        Args:
            timeout: Seconds to wait for one to arrive.

        Returns:
            The operation, or None if the queue stayed empty.
        """
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def drain(self) -> list[Operation[Any]]:
        """Remove and return all queued operations."""
        operations = []
        while True:
            try:
                operations.append(self._queue.get_nowait())
            except queue.Empty:
                return operations


class Dispatcher:
    """
    Single-worker command dispatcher.

    Attributes:
        session: Transport session used by the worker thread.
        operations: Queue shared with submitting callers.
    """

    def __init__(
        self,
        session: TransportSession,
        idle_wait: float = IDLE_WAIT_S,
    ) -> None:
        """
        Initialize dispatcher.

        Args:
            session: Transport session; only the worker thread touches it.
            idle_wait: Seconds to wait on an empty queue before re-checking
                the stop flag.
        """
        self.session = session
        self.operations = OperationQueue()
        self._idle_wait = idle_wait
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        """Check if the worker thread is alive."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the worker thread."""
        if self.is_running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            name="lcdm-dispatcher",
            daemon=True,
        )
        self._thread.start()
        logger.info("Dispatcher started")

    def stop(self, timeout: Optional[float] = None) -> None:
        """
        Stop the worker thread.

        The stop flag is observed between operations, so an operation in
        flight runs to completion first. Operations still queued afterwards
        are cancelled.

        Args:
            timeout: Seconds to wait for the worker to finish.
        """
        self._stop_event.set()
        if self._thread is threading.current_thread():
            # Called from a future callback; the loop exits once it returns.
            logger.debug("Stop requested from the worker thread")
        elif self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning("Dispatcher did not stop in time")
            self._thread = None

        for operation in self.operations.drain():
            operation.future.cancel()
            logger.info(f"Cancelled queued {operation.__class__.__name__}")
        logger.info("Dispatcher stopped")

    def submit(self, operation: Operation[Any]) -> None:
        """Queue an operation for execution."""
        self.operations.put(operation)

    def _run(self) -> None:
        while not self._stop_event.is_set():
            operation = self.operations.get(self._idle_wait)
            if operation is None:
                continue

            if not operation.future.set_running_or_notify_cancel():
                logger.info(f"Skipping cancelled {operation.__class__.__name__}")
                continue

            try:
                self.execute(operation)
            except Exception as e:
                logger.exception(f"{operation.__class__.__name__} crashed: {e}")
                if not operation.future.done():
                    operation.future.set_exception(e)

    def execute(self, operation: Operation[Any]) -> None:
        """
        Drive an operation to completion.

        Args:
            operation: Operation to run; its future is resolved on return.
        """
        name = operation.__class__.__name__
        logger.info(f"Executing {name}")

        while not operation.is_completed:
            command = operation.next_command()
            envelope = encode_command_envelope(command.code, command.data)
            logger.debug(
                f"Sending {get_command_name(command.code)} data={command.data!r}"
            )

            try:
                self.session.send_and_ack(envelope)
                response = self.session.receive_and_ack(command.response_size)
            except TransportError as e:
                logger.error(f"{name} round trip failed: {e}")
                operation.mark_error()
                break

            decoded = decode_response(response, command.response_size)
            error: Optional[LcdmError] = decoded.error
            if error is None:
                error = operation.handle_response(decoded.data)

            if error is not None:
                logger.error(f"{name} got a bad response: {error}")
                operation.mark_error()
                break

        logger.info(f"{name} completed")
