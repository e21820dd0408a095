"""
Asyncio facade for the LCDM driver.

Lets asyncio applications await dispenser operations without blocking
the event loop; the blocking serial work stays on the driver's worker
thread.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from .core.value_objects import DispenseResult, OperationStatus
from .driver import LcdmDispenser


logger = logging.getLogger(__name__)


class AsyncLcdmDispenser:
    """
    Awaitable wrapper around LcdmDispenser.

    Attributes:
        dispenser: The wrapped driver.
    """

    def __init__(self, dispenser: LcdmDispenser) -> None:
        self.dispenser = dispenser

    async def purge(self) -> OperationStatus:
        """Clear notes left in the transport path."""
        return await asyncio.wrap_future(self.dispenser.purge())

    async def dispense(self, requested_bills: Mapping[Any, int]) -> DispenseResult:
        """
        Dispense notes from the cassettes.

        Args:
            requested_bills: Notes per cassette.

        Returns:
            Dispense result.
        """
        result = await asyncio.wrap_future(self.dispenser.dispense(requested_bills))
        if not result.is_success:
            logger.warning(f"Dispense finished with {result.status.value}")
        return result

    async def close(self) -> None:
        """Close the driver without blocking the event loop."""
        await asyncio.get_running_loop().run_in_executor(None, self.dispenser.close)

    async def __aenter__(self) -> AsyncLcdmDispenser:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()
