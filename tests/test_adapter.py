"""
Tests for the asyncio facade.
"""

import pytest

from lcdm import LcdmDispenser
from lcdm.adapter import AsyncLcdmDispenser
from lcdm.constants import Command
from lcdm.core.value_objects import Cassette, OperationStatus

from conftest import FAST_PROTOCOL
from device_simulator import FakeLcdm, single_response


class TestAsyncLcdmDispenser:
    """Tests for AsyncLcdmDispenser."""

    @pytest.fixture
    def async_dispenser(self, dispenser):
        return AsyncLcdmDispenser(dispenser)

    @pytest.mark.asyncio
    async def test_purge(self, async_dispenser):
        """Test awaiting purge."""
        assert await async_dispenser.purge() is OperationStatus.GOOD

    @pytest.mark.asyncio
    async def test_dispense(self, async_dispenser, device):
        """Test awaiting a multi-command dispense."""
        result = await async_dispenser.dispense({Cassette.LOWER: 61})

        assert result.dispensed_bills[Cassette.LOWER] == 61
        assert len(device.commands) == 2

    @pytest.mark.asyncio
    async def test_dispense_failure_is_returned(self):
        """Test device fault comes back as a result, not an exception."""
        device = FakeLcdm(
            lambda code, data: single_response(code, 1, status=0x38)
        )
        async with AsyncLcdmDispenser(LcdmDispenser(device, FAST_PROTOCOL)) as dispenser:
            result = await dispenser.dispense({Cassette.UPPER: 3})

        assert result.status is OperationStatus.BILL_END
        assert result.dispensed_bills[Cassette.UPPER] == 1
        assert device.closed

    @pytest.mark.asyncio
    async def test_close(self, async_dispenser, dispenser):
        """Test async close shuts the driver down."""
        await async_dispenser.close()

        assert dispenser.is_closed
        assert not dispenser.is_running

    @pytest.mark.asyncio
    async def test_sequential_awaits(self, async_dispenser, device):
        """Test awaited operations keep submission order."""
        await async_dispenser.purge()
        await async_dispenser.dispense({Cassette.UPPER: 1})

        assert [code for code, _ in device.commands] == [
            Command.PURGE,
            Command.UPPER_DISPENSE,
        ]


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
