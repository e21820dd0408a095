"""
Pytest configuration for LCDM driver tests.

This conftest.py adds the project root to sys.path so that tests can
import the package without installing it, and provides simulated
device fixtures.
"""

import sys
from pathlib import Path

import pytest


project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from lcdm import LcdmDispenser  # noqa: E402
from lcdm.settings import ProtocolSettings  # noqa: E402

from device_simulator import FakeLcdm  # noqa: E402


FAST_PROTOCOL = ProtocolSettings(ack_wait=0.0, idle_wait=0.01, join_timeout=5.0)


@pytest.fixture
def device():
    """Simulated dispenser that serves every request in full."""
    return FakeLcdm()


@pytest.fixture
def dispenser(device):
    """Running driver connected to the simulated dispenser."""
    driver = LcdmDispenser(device, FAST_PROTOCOL)
    yield driver
    driver.close()


@pytest.fixture
def idle_dispenser(device):
    """Driver whose worker has not been started yet."""
    driver = LcdmDispenser(device, FAST_PROTOCOL, autostart=False)
    yield driver
    driver.close()
