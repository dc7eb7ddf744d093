"""Pytest fixtures for the biometric sign-in monitor tests."""

import os
import sys
from datetime import datetime
from pathlib import Path

# Keep test runs from writing log files
os.environ.setdefault("LOG_TO_FILE", "false")

sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from fastapi.testclient import TestClient

from api.api_server import create_app
from ledger import DeviceCommandBit, EventLedger


def local_ms(*args) -> int:
    """Epoch milliseconds for a local wall-clock time."""
    return int(datetime(*args).timestamp() * 1000)


@pytest.fixture
def ledger() -> EventLedger:
    """Create a fresh ledger with default bounds for each test."""
    return EventLedger()


@pytest.fixture
def small_ledger() -> EventLedger:
    """Ledger that only keeps five entries."""
    return EventLedger(max_history=5)


@pytest.fixture
def command_bit() -> DeviceCommandBit:
    return DeviceCommandBit()


@pytest.fixture
def client(ledger: EventLedger, command_bit: DeviceCommandBit) -> TestClient:
    """Test client wired to the fixture ledger."""
    app = create_app(ledger=ledger, command_bit=command_bit)
    return TestClient(app)
