"""Pytest configuration and fixtures."""

import shutil
import tempfile

import pytest

from codepulse.models import Heartbeat


class FakeClock:
    """Controllable epoch-seconds clock for time-dependent tests."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    temp_path = tempfile.mkdtemp()
    yield temp_path
    shutil.rmtree(temp_path)


@pytest.fixture
def sample_heartbeat():
    """A fully populated heartbeat."""
    return Heartbeat(
        timestamp="2024-01-15T14:00:00.000Z",
        project="my-project",
        language="typescript",
        file="a.ts",
        branch="main",
        editor="codepulse",
        os="Linux",
    )


def make_heartbeats(count: int):
    """Distinct heartbeats in increasing timestamp order."""
    return [
        Heartbeat(
            timestamp=f"2024-01-15T14:{i // 60:02d}:{i % 60:02d}.000Z",
            project="my-project",
            file=f"file_{i}.py",
        )
        for i in range(count)
    ]


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")
    config.addinivalue_line("markers", "unit: mark test as unit test")
