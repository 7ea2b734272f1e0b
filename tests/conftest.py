"""
Pytest fixtures for Simple Serial Logger tests.
"""

import logging
import threading
import time
from datetime import datetime

import pytest

from serial_logger.config import LoggerConfig


class MockSerialPort:
    """Mock serial port for testing without hardware."""

    def __init__(self, timeout: float = 0.01):
        self.timeout = timeout
        self.rx = bytearray()
        self.written = []
        self.calls = []
        self.is_open = True
        self.close_count = 0
        self.read_error = None
        self.write_error = None
        self._lock = threading.Lock()

    def feed(self, data: bytes) -> None:
        """Make bytes available for reading."""
        with self._lock:
            self.rx.extend(data)

    @property
    def in_waiting(self) -> int:
        self.calls.append('in_waiting')
        with self._lock:
            return len(self.rx)

    def _idle(self) -> None:
        time.sleep(self.timeout)

    def read(self, size: int = 1) -> bytes:
        """Return up to size bytes, or b'' after the timeout."""
        self.calls.append('read')
        if self.read_error:
            raise self.read_error
        with self._lock:
            data = bytes(self.rx[:size])
            del self.rx[:size]
        if not data:
            self._idle()
        return data

    def read_until(self, expected: bytes = b"\n", size=None) -> bytes:
        """Return bytes up to and including expected, or whatever is buffered."""
        self.calls.append('read_until')
        if self.read_error:
            raise self.read_error
        with self._lock:
            idx = self.rx.find(expected)
            end = len(self.rx) if idx < 0 else idx + len(expected)
            data = bytes(self.rx[:end])
            del self.rx[:end]
        if not data:
            self._idle()
        return data

    def write(self, data: bytes) -> int:
        """Record written bytes."""
        if self.write_error:
            raise self.write_error
        self.written.append(bytes(data))
        return len(data)

    def flush(self) -> None:
        pass

    def close(self) -> None:
        self.is_open = False
        self.close_count += 1


@pytest.fixture
def mock_port():
    """Create mock serial port."""
    return MockSerialPort()


@pytest.fixture
def start_time():
    """Session start time one and a half seconds before the hour."""
    return datetime(2024, 1, 1, 10, 59, 58)


@pytest.fixture
def fixed_clock(start_time):
    """Clock that always returns the session start time."""
    return lambda: start_time


@pytest.fixture
def base_config(tmp_path):
    """Listen-mode configuration writing into a temporary directory."""
    return LoggerConfig(
        port="COM3",
        baud_rate=9600,
        output_dir=str(tmp_path),
        poll_interval=0.05,
    )


def wait_for(predicate, timeout: float = 2.0, interval: float = 0.01) -> bool:
    """Poll predicate until it is true or the timeout expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


@pytest.fixture
def wait_until():
    """Helper that polls a predicate until it holds."""
    return wait_for


@pytest.fixture
def restore_package_logger():
    """Undo setup_logging changes to the package logger."""
    package_logger = logging.getLogger('serial_logger')
    handlers = list(package_logger.handlers)
    level = package_logger.level
    yield package_logger
    for handler in package_logger.handlers:
        handler.close()
    package_logger.handlers[:] = handlers
    package_logger.setLevel(level)
