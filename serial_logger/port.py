"""
Serial port access for Simple Serial Logger.

Opens the port with fixed 8N1 framing and implements the two record
extraction strategies (Line and Buffer) on top of pyserial.
"""

import logging
import time

import serial

from .config import LoggerConfig

logger = logging.getLogger(__name__)

LINE_TERMINATOR = b"\n"


class ReadTimeoutError(serial.SerialException):
    """A line was started but its terminator did not arrive in time."""


def open_port(config: LoggerConfig) -> serial.Serial:
    """
    Open the configured serial port.

    Framing is fixed: 8 data bits, no parity, one stop bit, no handshake.

    Args:
        config: Session configuration

    Returns:
        Open pyserial port

    Raises:
        serial.SerialException: If the port cannot be opened
        ValueError: If a port parameter is out of range
    """
    port = serial.Serial(
        port=config.port,
        baudrate=config.baud_rate,
        bytesize=serial.EIGHTBITS,
        parity=serial.PARITY_NONE,
        stopbits=serial.STOPBITS_ONE,
        xonxoff=False,
        rtscts=False,
        dsrdtr=False,
        timeout=config.timeout_seconds,
        write_timeout=config.timeout_seconds,
    )
    logger.debug(f"Opened {config.port} at {config.baud_rate} baud (8N1)")
    return port


class PortIO:
    """
    Record-level reads and command writes on an open port.

    Line reads keep any partial line across a timeout so that no bytes are
    lost when the terminator arrives late.
    """

    def __init__(self, port, encoding: str = 'utf-8'):
        """
        Args:
            port: Open pyserial port (or compatible object)
            encoding: Text encoding of the device output
        """
        self.port = port
        self.encoding = encoding
        self._pending = bytearray()

    def _decode(self, data: bytes) -> str:
        return data.decode(self.encoding, errors='replace')

    def read_line(self) -> str:
        """
        Read one line, without its terminator.

        Returns:
            The line, or "" if nothing arrived within the timeout

        Raises:
            ReadTimeoutError: If a partial line arrived but no terminator
        """
        data = self.port.read_until(LINE_TERMINATOR)
        if not data:
            return ""

        self._pending.extend(data)
        if not self._pending.endswith(LINE_TERMINATOR):
            raise ReadTimeoutError(
                f"timeout waiting for line terminator ({len(self._pending)} bytes pending)"
            )

        line = bytes(self._pending[:-1])
        self._pending.clear()
        if line.endswith(b"\r"):
            line = line[:-1]
        return self._decode(line)

    def read_buffer(self, settle: float = 0.0) -> str:
        """
        Drain every byte currently available.

        Blocks up to the port timeout for the first byte.

        Args:
            settle: Seconds to wait after the first byte before draining

        Returns:
            Decoded bytes, or "" if nothing arrived
        """
        first = self.port.read(1)
        if not first:
            return ""

        if settle > 0:
            time.sleep(settle)

        waiting = self.port.in_waiting
        rest = self.port.read(waiting) if waiting else b""
        return self._decode(first + rest)

    def write_line(self, text: str) -> None:
        """
        Write text followed by a newline.

        Raises:
            serial.SerialTimeoutException: If the write times out
        """
        self.port.write((text + "\n").encode(self.encoding))
        self.port.flush()
