"""
Simple Serial Logger - Port Session Module.

Owns the open serial port for one logging session. Runs either a passive
listen loop or a command polling loop, writes every record to the active
data file and always closes the port on the way out.
"""

import logging
import queue
import threading
import time
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, TYPE_CHECKING

import serial

from .config import LoggerConfig, ReadMode
from .logging_config import RecordEcho
from .port import PortIO, open_port
from .reader import SerialReader
from .rotation import RotationState
from .sink import Record, append_record
from .stats import SessionStats, StatsReporter

if TYPE_CHECKING:
    from .visualization.tui import SessionTUI

logger = logging.getLogger(__name__)

# Longest the writer loop waits for a record before re-checking cancellation
QUEUE_GET_TIMEOUT = 0.1
READER_JOIN_TIMEOUT = 2.0

CLOSED_NOTICE = "Serial port closed. Exiting..."


class SessionPhase(Enum):
    """Lifecycle of a port session."""
    IDLE = "idle"
    OPEN = "open"
    LISTENING = "listening"
    POLLING = "polling"
    CLOSING = "closing"
    CLOSED = "closed"


class PortSession:
    """
    One serial logging session.

    Lifecycle: IDLE -> OPEN -> LISTENING | POLLING -> CLOSING -> CLOSED.
    CLOSED is reached on every path, including a failed open.
    """

    def __init__(self, config: LoggerConfig,
                 cancel_event: Optional[threading.Event] = None,
                 port_factory: Callable[[LoggerConfig], object] = open_port,
                 clock: Callable[[], datetime] = datetime.now,
                 tui: Optional['SessionTUI'] = None):
        """
        Initialize the session.

        Args:
            config: Session configuration
            cancel_event: Event that ends the session when set
            port_factory: Opens the serial port for a configuration
            clock: Wall clock used for the start time and record stamps
            tui: Optional live view
        """
        self.config = config
        self.cancel_event = cancel_event or threading.Event()
        self.port_factory = port_factory
        self.clock = clock
        self.tui = tui

        self.phase = SessionPhase.IDLE
        self.port = None
        self.port_io: Optional[PortIO] = None
        self.reader: Optional[SerialReader] = None
        self.records: 'queue.Queue[Record]' = queue.Queue(maxsize=config.queue_size)
        self.stats = SessionStats()
        self.echo = RecordEcho(enabled=tui is None)
        self.rotation: Optional[RotationState] = None
        self.start_time: Optional[datetime] = None
        self._reporter: Optional[StatsReporter] = None

    @property
    def active_file_name(self) -> str:
        """Name of the data file currently appended to ("" before the first record)."""
        return self.rotation.active_file_name if self.rotation else ""

    def run(self) -> int:
        """
        Run the session until cancelled.

        Returns:
            0 after a normal quit or a port that could not be opened,
            1 if the session failed unexpectedly
        """
        self.start_time = self.clock()
        self.rotation = RotationState(self.config.rotation_mode, self.start_time, self.config.prefix)
        self.stats.start()

        try:
            if not self._open():
                return 0

            self._start_reader()

            if self.config.polling:
                self.phase = SessionPhase.POLLING
                logger.info(f"Polling the serial port with '{self.config.command}' "
                            f"every {self.config.poll_interval:g}s. Press 'q' and Enter to quit.")
            else:
                self.phase = SessionPhase.LISTENING
                logger.info("Listening to the serial port. Press 'q' and Enter to quit.")

            self._service_loop()
            return 0

        except Exception as e:
            logger.exception(f"Session error: {e}")
            return 1
        finally:
            self.close()

    def stop(self) -> None:
        """Request the session to end."""
        self.cancel_event.set()

    def _open(self) -> bool:
        """Open the port; report and return False on failure."""
        try:
            self.port = self.port_factory(self.config)
        except (serial.SerialException, OSError, ValueError) as e:
            logger.error(f"Failed to open the serial port: {e}")
            if self.tui:
                self.tui.record_error(f"Failed to open the serial port: {e}")
            return False

        self.port_io = PortIO(self.port)
        self.phase = SessionPhase.OPEN
        logger.debug(f"Serial port {self.config.port} open @ {self.config.baud_rate} bps")
        return True

    def _start_reader(self) -> None:
        """Start the background reader and optional stats reporter."""
        settle = 0.0
        if self.config.polling and self.config.read_mode == ReadMode.BUFFER:
            settle = self.config.buffer_settle_ms / 1000.0

        self.reader = SerialReader(
            self.port_io,
            self.config.read_mode,
            self.records,
            self.cancel_event,
            stats=self.stats,
            settle=settle,
            clock=self.clock,
            on_error=self.tui.record_error if self.tui else None,
        )
        self.reader.start()

        if self.config.stats_interval > 0:
            self._reporter = StatsReporter(self.stats, self.config.stats_interval)
            self._reporter.start()

    def _service_loop(self) -> None:
        """Write queued records, sending poll commands when due."""
        interval = self.config.poll_interval
        next_poll = time.monotonic() if self.config.polling else None

        while not self.cancel_event.is_set():
            wait = QUEUE_GET_TIMEOUT
            if next_poll is not None:
                now = time.monotonic()
                if now >= next_poll:
                    self.send_command()
                    next_poll += interval
                    # Skip missed ticks rather than bursting commands
                    if next_poll <= now:
                        next_poll = now + interval
                wait = max(0.0, min(wait, next_poll - time.monotonic()))

            try:
                record = self.records.get(timeout=wait)
            except queue.Empty:
                continue

            self.handle_record(record)

    def send_command(self) -> bool:
        """
        Write the poll command to the port.

        Returns:
            True if the command was written
        """
        command = self.config.command
        try:
            self.port_io.write_line(command)
        except serial.SerialTimeoutException:
            logger.error("Error: serial port write timeout")
            self.stats.record_command_error()
            return False
        except (serial.SerialException, OSError) as e:
            logger.error(f"Error while sending command: {e}")
            self.stats.record_command_error()
            return False

        self.stats.record_command()
        self.echo.log_command(command)
        if self.tui:
            self.tui.record_command(command)
        return True

    def handle_record(self, record: Record) -> bool:
        """
        Append a record to the active data file.

        Starts a new file when the rotation boundary has been crossed.
        Sink errors are logged and the record is dropped.

        Args:
            record: Record to store

        Returns:
            True if the record was written
        """
        if not record.payload:
            return False

        file_name, rotated = self.rotation.check(record.timestamp)
        if rotated:
            self.stats.record_new_file()
            self.echo.log_new_file(file_name)
            if self.tui:
                self.tui.record_new_file(file_name)

        path = Path(self.config.output_dir) / file_name
        try:
            append_record(path, record.timestamp, record.payload)
        except OSError as e:
            logger.error(f"Error while processing data: {e}")
            self.stats.record_write_error()
            if self.tui:
                self.tui.record_error(f"Write failed: {e}")
            return False

        self.stats.record_written(len(record.payload))
        self.echo.log_record(record)
        if self.tui:
            self.tui.record_received(record)
        return True

    def _drain(self) -> None:
        """Write records still queued after the reader stopped."""
        while True:
            try:
                record = self.records.get_nowait()
            except queue.Empty:
                return
            self.handle_record(record)

    def close(self) -> None:
        """Stop the reader, close the port and report. Safe to call more than once."""
        if self.phase == SessionPhase.CLOSED:
            return

        self.phase = SessionPhase.CLOSING
        self.cancel_event.set()

        if self._reporter:
            self._reporter.stop()
            self._reporter = None

        if self.reader:
            self.reader.join(timeout=READER_JOIN_TIMEOUT)
            if self.reader.alive:
                logger.warning("Reader thread did not stop in time")
            else:
                self._drain()

        if self.port is not None and getattr(self.port, 'is_open', False):
            try:
                self.port.close()
            except (serial.SerialException, OSError) as e:
                logger.error(f"Error closing serial port: {e}")

        self._report_closed()
        self._log_stats()
        self.phase = SessionPhase.CLOSED

    def _report_closed(self) -> None:
        """Tell the operator the port is closed, whatever the log level."""
        if self.tui:
            self.tui.record_closed(CLOSED_NOTICE)
        else:
            print(CLOSED_NOTICE, flush=True)
        logger.debug(f"Session for {self.config.port} closed")

    def _log_stats(self) -> None:
        """Log final statistics."""
        for line in self.stats.format_report().splitlines():
            logger.debug(line)
