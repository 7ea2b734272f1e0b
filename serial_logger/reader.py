"""
Background reader for Simple Serial Logger.

Reads records from the port on its own thread and hands them to the
session's writer loop through a bounded queue.
"""

import logging
import queue
import threading
from datetime import datetime
from typing import Callable, Optional

from .config import ReadMode
from .port import PortIO, ReadTimeoutError
from .sink import Record
from .stats import SessionStats

logger = logging.getLogger(__name__)

# Wait between queue put attempts and after an unexpected read error
QUEUE_PUT_TIMEOUT = 0.1
ERROR_PAUSE = 0.1


class SerialReader:
    """
    Reads one record at a time from the port.

    Line mode reads up to a newline, Buffer mode drains whatever is
    available. Empty reads produce nothing. Timeouts and read errors are
    logged and counted; the reader keeps running until cancelled.
    """

    def __init__(self, port_io: PortIO, read_mode: ReadMode,
                 records: 'queue.Queue[Record]', cancel_event: threading.Event,
                 stats: Optional[SessionStats] = None, settle: float = 0.0,
                 clock: Callable[[], datetime] = datetime.now,
                 on_error: Optional[Callable[[str], None]] = None):
        """
        Initialize the reader.

        Args:
            port_io: Record-level port access
            read_mode: Line or Buffer extraction
            records: Queue the records are pushed onto
            cancel_event: Session cancellation event
            stats: Optional statistics to update
            settle: Buffer mode delay before draining, in seconds
            clock: Source of record timestamps
            on_error: Called with the message of every timeout or read error
        """
        self.port_io = port_io
        self.read_mode = read_mode
        self.records = records
        self.cancel_event = cancel_event
        self.stats = stats or SessionStats()
        self.settle = settle
        self.clock = clock
        self.on_error = on_error
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Start the reader thread."""
        self._thread = threading.Thread(target=self._read_loop, name="serial-reader", daemon=True)
        self._thread.start()

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the reader thread to finish."""
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=timeout)

    @property
    def alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def read_once(self) -> Optional[Record]:
        """
        Read a single unit of data and stamp it.

        Returns:
            Record, or None when nothing usable was read
        """
        try:
            if self.read_mode == ReadMode.BUFFER:
                payload = self.port_io.read_buffer(self.settle)
            else:
                payload = self.port_io.read_line()
        except ReadTimeoutError as e:
            self._report(logging.WARNING, "Error: serial port timeout")
            logger.debug(f"Read timeout detail: {e}")
            self.stats.record_timeout()
            return None
        except Exception as e:
            self._report(logging.ERROR, f"Error while processing data: {e}")
            self.stats.record_read_error()
            self.cancel_event.wait(ERROR_PAUSE)
            return None

        if not payload:
            return None
        return Record(timestamp=self.clock(), payload=payload)

    def _report(self, level: int, message: str) -> None:
        logger.log(level, message)
        if self.on_error:
            self.on_error(message)

    def _read_loop(self) -> None:
        """Main loop of the reader thread."""
        logger.debug(f"Reader started ({self.read_mode.value} mode)")

        while not self.cancel_event.is_set():
            record = self.read_once()
            if record is not None:
                self._put(record)

        logger.debug("Reader stopped")

    def _put(self, record: Record) -> None:
        """Queue a record, blocking while the queue is full."""
        while not self.cancel_event.is_set():
            try:
                self.records.put(record, timeout=QUEUE_PUT_TIMEOUT)
                return
            except queue.Full:
                continue
        logger.debug(f"Dropped record at shutdown: {record.format()}")
