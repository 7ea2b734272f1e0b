"""
Operator console input for Simple Serial Logger.

Watches the input stream on its own thread and requests shutdown when the
operator enters 'q'.
"""

import logging
import sys
import threading
from typing import Optional, TextIO

logger = logging.getLogger(__name__)

QUIT_KEY = "q"


def is_quit_command(text: str) -> bool:
    """True for 'q' or 'Q', surrounding whitespace ignored."""
    return text.strip().lower() == QUIT_KEY


class ConsoleWatcher:
    """
    Reads operator input lines and sets the cancellation event on quit.

    The thread is a daemon because a blocking read on a console cannot be
    interrupted portably.
    """

    def __init__(self, cancel_event: threading.Event, stream: Optional[TextIO] = None):
        """
        Args:
            cancel_event: Event to set when quit is requested
            stream: Input stream (defaults to sys.stdin)
        """
        self.cancel_event = cancel_event
        self.stream = stream if stream is not None else sys.stdin
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Start watching the input stream."""
        self._thread = threading.Thread(target=self._watch, name="console-watcher", daemon=True)
        self._thread.start()

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=timeout)

    def _watch(self) -> None:
        while not self.cancel_event.is_set():
            try:
                line = self.stream.readline()
            except (OSError, ValueError) as e:
                logger.debug(f"Console input unavailable: {e}")
                return
            if not line:
                # EOF: no more operator input, keep running until a signal
                logger.debug("Console input closed")
                return
            if is_quit_command(line):
                logger.info("Quit requested")
                self.cancel_event.set()
                return
