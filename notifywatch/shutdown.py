"""
Cooperative shutdown for the event reader.

A ShutdownToken is set once, from a signal handler or another thread, and
observed by the reader between reads. Its pipe makes a blocked read wake up.
"""

import logging
import os
import signal
import threading
from contextlib import contextmanager

logger = logging.getLogger(__name__)

DEFAULT_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class ShutdownToken:
    """
    Set-once shutdown request.

    The read end of an internal pipe is exposed through fileno() and becomes
    readable once the token is set, so it can be passed to select().
    """

    def __init__(self):
        self._event = threading.Event()
        self._read_fd, self._write_fd = os.pipe()
        os.set_blocking(self._write_fd, False)

    def set(self):
        """Request shutdown. Safe to call from a signal handler."""
        if self._event.is_set():
            return
        self._event.set()
        try:
            os.write(self._write_fd, b"\0")
        except OSError as e:
            logger.debug(f"Could not write shutdown wakeup byte: {e}")

    def is_set(self):
        return self._event.is_set()

    def fileno(self):
        return self._read_fd

    def close(self):
        for fd in (self._read_fd, self._write_fd):
            try:
                os.close(fd)
            except OSError as e:
                logger.debug(f"Error closing shutdown pipe {fd}: {e}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


@contextmanager
def install_signal_handlers(token, signals=DEFAULT_SIGNALS):
    """
    Route ``signals`` to ``token.set()`` for the duration of the block.

    Previous handlers are restored on exit. Must run on the main thread.
    """

    def handle_signal(signum, frame):
        logger.info(f"Received {signal.Signals(signum).name}, shutting down")
        token.set()

    previous = {}
    try:
        for signum in signals:
            previous[signum] = signal.signal(signum, handle_signal)
        yield token
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)
