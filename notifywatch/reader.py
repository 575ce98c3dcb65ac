"""
Event reader for notifywatch.

The reader owns the read buffer and the shutdown protocol:
- Opening the channel and registering one watch
- Reading, framing and decoding batches of records until shutdown
- Forwarding every decoded event to a renderer
- Releasing the watch and the channel on every exit path
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from notifywatch.channel import NotificationChannel
from notifywatch.errors import (ChannelUnavailable, FatalReadError,
                                InterruptedRead, MalformedStream,
                                NotifyWatchError, PathNotWatchable)
from notifywatch.events import (HEADER_SIZE, READ_BUFFER_SIZE, DecodedEvent,
                                decode_event, frame_records)

logger = logging.getLogger(__name__)


@dataclass
class ReaderStats:
    """Counters kept by the reader for the exit summary."""

    reads: int = 0
    interrupted_reads: int = 0
    events: int = 0


@dataclass
class ReadStatus:
    """Outcome of EventReader.run: clean shutdown or the condition that ended it."""

    error: Optional[NotifyWatchError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def exit_code(self) -> int:
        return 0 if self.error is None else 1


class EventReader:
    """
    Reads inotify records for a single path and dispatches decoded events.

    Attributes:
        channel_factory: Callable returning an open channel.
        buffer: Fixed-size read buffer reused for every read.
        stats: ReaderStats for the most recent run.
    """

    def __init__(self, channel_factory=NotificationChannel.open, buffer_size: int = READ_BUFFER_SIZE):
        self.channel_factory = channel_factory
        self.buffer = bytearray(buffer_size)
        self.stats = ReaderStats()

    def run(
        self,
        path: str,
        mask: int,
        shutdown,
        render: Callable[[DecodedEvent], None],
        on_read: Optional[Callable[[int], None]] = None,
    ) -> ReadStatus:
        """
        Watch ``path`` and render events until ``shutdown`` is set.

        Args:
            path: File or directory to watch.
            mask: Interest mask to register.
            shutdown: Token with is_set() and fileno(), see ShutdownToken.
            render: Called with each decoded event, in stream order.
            on_read: Called with the byte count of every successful read,
                before that read's events are rendered.

        Returns:
            ReadStatus describing why the reader stopped.
        """
        self.stats = ReaderStats()
        try:
            channel = self.channel_factory()
        except ChannelUnavailable as e:
            logger.debug(f"Channel unavailable: {e.describe()}")
            return ReadStatus(error=e)

        with channel:
            try:
                watch = channel.watch(path, mask)
            except PathNotWatchable as e:
                logger.debug(f"Watch registration failed: {e.describe()}")
                return ReadStatus(error=e)

            with watch:
                error = self._read_loop(channel, watch, shutdown, render, on_read)

        logger.info(
            f"Reader stopped after {self.stats.reads} reads, {self.stats.events} events"
        )
        return ReadStatus(error=error)

    def _read_loop(self, channel, watch, shutdown, render, on_read):
        while not shutdown.is_set():
            try:
                count = channel.read_raw(self.buffer, interrupt=shutdown)
            except InterruptedRead:
                self.stats.interrupted_reads += 1
                logger.debug("Read interrupted; checking for shutdown")
                continue
            except FatalReadError as e:
                logger.debug(f"Fatal read error: {e.describe()}")
                return e

            self.stats.reads += 1
            logger.debug(f"Read {count} bytes")
            try:
                self._dispatch(memoryview(self.buffer)[:count], watch, render, on_read)
            except MalformedStream as e:
                logger.debug(f"Malformed event stream: {e}")
                return e
        return None

    def _dispatch(self, data, watch, render, on_read):
        if len(data) < HEADER_SIZE:
            raise MalformedStream(
                f"Unexpected number of bytes: read returned {len(data)}, "
                f"one event header is {HEADER_SIZE}"
            )
        if on_read is not None:
            on_read(len(data))
        for raw in frame_records(data):
            event = decode_event(raw)
            if event.is_overflow:
                logger.warning("Kernel event queue overflowed; events were lost")
            elif event.is_watch_removed and event.wd == watch.wd:
                watch.invalidate()
            self.stats.events += 1
            render(event)
