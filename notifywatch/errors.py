"""
Error types raised by the notification channel and the event reader.
"""

import os


class NotifyWatchError(Exception):
    """Base class for all notifywatch errors."""

    pass


class OSBackedError(NotifyWatchError):
    """An error that wraps an errno reported by the operating system."""

    def __init__(self, message, errno=None):
        self.errno = errno
        self.strerror = os.strerror(errno) if errno else None
        super().__init__(message)

    def describe(self):
        if self.errno is None:
            return str(self)
        return f"{self} (errno {self.errno}: {self.strerror})"


class ChannelUnavailable(OSBackedError):
    """The inotify instance could not be created."""

    pass


class PathNotWatchable(OSBackedError):
    """A watch could not be registered for the requested path."""

    def __init__(self, path, errno=None):
        self.path = path
        super().__init__(f"Failed to add '{path}' to the watch list", errno)


class InterruptedRead(NotifyWatchError):
    """A blocking read was interrupted before any data arrived."""

    pass


class FatalReadError(OSBackedError):
    """Reading from the inotify descriptor failed for a reason other than EINTR."""

    pass


class MalformedStream(NotifyWatchError):
    """The bytes returned by a read cannot be framed into event records."""

    pass
