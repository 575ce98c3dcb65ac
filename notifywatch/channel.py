"""
Notification channel backed by the Linux inotify API.

The channel owns one inotify descriptor. Watches are registered through it
and raw event bytes are read from it into a caller-supplied buffer.
"""

import ctypes
import ctypes.util
import logging
import os
import select

from notifywatch.errors import (ChannelUnavailable, FatalReadError,
                                InterruptedRead, PathNotWatchable)

logger = logging.getLogger(__name__)

IN_CLOEXEC = os.O_CLOEXEC

_libc = None


def get_libc():
    """Load libc once and declare the inotify entry points."""
    global _libc
    if _libc is None:
        # find_library may return None; CDLL(None) still resolves symbols
        # from the running interpreter when it is linked against libc.
        libc = ctypes.CDLL(ctypes.util.find_library("c"), use_errno=True)
        libc.inotify_init1.argtypes = (ctypes.c_int,)
        libc.inotify_init1.restype = ctypes.c_int
        libc.inotify_add_watch.argtypes = (ctypes.c_int, ctypes.c_char_p, ctypes.c_uint32)
        libc.inotify_add_watch.restype = ctypes.c_int
        libc.inotify_rm_watch.argtypes = (ctypes.c_int, ctypes.c_int)
        libc.inotify_rm_watch.restype = ctypes.c_int
        _libc = libc
    return _libc


class Watch:
    """
    A registration of one path with one interest mask.

    Attributes:
        path: The watched path as given by the caller.
        mask: Interest mask passed to inotify_add_watch.
        wd: Watch descriptor returned by the kernel.
        active: False once released or once the kernel dropped the watch.
    """

    def __init__(self, channel, path, mask, wd):
        self.channel = channel
        self.path = path
        self.mask = mask
        self.wd = wd
        self.active = True

    def invalidate(self):
        """Mark the watch as removed by the kernel; no release call is needed."""
        if self.active:
            logger.info(f"Watch {self.wd} on {self.path} was removed by the kernel")
        self.active = False

    def release(self):
        self.channel.unwatch(self)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False

    def __repr__(self):
        return f"Watch(path={self.path!r}, wd={self.wd}, active={self.active})"


class NotificationChannel:
    """An open inotify instance."""

    def __init__(self, fd):
        self.fd = fd
        self.closed = False

    @classmethod
    def open(cls):
        """
        Create a new inotify instance.

        Raises:
            ChannelUnavailable: If the kernel refuses to allocate the instance,
                e.g. when max_user_instances is exhausted.
        """
        fd = get_libc().inotify_init1(IN_CLOEXEC)
        if fd < 0:
            err = ctypes.get_errno()
            raise ChannelUnavailable("Failed to create inotify file descriptor", err)
        logger.debug(f"Opened inotify descriptor {fd}")
        return cls(fd)

    def fileno(self):
        return self.fd

    def watch(self, path, mask):
        """
        Register interest in ``path``.

        Returns:
            Watch: The active registration.

        Raises:
            PathNotWatchable: If the path does not exist or cannot be monitored.
        """
        wd = get_libc().inotify_add_watch(self.fd, os.fsencode(path), int(mask))
        if wd < 0:
            err = ctypes.get_errno()
            raise PathNotWatchable(path, err)
        logger.info(f"Watching {path} (wd={wd}, mask={int(mask):#x})")
        return Watch(self, path, mask, wd)

    def read_raw(self, buffer, interrupt=None):
        """
        Block until events are available and read them into ``buffer``.

        Args:
            buffer: Writable buffer, at least one maximal record long.
            interrupt: Optional object with a fileno(); when it becomes
                readable before any events do, the read is abandoned.

        Returns:
            int: Number of bytes written to the buffer.

        Raises:
            InterruptedRead: If interrupted before data arrived.
            FatalReadError: On any other I/O failure.
        """
        try:
            if interrupt is not None:
                ready, _, _ = select.select([self.fd, interrupt], [], [])
                if self.fd not in ready:
                    raise InterruptedRead("Read interrupted by shutdown request")
            return os.readv(self.fd, [buffer])
        except InterruptedError as e:
            raise InterruptedRead(str(e)) from e
        except OSError as e:
            raise FatalReadError("Error reading inotify file descriptor", e.errno) from e

    def unwatch(self, watch):
        """Release a watch. Failures are logged, never raised."""
        if not watch.active:
            return
        watch.active = False
        if self.closed:
            return
        if get_libc().inotify_rm_watch(self.fd, watch.wd) < 0:
            err = ctypes.get_errno()
            logger.warning(
                f"Failed to remove watch {watch.wd} on {watch.path}: {os.strerror(err)}"
            )
        else:
            logger.debug(f"Removed watch {watch.wd} on {watch.path}")

    def close(self):
        """Close the inotify descriptor. Safe to call more than once."""
        if self.closed:
            return
        self.closed = True
        try:
            os.close(self.fd)
            logger.debug(f"Closed inotify descriptor {self.fd}")
        except OSError as e:
            logger.warning(f"Failed to close inotify descriptor {self.fd}: {e}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
