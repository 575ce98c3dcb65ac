"""
Event model for notifywatch.

This module describes the records the kernel writes to an inotify descriptor:
- The interest mask categories and their canonical labels
- The fixed record header layout and the read buffer size it implies
- Framing a filled byte range into raw records
- Decoding raw records into renderer-facing events
"""

import enum
import os
import struct
from dataclasses import dataclass
from typing import Iterator, Tuple

from notifywatch.errors import MalformedStream


class EventMask(enum.IntFlag):
    """Event category bits, as defined in <sys/inotify.h>."""

    ACCESS = 0x00000001
    MODIFY = 0x00000002
    ATTRIB = 0x00000004
    CLOSE_WRITE = 0x00000008
    CLOSE_NOWRITE = 0x00000010
    OPEN = 0x00000020
    MOVED_FROM = 0x00000040
    MOVED_TO = 0x00000080
    CREATE = 0x00000100
    DELETE = 0x00000200
    DELETE_SELF = 0x00000400
    MOVE_SELF = 0x00000800
    UNMOUNT = 0x00002000
    Q_OVERFLOW = 0x00004000
    IGNORED = 0x00008000
    ISDIR = 0x40000000

    ALL = (
        ACCESS | MODIFY | ATTRIB | CLOSE_WRITE | CLOSE_NOWRITE | OPEN
        | MOVED_FROM | MOVED_TO | CREATE | DELETE | DELETE_SELF | MOVE_SELF
        | UNMOUNT | Q_OVERFLOW | IGNORED | ISDIR
    )


# Ascending bit order; labels for a mask are always listed in this order.
CATEGORIES: Tuple[Tuple[EventMask, str], ...] = (
    (EventMask.ACCESS, "accessed"),
    (EventMask.MODIFY, "modified"),
    (EventMask.ATTRIB, "attribute-changed"),
    (EventMask.CLOSE_WRITE, "closed-after-write"),
    (EventMask.CLOSE_NOWRITE, "closed-without-write"),
    (EventMask.OPEN, "opened"),
    (EventMask.MOVED_FROM, "moved-from"),
    (EventMask.MOVED_TO, "moved-to"),
    (EventMask.CREATE, "created"),
    (EventMask.DELETE, "deleted"),
    (EventMask.DELETE_SELF, "deleted-self"),
    (EventMask.MOVE_SELF, "moved-self"),
    (EventMask.UNMOUNT, "unmounted"),
    (EventMask.Q_OVERFLOW, "queue-overflow"),
    (EventMask.IGNORED, "watch-removed"),
    (EventMask.ISDIR, "is-directory"),
)

# struct inotify_event: int wd; uint32_t mask, cookie, len; char name[];
EVENT_HEADER = struct.Struct("iIII")
HEADER_SIZE = EVENT_HEADER.size
NAME_MAX = 255
# Large enough for one record carrying the longest name plus its terminator.
READ_BUFFER_SIZE = HEADER_SIZE + NAME_MAX + 1

OVERFLOW_WD = -1


@dataclass(frozen=True)
class RawEvent:
    """One framed record: the header fields and the undecoded name bytes."""

    wd: int
    mask: int
    cookie: int
    length: int
    name: bytes = b""


@dataclass(frozen=True)
class DecodedEvent:
    """Renderer-facing view of a raw record."""

    wd: int
    mask: int
    cookie: int
    name_length: int
    name: str
    labels: Tuple[str, ...]

    @property
    def is_overflow(self) -> bool:
        return bool(self.mask & EventMask.Q_OVERFLOW)

    @property
    def is_watch_removed(self) -> bool:
        return bool(self.mask & EventMask.IGNORED)


def mask_labels(mask: int) -> Tuple[str, ...]:
    """Return the labels of every category set in ``mask``, in canonical order."""
    return tuple(label for bit, label in CATEGORIES if mask & bit)


def frame_records(data) -> Iterator[RawEvent]:
    """
    Split the bytes returned by one read into raw records.

    Args:
        data: Bytes-like object holding exactly the bytes the read returned.

    Yields:
        RawEvent for each record, in stream order.

    Raises:
        MalformedStream: If the data cannot hold one header, or a record's
            header or name would run past the end of the data.
    """
    view = memoryview(data)
    end = len(view)
    if end < HEADER_SIZE:
        raise MalformedStream(
            f"Read returned {end} bytes, less than one {HEADER_SIZE}-byte event header"
        )

    offset = 0
    while offset < end:
        if offset + HEADER_SIZE > end:
            raise MalformedStream(
                f"Event header at offset {offset} overruns the {end} bytes read"
            )
        wd, mask, cookie, length = EVENT_HEADER.unpack_from(view, offset)
        name_start = offset + HEADER_SIZE
        record_end = name_start + length
        if record_end > end:
            raise MalformedStream(
                f"Event at offset {offset} declares a {length}-byte name "
                f"but only {end - name_start} bytes remain"
            )
        yield RawEvent(wd, mask, cookie, length, bytes(view[name_start:record_end]))
        offset = record_end


def decode_event(raw: RawEvent) -> DecodedEvent:
    """Resolve a raw record into a DecodedEvent."""
    if raw.mask & EventMask.Q_OVERFLOW or not raw.length:
        name = ""
    else:
        # The name is NUL terminated and NUL padded up to the declared length.
        name = os.fsdecode(raw.name.split(b"\0", 1)[0])
    return DecodedEvent(
        wd=raw.wd,
        mask=raw.mask,
        cookie=raw.cookie,
        name_length=raw.length,
        name=name,
        labels=mask_labels(raw.mask),
    )


def pack_event(wd: int, mask: int, cookie: int = 0, name: bytes = b"", padded_length: int = None) -> bytes:
    """
    Build the wire form of one record, padding the name with NULs.

    Used to replay captured or synthetic streams through frame_records.
    """
    length = padded_length if padded_length is not None else (len(name) + 1 if name else 0)
    if length and length < len(name):
        raise ValueError(f"padded_length {length} is shorter than the {len(name)}-byte name")
    return EVENT_HEADER.pack(wd, mask, cookie, length) + name.ljust(length, b"\0")
