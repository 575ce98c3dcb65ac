"""
Tests for the inotify-backed notification channel.

These talk to the kernel and only run on Linux.
"""

import sys

import pytest

from notifywatch.channel import NotificationChannel
from notifywatch.errors import (FatalReadError, InterruptedRead,
                                PathNotWatchable)
from notifywatch.events import (READ_BUFFER_SIZE, EventMask, decode_event,
                                frame_records)
from notifywatch.shutdown import ShutdownToken

pytestmark = pytest.mark.skipif(not sys.platform.startswith("linux"), reason="inotify is Linux-only")


@pytest.fixture
def channel():
    chan = NotificationChannel.open()
    yield chan
    chan.close()


def test_open_returns_descriptor(channel):
    assert channel.fileno() >= 0
    assert not channel.closed


def test_watch_missing_path(channel, tmp_path):
    missing = tmp_path / "does-not-exist"
    with pytest.raises(PathNotWatchable) as excinfo:
        channel.watch(str(missing), EventMask.ALL)
    assert excinfo.value.path == str(missing)
    assert excinfo.value.errno is not None
    assert "does-not-exist" in str(excinfo.value)


def test_read_created_file(channel, tmp_path):
    watch = channel.watch(str(tmp_path), EventMask.ALL)
    assert watch.wd >= 1
    (tmp_path / "a.txt").write_text("")

    buffer = bytearray(READ_BUFFER_SIZE)
    count = channel.read_raw(buffer)
    events = [decode_event(r) for r in frame_records(memoryview(buffer)[:count])]
    created = [e for e in events if "created" in e.labels]
    assert created
    assert created[0].name == "a.txt"
    assert created[0].wd == watch.wd


def test_read_interrupted_by_token(channel, tmp_path):
    channel.watch(str(tmp_path), EventMask.ALL)
    with ShutdownToken() as token:
        token.set()
        with pytest.raises(InterruptedRead):
            channel.read_raw(bytearray(READ_BUFFER_SIZE), interrupt=token)


def test_pending_events_win_over_interrupt(channel, tmp_path):
    channel.watch(str(tmp_path), EventMask.ALL)
    (tmp_path / "b.txt").write_text("")
    with ShutdownToken() as token:
        token.set()
        count = channel.read_raw(bytearray(READ_BUFFER_SIZE), interrupt=token)
    assert count > 0


def test_read_after_close_is_fatal(tmp_path):
    chan = NotificationChannel.open()
    chan.close()
    with pytest.raises(FatalReadError) as excinfo:
        chan.read_raw(bytearray(READ_BUFFER_SIZE))
    assert excinfo.value.errno is not None


def test_release_is_idempotent(channel, tmp_path, caplog):
    watch = channel.watch(str(tmp_path), EventMask.ALL)
    watch.release()
    assert not watch.active
    caplog.clear()
    watch.release()
    channel.close()
    channel.close()
    assert channel.closed
    assert not [r for r in caplog.records if r.levelname == "WARNING"]


def test_unwatch_after_kernel_removal_is_skipped(channel, tmp_path, caplog):
    target = tmp_path / "target"
    target.mkdir()
    watch = channel.watch(str(target), EventMask.ALL)
    watch.invalidate()
    caplog.clear()
    channel.unwatch(watch)
    assert not [r for r in caplog.records if r.levelname == "WARNING"]
