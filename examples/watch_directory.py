"""
Watch a directory with the library API and print one line per event.

Usage: python examples/watch_directory.py DIRECTORY
"""

import sys

from notifywatch.events import EventMask
from notifywatch.reader import EventReader
from notifywatch.shutdown import ShutdownToken, install_signal_handlers


def print_event(event):
    print(f"{event.name or '.'}: {', '.join(event.labels)}")


def main(path):
    with ShutdownToken() as token, install_signal_handlers(token):
        status = EventReader().run(path, EventMask.ALL, token, print_event)
    if not status.ok:
        print(status.error, file=sys.stderr)
    return status.exit_code


if __name__ == "__main__":
    sys.exit(main(sys.argv[1]))
