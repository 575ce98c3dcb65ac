"""
notifywatch: dump inotify events for a single file or directory.

Provides both a CLI and library API for reading the kernel's change
notification stream and rendering every decoded event.
"""

__version__ = "0.1.0"
