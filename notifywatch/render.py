"""
Human-readable rendering of decoded events.
"""

import click
from rich.console import Console
from rich.table import Table

READ_MARKER = "Completed one read..."
END_MARKER = "Ending program..."


def format_event(event):
    """Return the text block for one event, without the trailing blank line."""
    lines = [
        "Event info:",
        f"   Watch descriptor.... {event.wd}",
        f"   Mask................ {event.mask}",
        f"   Cookie.............. {event.cookie}",
        f"   Length of name...... {event.name_length}",
        f"   Name................ {event.name}",
        "Event mask includes:",
    ]
    lines.extend(f"   - {label}" for label in event.labels)
    return "\n".join(lines)


class TextRenderer:
    """Plain text output, one block per event."""

    def __init__(self, file=None):
        self.file = file

    def read_completed(self, count):
        click.echo(READ_MARKER, file=self.file)

    def __call__(self, event):
        click.echo(format_event(event) + "\n", file=self.file)

    def finish(self):
        click.echo(END_MARKER, file=self.file)


class TableRenderer:
    """One rich table per event."""

    def __init__(self, file=None):
        self.console = Console(file=file)

    def read_completed(self, count):
        self.console.print(f"[bold]Read {count} bytes[/bold]")

    def __call__(self, event):
        table = Table(title="Overflow" if event.is_overflow else event.name or "Event")
        table.add_column("Property", style="cyan")
        table.add_column("Value", style="magenta")
        table.add_row("Watch descriptor", str(event.wd))
        table.add_row("Mask", f"{event.mask:#010x}")
        table.add_row("Cookie", str(event.cookie))
        table.add_row("Length of name", str(event.name_length))
        table.add_row("Name", event.name)
        table.add_row("Mask includes", ", ".join(event.labels))
        self.console.print(table)

    def finish(self):
        self.console.print(END_MARKER)


RENDERERS = {
    "text": TextRenderer,
    "table": TableRenderer,
}


def get_renderer(name, file=None):
    try:
        return RENDERERS[name.lower()](file=file)
    except KeyError:
        raise ValueError(f"Unknown output format: {name}") from None
