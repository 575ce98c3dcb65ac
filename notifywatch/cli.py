import click

from notifywatch import config
from notifywatch import logger as notify_logger
from notifywatch import render
from notifywatch.errors import (ChannelUnavailable, FatalReadError,
                                PathNotWatchable)
from notifywatch.events import EventMask
from notifywatch.reader import EventReader
from notifywatch.shutdown import ShutdownToken, install_signal_handlers

STARTUP_ERRORS = (ChannelUnavailable, PathNotWatchable)


def report_error(error):
    """Write the stderr diagnostic for the condition that stopped the reader."""
    if isinstance(error, STARTUP_ERRORS):
        click.echo(str(error), err=True)
    elif isinstance(error, FatalReadError):
        click.echo("Error reading inotify file descriptor", err=True)
        click.echo(f"Errno is '{error.strerror}' ({error.errno})", err=True)
    else:
        click.echo(f"Error reading inotify file descriptor. {error}", err=True)


@click.command()
@click.argument("path")
@click.option("--config", "-c", "config_path", default=None, help="Path to configuration TOML file.")
@click.option("--debug", is_flag=True, help="Enable debug logging.")
@click.option("--format", "-f", "out_format", default=None, type=click.Choice(sorted(render.RENDERERS), case_sensitive=False), help="Output format.")
@click.version_option(package_name="notifywatch")
@click.pass_context
def main(ctx, path, config_path, debug, out_format):
    """
    Print every inotify event reported for PATH until interrupted.
    """
    try:
        cfg = config.load_config(config_path)
        renderer = render.get_renderer(out_format or cfg["output"]["format"])
    except Exception as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        ctx.exit(1)

    log_cfg = cfg.get("logging", {})
    level = "DEBUG" if debug else log_cfg.get("level", "WARNING")
    notify_logger.setup_logger(
        "notifywatch",
        log_dir=log_cfg.get("log_dir"),
        level=notify_logger.level_from_name(level),
    )

    reader = EventReader()
    with ShutdownToken() as token, install_signal_handlers(token):
        status = reader.run(path, EventMask.ALL, token, renderer, on_read=renderer.read_completed)

    if isinstance(status.error, STARTUP_ERRORS):
        report_error(status.error)
        ctx.exit(status.exit_code)

    if status.error is not None:
        report_error(status.error)
    renderer.finish()
    ctx.exit(status.exit_code)


if __name__ == "__main__":
    main()
