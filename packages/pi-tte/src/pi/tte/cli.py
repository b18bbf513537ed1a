"""CLI entry point for tte. Uses Click for argument parsing."""

from __future__ import annotations

import logging
import os
import sys

import click

from pi.tte.config import load_config
from pi.tte.session import TTE_VERSION, Editor
from pi.tte.terminal import ProcessTerminal, TerminalError

logger = logging.getLogger("pi.tte")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(log_file: str | None, verbose: bool) -> None:
    """Send logs to *log_file*, or nowhere: the terminal is in raw mode."""
    if not log_file:
        logger.addHandler(logging.NullHandler())
        return
    handler = logging.FileHandler(log_file)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)


@click.command()
@click.argument("filename", required=False, type=click.Path(dir_okay=False))
@click.option("--tab-stop", type=int, default=None, help="Columns per tab stop")
@click.option(
    "--quit-times",
    type=int,
    default=None,
    help="Ctrl-Q presses needed to quit with unsaved changes",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False),
    default=None,
    envvar="PI_TTE_LOG",
    help="Write a debug log to this file",
)
@click.option("--verbose", is_flag=True, help="Log at DEBUG level")
@click.version_option(TTE_VERSION, prog_name="tte")
def main(filename, tab_stop, quit_times, log_file, verbose):
    """A tiny full-screen text editor."""
    setup_logging(log_file, verbose)
    config = load_config().with_overrides(
        tab_stop=tab_stop, quit_times=quit_times
    )
    logger.info("starting tte %s (pid %d)", TTE_VERSION, os.getpid())

    try:
        with ProcessTerminal() as terminal:
            editor = Editor(terminal, config)
            if filename:
                editor.open(filename)
            editor.run()
    except (TerminalError, OSError) as exc:
        logger.error("fatal: %s", exc)
        click.echo(f"tte: {exc}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
