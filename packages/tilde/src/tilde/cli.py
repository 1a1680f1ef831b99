"""CLI entry point for tilde. Uses Click for argument parsing."""

from __future__ import annotations

import logging
import sys

import click

from tilde import __version__
from tilde.config import LOG_LEVELS, Config

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(config: Config) -> None:
    """Send log records to ``config.log_file``; without one, stay silent."""
    if not config.log_file:
        return
    logging.basicConfig(
        filename=config.log_file,
        level=getattr(logging, config.log_level.upper()),
        format=LOG_FORMAT,
    )


@click.command()
@click.version_option(__version__, prog_name="tilde")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write log records to this file (env: TILDE_LOG_FILE)",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS),
    default=None,
    help="Minimum level written to the log file (env: TILDE_LOG_LEVEL)",
)
def main(log_file, log_level):
    """Full-screen terminal text editor. Press Ctrl-Q to quit."""
    config = Config.from_env()
    if log_file is not None:
        config.log_file = log_file
    if log_level is not None:
        config.log_level = log_level

    setup_logging(config)

    from tilde.app import run_editor

    sys.exit(run_editor(config))


if __name__ == "__main__":
    main()
