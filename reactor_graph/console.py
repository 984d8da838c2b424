"""Terminal output helpers for the command-line interface.

The graph builder itself never prints. These helpers are only used by the
CLI to report progress and failures.
"""

from __future__ import annotations

import logging
import sys
from typing import NoReturn

import click


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate phases of a command's output, e.g. discovery vs. order.
    """
    click.echo(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def fatal(msg: str, exit_code: int = 1) -> NoReturn:
    """Print an error message to stderr and exit with the given code.

    Use for unrecoverable errors that should halt the command.
    """
    click.echo(f"Error: {msg}", err=True)
    sys.exit(exit_code)


def setup_logging(verbose: bool) -> None:
    """Send library log records to stderr; debug records only when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
