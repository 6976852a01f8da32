"""
Console reporter — the [INFO] / [WARN] / [ERROR] lines of an install.

Steps talk to the user through a Reporter, never through print() or
logging, so tests can swap in a recorder and the CLI can mute output.
"""

from __future__ import annotations

import logging
from typing import Protocol

import click

logger = logging.getLogger(__name__)


class Reporter(Protocol):
    def info(self, message: str) -> None: ...

    def warn(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def echo(self, message: str = "") -> None: ...


class ConsoleReporter:
    """Coloured progress lines: info on stdout, warnings and errors on stderr.

    Every line is mirrored into logging at the matching level so a
    LEVBOOT_LOG_FILE captures the whole install transcript.
    """

    def __init__(self, quiet: bool = False):
        self.quiet = quiet

    def info(self, message: str) -> None:
        logger.info(message)
        if not self.quiet:
            click.secho("[INFO] ", fg="green", bold=True, nl=False)
            click.echo(message)

    def warn(self, message: str) -> None:
        logger.warning(message)
        click.secho("[WARN] ", fg="yellow", bold=True, nl=False, err=True)
        click.echo(message, err=True)

    def error(self, message: str) -> None:
        logger.error(message)
        click.secho("[ERROR] ", fg="red", bold=True, nl=False, err=True)
        click.echo(message, err=True)

    def echo(self, message: str = "") -> None:
        if not self.quiet:
            click.echo(message)
