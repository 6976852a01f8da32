"""
Interactive prompts.

Steps ask the user through a Prompter so tests can script answers.
ClickPrompter is the real terminal implementation.
"""

from __future__ import annotations

from typing import Protocol

import click

from levboot.core.engine.runner import InstallAborted


class Prompter(Protocol):
    def ask(self, message: str, default: str = "") -> str: ...

    def confirm(self, message: str, default: bool = False) -> bool: ...


class ClickPrompter:
    """Prompts on the terminal. Ctrl-C or EOF aborts the install."""

    def ask(self, message: str, default: str = "") -> str:
        try:
            return click.prompt(message, default=default, show_default=False, type=str)
        except click.Abort as e:
            raise InstallAborted(message) from e

    def confirm(self, message: str, default: bool = False) -> bool:
        try:
            return click.confirm(message, default=default)
        except click.Abort as e:
            raise InstallAborted(message) from e


class AnswerAllPrompter:
    """Non-interactive prompter: defaults for values, a fixed yes/no."""

    def __init__(self, assume_yes: bool = False):
        self.assume_yes = assume_yes

    def ask(self, message: str, default: str = "") -> str:
        return default

    def confirm(self, message: str, default: bool = False) -> bool:
        return self.assume_yes
