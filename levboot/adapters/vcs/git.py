"""
Git adapter — fetch the application repository.
"""

from __future__ import annotations

import shutil

from levboot.adapters.base import Adapter, ExecutionContext
from levboot.adapters.shell.command import run_argv
from levboot.core.models.action import Receipt


class GitAdapter(Adapter):
    """Git operations through the git CLI.

    Action params:
        operation (str): Only 'clone'.
        url (str): Repository URL.
        dest (str): Target directory; must not exist.
        timeout (float): Seconds before giving up (default: none).
    """

    @property
    def name(self) -> str:
        return "git"

    def is_available(self) -> bool:
        return shutil.which("git") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        params = context.params
        if params.get("operation") != "clone":
            return False, f"Unknown operation '{params.get('operation', '')}'. Valid: clone"
        for key in ("url", "dest"):
            if not params.get(key):
                return False, f"Missing required param: '{key}'"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        params = context.params
        return run_argv(
            self.name,
            context.action.id,
            ["git", "clone", params["url"], params["dest"]],
            cwd=context.working_dir,
            env_overrides=context.env,
            timeout=params.get("timeout"),
        )
