"""
Shell command adapter — run one external program and capture the result.

This is the single place where installer commands hit ``subprocess.run``.
The package, git and node adapters build argv lists and delegate here.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import time

from levboot.adapters.base import Adapter, ExecutionContext
from levboot.core.models.action import Receipt

logger = logging.getLogger(__name__)

# Keep the tail of noisy installer output only
_OUTPUT_TAIL = 4000


def run_argv(
    adapter: str,
    action_id: str,
    argv: list[str],
    *,
    cwd: str | None = None,
    env_overrides: dict[str, str] | None = None,
    timeout: float | None = None,
) -> Receipt:
    """Run ``argv`` and turn the outcome into a Receipt.

    Missing executables, non-zero exits, and timeouts all become
    failed receipts. Nothing is raised.
    """
    env = os.environ.copy()
    if env_overrides:
        env.update(env_overrides)

    command = " ".join(argv)
    logger.debug("Executing: %s (cwd=%s)", command, cwd)
    start = time.monotonic()

    try:
        result = subprocess.run(
            argv,
            cwd=cwd,
            env=env,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError:
        return Receipt.failure(
            adapter=adapter,
            action_id=action_id,
            error=f"Command not found: {argv[0]}",
            metadata={"command": command},
        )
    except subprocess.TimeoutExpired:
        return Receipt.failure(
            adapter=adapter,
            action_id=action_id,
            error=f"Command timed out after {timeout}s",
            metadata={"command": command, "timeout": timeout},
        )
    except Exception as e:
        logger.exception("Subprocess error: %s", command)
        return Receipt.failure(
            adapter=adapter,
            action_id=action_id,
            error=f"Command execution error: {e}",
            metadata={"command": command},
        )

    elapsed_ms = int((time.monotonic() - start) * 1000)
    stdout = (result.stdout or "").strip()[-_OUTPUT_TAIL:]
    stderr = (result.stderr or "").strip()[-_OUTPUT_TAIL:]

    if result.returncode == 0:
        return Receipt.success(
            adapter=adapter,
            action_id=action_id,
            output=stdout,
            duration_ms=elapsed_ms,
            return_code=0,
            metadata={"command": command, "stderr": stderr},
        )
    return Receipt.failure(
        adapter=adapter,
        action_id=action_id,
        error=stderr or f"Command exited with code {result.returncode}",
        output=stdout,
        duration_ms=elapsed_ms,
        return_code=result.returncode,
        metadata={"command": command},
    )


class ShellCommandAdapter(Adapter):
    """Run an arbitrary argv.

    Action params:
        argv (list[str]): Program and arguments.
        timeout (float): Seconds before giving up (default: wait forever).
    """

    @property
    def name(self) -> str:
        return "shell"

    def is_available(self) -> bool:
        return shutil.which("sh") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        argv = context.params.get("argv")
        if not argv or not isinstance(argv, list):
            return False, "Missing required param: 'argv' (non-empty list)"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        return run_argv(
            self.name,
            context.action.id,
            [str(a) for a in context.params["argv"]],
            cwd=context.working_dir,
            env_overrides=context.env,
            timeout=context.params.get("timeout"),
        )
