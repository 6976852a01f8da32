"""
Node.js adapter — yarn/npm dependency installs and global npm packages.
"""

from __future__ import annotations

import logging
import shutil

from levboot.adapters.base import Adapter, ExecutionContext
from levboot.adapters.shell.command import run_argv
from levboot.core.models.action import Receipt

logger = logging.getLogger(__name__)

INSTALLERS = ("yarn", "npm")

# Quiet npm's progress chatter during installs
NODE_ENV_OVERRIDES = {"npm_config_loglevel": "warn"}


def install_command(installer: str, ignore_scripts: bool = True) -> list[str]:
    """Project dependency install command for ``installer``.

    yarn is throttled to one network connection; flaky mobile links
    drop parallel fetches.
    """
    if installer == "yarn":
        argv = ["yarn", "install"]
        if ignore_scripts:
            argv.append("--ignore-scripts")
        argv += ["--network-concurrency", "1"]
        return argv
    argv = ["npm", "install", "--no-audit", "--no-fund"]
    if ignore_scripts:
        argv.append("--ignore-scripts")
    return argv


def global_install_command(package: str) -> list[str]:
    return ["npm", "install", "-g", package, "--no-audit", "--no-fund"]


class NodeAdapter(Adapter):
    """Node.js package manager operations.

    Action params:
        operation (str): 'install' (project deps) or 'global_install'.
        installer (str): 'yarn' or 'npm' (for 'install').
        ignore_scripts (bool): Skip lifecycle scripts (default: True).
        package (str): npm package name (for 'global_install').
    """

    @property
    def name(self) -> str:
        return "node"

    def is_available(self) -> bool:
        return shutil.which("npm") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        params = context.params
        operation = params.get("operation", "")
        if operation == "install":
            if params.get("installer") not in INSTALLERS:
                return False, f"Unknown installer: {params.get('installer')!r}"
            if not context.working_dir:
                return False, "Project install needs a working directory"
            return True, ""
        if operation == "global_install":
            if not params.get("package"):
                return False, "Missing required param: 'package'"
            return True, ""
        return False, f"Unknown operation '{operation}'. Valid: global_install, install"

    def execute(self, context: ExecutionContext) -> Receipt:
        params = context.params
        if params["operation"] == "install":
            argv = install_command(params["installer"], params.get("ignore_scripts", True))
        else:
            argv = global_install_command(params["package"])

        env = {**NODE_ENV_OVERRIDES, **context.env}
        logger.debug("node %s via %s", params["operation"], argv[0])
        return run_argv(
            self.name,
            context.action.id,
            argv,
            cwd=context.working_dir,
            env_overrides=env,
            timeout=params.get("timeout"),
        )
