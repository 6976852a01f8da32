"""
System package adapter — Termux ``pkg`` or Debian ``apt-get``.

The installer never resolves packages itself; it asks the OS package
manager three questions: refresh the index, is X installed, install X.
"""

from __future__ import annotations

import logging
import shutil

from levboot.adapters.base import Adapter, ExecutionContext
from levboot.adapters.shell.command import run_argv
from levboot.core.models.action import Receipt

logger = logging.getLogger(__name__)

MANAGERS = ("pkg", "apt-get")

_OPERATIONS = {"update", "is_installed", "install"}


def _commands(manager: str, operation: str, package: str = "") -> list[str]:
    if manager == "pkg":
        return {
            "update": ["pkg", "update", "-y"],
            "is_installed": ["pkg", "list-installed", package],
            "install": ["pkg", "install", "-y", package],
        }[operation]
    return {
        "update": ["apt-get", "update", "-y"],
        "is_installed": ["dpkg", "-s", package],
        "install": ["apt-get", "install", "-y", package],
    }[operation]


class SystemPackageAdapter(Adapter):
    """OS package manager operations.

    Action params:
        operation (str): 'update', 'is_installed' or 'install'.
        manager (str): 'pkg' or 'apt-get'.
        package (str): Package name (for 'is_installed' and 'install').
    """

    @property
    def name(self) -> str:
        return "packages"

    def is_available(self) -> bool:
        return any(shutil.which(m) for m in MANAGERS)

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        params = context.params
        operation = params.get("operation", "")
        if operation not in _OPERATIONS:
            return False, f"Unknown operation '{operation}'. Valid: {', '.join(sorted(_OPERATIONS))}"
        if params.get("manager") not in MANAGERS:
            return False, f"Unknown package manager: {params.get('manager')!r}"
        if operation != "update" and not params.get("package"):
            return False, f"Missing required param: 'package' for {operation}"
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        params = context.params
        operation = params["operation"]
        manager = params["manager"]
        package = params.get("package", "")

        receipt = run_argv(
            self.name,
            context.action.id,
            _commands(manager, operation, package),
            cwd=context.working_dir,
            env_overrides=context.env,
            timeout=params.get("timeout"),
        )

        # `pkg list-installed` exits 0 even for unknown packages; the
        # listing itself is the answer ("name/stable,now 1.0 [installed]").
        if operation == "is_installed" and manager == "pkg" and receipt.ok:
            listed = any(
                line.startswith(f"{package}/") for line in receipt.output.splitlines()
            )
            if not listed:
                return Receipt.failure(
                    adapter=self.name,
                    action_id=context.action.id,
                    error=f"{package} is not installed",
                    return_code=1,
                    metadata=receipt.metadata,
                )
        return receipt
