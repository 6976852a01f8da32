"""
Install plan — the ordered steps of a Levanter install.

    from levboot.core.steps import build_plan
"""

from __future__ import annotations

from levboot.core.engine.runner import Step
from levboot.core.models.settings import InstallerConfig
from levboot.core.steps.autostart import autostart_steps
from levboot.core.steps.dependencies import dependency_steps
from levboot.core.steps.device import device_steps, release_wake_lock
from levboot.core.steps.packages import package_steps
from levboot.core.steps.repository import repository_steps
from levboot.core.steps.settings import settings_steps


def build_plan(config: InstallerConfig) -> list[Step]:
    return [
        *device_steps(),
        *package_steps(config),
        *repository_steps(config),
        *dependency_steps(),
        *settings_steps(),
        *autostart_steps(),
    ]


__all__ = ["build_plan", "release_wake_lock"]
