"""
Repository steps — move any old checkout aside, clone, verify.

These are the only fatal steps of an install; each one owns an exit
code so scripts driving levboot can tell them apart.
"""

from __future__ import annotations

from levboot.core.engine.runner import Step, StepContext
from levboot.core.models.action import Action, Receipt
from levboot.core.models.settings import InstallerConfig
from levboot.core.models.step import Phase
from levboot.core.services.backup import relocate_directory

EXIT_BACKUP_FAILED = 1
EXIT_CLONE_FAILED = 2
EXIT_DIR_MISSING = 3


def back_up_existing(ctx: StepContext) -> Receipt:
    target = ctx.config.install_path()
    if not target.exists():
        return Receipt.skip("fs", "fs:backup", f"no existing {target}")
    try:
        backup = relocate_directory(target)
    except OSError as e:
        return Receipt.failure("fs", "fs:backup", f"Failed to back up existing folder: {e}")
    ctx.info(f"Existing {target} found, backed up to {backup}")
    return Receipt.success("fs", "fs:backup", output=str(backup), metadata={"backup": str(backup)})


def clone_repository(ctx: StepContext) -> Receipt:
    ctx.info(f"Cloning {ctx.config.app_name} repository...")
    return ctx.run(
        Action(
            id="git:clone",
            adapter="git",
            params={
                "operation": "clone",
                "url": ctx.config.repository,
                "dest": str(ctx.config.install_path()),
            },
        )
    )


def verify_checkout(ctx: StepContext) -> Receipt:
    target = ctx.config.install_path()
    if target.is_dir():
        return Receipt.success("fs", "fs:verify", output=str(target))
    return Receipt.failure("fs", "fs:verify", f"Cannot cd to {target}")


def repository_steps(config: InstallerConfig) -> list[Step]:
    target = config.install_path()
    return [
        Step(
            name="backup-existing",
            phase=Phase.CLONING,
            action=back_up_existing,
            exit_code=EXIT_BACKUP_FAILED,
            description="Backup of existing install directory",
            remediation=f"Move or remove {target} by hand, then run levboot again.",
        ),
        Step(
            name="clone",
            phase=Phase.CLONING,
            action=clone_repository,
            exit_code=EXIT_CLONE_FAILED,
            description="Git clone",
            remediation="Check network or git settings.",
        ),
        Step(
            name="verify-checkout",
            phase=Phase.CLONING,
            action=verify_checkout,
            exit_code=EXIT_DIR_MISSING,
            description="Install directory check",
            remediation=f"The clone did not produce {target}.",
        ),
    ]
