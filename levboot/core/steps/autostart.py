"""
Autostart steps — guard script, shell hook, optional pm2.
"""

from __future__ import annotations

from levboot.core.engine.runner import Step, StepContext
from levboot.core.models.action import Action, Receipt
from levboot.core.models.step import FailurePolicy, Phase
from levboot.core.services.autostart import (
    hook_installed,
    install_hook,
    render_guard_script,
    write_guard_script,
)


def create_guard_script(ctx: StepContext) -> Receipt:
    config = ctx.config
    script = config.guard_script_path()
    ctx.info(f"Creating autorun helper at {script}")
    try:
        write_guard_script(script, render_guard_script(config.install_path(), config.autostart))
    except OSError as e:
        return Receipt.failure("fs", "fs:guard_script", str(e))
    return Receipt.success("fs", "fs:guard_script", output=str(script))


def hook_present(ctx: StepContext) -> bool:
    autostart = ctx.config.autostart
    return hook_installed(autostart.startup_path(), autostart.marker)


def add_startup_hook(ctx: StepContext) -> Receipt:
    autostart = ctx.config.autostart
    startup = autostart.startup_path()
    ctx.info(f"Adding autorun launcher to {startup}")
    try:
        install_hook(startup, autostart.marker, ctx.config.guard_script_path())
    except OSError as e:
        return Receipt.failure("fs", "fs:startup_hook", str(e))
    return Receipt.success("fs", "fs:startup_hook", output=str(startup))


def install_pm2(ctx: StepContext) -> Receipt:
    if not ctx.prompter.confirm(
        "Do you want to install pm2 globally to manage the bot in background?",
        default=False,
    ):
        return Receipt.skip("node", "node:global_install:pm2", "")
    if not ctx.prober.refresh("npm"):
        return Receipt.failure("node", "node:global_install:pm2", "npm not available; cannot install pm2")

    ctx.info("Installing pm2 globally...")
    receipt = ctx.run(
        Action(
            id="node:global_install:pm2",
            adapter="node",
            params={"operation": "global_install", "package": "pm2"},
        )
    )
    if receipt.ok:
        ctx.prober.refresh("pm2")
        name = ctx.config.autostart.pm2_name
        ctx.info(f"With pm2: pm2 start npm --name {name} -- start ; pm2 save")
    return receipt


def autostart_steps() -> list[Step]:
    return [
        Step(
            name="guard-script",
            phase=Phase.REGISTERING_AUTOSTART,
            action=create_guard_script,
            policy=FailurePolicy.WARN,
            description="Autorun helper",
        ),
        Step(
            name="startup-hook",
            phase=Phase.REGISTERING_AUTOSTART,
            action=add_startup_hook,
            check=hook_present,
            policy=FailurePolicy.WARN,
            description="Autorun launcher",
        ),
        Step(
            name="pm2",
            phase=Phase.REGISTERING_AUTOSTART,
            action=install_pm2,
            policy=FailurePolicy.WARN,
            description="pm2 install",
            remediation="You can still start the bot manually with 'npm start'.",
        ),
    ]
