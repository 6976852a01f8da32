"""
System package steps — index refresh, one step per package, npm/yarn.

Each package is its own step with an "already installed" check, so a
re-run over a provisioned device only queries, never reinstalls.
"""

from __future__ import annotations

from levboot.core.engine.runner import Step, StepContext
from levboot.core.models.action import Action, Receipt
from levboot.core.models.settings import InstallerConfig
from levboot.core.models.step import FailurePolicy, Phase

_NO_MANAGER = "no package manager (pkg or apt-get) available"


def _package_action(manager: str, operation: str, package: str = "") -> Action:
    params = {"operation": operation, "manager": manager}
    if package:
        params["package"] = package
    action_id = f"{manager}:{operation}" + (f":{package}" if package else "")
    return Action(id=action_id, adapter="packages", params=params)


def update_index(ctx: StepContext) -> Receipt:
    manager = ctx.prober.package_manager()
    if manager is None:
        return Receipt.failure("packages", "packages:update", _NO_MANAGER)
    ctx.info("Updating package lists...")
    return ctx.run(_package_action(manager, "update"))


def _installed_check(package: str):
    def check(ctx: StepContext) -> bool:
        manager = ctx.prober.package_manager()
        if manager is None:
            return False
        return ctx.run(_package_action(manager, "is_installed", package)).ok

    return check


def _install(package: str):
    def action(ctx: StepContext) -> Receipt:
        manager = ctx.prober.package_manager()
        if manager is None:
            return Receipt.failure("packages", f"packages:install:{package}", _NO_MANAGER)
        ctx.info(f"Installing {package}...")
        return ctx.run(_package_action(manager, "install", package))

    return action


def ensure_npm(ctx: StepContext) -> Receipt:
    # nodejs-lts may have just been installed; PATH lookups are fresh
    ctx.prober.refresh("node")
    if ctx.prober.refresh("npm"):
        return Receipt.success("probe", "probe:npm", output="npm found")
    return Receipt.failure("probe", "probe:npm", "npm not found")


def yarn_present(ctx: StepContext) -> bool:
    return ctx.prober.refresh("yarn")


def install_yarn(ctx: StepContext) -> Receipt:
    if not ctx.prober.probe("npm"):
        return Receipt.failure("node", "node:global_install:yarn", "npm missing; cannot install yarn automatically")
    ctx.info("Installing yarn globally via npm...")
    receipt = ctx.run(
        Action(
            id="node:global_install:yarn",
            adapter="node",
            params={"operation": "global_install", "package": "yarn"},
        )
    )
    if receipt.ok:
        ctx.prober.refresh("yarn")
    return receipt


def package_steps(config: InstallerConfig) -> list[Step]:
    steps = [
        Step(
            name="update-index",
            phase=Phase.INSTALLING,
            action=update_index,
            policy=FailurePolicy.WARN,
            description="Package index update",
            remediation="Continuing with the current package lists.",
        )
    ]
    for package in config.effective_packages():
        steps.append(
            Step(
                name=f"package:{package}",
                phase=Phase.INSTALLING,
                action=_install(package),
                check=_installed_check(package),
                policy=FailurePolicy.WARN,
                description=f"Package {package}",
                remediation=f"You may need to install {package} manually later.",
            )
        )
    steps += [
        Step(
            name="npm",
            phase=Phase.INSTALLING,
            action=ensure_npm,
            policy=FailurePolicy.WARN,
            description="npm check",
            remediation="nodejs-lts should provide npm; install nodejs or nodejs-lts if missing.",
        ),
        Step(
            name="yarn",
            phase=Phase.INSTALLING,
            action=install_yarn,
            check=yarn_present,
            policy=FailurePolicy.WARN,
            description="Global yarn install",
            remediation="You can 'pkg install yarn' later.",
        ),
    ]
    return steps
