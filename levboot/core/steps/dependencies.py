"""
Dependency steps — prepare the checkout, then yarn (or npm) install.
"""

from __future__ import annotations

import shutil

from levboot.core.engine.runner import Step, StepContext, run_with_fallback
from levboot.core.models.action import Action, Receipt
from levboot.core.models.step import FailurePolicy, Phase
from levboot.core.services.package_json import sanitize_package_json


def sanitize_manifest(ctx: StepContext) -> Receipt:
    names = ctx.config.stripped_dependencies()
    if not names:
        return Receipt.skip("fs", "fs:package_json", "native profile keeps every dependency")

    manifest = ctx.config.install_path() / "package.json"
    if not manifest.is_file():
        ctx.warn("No package.json found in repo root; skipping removal step.")
        return Receipt.skip("fs", "fs:package_json", "no package.json")

    ctx.info(f"Removing {', '.join(names)} from package.json (if present)...")
    try:
        removed = sanitize_package_json(manifest, names)
    except (OSError, ValueError) as e:
        return Receipt.failure("fs", "fs:package_json", str(e))
    return Receipt.success("fs", "fs:package_json", output=", ".join(removed) or "nothing to remove")


def remove_node_modules(ctx: StepContext) -> Receipt:
    modules = ctx.config.install_path() / "node_modules"
    if not modules.is_dir():
        return Receipt.skip("fs", "fs:node_modules", "")
    ctx.info("Removing existing node_modules to ensure a clean install...")
    try:
        shutil.rmtree(modules)
    except OSError as e:
        return Receipt.failure("fs", "fs:node_modules", str(e))
    return Receipt.success("fs", "fs:node_modules")


def remove_pm2_docker(ctx: StepContext) -> Receipt:
    path = ctx.config.pm2_docker_path()
    if not path.is_file():
        return Receipt.skip("fs", "fs:pm2_docker", "")
    ctx.warn("Found existing pm2-docker; removing it to avoid install conflicts.")
    try:
        path.unlink()
    except OSError as e:
        return Receipt.failure("fs", "fs:pm2_docker", str(e))
    return Receipt.success("fs", "fs:pm2_docker", output=str(path))


def _install_action(ctx: StepContext, installer: str) -> Action:
    return Action(
        id=f"node:install:{installer}",
        adapter="node",
        cwd=str(ctx.config.install_path()),
        params={
            "operation": "install",
            "installer": installer,
            "ignore_scripts": ctx.config.ignore_scripts,
        },
    )


def install_dependencies(ctx: StepContext) -> Receipt:
    if ctx.config.ignore_scripts:
        ctx.info("Installing node dependencies (lifecycle scripts skipped)...")
    else:
        ctx.info("Installing node dependencies...")

    has_yarn = ctx.prober.refresh("yarn")
    has_npm = ctx.prober.refresh("npm")

    if has_yarn:
        return run_with_fallback(ctx, _install_action(ctx, "yarn"), _install_action(ctx, "npm"))
    if has_npm:
        ctx.warn("yarn not found; running npm install instead.")
        return ctx.run(_install_action(ctx, "npm"))
    return Receipt.failure("node", "node:install", "neither yarn nor npm is available")


def dependency_steps() -> list[Step]:
    return [
        Step(
            name="sanitize-package-json",
            phase=Phase.CONFIGURING_DEPS,
            action=sanitize_manifest,
            policy=FailurePolicy.WARN,
            description="package.json edit",
        ),
        Step(
            name="remove-node-modules",
            phase=Phase.CONFIGURING_DEPS,
            action=remove_node_modules,
            policy=FailurePolicy.WARN,
            description="node_modules cleanup",
        ),
        Step(
            name="remove-pm2-docker",
            phase=Phase.CONFIGURING_DEPS,
            action=remove_pm2_docker,
            policy=FailurePolicy.WARN,
            description="pm2-docker cleanup",
            remediation="Remove it by hand before installing pm2.",
        ),
        Step(
            name="install-dependencies",
            phase=Phase.CONFIGURING_DEPS,
            action=install_dependencies,
            policy=FailurePolicy.WARN,
            description="Node dependency install",
            remediation="Inspect the errors above and add missing system libraries if needed.",
        ),
    ]
