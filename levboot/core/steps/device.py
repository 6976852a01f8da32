"""
Device steps — storage permission, wake lock, and the capability probe.

All of these are conveniences: a missing Termux helper just means the
step is skipped.
"""

from __future__ import annotations

import logging

from levboot.core.engine.runner import Step, StepContext
from levboot.core.models.action import Action, Receipt
from levboot.core.models.step import FailurePolicy, Phase

logger = logging.getLogger(__name__)


def _termux(ctx: StepContext, tool: str) -> Receipt:
    return ctx.run(Action(id=f"termux:{tool}", adapter="shell", params={"argv": [tool]}))


def request_storage(ctx: StepContext) -> Receipt:
    if not ctx.prober.probe("termux-setup-storage"):
        return Receipt.skip("shell", "termux:termux-setup-storage", "termux-setup-storage not available")
    if not ctx.prompter.confirm("Grant Termux storage permission now?", default=False):
        return Receipt.skip("shell", "termux:termux-setup-storage", "storage permission not requested")
    return _termux(ctx, "termux-setup-storage")


def acquire_wake_lock(ctx: StepContext) -> Receipt:
    if not ctx.prober.probe("termux-wake-lock"):
        return Receipt.skip("shell", "termux:termux-wake-lock", "termux-wake-lock not available")
    return _termux(ctx, "termux-wake-lock")


def release_wake_lock(ctx: StepContext) -> None:
    """Best-effort unlock at the very end of a run, whatever happened."""
    if not ctx.prober.probe("termux-wake-unlock"):
        return
    receipt = _termux(ctx, "termux-wake-unlock")
    if receipt.failed:
        logger.debug("termux-wake-unlock failed: %s", receipt.diagnostic)


def probe_environment(ctx: StepContext) -> Receipt:
    flags = ctx.prober.probe_all()
    present = [f.tool for f in flags if f.present]
    logger.info("Detected tools: %s", ", ".join(present) or "none")

    manager = ctx.prober.package_manager()
    if manager is None:
        return Receipt.failure("probe", "probe:environment", "neither pkg nor apt-get found on PATH")
    return Receipt.success(
        "probe",
        "probe:environment",
        output=f"package manager: {manager}",
        metadata={"present": present},
    )


def device_steps() -> list[Step]:
    return [
        Step(
            name="storage-permission",
            phase=Phase.INIT,
            action=request_storage,
            policy=FailurePolicy.WARN,
            description="termux-setup-storage",
            remediation="Storage permission was not granted; you can run termux-setup-storage later.",
        ),
        Step(
            name="wake-lock",
            phase=Phase.INIT,
            action=acquire_wake_lock,
            policy=FailurePolicy.WARN,
            description="termux-wake-lock",
            remediation="The device may sleep during the install.",
        ),
        Step(
            name="probe-environment",
            phase=Phase.PROBING,
            action=probe_environment,
            policy=FailurePolicy.WARN,
            description="Environment probe",
            remediation="System packages cannot be installed automatically.",
        ),
    ]
