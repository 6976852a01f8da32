"""
Step runner — the one driver loop of the installer.

A run is an ordered list of Steps. Each step wraps one or more adapter
calls and declares what a failure means:

    fatal → halt the run, report, exit with the step's exit code
    warn  → print a warning, remember it, carry on

Flow:
    validate plan → for each step: check → action → receipt → policy

There is no rollback. A fatal failure leaves the device exactly as the
last completed step left it.
"""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from levboot.adapters.registry import AdapterRegistry
from levboot.core.models.action import Action, Receipt
from levboot.core.models.settings import InstallerConfig
from levboot.core.models.step import FailurePolicy, Phase, StepResult
from levboot.core.observability.console import Reporter

if TYPE_CHECKING:
    from levboot.core.services.prober import EnvironmentProber
    from levboot.core.services.prompts import Prompter

logger = logging.getLogger(__name__)


# ── Errors ──────────────────────────────────────────────────────


class FatalStepError(Exception):
    """A fatal step failed; the run stops here."""

    def __init__(
        self,
        step: str,
        message: str,
        exit_code: int = 1,
        diagnostic: str = "",
        remediation: str = "",
    ):
        super().__init__(message)
        self.step = step
        self.message = message
        self.exit_code = exit_code
        self.diagnostic = diagnostic
        self.remediation = remediation


class PlanError(Exception):
    """A plan is malformed (phase order, duplicate names)."""


class InstallAborted(Exception):
    """The user interrupted the install at a prompt."""


# ── Plan ────────────────────────────────────────────────────────


@dataclass
class Step:
    """One provisioning step.

    ``action`` returns a Receipt. ``check``, when given, returns True
    if the step's goal is already met, in which case the action is
    not run at all.
    """

    name: str
    phase: Phase
    action: Callable[[StepContext], Receipt]
    policy: FailurePolicy = FailurePolicy.FATAL
    check: Callable[[StepContext], bool] | None = None
    exit_code: int = 1
    remediation: str = ""
    description: str = ""

    @property
    def label(self) -> str:
        return self.description or self.name


def validate_plan(steps: list[Step]) -> None:
    """Reject plans that would re-enter an earlier phase.

    Raises:
        PlanError: On backwards phases, terminal phases, or duplicate names.
    """
    seen: set[str] = set()
    previous: Step | None = None
    for step in steps:
        if step.name in seen:
            raise PlanError(f"Duplicate step name: {step.name}")
        seen.add(step.name)

        if step.phase in (Phase.DONE, Phase.FATAL):
            raise PlanError(f"Step '{step.name}' cannot belong to terminal phase {step.phase.value}")

        if previous is not None and step.phase.rank < previous.phase.rank:
            raise PlanError(
                f"Step '{step.name}' ({step.phase.value}) comes after "
                f"'{previous.name}' ({previous.phase.value})"
            )
        previous = step


# ── Report ──────────────────────────────────────────────────────


def generate_run_id() -> str:
    now = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    return f"run-{now}-{uuid.uuid4().hex[:6]}"


@dataclass
class RunReport:
    """Everything that happened during one run."""

    run_id: str = field(default_factory=generate_run_id)
    started_at: str = field(default_factory=lambda: datetime.now(UTC).isoformat())
    finished_at: str = ""
    phase: Phase = Phase.INIT
    results: list[StepResult] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    fatal: FatalStepError | None = None

    def _count(self, status: str) -> int:
        return sum(1 for r in self.results if r.status == status)

    @property
    def ok_count(self) -> int:
        return self._count("ok")

    @property
    def skipped_count(self) -> int:
        return self._count("skipped")

    @property
    def warned_count(self) -> int:
        return self._count("warned")

    @property
    def duration_ms(self) -> int:
        return sum(r.duration_ms for r in self.results)

    @property
    def status(self) -> str:
        if self.fatal is not None:
            return "failed"
        if self.warnings:
            return "warnings"
        return "ok"

    @property
    def exit_code(self) -> int:
        return self.fatal.exit_code if self.fatal is not None else 0

    def result_for(self, step: str) -> StepResult | None:
        for result in self.results:
            if result.step == step:
                return result
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "phase": self.phase.value,
            "status": self.status,
            "exit_code": self.exit_code,
            "warnings": list(self.warnings),
            "fatal": (
                {
                    "step": self.fatal.step,
                    "message": self.fatal.message,
                    "diagnostic": self.fatal.diagnostic,
                    "remediation": self.fatal.remediation,
                }
                if self.fatal
                else None
            ),
            "steps": [r.model_dump(mode="json") for r in self.results],
        }


# ── Context ─────────────────────────────────────────────────────


@dataclass
class StepContext:
    """What every step action gets: config, tools, and the user."""

    config: InstallerConfig
    registry: AdapterRegistry
    prober: EnvironmentProber
    prompter: Prompter
    reporter: Reporter
    report: RunReport = field(default_factory=RunReport)

    def run(self, action: Action, env: dict[str, str] | None = None) -> Receipt:
        return self.registry.execute_action(action, env=env)

    def info(self, message: str) -> None:
        self.reporter.info(message)

    def warn(self, message: str) -> None:
        """Print a warning and keep it for the final summary."""
        self.report.warnings.append(message)
        self.reporter.warn(message)


def short_diagnostic(text: str, limit: int = 200) -> str:
    """Last non-empty line of tool output, clipped for one-line messages."""
    lines = [line.strip() for line in text.splitlines() if line.strip()]
    if not lines:
        return "no output"
    last = lines[-1]
    return last if len(last) <= limit else last[: limit - 3] + "..."


def run_with_fallback(
    ctx: StepContext,
    primary: Action,
    fallback: Action,
    env: dict[str, str] | None = None,
) -> Receipt:
    """Try ``primary``; on failure warn and try ``fallback`` once."""
    receipt = ctx.run(primary, env=env)
    if receipt.ok:
        return receipt

    ctx.warn(f"{primary.id} failed ({short_diagnostic(receipt.diagnostic)}); trying {fallback.id}")
    second = ctx.run(fallback, env=env)
    second.metadata["fallback_from"] = primary.id
    if second.failed:
        second.error = f"{primary.id}: {receipt.diagnostic}; {fallback.id}: {second.diagnostic}"
    return second


# ── Driver ──────────────────────────────────────────────────────


def run_step(step: Step, ctx: StepContext) -> StepResult:
    """Run one step and apply its failure policy.

    Raises:
        FatalStepError: If a fatal-policy step fails.
        InstallAborted: If the user aborted at a prompt.
    """
    ctx.report.phase = step.phase
    start = time.monotonic()

    if step.check is not None:
        try:
            satisfied = step.check(ctx)
        except Exception as e:
            logger.debug("Check for %s raised %s; running the step", step.name, e)
            satisfied = False
        if satisfied:
            result = StepResult(
                step=step.name,
                phase=step.phase,
                status="skipped",
                detail="already satisfied",
            )
            ctx.report.results.append(result)
            ctx.info(f"{step.label}: already satisfied")
            logger.info("⊘ %s (already satisfied)", step.name)
            return result

    try:
        receipt = step.action(ctx)
    except (FatalStepError, InstallAborted):
        raise
    except Exception as e:
        logger.exception("Step %s raised", step.name)
        receipt = Receipt.failure(adapter="step", action_id=step.name, error=f"Unexpected error: {e}")

    elapsed_ms = int((time.monotonic() - start) * 1000)

    if receipt.ok or receipt.status == "skipped":
        result = StepResult(
            step=step.name,
            phase=step.phase,
            status=receipt.status,
            detail=receipt.output if receipt.status == "skipped" else "",
            duration_ms=elapsed_ms,
        )
        ctx.report.results.append(result)
        if receipt.status == "skipped" and receipt.output:
            ctx.info(f"{step.label}: {receipt.output}")
        logger.info("%s %s", "✓" if receipt.ok else "⊘", step.name)
        return result

    diagnostic = receipt.diagnostic
    if step.policy == FailurePolicy.WARN:
        result = StepResult(
            step=step.name,
            phase=step.phase,
            status="warned",
            detail=diagnostic,
            duration_ms=elapsed_ms,
        )
        ctx.report.results.append(result)
        message = f"{step.label} failed: {short_diagnostic(diagnostic)}."
        if step.remediation:
            message = f"{message} {step.remediation}"
        ctx.warn(message)
        logger.info("✗ %s (warn): %s", step.name, diagnostic)
        return result

    ctx.report.results.append(
        StepResult(
            step=step.name,
            phase=step.phase,
            status="failed",
            detail=diagnostic,
            duration_ms=elapsed_ms,
        )
    )
    logger.info("✗ %s (fatal): %s", step.name, diagnostic)
    raise FatalStepError(
        step=step.name,
        message=f"{step.label} failed",
        exit_code=step.exit_code,
        diagnostic=diagnostic,
        remediation=step.remediation,
    )


def run_steps(steps: list[Step], ctx: StepContext) -> RunReport:
    """Run a whole plan. Fatal errors end up in the report, not raised.

    Raises:
        PlanError: Before any step runs, if the plan is malformed.
        InstallAborted: If the user aborted at a prompt.
    """
    validate_plan(steps)
    report = ctx.report

    try:
        for step in steps:
            run_step(step, ctx)
    except FatalStepError as e:
        report.fatal = e
        report.phase = Phase.FATAL
        ctx.reporter.error(f"{e.message}: {e.diagnostic}" if e.diagnostic else e.message)
        if e.remediation:
            ctx.reporter.error(e.remediation)
    else:
        report.phase = Phase.DONE
    finally:
        report.finished_at = datetime.now(UTC).isoformat()

    return report
