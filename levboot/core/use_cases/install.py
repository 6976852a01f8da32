"""
Install use case — one full interactive Levanter install.

Wires config, adapters, prober and prompter into a StepContext, runs
the plan, releases the wake lock, prints the summary and "Next steps",
and appends the run to the ledger. Whatever happens, the user always
gets the "Next steps" block.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from levboot.adapters import default_registry
from levboot.adapters.registry import AdapterRegistry
from levboot.core.engine.runner import InstallAborted, RunReport, StepContext, run_steps
from levboot.core.models.settings import InstallerConfig
from levboot.core.observability.console import ConsoleReporter, Reporter
from levboot.core.persistence.audit import AuditWriter, RunRecord
from levboot.core.services.prober import EnvironmentProber
from levboot.core.services.prompts import ClickPrompter, Prompter
from levboot.core.steps import build_plan, release_wake_lock

logger = logging.getLogger(__name__)

EXIT_ABORTED = 1


@dataclass
class InstallResult:
    report: RunReport
    config: InstallerConfig
    aborted: bool = False

    @property
    def exit_code(self) -> int:
        if self.aborted:
            return EXIT_ABORTED
        return self.report.exit_code

    @property
    def status(self) -> str:
        return "aborted" if self.aborted else self.report.status

    def to_dict(self) -> dict:
        data = self.report.to_dict()
        data["status"] = self.status
        data["exit_code"] = self.exit_code
        data["profile"] = self.config.profile
        data["install_dir"] = str(self.config.install_path())
        return data


def build_record(result: InstallResult) -> RunRecord:
    report = result.report
    return RunRecord(
        run_id=report.run_id,
        timestamp=report.started_at,
        finished_at=report.finished_at,
        profile=result.config.profile,
        install_dir=str(result.config.install_path()),
        status=result.status,
        exit_code=result.exit_code,
        final_phase=report.phase.value,
        steps_total=len(report.results),
        steps_ok=report.ok_count,
        steps_skipped=report.skipped_count,
        steps_warned=report.warned_count,
        duration_ms=report.duration_ms,
        warnings=list(report.warnings),
        fatal_step=report.fatal.step if report.fatal else None,
        fatal_message=report.fatal.message if report.fatal else None,
    )


def print_next_steps(config: InstallerConfig, reporter: Reporter) -> None:
    install_dir = config.install_path()
    reporter.echo()
    reporter.echo("Next steps:")
    reporter.echo(f"  1) Review the config file: {config.output_path()}")
    reporter.echo(
        f"  2) Start the bot manually the first time to make sure it runs: "
        f"cd {install_dir} && {config.autostart.start_command}"
    )
    reporter.echo(
        f"  3) Opening a shell runs the autorun helper ({config.autostart.script_name}). "
        "It uses pm2 if installed, otherwise starts npm in the background."
    )
    reporter.echo()


def _summarize(result: InstallResult, reporter: Reporter) -> None:
    report = result.report
    if result.aborted:
        reporter.error("Installation aborted.")
    elif report.fatal is not None:
        reporter.error(f"Installation stopped at step '{report.fatal.step}' (exit {report.exit_code}).")
    elif report.warnings:
        reporter.info(f"Installation finished with {len(report.warnings)} warning(s):")
        for warning in report.warnings:
            reporter.echo(f"  - {warning}")
    else:
        reporter.info("Installation finished.")


def run_install(
    config: InstallerConfig,
    *,
    registry: AdapterRegistry | None = None,
    prober: EnvironmentProber | None = None,
    prompter: Prompter | None = None,
    reporter: Reporter | None = None,
    audit: AuditWriter | None = None,
) -> InstallResult:
    """Run the whole install. Never raises for step failures.

    Args:
        config: Validated installer configuration.
        registry: Adapter registry (default: all real adapters).
        prober: Environment prober (default: PATH lookups).
        prompter: Where answers come from (default: the terminal).
        reporter: Where progress goes (default: coloured stdout).
        audit: Run ledger (default: ``<state_dir>/audit.ndjson``).
    """
    reporter = reporter or ConsoleReporter()
    ctx = StepContext(
        config=config,
        registry=registry or default_registry(),
        prober=prober or EnvironmentProber(),
        prompter=prompter or ClickPrompter(),
        reporter=reporter,
    )
    audit = audit or AuditWriter(state_dir=config.state_path())

    reporter.echo("=========================================")
    reporter.echo(f"Levanter installer (profile: {config.profile})")
    reporter.echo("=========================================")
    logger.info("Run %s: installing %s into %s", ctx.report.run_id, config.repository, config.install_path())

    result = InstallResult(report=ctx.report, config=config)
    try:
        run_steps(build_plan(config), ctx)
    except (InstallAborted, KeyboardInterrupt):
        result.aborted = True
        logger.info("Run %s aborted at %s", ctx.report.run_id, ctx.report.phase.value)
    finally:
        release_wake_lock(ctx)

    _summarize(result, reporter)
    print_next_steps(config, reporter)
    audit.write(build_record(result))
    return result
