"""
levboot — CLI entrypoint.

Usage:
    levboot                 # same as: levboot install
    levboot install --profile native
    levboot probe --json
    levboot history -n 5
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from levboot import __version__
from levboot.core.config.loader import ConfigError, load_config
from levboot.core.models.settings import InstallerConfig
from levboot.core.observability.logging_config import resolve_level, setup_logging


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="levboot")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging.")
@click.option("--quiet", "-q", is_flag=True, help="Only print warnings and errors.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="Path to levboot.yml (default: $LEVBOOT_CONFIG or ~/.config/levboot/levboot.yml).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """Install Levanter on Termux and keep it starting on its own."""
    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path).expanduser() if config_path else None

    setup_logging(level=resolve_level(debug=debug, verbose=verbose, quiet=quiet))

    if ctx.invoked_subcommand is None:
        ctx.invoke(install)


def _load(ctx: click.Context) -> InstallerConfig:
    try:
        return load_config(ctx.obj.get("config_path"))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)


@cli.command()
@click.option(
    "--profile",
    type=click.Choice(["safe", "native"]),
    default=None,
    help="safe: strip native deps, skip lifecycle scripts. native: full toolchain.",
)
@click.option("--install-dir", default=None, help="Where to clone the app (default: ~/levanter).")
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Keep every default and answer yes to every question.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Print the run report as JSON at the end.")
@click.pass_context
def install(
    ctx: click.Context,
    profile: str | None,
    install_dir: str | None,
    assume_yes: bool,
    as_json: bool,
) -> None:
    """Run the interactive install (default command)."""
    from levboot.core.observability.console import ConsoleReporter
    from levboot.core.services.prompts import AnswerAllPrompter, ClickPrompter
    from levboot.core.use_cases.install import run_install

    config = _load(ctx)
    overrides = {}
    if profile:
        overrides["profile"] = profile
    if install_dir:
        overrides["install_dir"] = install_dir
    if overrides:
        config = config.model_copy(update=overrides)

    prompter = AnswerAllPrompter(assume_yes=True) if assume_yes else ClickPrompter()
    result = run_install(
        config,
        prompter=prompter,
        reporter=ConsoleReporter(quiet=ctx.obj.get("quiet", False) or as_json),
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    sys.exit(result.exit_code)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def probe(ctx: click.Context, as_json: bool) -> None:
    """Show which tools this device has."""
    from levboot.adapters import default_registry
    from levboot.core.services.prober import EnvironmentProber

    prober = EnvironmentProber()
    flags = prober.probe_all()
    adapters = default_registry().adapter_status()

    if as_json:
        click.echo(json.dumps({
            "tools": [f.to_dict() for f in flags],
            "package_manager": prober.package_manager(),
            "node_installer": prober.node_installer(),
            "adapters": adapters,
        }, indent=2))
        return

    click.secho("\n🔎 Capabilities", fg="cyan", bold=True)
    for flag in flags:
        if flag.present:
            click.secho(f"   ✓ {flag.tool}", fg="green", nl=False)
            click.echo(f"  → {flag.path}")
        else:
            click.secho(f"   ✗ {flag.tool}", fg="bright_black")
    click.echo()
    click.echo(f"   Package manager: {prober.package_manager() or 'none'}")
    click.echo(f"   Node installer:  {prober.node_installer() or 'none'}")
    ready = [name for name, s in adapters.items() if s["available"]]
    click.echo(f"   Adapters ready:  {', '.join(ready) or 'none'}")
    click.echo()


@cli.command()
@click.option("-n", "count", type=int, default=10, show_default=True, help="Number of runs to show.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def history(ctx: click.Context, count: int, as_json: bool) -> None:
    """Show recent install runs."""
    from levboot.core.persistence.audit import AuditWriter

    config = _load(ctx)
    records = AuditWriter(state_dir=config.state_path()).read_recent(count)

    if as_json:
        click.echo(json.dumps([r.model_dump(mode="json") for r in records], indent=2))
        return

    if not records:
        click.echo("No install runs recorded yet.")
        return

    colors = {"ok": "green", "warnings": "yellow", "failed": "red", "aborted": "red"}
    for record in records:
        click.echo(f"{record.timestamp}  {record.run_id}  ", nl=False)
        click.secho(f"{record.status:<8}", fg=colors.get(record.status, "white"), nl=False)
        detail = f"  exit={record.exit_code}  profile={record.profile}"
        if record.fatal_step:
            detail += f"  stopped at {record.fatal_step}"
        elif record.warnings:
            detail += f"  {len(record.warnings)} warning(s)"
        click.echo(detail)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
