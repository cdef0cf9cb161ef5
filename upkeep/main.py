"""
upkeep — CLI entrypoint.

Usage:
    upkeep --help
    upkeep run
    upkeep run --dry-run --only brew_formula --only asdf
    upkeep steps
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from upkeep import __version__
from upkeep.core.models.config import StepName
from upkeep.core.observability.logging_config import setup_from_flags

_STEP_CHOICE = click.Choice([s.value for s in StepName])


@click.group()
@click.version_option(version=__version__, prog_name="upkeep")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="Path to upkeep.yml (default: ~/.config/upkeep.yml).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """upkeep — update every tool on this machine in one go."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_from_flags(debug=debug, verbose=verbose, quiet=quiet)


@cli.command()
@click.option("--dry-run", "-n", is_flag=True, help="Print commands instead of running them.")
@click.option("--only", "only", multiple=True, type=_STEP_CHOICE, help="Run only these steps.")
@click.option("--disable", "disable", multiple=True, type=_STEP_CHOICE, help="Skip these steps.")
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Say yes to tool prompts where supported.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def run(
    ctx: click.Context,
    dry_run: bool,
    only: tuple[str, ...],
    disable: tuple[str, ...],
    assume_yes: bool,
    as_json: bool,
) -> None:
    """Run every applicable update step.

    Examples:

        upkeep run

        upkeep run --dry-run

        upkeep run --only nix --only home_manager
    """
    from upkeep.adapters.shell.process import stderr_spawner, subprocess_spawner
    from upkeep.core.config.loader import ConfigError, load_config
    from upkeep.core.engine.runner import run_steps
    from upkeep.core.execution.context import ExecutionContext
    from upkeep.core.execution.report import ReportSink

    try:
        config = load_config(ctx.obj.get("config_path"))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)

    overrides: dict = {}
    if only:
        overrides["only"] = [StepName(s) for s in only]
    if disable:
        overrides["disable"] = [*config.disable, *(StepName(s) for s in disable)]
    if assume_yes:
        overrides["assume_yes"] = True
    if overrides:
        config = config.model_copy(update=overrides)

    # With --json our stdout carries only the report
    context = ExecutionContext.build(
        config,
        dry_run=True if dry_run else None,
        sink=ReportSink(echo=not as_json),
        spawner=stderr_spawner if as_json else subprocess_spawner,
    )
    report = run_steps(context)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        sys.exit(1 if report.failed else 0)

    mode_label = "[dry-run] " if report.dry_run else ""

    click.echo()
    click.secho(f"⚡ {mode_label}Summary", fg="cyan", bold=True)
    for result in report.results:
        label = result.title or result.step
        if result.ok:
            click.secho(f"   ✓ {label}", fg="green")
        elif result.failed:
            click.secho(f"   ✗ {label}", fg="red", nl=False)
            click.echo(f"  {result.message}")
        elif ctx.obj.get("verbose"):
            click.secho(f"   ⊘ {label} ", fg="yellow", nl=False)
            click.echo(f"({result.message})")

    click.echo()
    status_color = {"ok": "green", "partial": "yellow", "failed": "red"}.get(
        report.status, "white"
    )
    ran = report.succeeded + report.failed
    click.secho(
        f"   Result: {report.succeeded}/{ran} succeeded, {report.skipped} skipped",
        fg=status_color,
        bold=True,
    )
    click.echo()

    if report.failed:
        sys.exit(1)


@cli.command()
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def steps(as_json: bool) -> None:
    """List the step catalogue in run order."""
    from upkeep.core.platform import Host
    from upkeep.steps import STEPS

    host = Host.detect()
    rows = [
        {
            "key": spec.key,
            "name": spec.name.value,
            "platforms": sorted(spec.platforms),
            "applies": spec.applies_to(host),
        }
        for spec in STEPS
    ]

    if as_json:
        click.echo(json.dumps(rows, indent=2))
        return

    click.secho(f"\n🔧 Steps ({host.system}/{host.arch}):\n", fg="cyan", bold=True)
    for row in rows:
        marker = "•" if row["applies"] else "·"
        platforms = f"  [{', '.join(row['platforms'])}]" if row["platforms"] else ""
        line = f"   {marker} {row['key']:<28}{platforms}"
        if row["applies"]:
            click.echo(line)
        else:
            click.secho(line, dim=True)
    click.echo()


if __name__ == "__main__":
    cli()
