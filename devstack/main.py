"""
DevStack — CLI entrypoint.

Usage:
    devstack --help
    devstack                      # prerequisite checks only
    devstack --install
    devstack --start --site=all
    devstack --stop --site=drupal
    devstack --list
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, NoReturn

import click

from devstack import __version__
from devstack.core.errors import DevstackError, UsageError
from devstack.core.observability.logging_config import resolve_level, setup_logging
from devstack.core.services.lifecycle import LIFECYCLE_TARGETS
from devstack.core.services.progress import ProgressEvent

logger = logging.getLogger(__name__)

FOLLOW_UP_NOTE = (
    "Ensure you have at least one published post in WordPress and one published "
    "'article' node in Drupal for the frontend demo to display data."
)


class FlagCommand(click.Command):
    """A click command whose usage errors exit with status 1."""

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            e.exit_code = 1
            raise


def _usage_fail(ctx: click.Context, message: str) -> NoReturn:
    err = click.UsageError(message, ctx)
    err.exit_code = 1
    raise err


def _fail(error: DevstackError, as_json: bool) -> NoReturn:
    logger.debug("Aborting", exc_info=True)
    if as_json:
        click.echo(json.dumps({"error": str(error), "hints": error.hints}, indent=2))
    else:
        click.echo()
        click.secho(f"❌ {error}", fg="red", err=True)
        for hint in error.hints:
            click.echo(f"   • {hint}", err=True)
        click.echo(err=True)
    sys.exit(1)


def _progress_printer(quiet: bool):
    """Render ProgressEvents the way the shell script logged its steps."""

    def render(event: ProgressEvent) -> None:
        if event.status == "started":
            if quiet:
                return
            click.echo()
            click.secho(f"--> {datetime.now():%H:%M:%S} | {event.message}", fg="cyan", bold=True)
            click.echo("-" * 50)
        elif event.status == "waiting" and not quiet:
            click.echo(f"   ⏳ {event.message}")
        elif event.status == "skipped" and not quiet:
            click.secho(f"   ⊘ {event.message}", fg="yellow")
        elif event.status == "warning":
            click.secho(f"   ⚠️  {event.message}", fg="yellow")
        elif event.status == "done" and event.step == "install" and not quiet:
            click.secho(f"   ✓ {event.message}", fg="green")
        elif event.status == "failed":
            click.secho(f"   ✗ {event.site}: {event.step}", fg="red")

    return render


def _print_summary(config: Any) -> None:
    from devstack.core.use_cases.status import summary

    click.echo()
    click.secho("🏁 Setup Script Finished!", fg="cyan", bold=True)
    click.echo()
    click.secho("Project URLs:", bold=True)
    rows = summary(config)
    width = max(len(name) for name, _ in rows) + 1
    for name, url in rows:
        click.echo(f"  {name + ':':<{width}} {url}")
    click.echo()
    click.echo(FOLLOW_UP_NOTE)
    click.echo()


@click.command(cls=FlagCommand)
@click.version_option(version=__version__, prog_name="devstack")
@click.option("--install", is_flag=True, help="Install WordPress, Drupal and the frontend (in that order).")
@click.option("--clean-frontend", is_flag=True, help="With --install: delete and rebuild the frontend.")
@click.option("--start", "start", is_flag=True, help="Start DDEV for --site.")
@click.option("--stop", "stop", is_flag=True, help="Stop DDEV for --site.")
@click.option(
    "--site",
    type=click.Choice(LIFECYCLE_TARGETS, case_sensitive=False),
    default=None,
    help="Target for --start/--stop.",
)
@click.option("--list", "list_", is_flag=True, help="Show status and URL of each managed project.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to devstack.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    install: bool,
    clean_frontend: bool,
    start: bool,
    stop: bool,
    site: str | None,
    list_: bool,
    as_json: bool,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """DevStack — bootstrap WordPress (Bedrock), Drupal and a static frontend on DDEV.

    With no options, only the prerequisite checks run.
    """
    ctx.ensure_object(dict)

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=resolve_level(
            debug=debug,
            verbose=verbose,
            quiet=quiet,
            env_level=os.environ.get("DEVSTACK_LOG_LEVEL"),
        ),
        log_file=os.environ.get("DEVSTACK_LOG_FILE"),
        log_file_level=os.environ.get("DEVSTACK_LOG_FILE_LEVEL"),
    )

    # ── Usage checks (before any side effect) ───────────────────
    if (start or stop) and not site:
        _usage_fail(ctx, "--site=<name|all> is required with --start/--stop.")
    if site and not (start or stop):
        _usage_fail(ctx, "--site only applies to --start/--stop.")
    if install and (start or stop):
        _usage_fail(ctx, "--install cannot be combined with --start/--stop.")
    if clean_frontend and not install:
        _usage_fail(ctx, "--clean-frontend only applies to --install.")

    from devstack.adapters.registry import default_registry
    from devstack.core.config.loader import load_workspace
    from devstack.core.services.prerequisites import check_prerequisites

    try:
        config = load_workspace(Path(config_path) if config_path else None)
    except DevstackError as e:
        _fail(e, as_json)

    registry = default_registry(config, runner=ctx.obj.get("runner"), secrets=ctx.obj.get("secrets"))
    on_progress = None if as_json else _progress_printer(quiet)

    try:
        # ── Prerequisites (always, fatal) ───────────────────────
        if not as_json and not quiet:
            click.echo()
            click.secho(f"--> {datetime.now():%H:%M:%S} | Checking prerequisites...", fg="cyan", bold=True)
        prereq = check_prerequisites(config, registry.runner, registry.runtime)
        if not as_json and not quiet:
            click.secho("   ✓ All prerequisites are installed.", fg="green")
            started = f" (started {registry.runtime.provider.name})" if prereq.provider_started and registry.runtime.provider else ""
            click.secho(f"   ✓ Container runtime is running{started}.", fg="green")

        if install:
            _do_install(config, registry, clean_frontend, as_json, on_progress)
        elif start or stop:
            assert site is not None  # guaranteed by usage checks above
            _do_lifecycle(config, registry, site, start, stop, as_json, on_progress)
        elif list_:
            _do_list(config, registry, as_json)
        elif as_json:
            click.echo(json.dumps({"prerequisites": prereq.to_dict()}, indent=2))
        else:
            click.echo()
            click.echo("Checks only (no installation). Run with --install to set everything up.")
            _print_summary(config)

    except UsageError as e:
        _usage_fail(ctx, str(e))
    except DevstackError as e:
        _fail(e, as_json)


def _do_install(config, registry, clean_frontend: bool, as_json: bool, on_progress) -> None:
    from devstack.core.use_cases.install import run_install

    report = run_install(
        config,
        registry,
        clean_frontend=clean_frontend,
        on_progress=on_progress,
    )

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        return

    if report.warnings:
        click.echo()
        click.secho("⚠️  Manual follow-up needed:", fg="yellow", bold=True)
        for warning in report.warnings:
            click.echo(f"   • {warning}")

    _print_summary(config)


def _do_lifecycle(config, registry, site: str, start: bool, stop: bool, as_json: bool, on_progress) -> None:
    from devstack.core.services.lifecycle import control

    report = control(config, registry, site, start=start, stop=stop, on_progress=on_progress)

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        click.echo()
        for outcome in report.outcomes:
            if outcome.action == "skip":
                continue
            if outcome.ok:
                click.secho(f"   ✓ {outcome.site}: {outcome.action}", fg="green")
            else:
                click.secho(f"   ✗ {outcome.message}", fg="red")
        done = len(report.outcomes) - len(report.failed) - len(report.skipped)
        color = "green" if report.ok else "red"
        click.secho(f"   Result: {done} ok, {len(report.failed)} failed, {len(report.skipped)} skipped", fg=color, bold=True)
        click.echo()

    if not report.ok:
        sys.exit(1)


def _do_list(config, registry, as_json: bool) -> None:
    from devstack.core.models.site import SiteStatus
    from devstack.core.use_cases.status import list_sites

    result = list_sites(config, registry)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    status_colors = {
        SiteStatus.RUNNING: "green",
        SiteStatus.CONFIGURED: "yellow",
        SiteStatus.CREATED: "yellow",
        SiteStatus.NOT_CREATED: "red",
    }

    click.echo()
    click.secho("📋 Managed projects", fg="cyan", bold=True)
    click.echo(f"   {'NAME':<10} {'PROJECT':<20} {'STATUS':<12} {'DDEV':<6} URL")
    for s in result.sites:
        click.echo(f"   {s.human_name:<10} {s.project_name:<20} ", nl=False)
        click.secho(f"{s.status.label:<12}", fg=status_colors[s.status], nl=False)
        click.echo(f" {'yes' if s.registered else 'no':<6} {s.url}")
    click.echo()


if __name__ == "__main__":
    cli()
