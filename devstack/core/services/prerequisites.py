"""
Prerequisite checks — required tools on PATH and a reachable container
runtime, verified before anything is mutated.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field

from devstack.adapters.containers.runtime import ContainerRuntimeAdapter
from devstack.adapters.shell.command import CommandRunner
from devstack.core.errors import PrerequisiteError
from devstack.core.models.workspace import WorkspaceConfig

logger = logging.getLogger(__name__)


@dataclass
class PrerequisiteReport:
    """What the checks found."""

    tools: dict[str, bool] = field(default_factory=dict)
    runtime_reachable: bool = False
    provider_started: bool = False
    waited_seconds: float = 0.0

    @property
    def missing_tools(self) -> list[str]:
        return [name for name, ok in self.tools.items() if not ok]

    @property
    def ok(self) -> bool:
        return not self.missing_tools and self.runtime_reachable

    def to_dict(self) -> dict:
        return {
            "ok": self.ok,
            "tools": self.tools,
            "missing_tools": self.missing_tools,
            "runtime_reachable": self.runtime_reachable,
            "provider_started": self.provider_started,
            "waited_seconds": self.waited_seconds,
        }


def check_tools(runner: CommandRunner, tools: tuple[str, ...] | list[str]) -> dict[str, bool]:
    """Resolve each tool on PATH."""
    return {name: runner.which(name) is not None for name in tools}


def ensure_runtime(
    config: WorkspaceConfig,
    runtime: ContainerRuntimeAdapter,
    report: PrerequisiteReport,
) -> None:
    """Make sure the container daemon answers, starting the provider if we can.

    Polls every ``poll_interval`` seconds for at most ``start_timeout``.
    """
    if runtime.is_reachable():
        report.runtime_reachable = True
        return

    provider = runtime.provider
    if provider is None or not runtime.provider_available():
        hint = provider.install_hint if provider else "Start your Docker provider and re-run."
        raise PrerequisiteError(
            "The container runtime is not running and no known provider can start it.",
            hints=[hint],
        )

    logger.warning("%s is not running; starting it", provider.name)
    result = runtime.start_provider()
    if result.failed:
        raise PrerequisiteError(
            f"Could not start {provider.name}: {result.message}",
            hints=[f"Start {provider.name} manually and re-run."],
        )
    report.provider_started = True

    settings = config.runtime
    deadline = time.monotonic() + settings.start_timeout
    waited = 0.0
    while waited < settings.start_timeout:
        runtime.runner.sleep(settings.poll_interval)
        waited += settings.poll_interval
        if runtime.is_reachable():
            report.runtime_reachable = True
            report.waited_seconds = waited
            logger.info("%s is up after %.0fs", provider.name, waited)
            return
        if time.monotonic() > deadline:
            break

    report.waited_seconds = waited
    raise PrerequisiteError(
        f"{provider.name} did not become reachable within {settings.start_timeout:.0f}s.",
        hints=[f"Check {provider.name} and re-run once `docker info` succeeds."],
    )


def check_prerequisites(
    config: WorkspaceConfig,
    runner: CommandRunner,
    runtime: ContainerRuntimeAdapter,
) -> PrerequisiteReport:
    """Run every check; raise PrerequisiteError on the first fatal finding.

    All missing tools are reported together, before the runtime is probed.
    """
    report = PrerequisiteReport(tools=check_tools(runner, config.required_tools))

    missing = report.missing_tools
    if missing:
        raise PrerequisiteError(
            "The following tools are missing: " + ", ".join(missing),
            hints=["Install the missing tools and re-run."],
        )

    ensure_runtime(config, runtime, report)
    return report
