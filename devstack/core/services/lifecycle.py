"""
Lifecycle control — start and stop DDEV environments on demand.

Independent of installation: a site that was never configured is
skipped with a notice, never created. With target ``all`` every site is
handled on its own; one failure does not stop the others.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from devstack.adapters.registry import AdapterRegistry
from devstack.core.errors import UsageError
from devstack.core.models.site import SITE_ORDER, SiteKind, SiteStatus
from devstack.core.models.workspace import WorkspaceConfig
from devstack.core.services.progress import ProgressCallback, ProgressEvent
from devstack.core.services.site_probe import probe_site

logger = logging.getLogger(__name__)

ALL_TARGET = "all"
LIFECYCLE_TARGETS: tuple[str, ...] = (*(k.value for k in SITE_ORDER), ALL_TARGET)

_VERBS = {"start": "Starting", "stop": "Stopping"}


@dataclass
class LifecycleOutcome:
    """What happened to one site for one action."""

    site: str
    action: str          # start, stop, skip
    ok: bool = True
    message: str = ""


@dataclass
class LifecycleReport:
    """All outcomes of one ``control`` call."""

    target: str
    outcomes: list[LifecycleOutcome] = field(default_factory=list)

    @property
    def failed(self) -> list[LifecycleOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def skipped(self) -> list[str]:
        return [o.site for o in self.outcomes if o.action == "skip"]

    @property
    def ok(self) -> bool:
        return not self.failed

    def to_dict(self) -> dict:
        return {
            "target": self.target,
            "ok": self.ok,
            "outcomes": [
                {"site": o.site, "action": o.action, "ok": o.ok, "message": o.message}
                for o in self.outcomes
            ],
        }


def resolve_targets(target: str) -> list[SiteKind]:
    """Expand a target name into sites, in fixed order.

    Raises:
        UsageError: for anything outside the known set.
    """
    name = (target or "").strip().lower()
    if name == ALL_TARGET:
        return list(SITE_ORDER)
    try:
        return [SiteKind(name)]
    except ValueError:
        raise UsageError(
            f"Unknown site '{target}'. Valid: {', '.join(LIFECYCLE_TARGETS)}"
        ) from None


def control(
    config: WorkspaceConfig,
    registry: AdapterRegistry,
    target: str,
    *,
    start: bool = False,
    stop: bool = False,
    on_progress: ProgressCallback | None = None,
) -> LifecycleReport:
    """Stop and/or start the target sites.

    When both are requested, stop runs before start (a restart).
    Failures are recorded in the report, never raised.

    Raises:
        UsageError: for an unknown target or when neither action is given.
    """
    if not start and not stop:
        raise UsageError("Nothing to do: pass --start and/or --stop.")

    kinds = resolve_targets(target)
    report = LifecycleReport(target=target)
    ddev = registry.ddev

    def notify(site: str, step: str, status: str, message: str = "") -> None:
        if on_progress:
            on_progress(ProgressEvent(site=site, step=step, status=status, message=message))

    for kind in kinds:
        spec = config.site(kind)
        site_dir = config.site_path(kind)

        if probe_site(config, spec) < SiteStatus.CONFIGURED:
            message = f"{spec.human_name} is not set up ('{spec.directory}/.ddev' missing). Skipping."
            logger.info(message)
            report.outcomes.append(LifecycleOutcome(site=kind.value, action="skip", message=message))
            notify(kind.value, "lifecycle", "skipped", message)
            continue

        actions: list[str] = []
        if stop:
            actions.append("stop")
        if start:
            actions.append("start")

        for action in actions:
            notify(kind.value, action, "started", f"{_VERBS[action]} {spec.human_name}...")
            result = ddev.stop(site_dir) if action == "stop" else ddev.start(site_dir)
            if result.ok:
                report.outcomes.append(LifecycleOutcome(site=kind.value, action=action))
                notify(kind.value, action, "done")
            else:
                message = f"Failed to {action} {spec.human_name}: {result.message}"
                logger.info(message)
                report.outcomes.append(
                    LifecycleOutcome(site=kind.value, action=action, ok=False, message=message)
                )
                notify(kind.value, action, "failed", message)

    return report
