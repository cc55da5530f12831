"""
Installer base — the shared step machinery for every sub-project.

Steps run strictly in order. A failing step raises StepError and the
remaining steps never run; best-effort commands (unregistering a stale
DDEV project, resetting a database) are logged and ignored.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from devstack.adapters.registry import AdapterRegistry
from devstack.core.errors import DevstackError, StepError
from devstack.core.models.command import CommandResult
from devstack.core.models.site import SiteKind, SiteSpec
from devstack.core.models.workspace import WorkspaceConfig
from devstack.core.services.progress import ProgressCallback, ProgressEvent
from devstack.core.services.site_probe import is_installed

logger = logging.getLogger(__name__)


@dataclass
class InstallResult:
    """Outcome of one installer run."""

    site: str
    status: str = "pending"   # installed, skipped
    steps: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "site": self.site,
            "status": self.status,
            "steps": self.steps,
            "warnings": self.warnings,
        }


@dataclass
class Step:
    """A named unit of installer work."""

    id: str
    description: str
    run: Callable[[], None]


class SiteInstaller(ABC):
    """Common shape of the WordPress, Drupal, and Frontend installers."""

    kind: SiteKind

    def __init__(
        self,
        config: WorkspaceConfig,
        registry: AdapterRegistry,
        on_progress: ProgressCallback | None = None,
    ):
        self.config = config
        self.registry = registry
        self.on_progress = on_progress
        self.result = InstallResult(site=self.kind.value)

    # ── Properties ──────────────────────────────────────────────

    @property
    def spec(self) -> SiteSpec:
        return self.config.site(self.kind)

    @property
    def site_dir(self) -> Path:
        return self.config.site_path(self.kind)

    @property
    def url(self) -> str:
        return self.spec.url(self.config.tld)

    # ── Template method ─────────────────────────────────────────

    @abstractmethod
    def steps(self) -> list[Step]:
        """Ordered steps for a fresh install."""

    def install(self) -> InstallResult:
        """Run every step, or nothing if the site is already installed."""
        if is_installed(self.config, self.spec):
            self._notify("install", "skipped", f"{self.spec.human_name} is already installed. Skipping setup.")
            self.result.status = "skipped"
            return self.result

        for step in self.steps():
            self._run_step(step)

        self.result.status = "installed"
        self._notify("install", "done", f"{self.spec.human_name} setup complete.")
        return self.result

    def _run_step(self, step: Step) -> None:
        self._notify(step.id, "started", step.description)
        try:
            step.run()
        except StepError as e:
            self._notify(step.id, "failed", str(e))
            raise
        except DevstackError as e:
            self._notify(step.id, "failed", str(e))
            raise StepError(self.spec.human_name, step.id, str(e), e.hints) from e
        except OSError as e:
            self._notify(step.id, "failed", str(e))
            raise self._filesystem_error(step.id, e) from e
        self.result.steps.append(step.id)
        self._notify(step.id, "done")

    # ── Helpers ─────────────────────────────────────────────────

    def _notify(self, step: str, status: str, message: str = "") -> None:
        loud = status in ("warning", "failed") and self.on_progress is None
        level = logging.WARNING if loud else logging.INFO
        logger.log(level, "[%s] %s %s %s", self.kind.value, step, status, message)
        if self.on_progress:
            self.on_progress(ProgressEvent(site=self.kind.value, step=step, status=status, message=message))

    def _warn(self, step: str, message: str) -> None:
        self.result.warnings.append(message)
        self._notify(step, "warning", message)

    def _require(
        self,
        result: CommandResult,
        step: str,
        hints: list[str] | None = None,
    ) -> CommandResult:
        """Turn a failed command into StepError; pass a success through."""
        if result.failed:
            raise StepError(self.spec.human_name, step, f"`{result.display}` — {result.message}", hints)
        return result

    def _filesystem_error(self, step: str, error: OSError) -> StepError:
        """StepError for a file operation the OS refused."""
        target = error.filename or self.site_dir
        return StepError(
            self.spec.human_name,
            step,
            f"{error.strerror or error} ({target})",
            hints=[
                f"Check ownership and permissions under {self.spec.directory}/; "
                "files written from inside a DDEV container may belong to another user.",
            ],
        )

    def _best_effort(self, result: CommandResult, what: str) -> None:
        if result.failed:
            logger.info("Ignoring failure of %s: %s", what, result.message)

    # ── Shared steps ────────────────────────────────────────────

    def _create_or_reuse(self, create: Callable[[], CommandResult]) -> None:
        """Scaffold the site directory, or warn and reuse an existing one."""
        if self.site_dir.exists():
            self._warn(
                "scaffold",
                f"'{self.spec.directory}' directory already exists. Skipping creation.",
            )
            return
        self._require(create(), "scaffold")

    def _register(self) -> None:
        """Forget any stale DDEV registration, then declare the project."""
        ddev = self.registry.ddev
        spec = self.spec
        self._best_effort(ddev.unlist(spec.project_name, cwd=self.site_dir), "ddev unlist")
        self._require(
            ddev.config(
                self.site_dir,
                project_name=spec.project_name,
                project_type=spec.project_type,
                docroot=spec.docroot,
                webserver_type=spec.webserver_type,
            ),
            "register",
        )

    def start(self) -> None:
        self._ensure_running()

    def _ensure_running(self) -> bool:
        """Start DDEV unless it already runs; settle after a fresh start.

        Returns:
            True if this call started the project.
        """
        ddev = self.registry.ddev
        if ddev.is_running(self.site_dir):
            logger.info("%s is already running", self.spec.project_name)
            return False
        self._require(ddev.start(self.site_dir), "start")
        settle = self.config.runtime.settle_seconds
        if settle > 0:
            self._notify("start", "waiting", f"Waiting {settle:g}s for services to initialize...")
            self.registry.runner.sleep(settle)
        return True
