"""
Install use case — run the three installers in fixed order.

A StepError from any installer aborts the whole run; later sites are
never attempted.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from devstack.adapters.registry import AdapterRegistry
from devstack.core.models.workspace import WorkspaceConfig
from devstack.core.services.installers import INSTALLERS, FrontendInstaller, InstallResult
from devstack.core.services.progress import ProgressCallback


@dataclass
class InstallReport:
    """Per-site results of a full install."""

    results: list[InstallResult] = field(default_factory=list)

    @property
    def installed(self) -> list[str]:
        return [r.site for r in self.results if r.status == "installed"]

    @property
    def skipped(self) -> list[str]:
        return [r.site for r in self.results if r.status == "skipped"]

    @property
    def warnings(self) -> list[str]:
        return [w for r in self.results for w in r.warnings]

    def to_dict(self) -> dict:
        return {
            "installed": self.installed,
            "skipped": self.skipped,
            "results": [r.to_dict() for r in self.results],
        }


def run_install(
    config: WorkspaceConfig,
    registry: AdapterRegistry,
    *,
    clean_frontend: bool = False,
    on_progress: ProgressCallback | None = None,
) -> InstallReport:
    """Install WordPress, Drupal, and the frontend.

    Args:
        config: Workspace configuration.
        registry: Adapters to run tools through.
        clean_frontend: Remove the frontend first and reinstall it.
        on_progress: Optional progress callback.

    Raises:
        StepError: as soon as any installer step fails.
    """
    report = InstallReport()
    for installer_cls in INSTALLERS:
        installer = installer_cls(config, registry, on_progress)
        if clean_frontend and isinstance(installer, FrontendInstaller):
            installer.clean()
        report.results.append(installer.install())
    return report
