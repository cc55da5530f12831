"""
Drush adapter — Drupal site operations through ``ddev drush``.
"""

from __future__ import annotations

from pathlib import Path

from devstack.adapters.base import Adapter
from devstack.adapters.containers.ddev import DdevAdapter
from devstack.adapters.shell.command import CommandRunner
from devstack.core.models.command import CommandResult


class DrushAdapter(Adapter):
    """Drush, executed inside the DDEV web container."""

    def __init__(self, runner: CommandRunner, ddev: DdevAdapter):
        super().__init__(runner)
        self.ddev = ddev

    @property
    def name(self) -> str:
        return "drush"

    @property
    def binary(self) -> str:
        return self.ddev.binary

    def require(self, site_dir: Path) -> CommandResult:
        """Add Drush to the project so the passthrough has something to run."""
        return self.ddev.composer(site_dir, "require", "drush/drush", "--no-interaction", "--quiet")

    def site_install(
        self,
        site_dir: Path,
        *,
        db_url: str,
        site_name: str,
        account_name: str,
        account_pass: str,
        profile: str = "standard",
    ) -> CommandResult:
        return self.ddev.drush(
            site_dir,
            "site:install", profile,
            f"--db-url={db_url}",
            f"--site-name={site_name}",
            f"--account-name={account_name}",
            f"--account-pass={account_pass}",
            "-y",
        )

    def enable(self, site_dir: Path, module: str) -> CommandResult:
        return self.ddev.drush(site_dir, "en", module, "-y")

    def cache_rebuild(self, site_dir: Path) -> CommandResult:
        return self.ddev.drush(site_dir, "cr")
