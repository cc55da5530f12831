"""
WP-CLI adapter — WordPress site operations through ``ddev wp``.
"""

from __future__ import annotations

from pathlib import Path

from devstack.adapters.base import Adapter
from devstack.adapters.containers.ddev import DdevAdapter
from devstack.adapters.shell.command import CommandRunner
from devstack.core.models.command import CommandResult

# Bedrock keeps WordPress core under web/wp.
BEDROCK_CORE_PATH = "web/wp"


class WpCliAdapter(Adapter):
    """WP-CLI, executed inside the DDEV web container."""

    def __init__(self, runner: CommandRunner, ddev: DdevAdapter):
        super().__init__(runner)
        self.ddev = ddev

    @property
    def name(self) -> str:
        return "wp-cli"

    @property
    def binary(self) -> str:
        return self.ddev.binary

    def core_install(
        self,
        site_dir: Path,
        *,
        url: str,
        title: str,
        admin_user: str,
        admin_password: str,
        admin_email: str,
    ) -> CommandResult:
        return self.ddev.wp(
            site_dir,
            f"--path={BEDROCK_CORE_PATH}",
            "core", "install",
            f"--url={url}",
            f"--title={title}",
            f"--admin_user={admin_user}",
            f"--admin_password={admin_password}",
            f"--admin_email={admin_email}",
        )

    def reset_database(self, site_dir: Path, database: str) -> CommandResult:
        """Drop and recreate the site database so core install starts empty."""
        return self.ddev.mysql(
            site_dir,
            f"DROP DATABASE IF EXISTS {database}; CREATE DATABASE {database};",
        )
