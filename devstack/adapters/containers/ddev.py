"""
DDEV adapter — project configuration, lifecycle, and passthroughs.

Uses the ddev CLI only. Status and list output are interpreted here so
services work with booleans and sets, not text.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

from devstack.adapters.base import Adapter
from devstack.core.models.command import CommandResult

logger = logging.getLogger(__name__)

RUNNING_MARKER = "running"

# `ddev list` draws its table with box or ASCII borders and may colour cells
_BORDERS = str.maketrans({c: " " for c in "│┃|"})
_ANSI = re.compile(r"\x1b\[[0-9;]*m")


class DdevAdapter(Adapter):
    """DDEV local-development orchestrator operations."""

    @property
    def name(self) -> str:
        return "ddev"

    # ── Project metadata ────────────────────────────────────────

    def config(
        self,
        site_dir: Path,
        project_name: str,
        project_type: str,
        docroot: str,
        webserver_type: str | None = None,
    ) -> CommandResult:
        args = [
            "ddev", "config",
            f"--project-name={project_name}",
            f"--project-type={project_type}",
            f"--docroot={docroot}",
        ]
        if webserver_type:
            args.append(f"--webserver-type={webserver_type}")
        return self.runner.run(args, cwd=site_dir, stream=True)

    def unlist(self, project_name: str, cwd: Path | None = None) -> CommandResult:
        """Forget a (possibly stale) registration for ``project_name``."""
        return self.runner.run(["ddev", "stop", "--unlist", project_name], cwd=cwd, timeout=120)

    def delete(self, project_name: str, cwd: Path | None = None) -> CommandResult:
        """Remove a project's containers and database without a snapshot."""
        return self.runner.run(
            ["ddev", "delete", "--omit-snapshot", "--yes", project_name],
            cwd=cwd,
            timeout=300,
        )

    # ── Lifecycle ───────────────────────────────────────────────

    def start(self, site_dir: Path) -> CommandResult:
        return self.runner.run(["ddev", "start"], cwd=site_dir, stream=True)

    def stop(self, site_dir: Path) -> CommandResult:
        return self.runner.run(["ddev", "stop"], cwd=site_dir, stream=True)

    def status(self, site_dir: Path) -> CommandResult:
        return self.runner.run(["ddev", "status"], cwd=site_dir, timeout=60)

    def is_running(self, site_dir: Path) -> bool:
        """True when ``ddev status`` reports the project as running."""
        result = self.status(site_dir)
        if result.failed:
            return False
        text = result.stdout.lower()
        return RUNNING_MARKER in text and f"not {RUNNING_MARKER}" not in text

    def list_projects(self) -> CommandResult:
        return self.runner.run(["ddev", "list"], timeout=60)

    def listed(self, project_names: Iterable[str]) -> dict[str, str]:
        """Map each known project name to its ``ddev list`` row.

        Names DDEV does not know are absent from the result.
        """
        result = self.list_projects()
        rows: dict[str, str] = {}
        if result.failed:
            logger.debug("ddev list failed: %s", result.message)
            return rows
        wanted = set(project_names)
        for line in result.stdout.splitlines():
            cells = _ANSI.sub("", line).translate(_BORDERS).split()
            if cells and cells[0] in wanted and cells[0] not in rows:
                rows[cells[0]] = " ".join(cells)
        return rows

    # ── Passthroughs ────────────────────────────────────────────

    def composer(self, site_dir: Path, *args: str) -> CommandResult:
        return self.runner.run(["ddev", "composer", *args], cwd=site_dir, stream=True)

    def wp(self, site_dir: Path, *args: str) -> CommandResult:
        return self.runner.run(["ddev", "wp", *args], cwd=site_dir, stream=True)

    def drush(self, site_dir: Path, *args: str) -> CommandResult:
        return self.runner.run(["ddev", "drush", *args], cwd=site_dir, stream=True)

    def mysql(self, site_dir: Path, statement: str) -> CommandResult:
        return self.runner.run(["ddev", "mysql", "-e", statement], cwd=site_dir, timeout=120)
