"""
Composer adapter — PHP project scaffolding on the host.
"""

from __future__ import annotations

from pathlib import Path

from devstack.adapters.base import Adapter
from devstack.core.models.command import CommandResult


class ComposerAdapter(Adapter):
    """Composer, run directly on the host (not through DDEV)."""

    @property
    def name(self) -> str:
        return "composer"

    def create_project(
        self,
        package: str,
        directory: str,
        cwd: Path,
        *extra: str,
    ) -> CommandResult:
        return self.runner.run(
            ["composer", "create-project", package, directory, *extra],
            cwd=cwd,
            stream=True,
        )
