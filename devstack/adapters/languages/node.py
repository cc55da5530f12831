"""
npm adapter — frontend scaffolding, dependency install, and builds.
"""

from __future__ import annotations

from pathlib import Path

from devstack.adapters.base import Adapter
from devstack.core.models.command import CommandResult


class NpmAdapter(Adapter):
    """npm operations for the static frontend."""

    @property
    def name(self) -> str:
        return "npm"

    def create(self, cwd: Path, initializer: str, template: str) -> CommandResult:
        """Scaffold into ``cwd`` with ``npm create <initializer>``."""
        return self.runner.run(
            ["npm", "create", "--yes", initializer, ".", "--", "--template", template],
            cwd=cwd,
            stream=True,
        )

    def install(self, cwd: Path) -> CommandResult:
        return self.runner.run(["npm", "install"], cwd=cwd, stream=True)

    def run_script(self, cwd: Path, script: str) -> CommandResult:
        return self.runner.run(["npm", "run", script], cwd=cwd, stream=True)
