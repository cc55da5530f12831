"""
Frontend installer.

Scaffolds a Vite + Vue single-page app when there is none, points it at
both backends' APIs, builds it into ``dist/``, and serves that directory
from a generic DDEV PHP/nginx project.
"""

from __future__ import annotations

import logging
import shutil

from devstack.core.errors import StepError
from devstack.core.models.site import SiteKind
from devstack.core.services.config_ops import append_block_if_absent
from devstack.core.services.installers.base import SiteInstaller, Step
from devstack.core.services.templates import (
    FRONTEND_ENV_FILE,
    FRONTEND_ENV_MARKER,
    frontend_env_block,
)

logger = logging.getLogger(__name__)

VITE_INITIALIZER = "vite@latest"
VITE_TEMPLATE = "vue"
BUILD_SCRIPT = "build"


class FrontendInstaller(SiteInstaller):
    kind = SiteKind.FRONTEND

    def steps(self) -> list[Step]:
        return [
            Step("scaffold", "Setting up Frontend...", self.scaffold),
            Step("template", "Initializing Vue project using Vite...", self.scaffold_app),
            Step("api-env", "Pointing the frontend at the backend APIs...", self.write_api_env),
            Step("dependencies", "Installing frontend dependencies...", self.install_dependencies),
            Step("build", "Building the frontend...", self.build),
            Step("register", "Configuring DDEV for Frontend...", self._register),
            Step("start", "Starting Frontend DDEV environment...", self.start),
        ]

    def clean(self) -> bool:
        """Remove the frontend entirely so the next install starts fresh.

        Returns:
            True if anything was removed.
        """
        if not self.site_dir.exists():
            return False
        self._notify("clean", "started", f"Removing '{self.spec.directory}' for a clean reinstall...")
        if self.spec.marker(self.config.root).is_file():
            self._best_effort(
                self.registry.ddev.delete(self.spec.project_name, cwd=self.site_dir),
                "ddev delete",
            )
        try:
            shutil.rmtree(self.site_dir)
        except OSError as e:
            self._notify("clean", "failed", str(e))
            raise self._filesystem_error("clean", e) from e
        self._notify("clean", "done")
        return True

    # ── Steps ───────────────────────────────────────────────────

    def scaffold(self) -> None:
        if self.site_dir.exists():
            self._warn(
                "scaffold",
                f"'{self.spec.directory}' directory already exists. Skipping creation.",
            )
            return
        self.site_dir.mkdir(parents=True)

    def scaffold_app(self) -> None:
        if (self.site_dir / "package.json").is_file():
            logger.info("package.json present; keeping the existing app")
            return
        self._require(
            self.registry.npm.create(self.site_dir, VITE_INITIALIZER, VITE_TEMPLATE),
            "template",
        )

    def write_api_env(self) -> None:
        append_block_if_absent(
            self.site_dir / FRONTEND_ENV_FILE,
            FRONTEND_ENV_MARKER,
            frontend_env_block(self.config),
        )

    def install_dependencies(self) -> None:
        self._require(self.registry.npm.install(self.site_dir), "dependencies")

    def build(self) -> None:
        self._require(self.registry.npm.run_script(self.site_dir, BUILD_SCRIPT), "build")
        output = self.site_dir / self.spec.docroot
        if not output.is_dir():
            raise StepError(
                self.spec.human_name,
                "build",
                f"build finished but '{self.spec.docroot}/' was not produced",
                hints=[f"Check the '{BUILD_SCRIPT}' script in {self.spec.directory}/package.json."],
            )
