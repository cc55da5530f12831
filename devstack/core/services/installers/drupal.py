"""
Drupal installer.

Scaffolds drupal/recommended-project, installs the site with Drush,
enables JSON:API, and grants the frontend origin CORS access through a
single ``parameters.cors.config`` entry in services.yml.
"""

from __future__ import annotations

import logging

from devstack.core.models.site import SiteKind
from devstack.core.services.config_ops import seed_from_template, upsert_yaml_key
from devstack.core.services.installers.base import SiteInstaller, Step
from devstack.core.services.templates import (
    DRUPAL_CORS_KEY,
    DRUPAL_CORS_SECTION,
    DRUPAL_DEFAULT_SERVICES_PATH,
    DRUPAL_SERVICES_PATH,
    drupal_cors_config,
)

logger = logging.getLogger(__name__)

DRUPAL_PACKAGE = "drupal/recommended-project"
API_MODULE = "jsonapi"


class DrupalInstaller(SiteInstaller):
    kind = SiteKind.DRUPAL

    def steps(self) -> list[Step]:
        return [
            Step("scaffold", "Creating the Drupal project...", self.scaffold),
            Step("register", "Configuring DDEV for Drupal...", self._register),
            Step("start", "Starting Drupal DDEV environment...", self.start),
            Step("drush", "Ensuring Drush is installed...", self.require_drush),
            Step("site-install", "Installing Drupal site...", self.install_site),
            Step("jsonapi", "Enabling Drupal JSON:API module...", self.enable_api),
            Step("cors", "Configuring Drupal CORS...", self.configure_cors),
        ]

    # ── Steps ───────────────────────────────────────────────────

    def scaffold(self) -> None:
        self._create_or_reuse(
            lambda: self.registry.composer.create_project(
                DRUPAL_PACKAGE, self.spec.directory, self.config.root, "--no-interaction",
            )
        )

    def require_drush(self) -> None:
        self._require(self.registry.drush.require(self.site_dir), "drush")

    def install_site(self) -> None:
        admin = self.config.admin
        self._require(
            self.registry.drush.site_install(
                self.site_dir,
                db_url=self.config.database.url,
                site_name=self.spec.title,
                account_name=admin.user,
                account_pass=admin.password,
            ),
            "site-install",
            hints=[
                "Check the Drush output above for details.",
                f"After fixing, run `ddev drush site:install` inside {self.spec.directory}/, "
                f"or remove {self.spec.directory}/.ddev so --install retries the whole setup.",
            ],
        )

    def enable_api(self) -> None:
        self._require(self.registry.drush.enable(self.site_dir, API_MODULE), "jsonapi")

    def configure_cors(self) -> None:
        services = self.site_dir / DRUPAL_SERVICES_PATH
        default = self.site_dir / DRUPAL_DEFAULT_SERVICES_PATH

        if not services.exists():
            if not default.is_file():
                self._warn(
                    "cors",
                    f"Neither {DRUPAL_SERVICES_PATH} nor {DRUPAL_DEFAULT_SERVICES_PATH} exists; "
                    "CORS was not configured.",
                )
                return
            seed_from_template(services, default)

        changed = upsert_yaml_key(services, DRUPAL_CORS_SECTION, DRUPAL_CORS_KEY, drupal_cors_config(self.config))
        if not changed:
            logger.info("Drupal CORS already configured")
        self._require(self.registry.drush.cache_rebuild(self.site_dir), "cors")
