"""
WordPress (Bedrock) installer.

Scaffolds Bedrock with Composer, points its .env at DDEV's database and
URL, fills in unique keys and salts, installs core with WP-CLI, and
drops a mu-plugin that lets the frontend origin call the REST API.
"""

from __future__ import annotations

import logging
from pathlib import Path

from devstack.core.errors import SecretsFetchError
from devstack.core.models.site import SiteKind
from devstack.core.models.workspace import WORDPRESS_SECRET_KEYS
from devstack.core.services.config_ops import (
    read_env_values,
    regenerate_secrets,
    secrets_are_valid,
    seed_from_template,
    set_many,
    write_atomic,
)
from devstack.core.services.installers.base import SiteInstaller, Step
from devstack.core.services.templates import WP_CORS_PLUGIN_PATH, wordpress_cors_plugin

logger = logging.getLogger(__name__)

BEDROCK_PACKAGE = "roots/bedrock"
ENV_FILE = ".env"
ENV_TEMPLATE = ".env.example"

SALTS_HINT = (
    "A common cause is missing or duplicate salts in wordpress/.env. "
    "Make sure every *_KEY and *_SALT value is unique."
)


class WordPressInstaller(SiteInstaller):
    kind = SiteKind.WORDPRESS

    def steps(self) -> list[Step]:
        return [
            Step("scaffold", "Creating the Bedrock project...", self.scaffold),
            Step("register", "Configuring DDEV for WordPress...", self._register),
            Step("env", "Configuring Bedrock .env file...", self.configure_env),
            Step("start", "Starting WordPress DDEV environment...", self.start),
            Step("database", "Ensuring a clean database for WordPress installation...", self.reset_database),
            Step("site-install", "Installing WordPress core...", self.install_core),
            Step("cors", "Configuring WordPress CORS (via mu-plugin)...", self.write_cors_plugin),
        ]

    # ── Steps ───────────────────────────────────────────────────

    def scaffold(self) -> None:
        self._create_or_reuse(
            lambda: self.registry.composer.create_project(
                BEDROCK_PACKAGE, self.spec.directory, self.config.root,
            )
        )

    def configure_env(self) -> None:
        env_path = self.site_dir / ENV_FILE
        seed_from_template(env_path, self.site_dir / ENV_TEMPLATE)

        db = self.config.database
        set_many(env_path, {
            "DB_NAME": db.name,
            "DB_USER": db.user,
            "DB_PASSWORD": db.password,
            "DB_HOST": db.host,
            "WP_HOME": self.url,
            "WP_SITEURL": f"{self.url}/wp",
        })

        source = self.registry.secrets
        if source is None:
            self._salts_unavailable(env_path, "no secret source configured")
            return
        try:
            regenerate_secrets(env_path, WORDPRESS_SECRET_KEYS, source)
        except SecretsFetchError as e:
            self._salts_unavailable(env_path, str(e))
            return
        logger.info("Generated fresh WordPress keys and salts")

    def reset_database(self) -> None:
        result = self.registry.wp.reset_database(self.site_dir, self.config.database.name)
        if result.failed:
            self._notify(
                "database", "warning",
                "DB drop/create had issues; usually ignorable on first run.",
            )

    def install_core(self) -> None:
        admin = self.config.admin
        self._require(
            self.registry.wp.core_install(
                self.site_dir,
                url=self.url,
                title=self.spec.title,
                admin_user=admin.user,
                admin_password=admin.password,
                admin_email=admin.email,
            ),
            "site-install",
            hints=[
                "Check the WP-CLI output above for details.",
                SALTS_HINT,
                f"After fixing, run `ddev wp --path=web/wp core install` inside "
                f"{self.spec.directory}/, or remove {self.spec.directory}/.ddev so "
                f"--install retries the whole setup.",
            ],
        )

    def write_cors_plugin(self) -> None:
        write_atomic(self.site_dir / WP_CORS_PLUGIN_PATH, wordpress_cors_plugin(self.config))

    # ── Helpers ─────────────────────────────────────────────────

    def _salts_unavailable(self, env_path: Path, reason: str) -> None:
        if secrets_are_valid(read_env_values(env_path), WORDPRESS_SECRET_KEYS):
            self._warn(
                "env",
                f"Could not generate fresh WordPress salts ({reason}); "
                f"keeping the existing unique values in {self.spec.directory}/{ENV_FILE}.",
            )
            return
        self._warn(
            "env",
            f"CRITICAL: could not generate WordPress salts ({reason}). "
            f"You MUST add unique keys and salts to {self.spec.directory}/{ENV_FILE} "
            "manually, or the core install will fail.",
        )
