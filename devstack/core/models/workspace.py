"""
Workspace model — the root configuration of a bootstrap run.

Built once at startup (from defaults, optionally overlaid with
devstack.yml) and passed explicitly to every service. Frozen: nothing
mutates it after construction.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from devstack.core.models.site import SITE_ORDER, SiteKind, SiteSpec

WORDPRESS_SECRET_KEYS: tuple[str, ...] = (
    "AUTH_KEY",
    "SECURE_AUTH_KEY",
    "LOGGED_IN_KEY",
    "NONCE_KEY",
    "AUTH_SALT",
    "SECURE_AUTH_SALT",
    "LOGGED_IN_SALT",
    "NONCE_SALT",
)


def _default_wordpress() -> SiteSpec:
    return SiteSpec(
        kind=SiteKind.WORDPRESS,
        directory="wordpress",
        project_name="wordpress-bedrock",
        human_name="WordPress",
        title="My Bedrock Site",
        project_type="wordpress",
        docroot="web",
    )


def _default_drupal() -> SiteSpec:
    return SiteSpec(
        kind=SiteKind.DRUPAL,
        directory="drupal",
        project_name="drupal-site",
        human_name="Drupal",
        title="My Drupal Site",
        project_type="drupal10",
        docroot="web",
    )


def _default_frontend() -> SiteSpec:
    return SiteSpec(
        kind=SiteKind.FRONTEND,
        directory="frontend",
        project_name="frontend-app",
        human_name="Frontend",
        title="Frontend",
        project_type="php",
        docroot="dist",
        webserver_type="nginx-fpm",
    )


class AdminCredentials(BaseModel):
    """Default administrator account for both CMS installs."""

    model_config = ConfigDict(frozen=True)

    user: str = "admin"
    password: str = "password"
    email: str = "admin@example.com"


class DatabaseSettings(BaseModel):
    """DDEV's in-network database coordinates."""

    model_config = ConfigDict(frozen=True)

    name: str = "db"
    user: str = "db"
    password: str = "db"
    host: str = "db"

    @property
    def url(self) -> str:
        """Database URL in the form Drush expects."""
        return f"mysql://{self.user}:{self.password}@{self.host}/{self.name}"


class CorsSettings(BaseModel):
    """Cross-origin policy granted to the frontend by both backends."""

    model_config = ConfigDict(frozen=True)

    methods: tuple[str, ...] = ("GET", "POST", "PUT", "DELETE", "OPTIONS")
    headers: tuple[str, ...] = ("Content-Type", "Authorization", "X-Requested-With", "Accept")
    supports_credentials: bool = True
    max_age: int = 0


class RuntimeSettings(BaseModel):
    """Container runtime reachability and remediation."""

    model_config = ConfigDict(frozen=True)

    provider: str = "orbstack"
    start_timeout: float = Field(default=60.0, gt=0)
    poll_interval: float = Field(default=2.0, gt=0)
    settle_seconds: float = Field(default=5.0, ge=0)


class WorkspaceConfig(BaseModel):
    """Everything a bootstrap run needs to know, fixed at startup."""

    model_config = ConfigDict(frozen=True)

    root: Path = Field(default_factory=Path.cwd)
    tld: str = "ddev.site"

    wordpress: SiteSpec = Field(default_factory=_default_wordpress)
    drupal: SiteSpec = Field(default_factory=_default_drupal)
    frontend: SiteSpec = Field(default_factory=_default_frontend)

    admin: AdminCredentials = Field(default_factory=AdminCredentials)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    cors: CorsSettings = Field(default_factory=CorsSettings)
    runtime: RuntimeSettings = Field(default_factory=RuntimeSettings)

    secrets_url: str = "https://api.wordpress.org/secret-key/1.1/salt/"
    required_tools: tuple[str, ...] = ("ddev", "composer", "node", "npm")

    @property
    def sites(self) -> list[SiteSpec]:
        """All sites in fixed install order."""
        return [self.site(kind) for kind in SITE_ORDER]

    def site(self, kind: SiteKind | str) -> SiteSpec:
        """Look up a site by kind (or its string value)."""
        kind = SiteKind(kind)
        if kind is SiteKind.WORDPRESS:
            return self.wordpress
        if kind is SiteKind.DRUPAL:
            return self.drupal
        return self.frontend

    def url(self, kind: SiteKind | str) -> str:
        """Public URL of a site."""
        return self.site(kind).url(self.tld)

    def site_path(self, kind: SiteKind | str) -> Path:
        """Directory of a site under the workspace root."""
        return self.site(kind).path(self.root)
