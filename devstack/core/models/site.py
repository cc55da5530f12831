"""
Site models — the three managed sub-projects and their derived status.

A site is declared once in configuration; its status is never stored.
It is re-derived from the filesystem (and optionally DDEV) every time
something needs to know it.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from pathlib import Path

from pydantic import BaseModel, ConfigDict

# Marker written by ``ddev config``; its presence means "configured".
DDEV_MARKER = ".ddev/config.yaml"


class SiteKind(str, Enum):
    """Which kind of sub-project a site is."""

    WORDPRESS = "wordpress"
    DRUPAL = "drupal"
    FRONTEND = "frontend"


# Fixed install / lifecycle order.
SITE_ORDER: tuple[SiteKind, ...] = (SiteKind.WORDPRESS, SiteKind.DRUPAL, SiteKind.FRONTEND)


class SiteStatus(IntEnum):
    """Derived status of a sub-project, ordered by progress."""

    NOT_CREATED = 0
    CREATED = 1
    CONFIGURED = 2
    RUNNING = 3

    @property
    def label(self) -> str:
        return self.name.lower().replace("_", " ")


class SiteSpec(BaseModel):
    """Declaration of one sub-project."""

    model_config = ConfigDict(frozen=True)

    kind: SiteKind
    directory: str
    project_name: str
    human_name: str
    title: str = ""
    project_type: str = "php"
    docroot: str = "web"
    webserver_type: str | None = None

    def url(self, tld: str) -> str:
        """Public URL DDEV assigns to this project."""
        return f"https://{self.project_name}.{tld}"

    def path(self, root: Path) -> Path:
        """Absolute directory of the site under the workspace root."""
        return root / self.directory

    def marker(self, root: Path) -> Path:
        """Path of the DDEV config marker file."""
        return self.path(root) / DDEV_MARKER
