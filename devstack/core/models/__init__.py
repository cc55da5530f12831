"""
Domain models — Pydantic types for the workspace bootstrapper.

All models are re-exported here for convenient access:

    from devstack.core.models import WorkspaceConfig, SiteSpec, SiteStatus, CommandResult
"""

from devstack.core.models.command import CommandResult
from devstack.core.models.site import DDEV_MARKER, SITE_ORDER, SiteKind, SiteSpec, SiteStatus
from devstack.core.models.workspace import (
    WORDPRESS_SECRET_KEYS,
    AdminCredentials,
    CorsSettings,
    DatabaseSettings,
    RuntimeSettings,
    WorkspaceConfig,
)

__all__ = [
    # workspace.py
    "AdminCredentials",
    # command.py
    "CommandResult",
    "CorsSettings",
    # site.py
    "DDEV_MARKER",
    "DatabaseSettings",
    "RuntimeSettings",
    "SITE_ORDER",
    "SiteKind",
    "SiteSpec",
    "SiteStatus",
    "WORDPRESS_SECRET_KEYS",
    "WorkspaceConfig",
]
