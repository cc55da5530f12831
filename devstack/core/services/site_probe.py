"""
Site probes — derive each sub-project's status from the filesystem.

Channel-independent: no CLI dependency. Status is never stored; call
``probe_site`` whenever it is needed.
"""

from __future__ import annotations

import logging

from devstack.adapters.containers.ddev import DdevAdapter
from devstack.core.models.site import SiteKind, SiteSpec, SiteStatus
from devstack.core.models.workspace import WorkspaceConfig

logger = logging.getLogger(__name__)


def _spec(config: WorkspaceConfig, site: SiteSpec | SiteKind | str) -> SiteSpec:
    return site if isinstance(site, SiteSpec) else config.site(site)


def probe_site(
    config: WorkspaceConfig,
    site: SiteSpec | SiteKind | str,
    ddev: DdevAdapter | None = None,
) -> SiteStatus:
    """Work out how far a sub-project has progressed.

    ``RUNNING`` is only reported when ``ddev`` is given; without it a
    configured site reports ``CONFIGURED``.
    """
    spec = _spec(config, site)
    site_dir = spec.path(config.root)

    if not site_dir.is_dir():
        return SiteStatus.NOT_CREATED
    if not spec.marker(config.root).is_file():
        return SiteStatus.CREATED
    if ddev is not None and ddev.is_running(site_dir):
        return SiteStatus.RUNNING
    return SiteStatus.CONFIGURED


def is_installed(config: WorkspaceConfig, site: SiteSpec | SiteKind | str) -> bool:
    """Directory exists AND the DDEV marker exists."""
    return probe_site(config, site) >= SiteStatus.CONFIGURED


def probe_all(config: WorkspaceConfig, ddev: DdevAdapter | None = None) -> dict[SiteKind, SiteStatus]:
    """Status of every managed site, in install order."""
    return {spec.kind: probe_site(config, spec, ddev) for spec in config.sites}
