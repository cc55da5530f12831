"""
Status use case — what exists, what runs, and where it lives.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from devstack.adapters.registry import AdapterRegistry
from devstack.core.models.site import SiteKind, SiteStatus
from devstack.core.models.workspace import WorkspaceConfig
from devstack.core.services.site_probe import probe_all


@dataclass
class SiteListing:
    """One managed site as seen right now."""

    kind: SiteKind
    human_name: str
    project_name: str
    directory: str
    url: str
    status: SiteStatus = SiteStatus.NOT_CREATED
    ddev_row: str | None = None    # matching `ddev list` row, if DDEV knows it

    @property
    def registered(self) -> bool:
        return self.ddev_row is not None

    def to_dict(self) -> dict:
        return {
            "site": self.kind.value,
            "name": self.human_name,
            "project": self.project_name,
            "directory": self.directory,
            "url": self.url,
            "status": self.status.label,
            "registered": self.registered,
        }


@dataclass
class ListResult:
    """Listing of every managed site, in install order."""

    sites: list[SiteListing] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"sites": [s.to_dict() for s in self.sites]}


def summary(config: WorkspaceConfig) -> list[tuple[str, str]]:
    """(human name, URL) for each site, without probing anything."""
    return [(spec.human_name, spec.url(config.tld)) for spec in config.sites]


def list_sites(config: WorkspaceConfig, registry: AdapterRegistry) -> ListResult:
    """Probe every site (including DDEV run state) and match `ddev list` rows."""
    ddev = registry.ddev
    statuses = probe_all(config, ddev)
    rows = ddev.listed(spec.project_name for spec in config.sites)

    result = ListResult()
    for spec in config.sites:
        result.sites.append(SiteListing(
            kind=spec.kind,
            human_name=spec.human_name,
            project_name=spec.project_name,
            directory=spec.directory,
            url=spec.url(config.tld),
            status=statuses[spec.kind],
            ddev_row=rows.get(spec.project_name),
        ))
    return result
