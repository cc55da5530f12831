"""
Adapter registry — one place that owns every tool adapter for a run.

Services receive the registry and pull the adapters they need from it,
so a test can swap the runner (or a single adapter) without touching
service code.
"""

from __future__ import annotations

import logging
from typing import cast

from devstack.adapters.base import Adapter
from devstack.adapters.cms.drupal import DrushAdapter
from devstack.adapters.cms.wordpress import WpCliAdapter
from devstack.adapters.containers.ddev import DdevAdapter
from devstack.adapters.containers.runtime import ContainerRuntimeAdapter
from devstack.adapters.http.salts import HttpSecretSource, SecretSource
from devstack.adapters.languages.node import NpmAdapter
from devstack.adapters.languages.php import ComposerAdapter
from devstack.adapters.shell.command import CommandRunner
from devstack.core.models.workspace import WorkspaceConfig

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Central registry of adapters plus the runner they share."""

    def __init__(self, runner: CommandRunner, secrets: SecretSource | None = None):
        self.runner = runner
        self.secrets = secrets
        self._adapters: dict[str, Adapter] = {}

    def register(self, adapter: Adapter) -> None:
        """Register an adapter under its name."""
        name = adapter.name
        if name in self._adapters:
            logger.warning("Overwriting existing adapter: %s", name)
        self._adapters[name] = adapter
        logger.debug("Registered adapter: %s", name)

    def __getitem__(self, name: str) -> Adapter:
        adapter = self._adapters.get(name)
        if adapter is None:
            raise KeyError(f"No adapter registered for '{name}'")
        return adapter

    # ── Typed accessors ─────────────────────────────────────────

    @property
    def ddev(self) -> DdevAdapter:
        return cast(DdevAdapter, self["ddev"])

    @property
    def composer(self) -> ComposerAdapter:
        return cast(ComposerAdapter, self["composer"])

    @property
    def npm(self) -> NpmAdapter:
        return cast(NpmAdapter, self["npm"])

    @property
    def wp(self) -> WpCliAdapter:
        return cast(WpCliAdapter, self["wp-cli"])

    @property
    def drush(self) -> DrushAdapter:
        return cast(DrushAdapter, self["drush"])

    @property
    def runtime(self) -> ContainerRuntimeAdapter:
        return cast(ContainerRuntimeAdapter, self["docker"])


def default_registry(
    config: WorkspaceConfig,
    runner: CommandRunner | None = None,
    secrets: SecretSource | None = None,
) -> AdapterRegistry:
    """Build the registry every real run uses."""
    runner = runner or CommandRunner()
    registry = AdapterRegistry(
        runner,
        secrets=secrets or HttpSecretSource(config.secrets_url),
    )
    ddev = DdevAdapter(runner)
    registry.register(ddev)
    registry.register(ComposerAdapter(runner))
    registry.register(NpmAdapter(runner))
    registry.register(WpCliAdapter(runner, ddev))
    registry.register(DrushAdapter(runner, ddev))
    registry.register(ContainerRuntimeAdapter(runner, provider=config.runtime.provider))
    return registry
