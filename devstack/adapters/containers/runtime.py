"""
Container runtime adapter — is a Docker daemon reachable, and can we
start the local virtualization provider that hosts it?
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from devstack.adapters.base import Adapter
from devstack.adapters.shell.command import CommandRunner
from devstack.core.models.command import CommandResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RuntimeProvider:
    """A local application that runs the Docker daemon."""

    name: str
    binary: str
    start_command: tuple[str, ...]
    status_command: tuple[str, ...]
    install_hint: str


KNOWN_PROVIDERS: dict[str, RuntimeProvider] = {
    "orbstack": RuntimeProvider(
        name="OrbStack",
        binary="orb",
        start_command=("orb", "start"),
        status_command=("orb", "status"),
        install_hint="Install OrbStack from https://orbstack.dev and re-run.",
    ),
    "colima": RuntimeProvider(
        name="Colima",
        binary="colima",
        start_command=("colima", "start"),
        status_command=("colima", "status"),
        install_hint="Install Colima (brew install colima) and re-run.",
    ),
}


class ContainerRuntimeAdapter(Adapter):
    """Docker daemon reachability plus provider start."""

    def __init__(self, runner: CommandRunner, provider: str | None = None):
        super().__init__(runner)
        self._provider_key = provider

    @property
    def name(self) -> str:
        return "docker"

    @property
    def provider(self) -> RuntimeProvider | None:
        if not self._provider_key:
            return None
        return KNOWN_PROVIDERS.get(self._provider_key.lower())

    def provider_available(self) -> bool:
        provider = self.provider
        return provider is not None and self.runner.which(provider.binary) is not None

    def is_reachable(self) -> bool:
        """Lightweight daemon probe.

        Prefers ``docker info``; without a docker CLI, falls back to the
        provider's own status command.
        """
        if self.is_available():
            return self.runner.run(["docker", "info"], timeout=20).ok

        if self.provider_available():
            provider = self.provider
            assert provider is not None
            result = self.runner.run(list(provider.status_command), timeout=20)
            text = f"{result.stdout} {result.stderr}".lower()
            return result.ok and "running" in text and "not running" not in text

        return False

    def start_provider(self) -> CommandResult:
        """Ask the provider application to start its daemon."""
        provider = self.provider
        if provider is None:
            return CommandResult.failure(
                command=[],
                stderr=f"Unknown container runtime provider: {self._provider_key}",
            )
        logger.info("Starting %s", provider.name)
        return self.runner.run(list(provider.start_command), timeout=120)
