"""
Adapter base — the contract between services and external tools.

Services only talk to tools through adapters, and adapters only start
processes through a CommandRunner. Each adapter exposes typed
operations for one collaborator; any parsing of that tool's output
lives in the adapter, nowhere else.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from devstack.adapters.shell.command import CommandRunner


class Adapter(ABC):
    """Abstract base class for all tool adapters.

    Adapters return CommandResults. They NEVER raise for a failing
    command; the caller decides whether a failure is fatal.

    To create a new adapter:
        1. Subclass Adapter
        2. Implement name (and binary, if it differs)
        3. Add typed operations that call ``self.runner.run``
        4. Register it in ``default_registry``
    """

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g., 'ddev', 'composer', 'npm')."""

    @property
    def binary(self) -> str:
        """Executable this adapter needs on PATH."""
        return self.name

    def is_available(self) -> bool:
        """Check if this adapter's underlying tool is on PATH."""
        return self.runner.which(self.binary) is not None

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
