"""Adapters — tool bindings for every external collaborator.

Public re-exports for convenient access.
"""

from devstack.adapters.base import Adapter
from devstack.adapters.mock import MockRunner
from devstack.adapters.registry import AdapterRegistry, default_registry
from devstack.adapters.shell.command import CommandRunner

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "CommandRunner",
    "MockRunner",
    "default_registry",
]
