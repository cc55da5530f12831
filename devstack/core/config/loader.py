"""
Configuration loader — reads devstack.yml into a WorkspaceConfig.

The file is optional: without one, every default applies and the
workspace root is the current directory. When present, it is found by
walking up from the starting directory and its parent becomes the root.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from devstack.core.errors import ConfigError
from devstack.core.models.workspace import WorkspaceConfig

logger = logging.getLogger(__name__)

# Default config filename
WORKSPACE_CONFIG_FILE = "devstack.yml"


def find_workspace_file(start_dir: Path | None = None) -> Path | None:
    """Search for devstack.yml starting from the given directory, walking up.

    Args:
        start_dir: Directory to start searching from (default: cwd).

    Returns:
        Path to devstack.yml, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()

    for _ in range(20):  # safety limit
        candidate = current / WORKSPACE_CONFIG_FILE
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break  # filesystem root
        current = parent

    return None


def load_workspace(path: Path | None = None, root: Path | None = None) -> WorkspaceConfig:
    """Build the workspace configuration.

    Args:
        path: Explicit path to devstack.yml. If None, searches upward
            from ``root`` (or cwd); a missing file means defaults.
        root: Workspace root override. Defaults to the config file's
            directory, or cwd when there is no config file.

    Returns:
        Validated, frozen WorkspaceConfig.

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid.
    """
    explicit = path is not None
    if path is None:
        path = find_workspace_file(root)

    if path is None:
        resolved_root = (root or Path.cwd()).resolve()
        logger.debug("No %s found, using defaults rooted at %s", WORKSPACE_CONFIG_FILE, resolved_root)
        return WorkspaceConfig(root=resolved_root)

    if not path.is_file():
        if explicit:
            raise ConfigError(f"Config file not found: {path}")
        return WorkspaceConfig(root=(root or Path.cwd()).resolve())

    logger.debug("Loading workspace config from %s", path)

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    # The YAML may wrap everything under a "workspace" key or be flat
    if "workspace" in data:
        data = data["workspace"]
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"Section 'workspace' in {path} must be a mapping")
    data = dict(data)

    # Site sections are partial overrides of the built-in declarations
    defaults = WorkspaceConfig()
    for kind in ("wordpress", "drupal", "frontend"):
        if kind in data:
            override = data[kind]
            if not isinstance(override, dict):
                raise ConfigError(f"Section '{kind}' in {path} must be a mapping")
            base = getattr(defaults, kind).model_dump()
            base.update(override)
            base["kind"] = kind
            data[kind] = base

    data["root"] = (root or path.parent).resolve()

    try:
        config = WorkspaceConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid workspace configuration: {e}") from e

    logger.info("Loaded workspace config from %s (root=%s)", path, config.root)
    return config
