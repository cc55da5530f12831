"""
Configuration file mutation — .env upserts, secret rotation, guarded
appends, and structured YAML upserts.

Channel-independent: no CLI dependency. Every function takes an explicit
path and rewrites the file atomically (temp file, then rename), so an
interrupted run never leaves a half-written file behind.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import tempfile
from pathlib import Path
from typing import Any, Iterable

import yaml

from devstack.adapters.http.salts import SecretSource
from devstack.core.errors import ConfigFileError, SecretsFetchError

logger = logging.getLogger(__name__)

# Values shipped in templates that must never reach an install.
PLACEHOLDER_VALUES = frozenset({
    "",
    "generateme",
    "put your unique phrase here",
})

# Inside double quotes dotenv reads \\, \" and \$ as escapes; ${...} interpolates
_DQ_SPECIAL = re.compile(r'([\\"$])')
_DQ_ESCAPE = re.compile(r'\\([\\"$])')


# ── Helpers ─────────────────────────────────────────────────────


def _key_pattern(key: str) -> re.Pattern[str]:
    """Match ``KEY=``, ``export KEY=`` and commented ``# KEY=`` lines."""
    return re.compile(rf"^\s*(?:#\s*)?(?:export\s+)?{re.escape(key)}\s*=")


def _read_lines(path: Path) -> list[str]:
    if not path.is_file():
        raise ConfigFileError(f"File not found: {path}")
    return path.read_text(encoding="utf-8").splitlines()


def _write_lines(path: Path, lines: list[str]) -> None:
    write_atomic(path, "\n".join(lines) + "\n")


def _format_assignment(key: str, value: str) -> str:
    if "'" not in value:
        return f"{key}='{value}'"
    escaped = _DQ_SPECIAL.sub(r"\\\1", value)
    return f'{key}="{escaped}"'


def _unquote(value: str) -> str:
    if len(value) < 2 or value[0] != value[-1] or value[0] not in ('"', "'"):
        return value
    if value[0] == "'":
        return value[1:-1]
    return _DQ_ESCAPE.sub(r"\1", value[1:-1])


def _default_mode() -> int:
    """Permissions a plain ``open()`` would give a new file."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_atomic(path: Path, content: str) -> None:
    """Replace ``path`` with ``content`` via a temp file in the same directory."""
    path.parent.mkdir(parents=True, exist_ok=True)
    _fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    tmp = Path(tmp_path)
    try:
        with open(_fd, "w", encoding="utf-8") as fh:
            fh.write(content)
        if path.exists():
            shutil.copymode(path, tmp)
        else:
            os.chmod(tmp, _default_mode())
        tmp.replace(path)
    except Exception:
        tmp.unlink(missing_ok=True)
        raise
    logger.debug("Wrote %s", path)


def seed_from_template(target: Path, template: Path) -> bool:
    """Copy ``template`` to ``target`` unless ``target`` already exists.

    Returns:
        True if a copy was made.

    Raises:
        ConfigFileError: if a copy is needed and the template is missing.
    """
    if target.exists():
        return False
    if not template.is_file():
        raise ConfigFileError(f"Template not found: {template}")
    shutil.copyfile(template, target)
    logger.info("Seeded %s from %s", target.name, template.name)
    return True


# ── .env files ──────────────────────────────────────────────────


def read_env_values(env_path: Path) -> dict[str, str]:
    """Read active ``KEY=value`` pairs from a .env file (quotes stripped)."""
    if not env_path.exists():
        return {}
    values: dict[str, str] = {}
    for line in env_path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        if line.startswith("export "):
            line = line[len("export "):]
        key, _, value = line.partition("=")
        key = key.strip()
        values[key] = _unquote(value.strip())
    return values


def replace_or_set(env_path: Path, key: str, value: str) -> bool:
    """Set ``key`` to ``value``, rewriting in place or appending.

    The first matching line (active, exported, or commented out) is
    rewritten; any further matches are dropped, so the key is present
    exactly once afterwards.

    Returns:
        True if the file content changed.
    """
    lines = _read_lines(env_path)
    pattern = _key_pattern(key)
    assignment = _format_assignment(key, value)

    out: list[str] = []
    placed = False
    for line in lines:
        if pattern.match(line):
            if not placed:
                out.append(assignment)
                placed = True
            continue
        out.append(line)
    if not placed:
        out.append(assignment)

    if out == lines:
        return False
    _write_lines(env_path, out)
    logger.debug("Set %s in %s", key, env_path)
    return True


def set_many(env_path: Path, values: dict[str, str]) -> list[str]:
    """Apply ``replace_or_set`` for each pair; return the keys that changed."""
    return [key for key, value in values.items() if replace_or_set(env_path, key, value)]


def secrets_are_valid(values: dict[str, str], keys: Iterable[str]) -> bool:
    """All ``keys`` present, non-placeholder, and pairwise distinct."""
    seen: set[str] = set()
    for key in keys:
        value = values.get(key)
        if value is None or value.strip().lower() in PLACEHOLDER_VALUES:
            return False
        if value in seen:
            return False
        seen.add(value)
    return True


def regenerate_secrets(env_path: Path, keys: Iterable[str], source: SecretSource) -> list[str]:
    """Replace every secret in ``keys`` with a freshly fetched value.

    The block is fetched before the file is touched: on a fetch failure
    the file is left exactly as it was and SecretsFetchError propagates.

    Returns:
        The keys written.

    Raises:
        ConfigFileError: if ``env_path`` does not exist.
        SecretsFetchError: if the source fails or omits a required key.
    """
    keys = list(keys)
    lines = _read_lines(env_path)

    block = source.fetch()
    fetched = _block_keys(block)
    missing = [k for k in keys if k not in fetched]
    if missing:
        raise SecretsFetchError(f"Secret source did not provide: {', '.join(missing)}")

    # Only the requested keys are written; extras in the block are dropped
    block_lines = [line for line in block.splitlines() if _line_key(line) in keys]

    patterns = [_key_pattern(k) for k in keys]
    kept = [line for line in lines if not any(p.match(line) for p in patterns)]
    while kept and not kept[-1].strip():
        kept.pop()
    _write_lines(env_path, [*kept, "", *block_lines])

    values = read_env_values(env_path)
    if not secrets_are_valid(values, keys):
        raise SecretsFetchError("Fetched secrets are not unique or still hold placeholders")

    logger.info("Regenerated %d secrets in %s", len(keys), env_path)
    return keys


def _line_key(line: str) -> str | None:
    stripped = line.strip()
    if not stripped or stripped.startswith("#") or "=" not in stripped:
        return None
    return stripped.partition("=")[0].strip()


def _block_keys(block: str) -> set[str]:
    return {k for k in (_line_key(line) for line in block.splitlines()) if k}


# ── Generic blocks ──────────────────────────────────────────────


def append_block_if_absent(path: Path, marker: str, block: str) -> bool:
    """Append ``block`` unless some line already contains ``marker``.

    A missing file is created with just the block.

    Returns:
        True if the block was appended.
    """
    if path.is_file():
        content = path.read_text(encoding="utf-8")
        if any(marker in line for line in content.splitlines()):
            logger.debug("Marker %r already present in %s", marker, path)
            return False
    else:
        content = ""

    if content and not content.endswith("\n"):
        content += "\n"
    if content:
        content += "\n"
    write_atomic(path, content + block.rstrip("\n") + "\n")
    logger.debug("Appended block %r to %s", marker, path)
    return True


# ── YAML files ──────────────────────────────────────────────────


def upsert_yaml_key(path: Path, section: str, key: str, value: Any) -> bool:
    """Set ``data[section][key] = value`` in a YAML mapping file.

    The document is parsed, updated, and serialized back, so the key
    exists exactly once no matter how many times this runs. YAML comments
    are not preserved.

    Returns:
        True if the file content changed.

    Raises:
        ConfigFileError: if the file is missing or not a YAML mapping.
    """
    if not path.is_file():
        raise ConfigFileError(f"File not found: {path}")

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigFileError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigFileError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")

    target = data.get(section)
    if target is None:
        target = {}
        data[section] = target
    elif not isinstance(target, dict):
        raise ConfigFileError(f"'{section}' in {path} is not a mapping")

    if target.get(key) == value:
        return False

    target[key] = value
    write_atomic(path, yaml.safe_dump(data, sort_keys=False, default_flow_style=False))
    logger.info("Updated %s.%s in %s", section, key, path)
    return True

