"""
Secret sources — where freshly generated WordPress keys and salts come from.

The remote endpoint is treated as opaque text. WordPress' generator
answers with PHP ``define()`` lines; those are rewritten into the
``KEY='value'`` form Bedrock's .env expects. Lines already in that form
pass through unchanged.
"""

from __future__ import annotations

import logging
import re
import urllib.error
import urllib.request
from abc import ABC, abstractmethod

from devstack.core.errors import SecretsFetchError

logger = logging.getLogger(__name__)

_DEFINE_RE = re.compile(r"""^\s*define\(\s*'(?P<key>[A-Z_]+)'\s*,\s*'(?P<value>.*)'\s*\);\s*$""")
_ENV_RE = re.compile(r"^\s*(?P<key>[A-Z_][A-Z0-9_]*)=")


class SecretSource(ABC):
    """Anything that can hand out a block of secret assignments."""

    @abstractmethod
    def fetch(self) -> str:
        """Return ``KEY='value'`` lines.

        Raises:
            SecretsFetchError: when no usable block can be produced.
        """


class HttpSecretSource(SecretSource):
    """Fetch secrets from a remote generator over HTTPS."""

    def __init__(self, url: str, timeout: float = 15.0):
        self.url = url
        self.timeout = timeout

    def fetch(self) -> str:
        logger.debug("Fetching secrets from %s", self.url)
        try:
            req = urllib.request.Request(
                self.url,
                headers={"User-Agent": "devstack/0.1"},
            )
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read().decode("utf-8", errors="replace")
        except (urllib.error.URLError, OSError) as e:
            raise SecretsFetchError(f"Could not fetch secrets from {self.url}: {e}") from e

        block = to_env_block(raw)
        if not block:
            raise SecretsFetchError(f"Secret source {self.url} returned no usable keys")
        return block


class StaticSecretSource(SecretSource):
    """A fixed block, for offline use and tests."""

    def __init__(self, text: str):
        self.text = text

    def fetch(self) -> str:
        block = to_env_block(self.text)
        if not block:
            raise SecretsFetchError("Static secret source is empty")
        return block


def to_env_block(raw: str) -> str:
    """Normalise a generator response into ``KEY='value'`` lines.

    Unrecognised lines (HTML, blanks, comments) are dropped.
    """
    lines: list[str] = []
    for line in raw.splitlines():
        m = _DEFINE_RE.match(line)
        if m:
            value = m.group("value").replace("'", "")
            lines.append(f"{m.group('key')}='{value}'")
            continue
        if _ENV_RE.match(line):
            lines.append(line.strip())
    return "\n".join(lines)
