"""
CommandResult — the execution contract between services and tools.

Every external command returns one of these. Adapters never raise for
a non-zero exit; the failure is captured here and the caller decides
whether it is fatal.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class CommandResult(BaseModel):
    """Outcome of a single external command."""

    command: list[str] = Field(default_factory=list)
    cwd: str | None = None
    return_code: int = 0

    stdout: str = ""
    stderr: str = ""
    error: str | None = None         # runner-level failure (timeout, not found)

    started_at: str = Field(default_factory=_now_iso)
    duration_ms: int = 0

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """Whether the command exited with status 0."""
        return self.return_code == 0 and self.error is None

    @property
    def failed(self) -> bool:
        """Whether the command failed."""
        return not self.ok

    @property
    def display(self) -> str:
        """The command line as a single printable string."""
        return " ".join(self.command)

    @property
    def message(self) -> str:
        """Best human-readable failure message."""
        if self.error:
            return self.error
        return self.stderr or self.stdout or f"Command exited with code {self.return_code}"

    @classmethod
    def success(cls, command: list[str], stdout: str = "", **kwargs: Any) -> CommandResult:
        """Create a success result."""
        return cls(command=command, return_code=0, stdout=stdout, **kwargs)

    @classmethod
    def failure(
        cls,
        command: list[str],
        return_code: int = 1,
        stderr: str = "",
        **kwargs: Any,
    ) -> CommandResult:
        """Create a failure result."""
        return cls(command=command, return_code=return_code, stderr=stderr, **kwargs)
