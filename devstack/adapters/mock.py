"""
Mock runner — universal test double for every external command.

Records each command it receives and answers from canned responses
matched by command prefix (longest prefix wins). Responses may carry a
side effect so a fake ``composer create-project`` can lay down files
the way the real tool would.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Sequence

from devstack.adapters.shell.command import CommandRunner
from devstack.core.models.command import CommandResult

SideEffect = Callable[[list[str], Path | None], "CommandResult | None"]


@dataclass
class MockCall:
    """One command the mock received."""

    args: list[str]
    cwd: Path | None
    stream: bool

    @property
    def line(self) -> str:
        return " ".join(self.args)


class MockRunner(CommandRunner):
    """CommandRunner that never starts a process.

    By default every command succeeds with ``default_stdout`` and every
    binary is on PATH. ``available`` narrows the PATH.
    """

    def __init__(
        self,
        available: Iterable[str] | None = None,
        default_stdout: str = "",
    ):
        self._available = set(available) if available is not None else None
        self._default_stdout = default_stdout
        self._responses: dict[tuple[str, ...], CommandResult | SideEffect] = {}
        self.calls: list[MockCall] = []
        self.sleeps: list[float] = []

    # ── Configuration ───────────────────────────────────────────

    def set_response(self, prefix: Sequence[str], response: CommandResult | SideEffect) -> None:
        """Answer commands starting with ``prefix``."""
        self._responses[tuple(prefix)] = response

    def set_output(self, prefix: Sequence[str], stdout: str) -> None:
        """Configure a successful command with the given stdout."""
        self._responses[tuple(prefix)] = CommandResult.success(list(prefix), stdout=stdout)

    def set_failure(self, prefix: Sequence[str], stderr: str = "Mock failure", return_code: int = 1) -> None:
        """Configure commands starting with ``prefix`` to fail."""
        self._responses[tuple(prefix)] = CommandResult.failure(
            list(prefix), return_code=return_code, stderr=stderr,
        )

    def set_available(self, names: Iterable[str] | None) -> None:
        self._available = set(names) if names is not None else None

    # ── CommandRunner ───────────────────────────────────────────

    def run(
        self,
        args: Sequence[str],
        cwd: Path | str | None = None,
        *,
        timeout: float | None = None,
        stream: bool = False,
        env: dict[str, str] | None = None,
    ) -> CommandResult:
        command = [str(a) for a in args]
        workdir = Path(cwd) if cwd is not None else None
        self.calls.append(MockCall(args=command, cwd=workdir, stream=stream))

        response = self._match(command)
        if response is None:
            return CommandResult.success(command, stdout=self._default_stdout, cwd=str(workdir) if workdir else None)
        if isinstance(response, CommandResult):
            return response.model_copy(update={"command": command})
        produced = response(command, workdir)
        if produced is None:
            return CommandResult.success(command, cwd=str(workdir) if workdir else None)
        return produced

    def which(self, name: str) -> str | None:
        if self._available is None or name in self._available:
            return f"/usr/bin/{name}"
        return None

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)

    # ── Inspection ──────────────────────────────────────────────

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def commands(self) -> list[str]:
        """Every command received, as printable lines."""
        return [c.line for c in self.calls]

    def called(self, *prefix: str) -> list[MockCall]:
        """Calls whose arguments start with ``prefix``."""
        n = len(prefix)
        return [c for c in self.calls if tuple(c.args[:n]) == prefix]

    def reset(self) -> None:
        """Clear the call log (responses are kept)."""
        self.calls.clear()
        self.sleeps.clear()

    def _match(self, command: list[str]) -> CommandResult | SideEffect | None:
        best: tuple[str, ...] | None = None
        for prefix in self._responses:
            if tuple(command[: len(prefix)]) == prefix and (best is None or len(prefix) > len(best)):
                best = prefix
        return self._responses[best] if best is not None else None
