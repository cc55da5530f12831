"""
Command runner — the one place that starts external processes.

Every adapter goes through a CommandRunner. It captures exit code,
stdout and stderr into a CommandResult and never raises for a failing
command, a missing binary, or a timeout.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import time
from pathlib import Path
from typing import Sequence

from devstack.core.models.command import CommandResult

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 1800


class CommandRunner:
    """Run commands synchronously and capture their outcome.

    ``stream=True`` lets the command write straight to the terminal
    (long installs); stdout/stderr are then not captured.
    """

    def run(
        self,
        args: Sequence[str],
        cwd: Path | str | None = None,
        *,
        timeout: float | None = DEFAULT_TIMEOUT,
        stream: bool = False,
        env: dict[str, str] | None = None,
    ) -> CommandResult:
        command = [str(a) for a in args]
        workdir = str(cwd) if cwd is not None else None
        run_env = {**os.environ, **env} if env else None

        logger.debug("Executing: %s (cwd=%s)", " ".join(command), workdir)
        start = time.monotonic()

        try:
            result = subprocess.run(
                command,
                cwd=workdir,
                capture_output=not stream,
                text=True,
                timeout=timeout,
                env=run_env,
            )
        except FileNotFoundError:
            return CommandResult(
                command=command,
                cwd=workdir,
                return_code=127,
                error=f"Command not found: {command[0]}",
            )
        except subprocess.TimeoutExpired:
            return CommandResult(
                command=command,
                cwd=workdir,
                return_code=124,
                error=f"Command timed out after {timeout}s",
                metadata={"timeout": timeout},
            )
        except OSError as e:
            return CommandResult(
                command=command,
                cwd=workdir,
                return_code=126,
                error=f"Command execution error: {e}",
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        outcome = CommandResult(
            command=command,
            cwd=workdir,
            return_code=result.returncode,
            stdout=(result.stdout or "").strip(),
            stderr=(result.stderr or "").strip(),
            duration_ms=elapsed_ms,
            metadata={"streamed": stream},
        )
        if outcome.failed:
            logger.debug("Command failed (%d): %s", result.returncode, outcome.display)
        return outcome

    def which(self, name: str) -> str | None:
        """Resolve an executable on PATH."""
        return shutil.which(name)

    def sleep(self, seconds: float) -> None:
        """Block for ``seconds``; the only suspension point the tool uses."""
        time.sleep(seconds)
