"""
Logging setup for the devstack CLI.

Handlers hang off the ``devstack`` logger, not the root logger, so
module loggers (``logging.getLogger(__name__)``) report through them
while anything else in the process keeps its own configuration.

Console level precedence:
    --debug / --verbose / --quiet  >  DEVSTACK_LOG_LEVEL  >  WARNING

DEVSTACK_LOG_FILE adds a file handler; DEVSTACK_LOG_FILE_LEVEL sets its
level independently of the console.
"""

from __future__ import annotations

import logging
import sys

PROJECT_LOGGER = "devstack"

_FILE_FORMAT = "%(asctime)s %(levelname)-7s %(short_name)s:%(lineno)d  %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


class ConsoleFormatter(logging.Formatter):
    """Per-level console lines.

    Warnings and errors read like CLI output; INFO adds the time and the
    emitting module; DEBUG adds the line number as well.
    """

    FORMATS = {
        logging.DEBUG: "%(asctime)s %(short_name)s:%(lineno)d  %(message)s",
        logging.INFO: "%(asctime)s [%(short_name)s] %(message)s",
        logging.WARNING: "⚠️  %(message)s",
        logging.ERROR: "❌ %(message)s",
        logging.CRITICAL: "❌ %(message)s",
    }

    def format(self, record: logging.LogRecord) -> str:
        record.short_name = short_name(record.name)
        fmt = self.FORMATS.get(record.levelno, "%(message)s")
        return logging.Formatter(fmt, datefmt="%H:%M:%S").format(record)


class FileFormatter(logging.Formatter):
    def __init__(self) -> None:
        super().__init__(_FILE_FORMAT, datefmt=_FILE_DATEFMT)

    def format(self, record: logging.LogRecord) -> str:
        record.short_name = short_name(record.name)
        return super().format(record)


def short_name(name: str) -> str:
    """``devstack.core.services.installers.wordpress`` → ``installers.wordpress``."""
    parts = name.split(".")
    if parts[0] != PROJECT_LOGGER:
        return name
    return ".".join(parts[-2:]) if len(parts) > 2 else parts[-1]


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> logging.Logger:
    """Attach console (and optionally file) handlers to the project logger.

    Safe to call more than once: earlier handlers are closed and replaced.

    Returns:
        The configured ``devstack`` logger.
    """
    console_level = _parse_level(level)

    project = logging.getLogger(PROJECT_LOGGER)
    for handler in list(project.handlers):
        project.removeHandler(handler)
        handler.close()
    project.propagate = False

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(ConsoleFormatter())
    project.addHandler(console)

    lowest = console_level
    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        lowest = min(lowest, file_level)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(file_level)
        file_handler.setFormatter(FileFormatter())
        project.addHandler(file_handler)

    project.setLevel(lowest)
    logging.raiseExceptions = False
    return project


def resolve_level(
    *,
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    env_level: str | None = None,
) -> str:
    """Pick the console level from CLI flags, then the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return env_level or "WARNING"


def _parse_level(level: str | None) -> int:
    numeric = logging.getLevelName(level.upper()) if level else None
    return numeric if isinstance(numeric, int) else logging.WARNING
