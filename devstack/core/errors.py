"""
Error types — everything the CLI knows how to report without a traceback.

Adapters never raise for a failing tool; services turn failed
CommandResults into one of these when the failure is fatal.
"""

from __future__ import annotations


class DevstackError(Exception):
    """Base class for expected, user-reportable failures."""

    def __init__(self, message: str, hints: list[str] | None = None):
        super().__init__(message)
        self.hints: list[str] = list(hints or [])


class UsageError(DevstackError):
    """Bad or missing command-line arguments."""


class ConfigError(DevstackError):
    """Raised when devstack.yml is invalid or unreadable."""


class PrerequisiteError(DevstackError):
    """Required tools are missing or the container runtime is unreachable."""


class StepError(DevstackError):
    """An installer step failed; remaining steps were aborted."""

    def __init__(self, site: str, step: str, message: str, hints: list[str] | None = None):
        super().__init__(f"{site}: {step} failed — {message}", hints)
        self.site = site
        self.step = step


class ConfigFileError(DevstackError):
    """A configuration file that should be mutated does not exist."""


class SecretsFetchError(DevstackError):
    """The remote secret source could not be reached or returned nothing usable."""
