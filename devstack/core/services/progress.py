"""
Progress events — how long-running services report what they are doing.

Services never print. They call an optional ``on_progress`` callback and
the CLI decides how to render each event.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable


@dataclass
class ProgressEvent:
    """One progress notification from an installer or controller."""

    site: str
    step: str
    status: str           # started, done, skipped, failed, warning, waiting
    message: str = ""


ProgressCallback = Callable[[ProgressEvent], None]
