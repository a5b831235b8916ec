from __future__ import annotations

from pathlib import Path
from typing import Optional


class VidscoutError(RuntimeError):
    """Base error type."""


class ConfigError(VidscoutError):
    """Config or argument contract violation."""


class ToolNotFoundError(VidscoutError):
    """The media inspection executable could not be located."""


class MarkerError(VidscoutError):
    """Tool version marker read/write problem."""


class ProbeError(VidscoutError):
    """Probe execution/parsing problem for a single file."""

    def __init__(self, path: Path, message: str, stderr: Optional[str] = None):
        super().__init__(f"{path}: {message}")
        self.path = path
        self.message = message
        self.stderr = stderr
