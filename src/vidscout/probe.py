from __future__ import annotations

import json
import os
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from .errors import ProbeError, ToolNotFoundError

# Where the tools usually live when they are not on PATH.
if sys.platform == "win32":
    FALLBACK_PATHS = {
        "mediainfo": Path(r"C:\Program Files\MediaInfo_CLI\MediaInfo.exe"),
        "ffprobe": Path(r"C:\Program Files\ffmpeg\bin\ffprobe.exe"),
    }
else:
    FALLBACK_PATHS = {
        "mediainfo": Path("/usr/bin/mediainfo"),
        "ffprobe": Path("/usr/bin/ffprobe"),
    }


class Prober(Protocol):
    """Anything that turns a media file into the tool's raw JSON document."""

    kind: str

    def probe(self, media_path: Path) -> Dict[str, Any]: ...


def resolve_tool(kind: str, explicit: Optional[Path] = None) -> Path:
    """Return the executable for `kind`, or raise ToolNotFoundError."""
    if explicit is not None:
        if explicit.is_file():
            return explicit
        raise ToolNotFoundError(f"{kind} executable not found at: {explicit}")

    found = shutil.which(kind)
    if found:
        return Path(found)

    fallback = FALLBACK_PATHS.get(kind)
    if fallback is not None and fallback.is_file():
        return fallback
    raise ToolNotFoundError(
        f"{kind} not found on PATH or at {fallback}; install it or pass --tool-path."
    )


class SubprocessTool:
    kind = ""
    version_args: List[str] = []

    def __init__(self, bin_path: Path, timeout_s: float = 120.0):
        self.bin_path = bin_path
        self.timeout_s = timeout_s

    def command(self, media_path: Path) -> List[str]:
        raise NotImplementedError

    def probe(self, media_path: Path) -> Dict[str, Any]:
        cmd = self.command(media_path)
        try:
            proc = subprocess.run(
                cmd,
                check=False,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout_s,
            )
        except subprocess.TimeoutExpired as e:
            raise ProbeError(
                media_path, f"{self.kind} timed out after {self.timeout_s:g}s"
            ) from e
        except FileNotFoundError as e:
            raise ProbeError(media_path, f"{self.kind} not found: {self.bin_path}") from e
        except OSError as e:
            raise ProbeError(media_path, f"{self.kind} exec error: {e}") from e

        if proc.returncode != 0:
            stderr = (proc.stderr or "").strip()
            raise ProbeError(
                media_path,
                stderr or f"{self.kind} exited {proc.returncode}",
                stderr=stderr,
            )

        try:
            data = json.loads(proc.stdout)
        except json.JSONDecodeError as e:
            raise ProbeError(media_path, f"{self.kind} output was not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise ProbeError(media_path, f"{self.kind} output was not a JSON object")
        return data

    def version(self) -> str:
        """Version line from the tool's banner."""
        try:
            proc = subprocess.run(
                [os.fspath(self.bin_path), *self.version_args],
                check=False,
                capture_output=True,
                text=True,
                timeout=self.timeout_s,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise ToolNotFoundError(f"could not run {self.bin_path}: {e}") from e
        lines = [ln.strip() for ln in (proc.stdout or "").splitlines() if ln.strip()]
        if not lines:
            return ""
        # mediainfo prints a "MediaInfo Command line," header before the version
        return lines[-1] if self.kind == "mediainfo" else lines[0]


class FFProbeTool(SubprocessTool):
    kind = "ffprobe"
    version_args = ["-version"]

    def command(self, media_path: Path) -> List[str]:
        return [
            os.fspath(self.bin_path),
            "-v",
            "quiet",
            "-print_format",
            "json",
            "-show_format",
            "-show_streams",
            os.fspath(media_path),
        ]


class MediaInfoTool(SubprocessTool):
    kind = "mediainfo"
    version_args = ["--Version"]

    def command(self, media_path: Path) -> List[str]:
        return [
            os.fspath(self.bin_path),
            "--Output=JSON",
            "--Full",
            os.fspath(media_path),
        ]


TOOLS = {"ffprobe": FFProbeTool, "mediainfo": MediaInfoTool}


def make_prober(kind: str, bin_path: Path, timeout_s: float) -> SubprocessTool:
    return TOOLS[kind](bin_path, timeout_s=timeout_s)
