from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import MarkerError
from .utils import utc_now_iso


def write_marker(path: Path, version: str, *, when: Optional[str] = None) -> Path:
    """Record the local tool version and the time it was checked."""
    payload = {"Version": version, "LastLocalUpdate": when or utc_now_iso()}
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
    tmp.replace(path)
    return path


def read_marker(path: Path) -> Optional[Dict[str, Any]]:
    """Return the marker contents, or None if the file does not exist."""
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MarkerError(f"Marker file is not valid JSON: {path}: {e}") from e

    if not isinstance(data, dict):
        raise MarkerError(f"Marker file must be a JSON object: {path}")
    for key in ("Version", "LastLocalUpdate"):
        if not isinstance(data.get(key), str):
            raise MarkerError(f"Marker file is missing '{key}': {path}")
    return data
