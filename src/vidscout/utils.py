from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from humanfriendly import InvalidSize
from humanfriendly import parse_size as _hf_parse_size

from .errors import ConfigError


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def as_path(s: str) -> Path:
    expanded = os.path.expandvars(os.path.expanduser(s))
    return Path(expanded).resolve()


def safe_int(v: Any) -> Optional[int]:
    try:
        if v is None or v == "":
            return None
        return int(v)
    except (TypeError, ValueError):
        # mediainfo sometimes reports "1080.0" or "1 920"
        f = safe_float(str(v).replace(" ", ""))
        return int(f) if f is not None else None


def safe_float(v: Any) -> Optional[float]:
    try:
        if v is None or v == "":
            return None
        return float(v)
    except (TypeError, ValueError):
        return None


def parse_size(text: str) -> int:
    """Parse "700M", "1.5G", "4096" into bytes (binary multiples)."""
    try:
        return _hf_parse_size(str(text), binary=True)
    except InvalidSize as e:
        raise ConfigError(f"Invalid size: {text!r}") from e


def parse_bitrate(text: str) -> int:
    """Parse "8M", "800k", "1500000" into bits per second (decimal multiples).

    A trailing "/s" or "ps" is accepted, so "2.5Mb/s" and "1500kbps" work too.
    """
    t = str(text).strip()
    for suffix in ("/s", "ps"):
        if t.lower().endswith(suffix):
            t = t[: -len(suffix)]
            break
    try:
        return _hf_parse_size(t, binary=False)
    except InvalidSize as e:
        raise ConfigError(f"Invalid bitrate: {text!r}") from e
