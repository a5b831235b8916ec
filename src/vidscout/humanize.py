from __future__ import annotations

from typing import List, Tuple, Union

Number = Union[int, float]

_SIZE_UNITS: List[Tuple[str, int]] = [
    ("PB", 1024**5),
    ("TB", 1024**4),
    ("GB", 1024**3),
    ("MB", 1024**2),
    ("KB", 1024),
]

_BITRATE_UNITS: List[Tuple[str, int]] = [
    ("Mb/s", 1000**2),
    ("Kb/s", 1000),
]


def _scale(value: Number, units: List[Tuple[str, int]], base_unit: str) -> str:
    value = max(value, 0)
    for label, divisor in units:
        if value / divisor >= 1:
            return f"{value / divisor:.2f} {label}"
    return f"{value:.0f} {base_unit}"


def format_size(num_bytes: Number) -> str:
    """Human-readable byte count, e.g. 5_000_000 -> "4.77 MB"."""
    return _scale(num_bytes, _SIZE_UNITS, "B")


def format_bitrate(bits_per_second: Number) -> str:
    """Human-readable bit rate, e.g. 1_500_000 -> "1.50 Mb/s"."""
    return _scale(bits_per_second, _BITRATE_UNITS, "b/s")


def format_duration(seconds: Number) -> str:
    total = int(max(seconds, 0))
    h, rem = divmod(total, 3600)
    m, s = divmod(rem, 60)
    return f"{h}:{m:02d}:{s:02d}"
