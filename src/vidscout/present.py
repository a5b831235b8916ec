from __future__ import annotations

import csv
import json
from functools import cmp_to_key
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from rich import box
from rich.console import Console
from rich.table import Table

from .errors import ConfigError
from .humanize import format_duration
from .model import VideoRecord


# ----------------------------
# Ordering
# ----------------------------


def _cmp(a: Any, b: Any) -> int:
    return (a > b) - (a < b)


def _num(v: Optional[int]) -> int:
    # missing numbers rank below any real value
    return -1 if v is None else v


def _compare(a: VideoRecord, b: VideoRecord) -> int:
    # codec ascending, then width and total bitrate descending
    return (
        _cmp((a.codec or "").casefold(), (b.codec or "").casefold())
        or -_cmp(_num(a.width), _num(b.width))
        or -_cmp(_num(a.total_bitrate), _num(b.total_bitrate))
    )


def sort_records(records: Iterable[VideoRecord]) -> List[VideoRecord]:
    """Stable sort for display and copy order."""
    return sorted(records, key=cmp_to_key(_compare))


# ----------------------------
# Columns
# ----------------------------


def _opt(v: Any) -> str:
    return "" if v is None else str(v)


# key -> (header, cell renderer, right-justify)
COLUMNS: Dict[str, Tuple[str, Callable[[VideoRecord], str], bool]] = {
    "folder": ("Folder", lambda r: r.folder.name, False),
    "name": ("Name", lambda r: r.name, False),
    "extension": ("Ext", lambda r: r.extension, False),
    "container": ("Container", lambda r: _opt(r.container), False),
    "codec": ("Codec", lambda r: _opt(r.codec), False),
    "hdr": ("HDR", lambda r: _opt(r.hdr), False),
    "width": ("Width", lambda r: _opt(r.width), True),
    "height": ("Height", lambda r: _opt(r.height), True),
    "video_bitrate": ("Video bitrate", lambda r: r.video_bitrate_h, True),
    "total_bitrate": ("Total bitrate", lambda r: r.total_bitrate_h, True),
    "total_bitrate_raw": ("Total bitrate (b/s)", lambda r: _opt(r.total_bitrate), True),
    "size": ("Size", lambda r: r.size_h, True),
    "size_raw": ("Size (bytes)", lambda r: str(r.size_bytes), True),
    "duration": (
        "Duration",
        lambda r: "" if r.duration_s is None else format_duration(r.duration_s),
        True,
    ),
    "audio_languages": ("Audio languages", lambda r: r.audio_languages, False),
    "audio_codecs": ("Audio codecs", lambda r: r.audio_codecs, False),
    "audio_channels": ("Audio channels", lambda r: r.audio_channels, False),
    "encoder": ("Encoder", lambda r: _opt(r.encoder), False),
    "path": ("Path", lambda r: str(r.path), False),
}


def validate_columns(columns: List[str]) -> List[str]:
    unknown = [c for c in columns if c not in COLUMNS]
    if unknown:
        raise ConfigError(
            f"Unknown display column(s): {', '.join(unknown)} "
            f"(choose from: {', '.join(COLUMNS)})"
        )
    return columns


def render_table(
    records: List[VideoRecord],
    columns: List[str],
    console: Optional[Console] = None,
) -> Table:
    table = Table(box=box.SIMPLE_HEAVY, show_lines=False)
    for key in validate_columns(columns):
        header, _, right = COLUMNS[key]
        table.add_column(header, justify="right" if right else "left", overflow="fold")
    for r in records:
        table.add_row(*(COLUMNS[key][1](r) for key in columns))

    (console or Console()).print(table)
    return table


# ----------------------------
# Export
# ----------------------------


def record_row(r: VideoRecord) -> Dict[str, Any]:
    return {
        "path": str(r.path),
        "folder": str(r.folder),
        "name": r.name,
        "extension": r.extension,
        "container": r.container,
        "codec": r.codec,
        "hdr": r.hdr,
        "width": r.width,
        "height": r.height,
        "video_bitrate": r.video_bitrate,
        "video_bitrate_h": r.video_bitrate_h,
        "total_bitrate": r.total_bitrate,
        "total_bitrate_h": r.total_bitrate_h,
        "size_bytes": r.size_bytes,
        "size_h": r.size_h,
        "duration_s": r.duration_s,
        "audio_languages": r.audio_languages,
        "audio_codecs": r.audio_codecs,
        "audio_channels": r.audio_channels,
        "encoder": r.encoder,
    }


def export_records(records: List[VideoRecord], path: Path) -> Path:
    """Write records as .csv or .json (chosen by suffix)."""
    rows = [record_row(r) for r in records]
    suffix = path.suffix.lower()
    if suffix not in {".csv", ".json"}:
        raise ConfigError(f"Export path must end in .csv or .json: {path}")

    path.parent.mkdir(parents=True, exist_ok=True)
    if suffix == ".json":
        path.write_text(json.dumps(rows, indent=2) + "\n", encoding="utf-8")
        return path

    fieldnames = list(record_row(records[0]).keys()) if records else ["path"]
    with path.open("w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=fieldnames)
        writer.writeheader()
        for row in rows:
            writer.writerow({k: "" if v is None else v for k, v in row.items()})
    return path
