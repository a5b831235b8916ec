from __future__ import annotations

from dataclasses import fields
from typing import Callable, Iterable, List, Optional, Tuple

from .humanize import format_bitrate, format_size
from .model import FilterSpec, VideoRecord

# (FilterSpec field, record attribute, comparison)
_NUMERIC: List[Tuple[str, str, str]] = [
    ("min_bitrate", "total_bitrate", "min"),
    ("max_bitrate", "total_bitrate", "max"),
    ("bitrate", "total_bitrate", "eq"),
    ("min_video_bitrate", "video_bitrate", "min"),
    ("max_video_bitrate", "video_bitrate", "max"),
    ("min_size", "size_bytes", "min"),
    ("max_size", "size_bytes", "max"),
    ("size", "size_bytes", "eq"),
    ("min_width", "width", "min"),
    ("max_width", "width", "max"),
    ("width", "width", "eq"),
    ("min_height", "height", "min"),
    ("max_height", "height", "max"),
    ("height", "height", "eq"),
]

# (FilterSpec field, record attribute, mode)
_TEXT: List[Tuple[str, str, str]] = [
    ("codec", "codec", "eq"),
    ("codec_not", "codec", "ne"),
    ("container", "container", "eq"),
    ("container_not", "container", "ne"),
    ("encoder", "encoder", "in"),
    ("encoder_not", "encoder", "not_in"),
    ("name", "name", "in"),
    ("name_not", "name", "not_in"),
    ("audio_language", "audio_languages", "in"),
    ("audio_language_not", "audio_languages", "not_in"),
    ("audio_codec", "audio_codecs", "in"),
    ("audio_codec_not", "audio_codecs", "not_in"),
    ("hdr", "hdr", "in"),
]


def _numeric_ok(value: Optional[int], bound: int, op: str) -> bool:
    if value is None:
        return False
    if op == "min":
        return value >= bound
    if op == "max":
        return value <= bound
    return value == bound


def _text_ok(value: Optional[str], needle: str, mode: str) -> bool:
    hay = (value or "").casefold()
    n = needle.casefold()
    if mode == "eq":
        return value is not None and hay == n
    if mode == "ne":
        return hay != n
    if mode == "in":
        return value is not None and n in hay
    return n not in hay


def matches(record: VideoRecord, spec: FilterSpec) -> bool:
    """True when `record` satisfies every option set on `spec`."""
    for key, attr, op in _NUMERIC:
        bound = getattr(spec, key)
        if bound is not None and not _numeric_ok(getattr(record, attr), bound, op):
            return False
    for key, attr, mode in _TEXT:
        needle = getattr(spec, key)
        if needle is not None and not _text_ok(getattr(record, attr), needle, mode):
            return False
    return True


def apply_filters(
    records: Iterable[VideoRecord], spec: FilterSpec
) -> List[VideoRecord]:
    return [r for r in records if matches(r, spec)]


def is_empty(spec: FilterSpec) -> bool:
    return all(getattr(spec, f.name) is None for f in fields(spec))


_LABELS = {
    "min": "min",
    "max": "max",
    "eq": "=",
}

_TEXT_LABELS = {
    "eq": "is",
    "ne": "is not",
    "in": "contains",
    "not_in": "does not contain",
}


def _fmt_for(attr: str) -> Callable[[int], str]:
    if attr == "size_bytes":
        return format_size
    if attr.endswith("bitrate"):
        return format_bitrate
    return str


def describe_filters(spec: FilterSpec) -> List[str]:
    """Human-readable list of the active options, in a fixed order."""
    out: List[str] = []
    for key, attr, mode in _TEXT:
        needle = getattr(spec, key)
        if needle is not None:
            label = attr.replace("_", " ")
            out.append(f"{label} {_TEXT_LABELS[mode]} {needle!r}")
    for key, attr, op in _NUMERIC:
        bound = getattr(spec, key)
        if bound is not None:
            label = attr.replace("_bytes", "").replace("_", " ")
            out.append(f"{label} {_LABELS[op]} {_fmt_for(attr)(bound)}")
    return out
