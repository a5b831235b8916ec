from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from .humanize import format_bitrate, format_size

UNKNOWN = "UND"

DEFAULT_VIDEO_EXTENSIONS: List[str] = [
    "mp4",
    "mkv",
    "avi",
    "mov",
    "wmv",
    "flv",
    "webm",
    "m4v",
    "mpg",
    "mpeg",
    "ts",
    "m2ts",
    "vob",
    "3gp",
]

DEFAULT_SIDECAR_EXTENSIONS: List[str] = ["jpg", "jpeg", "png", "webp"]

DEFAULT_COLUMNS: List[str] = [
    "folder",
    "name",
    "container",
    "codec",
    "hdr",
    "width",
    "height",
    "video_bitrate",
    "total_bitrate",
    "size",
    "audio_languages",
    "audio_codecs",
    "audio_channels",
    "encoder",
]


# ----------------------------
# Records
# ----------------------------


@dataclass(frozen=True)
class AudioTrack:
    codec: str = UNKNOWN
    language: str = UNKNOWN
    channels: str = UNKNOWN


@dataclass(frozen=True)
class VideoRecord:
    path: Path
    size_bytes: int
    container: Optional[str] = None
    codec: Optional[str] = None
    encoder: Optional[str] = None
    hdr: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    video_bitrate: Optional[int] = None
    total_bitrate: Optional[int] = None
    duration_s: Optional[float] = None
    audio: Tuple[AudioTrack, ...] = ()

    @property
    def folder(self) -> Path:
        return self.path.parent

    @property
    def name(self) -> str:
        return self.path.stem

    @property
    def extension(self) -> str:
        return self.path.suffix.lower().lstrip(".")

    @property
    def size_h(self) -> str:
        return format_size(self.size_bytes)

    @property
    def video_bitrate_h(self) -> str:
        return "" if self.video_bitrate is None else format_bitrate(self.video_bitrate)

    @property
    def total_bitrate_h(self) -> str:
        return "" if self.total_bitrate is None else format_bitrate(self.total_bitrate)

    @property
    def audio_codecs(self) -> str:
        return "|".join(a.codec for a in self.audio)

    @property
    def audio_languages(self) -> str:
        return "|".join(a.language for a in self.audio)

    @property
    def audio_channels(self) -> str:
        return "|".join(a.channels for a in self.audio)


@dataclass(frozen=True)
class FilterSpec:
    """Optional predicates; ``None`` means "no constraint"."""

    codec: Optional[str] = None
    codec_not: Optional[str] = None
    container: Optional[str] = None
    container_not: Optional[str] = None

    min_bitrate: Optional[int] = None
    max_bitrate: Optional[int] = None
    bitrate: Optional[int] = None
    min_video_bitrate: Optional[int] = None
    max_video_bitrate: Optional[int] = None
    min_size: Optional[int] = None
    max_size: Optional[int] = None
    size: Optional[int] = None
    min_width: Optional[int] = None
    max_width: Optional[int] = None
    width: Optional[int] = None
    min_height: Optional[int] = None
    max_height: Optional[int] = None
    height: Optional[int] = None

    encoder: Optional[str] = None
    encoder_not: Optional[str] = None
    name: Optional[str] = None
    name_not: Optional[str] = None
    audio_language: Optional[str] = None
    audio_language_not: Optional[str] = None
    audio_codec: Optional[str] = None
    audio_codec_not: Optional[str] = None
    hdr: Optional[str] = None


# ----------------------------
# Config
# ----------------------------


@dataclass(frozen=True)
class ToolConfig:
    kind: str = "mediainfo"  # "mediainfo" | "ffprobe"
    path: Optional[Path] = None
    timeout_s: float = 120.0
    version_file: Optional[Path] = None


@dataclass(frozen=True)
class ScanConfig:
    recursive: bool = False
    extensions: List[str] = field(
        default_factory=lambda: list(DEFAULT_VIDEO_EXTENSIONS)
    )


@dataclass(frozen=True)
class ProbeConfig:
    on_error: str = "fail"  # "fail" | "skip"


@dataclass(frozen=True)
class CopyConfig:
    sidecar_extensions: List[str] = field(
        default_factory=lambda: list(DEFAULT_SIDECAR_EXTENSIONS)
    )


@dataclass(frozen=True)
class DisplayConfig:
    columns: List[str] = field(default_factory=lambda: list(DEFAULT_COLUMNS))


@dataclass(frozen=True)
class VidscoutConfig:
    tool: ToolConfig = field(default_factory=ToolConfig)
    scan: ScanConfig = field(default_factory=ScanConfig)
    probe: ProbeConfig = field(default_factory=ProbeConfig)
    copy: CopyConfig = field(default_factory=CopyConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
