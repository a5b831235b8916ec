from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .errors import ProbeError
from .model import UNKNOWN, AudioTrack, VideoRecord
from .probe import Prober
from .utils import safe_float, safe_int


# ----------------------------
# Parsed stream variants
# ----------------------------


@dataclass(frozen=True)
class GeneralInfo:
    container: Optional[str] = None
    total_bitrate: Optional[int] = None
    encoder: Optional[str] = None
    duration_s: Optional[float] = None


@dataclass(frozen=True)
class VideoInfo:
    codec: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    bitrate: Optional[int] = None
    encoder: Optional[str] = None
    hdr: Optional[str] = None


@dataclass(frozen=True)
class AudioInfo:
    codec: Optional[str] = None
    language: Optional[str] = None
    channels: Optional[str] = None


StreamInfo = Union[GeneralInfo, VideoInfo, AudioInfo]


# ----------------------------
# Helpers
# ----------------------------


def _str(v: Any) -> Optional[str]:
    if v is None:
        return None
    s = str(v).strip()
    return s or None


def _tag(tags: Any, *keys: str) -> Optional[str]:
    """Case-insensitive tag lookup; Matroska tags vary ("BPS", "BPS-eng")."""
    if not isinstance(tags, dict):
        return None
    lowered = {str(k).lower(): v for k, v in tags.items()}
    for key in keys:
        v = _str(lowered.get(key.lower()))
        if v:
            return v
    return None


def _hdr_from_transfer(text: Optional[str]) -> Optional[str]:
    """HDR tag for a transfer characteristic; None for SDR curves like bt709."""
    if not text:
        return None
    t = text.lower()
    if "dolby vision" in t or "dovi" in t:
        return "Dolby Vision"
    if "2094" in t or "hdr10+" in t:
        return "HDR10+"
    if "2086" in t or "2084" in t or "hdr10" in t or t == "pq":
        return "HDR10"
    if "hlg" in t or "arib-std-b67" in t:
        return "HLG"
    return None


def _hdr_from_format(text: Optional[str]) -> Optional[str]:
    # HDR_Format only exists for HDR streams, so unknown names are kept as-is
    if not text:
        return None
    return _hdr_from_transfer(text) or text


# ----------------------------
# ffprobe
# ----------------------------


def _ffprobe_hdr(stream: Dict[str, Any]) -> Optional[str]:
    side_types = []
    side_data = stream.get("side_data_list")
    if isinstance(side_data, list):
        side_types = [
            str(sd.get("side_data_type"))
            for sd in side_data
            if isinstance(sd, dict) and sd.get("side_data_type")
        ]
    for st in side_types:
        if "DOVI" in st or "Dolby Vision" in st:
            return "Dolby Vision"
    for st in side_types:
        if "2094" in st or "HDR10+" in st:
            return "HDR10+"
    return _hdr_from_transfer(_str(stream.get("color_transfer")))


def _parse_ffprobe(raw: Dict[str, Any]) -> List[StreamInfo]:
    infos: List[StreamInfo] = []

    fmt = raw.get("format")
    if isinstance(fmt, dict):
        infos.append(
            GeneralInfo(
                container=_str(fmt.get("format_name")),
                total_bitrate=safe_int(fmt.get("bit_rate")),
                encoder=_tag(fmt.get("tags"), "encoder", "encoded_by"),
                duration_s=safe_float(fmt.get("duration")),
            )
        )

    streams = raw.get("streams") or []
    if not isinstance(streams, list):
        streams = []

    for s in streams:
        if not isinstance(s, dict):
            continue
        codec_type = s.get("codec_type")
        tags = s.get("tags")
        if codec_type == "video":
            disposition = s.get("disposition")
            # cover art shows up as a single-frame video stream
            if isinstance(disposition, dict) and disposition.get("attached_pic") == 1:
                continue
            bitrate = safe_int(s.get("bit_rate"))
            if bitrate is None:
                bitrate = safe_int(_tag(tags, "BPS", "BPS-eng"))
            infos.append(
                VideoInfo(
                    codec=_str(s.get("codec_name")),
                    width=safe_int(s.get("width")),
                    height=safe_int(s.get("height")),
                    bitrate=bitrate,
                    encoder=_tag(tags, "encoder"),
                    hdr=_ffprobe_hdr(s),
                )
            )
        elif codec_type == "audio":
            channels = _str(s.get("channel_layout"))
            if channels is None and safe_int(s.get("channels")):
                channels = f"{safe_int(s.get('channels'))}ch"
            infos.append(
                AudioInfo(
                    codec=_str(s.get("codec_name")),
                    language=_tag(tags, "language"),
                    channels=channels,
                )
            )
    return infos


# ----------------------------
# MediaInfo
# ----------------------------


def _parse_mediainfo(raw: Dict[str, Any]) -> List[StreamInfo]:
    media = raw.get("media")
    tracks = media.get("track") if isinstance(media, dict) else None
    if not isinstance(tracks, list):
        return []

    infos: List[StreamInfo] = []
    for t in tracks:
        if not isinstance(t, dict):
            continue
        track_type = t.get("@type")
        if track_type == "General":
            infos.append(
                GeneralInfo(
                    container=_str(t.get("Format")),
                    total_bitrate=safe_int(t.get("OverallBitRate")),
                    encoder=_str(t.get("Encoded_Application"))
                    or _str(t.get("Encoded_Library")),
                    duration_s=safe_float(t.get("Duration")),
                )
            )
        elif track_type == "Video":
            bitrate = safe_int(t.get("BitRate"))
            if bitrate is None:
                bitrate = safe_int(t.get("BitRate_Nominal"))
            infos.append(
                VideoInfo(
                    codec=_str(t.get("Format")),
                    width=safe_int(t.get("Width")),
                    height=safe_int(t.get("Height")),
                    bitrate=bitrate,
                    encoder=_str(t.get("Encoded_Library"))
                    or _str(t.get("Encoded_Library_Name")),
                    hdr=_hdr_from_format(_str(t.get("HDR_Format")))
                    or _hdr_from_transfer(_str(t.get("transfer_characteristics"))),
                )
            )
        elif track_type == "Audio":
            infos.append(
                AudioInfo(
                    codec=_str(t.get("Format")),
                    language=_str(t.get("Language")),
                    channels=_str(t.get("ChannelLayout"))
                    or (f"{t['Channels']}ch" if _str(t.get("Channels")) else None),
                )
            )
    return infos


_PARSERS = {"ffprobe": _parse_ffprobe, "mediainfo": _parse_mediainfo}


def parse_streams(raw: Dict[str, Any], kind: str) -> List[StreamInfo]:
    """Split a tool's JSON document into General/Video/Audio entries."""
    try:
        parser = _PARSERS[kind]
    except KeyError:
        raise ValueError(f"unknown probe tool kind: {kind}") from None
    return parser(raw)


def build_record(path: Path, size_bytes: int, infos: List[StreamInfo]) -> VideoRecord:
    """Merge parsed stream entries into one flat record.

    The first General and first Video entries win; every Audio entry is kept
    in order. A video-level encoder tag takes precedence over the container's.
    """
    general = next((i for i in infos if isinstance(i, GeneralInfo)), GeneralInfo())
    video = next((i for i in infos if isinstance(i, VideoInfo)), VideoInfo())
    audio = tuple(
        AudioTrack(
            codec=i.codec or UNKNOWN,
            language=i.language or UNKNOWN,
            channels=i.channels or UNKNOWN,
        )
        for i in infos
        if isinstance(i, AudioInfo)
    )
    return VideoRecord(
        path=path,
        size_bytes=size_bytes,
        container=general.container,
        codec=video.codec,
        encoder=video.encoder or general.encoder,
        hdr=video.hdr,
        width=video.width or None,
        height=video.height or None,
        video_bitrate=video.bitrate,
        total_bitrate=general.total_bitrate,
        duration_s=general.duration_s,
        audio=audio,
    )


def extract(path: Path, prober: Prober) -> VideoRecord:
    """Probe `path` and normalize the result. Raises ProbeError."""
    try:
        size_bytes = path.stat().st_size
    except OSError as e:
        raise ProbeError(path, f"cannot stat file: {e}") from e
    raw = prober.probe(path)
    return build_record(path, size_bytes, parse_streams(raw, prober.kind))
