from pathlib import Path
from typing import Any, Dict, Optional

from vidscout.errors import ProbeError
from vidscout.model import AudioTrack, VideoRecord


class FakeProber:
    """Returns canned JSON per file name instead of running a tool."""

    def __init__(self, kind: str, docs: Dict[str, Any], fail: Optional[set] = None):
        self.kind = kind
        self.docs = docs
        self.fail = fail or set()
        self.calls = []

    def probe(self, media_path: Path) -> Dict[str, Any]:
        self.calls.append(media_path.name)
        if media_path.name in self.fail:
            raise ProbeError(media_path, "unreadable")
        return self.docs[media_path.name]


def ffprobe_doc(
    *,
    codec: str = "h264",
    width: int = 1920,
    height: int = 1080,
    total_bitrate: str = "5000000",
    audio=(("aac", "eng", "stereo"),),
) -> Dict[str, Any]:
    streams = [
        {
            "codec_type": "video",
            "codec_name": codec,
            "width": width,
            "height": height,
        }
    ]
    for acodec, lang, layout in audio:
        streams.append(
            {
                "codec_type": "audio",
                "codec_name": acodec,
                "channel_layout": layout,
                "tags": {"language": lang},
            }
        )
    return {
        "format": {
            "format_name": "matroska,webm",
            "bit_rate": total_bitrate,
            "duration": "60.0",
        },
        "streams": streams,
    }


def make_record(
    name: str = "movie.mkv",
    *,
    codec: Optional[str] = "h264",
    width: Optional[int] = 1920,
    height: Optional[int] = 1080,
    total_bitrate: Optional[int] = 5_000_000,
    video_bitrate: Optional[int] = None,
    size_bytes: int = 1_000_000,
    encoder: Optional[str] = None,
    container: Optional[str] = "Matroska",
    hdr: Optional[str] = None,
    audio=(AudioTrack("AAC", "en", "L R"),),
    folder: Path = Path("/media/in"),
) -> VideoRecord:
    return VideoRecord(
        path=folder / name,
        size_bytes=size_bytes,
        container=container,
        codec=codec,
        encoder=encoder,
        hdr=hdr,
        width=width,
        height=height,
        video_bitrate=video_bitrate,
        total_bitrate=total_bitrate,
        duration_s=60.0,
        audio=tuple(audio),
    )


class FakeTool(FakeProber):
    """FakeProber with the bits of the subprocess tools the CLI touches."""

    bin_path = Path("/opt/fake/ffprobe")

    def version(self) -> str:
        return "ffprobe version 7.0-fake"
