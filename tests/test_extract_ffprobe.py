import unittest
from pathlib import Path

from vidscout.extract import (
    AudioInfo,
    GeneralInfo,
    VideoInfo,
    build_record,
    parse_streams,
)

FFPROBE_DOC = {
    "format": {
        "format_name": "matroska,webm",
        "duration": "5400.250000",
        "bit_rate": "12000000",
        "tags": {"ENCODER": "Lavf60.3.100"},
    },
    "streams": [
        {
            "codec_type": "video",
            "codec_name": "mjpeg",
            "width": 600,
            "height": 900,
            "disposition": {"attached_pic": 1},
        },
        {
            "codec_type": "video",
            "codec_name": "hevc",
            "width": 3840,
            "height": 2160,
            "color_transfer": "smpte2084",
            "tags": {"BPS-eng": "10500000", "ENCODER": "x265"},
        },
        {
            "codec_type": "audio",
            "codec_name": "eac3",
            "channel_layout": "5.1(side)",
            "tags": {"language": "eng"},
        },
        {
            "codec_type": "audio",
            "codec_name": "aac",
            "channels": 2,
        },
        {"codec_type": "subtitle", "codec_name": "subrip"},
    ],
}


class TestParseFFProbe(unittest.TestCase):
    def test_parses_into_tagged_entries(self):
        infos = parse_streams(FFPROBE_DOC, "ffprobe")
        kinds = [type(i) for i in infos]
        self.assertEqual(kinds, [GeneralInfo, VideoInfo, AudioInfo, AudioInfo])

    def test_record_fields(self):
        rec = build_record(
            Path("/m/Film.mkv"), 123, parse_streams(FFPROBE_DOC, "ffprobe")
        )
        self.assertEqual(rec.container, "matroska,webm")
        self.assertEqual(rec.codec, "hevc")
        self.assertEqual((rec.width, rec.height), (3840, 2160))
        self.assertEqual(rec.video_bitrate, 10_500_000)
        self.assertEqual(rec.total_bitrate, 12_000_000)
        self.assertAlmostEqual(rec.duration_s, 5400.25)
        self.assertEqual(rec.hdr, "HDR10")
        self.assertEqual(rec.encoder, "x265")
        self.assertEqual(rec.audio_codecs, "eac3|aac")
        self.assertEqual(rec.audio_languages, "eng|UND")
        self.assertEqual(rec.audio_channels, "5.1(side)|2ch")
        self.assertEqual(rec.total_bitrate_h, "12.00 Mb/s")

    def test_dolby_vision_side_data(self):
        doc = {
            "format": {"format_name": "mov,mp4,m4a,3gp,3g2,mj2"},
            "streams": [
                {
                    "codec_type": "video",
                    "codec_name": "hevc",
                    "width": 3840,
                    "height": 2160,
                    "color_transfer": "smpte2084",
                    "side_data_list": [{"side_data_type": "DOVI configuration record"}],
                }
            ],
        }
        rec = build_record(Path("/m/a.mp4"), 1, parse_streams(doc, "ffprobe"))
        self.assertEqual(rec.hdr, "Dolby Vision")

    def test_missing_values_stay_absent(self):
        doc = {
            "format": {"format_name": "avi", "bit_rate": "N/A"},
            "streams": [{"codec_type": "audio", "codec_name": "mp3"}],
        }
        rec = build_record(Path("/m/a.avi"), 1, parse_streams(doc, "ffprobe"))
        self.assertIsNone(rec.total_bitrate)
        self.assertIsNone(rec.width)
        self.assertIsNone(rec.height)
        self.assertIsNone(rec.codec)
        self.assertIsNone(rec.encoder)
        self.assertEqual(rec.total_bitrate_h, "")
        self.assertEqual(rec.audio_languages, "UND")
        self.assertEqual(rec.audio_channels, "UND")

    def test_no_audio_gives_empty_strings(self):
        doc = {"format": {}, "streams": [{"codec_type": "video", "codec_name": "vp9"}]}
        rec = build_record(Path("/m/a.webm"), 1, parse_streams(doc, "ffprobe"))
        self.assertEqual(rec.audio_codecs, "")
        self.assertEqual(rec.audio_languages, "")
        self.assertEqual(rec.audio_channels, "")

    def test_unknown_kind(self):
        with self.assertRaises(ValueError):
            parse_streams({}, "exiftool")

    def test_sdr_transfer_is_not_hdr(self):
        doc = {
            "format": {"format_name": "matroska,webm"},
            "streams": [
                {
                    "codec_type": "video",
                    "codec_name": "h264",
                    "color_transfer": "bt709",
                }
            ],
        }
        rec = build_record(Path("/m/sdr.mkv"), 1, parse_streams(doc, "ffprobe"))
        self.assertIsNone(rec.hdr)

    def test_hlg_transfer(self):
        doc = {
            "format": {},
            "streams": [
                {"codec_type": "video", "codec_name": "hevc", "color_transfer": "arib-std-b67"}
            ],
        }
        rec = build_record(Path("/m/hlg.mkv"), 1, parse_streams(doc, "ffprobe"))
        self.assertEqual(rec.hdr, "HLG")
