import os
from pathlib import Path

import pytest

from conftest import make_record
from vidscout.errors import ConfigError
from vidscout.transfer import copy_records, destination_for, find_sidecars


def _video(root: Path, rel: str, data: bytes = b"video") -> Path:
    p = root / rel
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_bytes(data)
    return p


def test_destination_mirrors_relative_path():
    assert destination_for(Path("/a/sub/video.mp4"), Path("/a"), Path("/b")) == Path(
        "/b/sub/video.mp4"
    )


def test_copy_creates_dirs_and_overwrites(tmp_path, capsys):
    src_root = tmp_path / "a"
    dst_root = tmp_path / "b"
    src = _video(src_root, "sub/video.mp4", b"0" * (2 * 1024 * 1024))
    rec = make_record("video.mp4", folder=src.parent)

    result = copy_records([rec], src_root, dst_root)
    dst = dst_root / "sub" / "video.mp4"
    assert result.copied == 1
    assert result.failed == 0
    assert dst.read_bytes() == src.read_bytes()
    assert result.details[0]["action"] == "copied"

    captured = capsys.readouterr()
    assert "100%" in captured.out
    assert "ETA" in captured.out

    # second run overwrites the existing destination without error
    src.write_bytes(b"new contents")
    again = copy_records([rec], src_root, dst_root)
    assert again.copied == 1
    assert dst.read_bytes() == b"new contents"


def test_copy_related_sidecars(tmp_path):
    src_root = tmp_path / "in"
    src = _video(src_root, "show/ep1.mkv")
    _video(src_root, "show/ep1.JPG", b"cover")
    _video(src_root, "show/ep1.png", b"thumb")
    _video(src_root, "show/ep1.nfo", b"<xml/>")
    _video(src_root, "show/ep2.jpg", b"other")
    rec = make_record("ep1.mkv", folder=src.parent)

    assert [p.name for p in find_sidecars(src, ["jpg", "png"])] == ["ep1.JPG", "ep1.png"]

    without = copy_records([rec], src_root, tmp_path / "plain", copy_related=False)
    assert without.sidecars == 0
    assert not (tmp_path / "plain" / "show" / "ep1.JPG").exists()

    result = copy_records(
        [rec], src_root, tmp_path / "out", copy_related=True, sidecar_ext=["jpg", "png"]
    )
    out = tmp_path / "out" / "show"
    assert result.copied == 1
    assert result.sidecars == 2
    assert sorted(p.name for p in out.iterdir()) == ["ep1.JPG", "ep1.mkv", "ep1.png"]


def test_failure_is_recorded_and_run_continues(tmp_path):
    src_root = tmp_path / "in"
    good = _video(src_root, "good.mkv")
    missing = make_record("missing.mkv", folder=src_root)
    recs = [missing, make_record("good.mkv", folder=good.parent)]

    result = copy_records(recs, src_root, tmp_path / "out")
    assert result.failed == 1
    assert result.copied == 1
    assert result.details[0]["action"] == "fail"
    assert (tmp_path / "out" / "good.mkv").exists()


def test_dry_run_touches_nothing(tmp_path, capsys):
    src_root = tmp_path / "in"
    src = _video(src_root, "x/film.mkv")
    result = copy_records(
        [make_record("film.mkv", folder=src.parent)], src_root, tmp_path / "out", dry_run=True
    )
    assert result.copied == 0
    assert result.details[0]["action"] == "copy_dry_run"
    assert not (tmp_path / "out").exists()
    assert "would copy" in capsys.readouterr().out


def test_progress_lines_name_the_relative_path(tmp_path, capsys):
    src_root = tmp_path / "a"
    src = _video(src_root, "sub/video.mp4", b"1" * 4096)
    copy_records([make_record("video.mp4", folder=src.parent)], src_root, tmp_path / "b")

    out = capsys.readouterr().out
    assert f"copy: {Path('sub') / 'video.mp4'} 100%" in out


def test_destination_equal_to_source_root_is_refused(tmp_path):
    lib = tmp_path / "lib"
    src = _video(lib, "movie.mkv", b"m" * 5000)

    with pytest.raises(ConfigError):
        copy_records([make_record("movie.mkv", folder=lib)], lib, lib)
    assert src.stat().st_size == 5000

    # same folder spelled differently
    with pytest.raises(ConfigError):
        copy_records([make_record("movie.mkv", folder=lib)], lib, lib / "sub" / "..")
    assert src.read_bytes() == b"m" * 5000


def test_destination_already_the_same_file_is_skipped(tmp_path, capsys):
    src_root = tmp_path / "in"
    src = _video(src_root, "show/ep1.mkv", b"e" * 3000)
    dst_root = tmp_path / "out"
    (dst_root / "show").mkdir(parents=True)
    os.link(src, dst_root / "show" / "ep1.mkv")

    result = copy_records([make_record("ep1.mkv", folder=src.parent)], src_root, dst_root)
    assert result.copied == 0
    assert result.failed == 0
    assert result.details[0]["action"] == "skip"
    assert result.details[0]["reason"] == "same_file"
    assert src.read_bytes() == b"e" * 3000
    assert "destination is the source" in capsys.readouterr().out
