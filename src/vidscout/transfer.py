from __future__ import annotations

import os
import shutil
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List

from .errors import ConfigError
from .model import DEFAULT_SIDECAR_EXTENSIONS, VideoRecord

_MB = 1024 * 1024


@dataclass(frozen=True)
class TransferResult:
    copied: int
    sidecars: int
    failed: int
    details: List[Dict[str, Any]]


def _copy_with_progress(
    src: Path, dst: Path, label: str, *, chunk_size: int = _MB
) -> None:
    """Stream `src` into `dst` (overwriting it), reporting every 10%.

    `label` is what the progress lines call the file, normally its path
    relative to the scanned root. Timestamps and permissions follow the data.
    """
    total = src.stat().st_size
    done = 0
    start = time.monotonic()
    reported = -1

    with src.open("rb") as inf, dst.open("wb") as outf:
        for chunk in iter(lambda: inf.read(chunk_size), b""):
            outf.write(chunk)
            done += len(chunk)

            pct = done * 100 // total if total else 100
            if pct == reported or (pct % 10 and pct != 100):
                continue
            reported = pct
            elapsed = time.monotonic() - start
            rate = done / elapsed if elapsed > 0 else 0.0
            eta = f"{int((total - done) / rate)}s" if rate > 0 else "??s"
            print(
                f"[vidscout] copy: {label} {pct}% "
                f"({done / _MB:.1f}/{total / _MB:.1f} MB) @ {rate / _MB:.2f} MB/s ETA {eta}",
                flush=True,
            )

    shutil.copystat(src, dst)


def _same_file(src: Path, dst: Path) -> bool:
    try:
        return os.path.samefile(src, dst)
    except OSError:
        return False


def destination_for(src: Path, source_root: Path, dest_root: Path) -> Path:
    """Mirror `src`'s position under `source_root` onto `dest_root`."""
    return dest_root / src.relative_to(source_root)


def find_sidecars(video: Path, extensions: Iterable[str]) -> List[Path]:
    """Files next to `video` with the same base name and a sidecar extension."""
    exts = {e.lower().lstrip(".") for e in extensions}
    try:
        siblings = sorted(video.parent.iterdir())
    except OSError:
        return []
    return [
        p
        for p in siblings
        if p != video
        and p.stem == video.stem
        and p.suffix.lower().lstrip(".") in exts
        and p.is_file()
    ]


def _copy_one(
    src: Path, dst: Path, label: str, *, kind: str, dry_run: bool
) -> Dict[str, Any]:
    detail = {"src": str(src), "dst": str(dst), "kind": kind}
    if _same_file(src, dst):
        print(f"[vidscout] copy: skipping {label} (destination is the source)", flush=True)
        return {**detail, "action": "skip", "reason": "same_file"}

    if dry_run:
        print(f"[vidscout] copy: would copy {src} -> {dst}", flush=True)
        return {**detail, "action": "copy_dry_run"}

    dst.parent.mkdir(parents=True, exist_ok=True)
    print(f"[vidscout] copy: {src} -> {dst}", flush=True)
    _copy_with_progress(src, dst, label)
    return {**detail, "action": "copied"}


def copy_records(
    records: Iterable[VideoRecord],
    source_root: Path,
    dest_root: Path,
    *,
    copy_related: bool = False,
    sidecar_ext: Iterable[str] = DEFAULT_SIDECAR_EXTENSIONS,
    dry_run: bool = False,
) -> TransferResult:
    """Copy each record (and optionally its sidecars) under `dest_root`.

    Records are processed in the order given. A failure on one file is
    recorded and the remaining files are still attempted; nothing already
    copied is rolled back. A destination that is the source folder itself
    raises ConfigError before anything is touched.
    """
    if dest_root.resolve() == source_root.resolve() or _same_file(
        source_root, dest_root
    ):
        raise ConfigError(f"Copy destination is the scanned folder: {dest_root}")

    sidecar_ext = list(sidecar_ext)
    copied = sidecars = failed = 0
    details: List[Dict[str, Any]] = []

    for rec in records:
        jobs = [(rec.path, "video")]
        if copy_related:
            jobs.extend((p, "sidecar") for p in find_sidecars(rec.path, sidecar_ext))

        for src, kind in jobs:
            try:
                dst = destination_for(src, source_root, dest_root)
                label = str(dst.relative_to(dest_root))
                detail = _copy_one(src, dst, label, kind=kind, dry_run=dry_run)
            except (OSError, ValueError) as e:
                failed += 1
                details.append(
                    {
                        "src": str(src),
                        "kind": kind,
                        "action": "fail",
                        "reason": f"{type(e).__name__}: {e}",
                    }
                )
                print(f"[vidscout] copy failed: {src}: {e}", file=sys.stderr)
                continue

            details.append(detail)
            if dry_run or detail["action"] != "copied":
                continue
            if kind == "video":
                copied += 1
            else:
                sidecars += 1

    return TransferResult(
        copied=copied, sidecars=sidecars, failed=failed, details=details
    )
