from __future__ import annotations

from pathlib import Path
from typing import Iterable, List, Optional

from .errors import ConfigError


def discover(
    root: Path,
    *,
    recursive: bool,
    extensions: Iterable[str],
    min_size: Optional[int] = None,
    max_size: Optional[int] = None,
    name_contains: Optional[str] = None,
    name_not_contains: Optional[str] = None,
) -> List[Path]:
    """List video files under `root` whose extension is in `extensions`.

    The size and name arguments drop files before they are probed; they mirror
    the equivalent filter predicates exactly.
    """
    if not root.exists():
        raise ConfigError(f"Root folder does not exist: {root}")
    if not root.is_dir():
        raise ConfigError(f"Root folder is not a directory: {root}")

    exts_norm = {e.lower().lstrip(".") for e in extensions if e.strip()}
    entries = root.rglob("*") if recursive else root.iterdir()

    paths = [
        p
        for p in entries
        if p.suffix.lower().lstrip(".") in exts_norm and p.is_file()
    ]
    paths.sort(key=lambda p: str(p.relative_to(root)))

    if name_contains:
        needle = name_contains.lower()
        paths = [p for p in paths if needle in p.stem.lower()]
    if name_not_contains:
        needle = name_not_contains.lower()
        paths = [p for p in paths if needle not in p.stem.lower()]

    if min_size is not None or max_size is not None:
        kept: List[Path] = []
        for p in paths:
            size = p.stat().st_size
            if min_size is not None and size < min_size:
                continue
            if max_size is not None and size > max_size:
                continue
            kept.append(p)
        paths = kept

    return paths
