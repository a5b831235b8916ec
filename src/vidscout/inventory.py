from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

from .errors import ProbeError
from .extract import extract
from .model import FilterSpec, VideoRecord
from .probe import Prober
from .scan import discover


@dataclass
class Inventory:
    root: Path
    scanned: int = 0
    records: List[VideoRecord] = field(default_factory=list)
    errors: List[ProbeError] = field(default_factory=list)


def build_inventory(
    root: Path,
    prober: Prober,
    *,
    recursive: bool,
    extensions: List[str],
    spec: FilterSpec,
    on_error: str = "fail",
    quiet: bool = False,
) -> Inventory:
    """Discover video files under `root` and probe each one in turn.

    With on_error="fail" the first ProbeError propagates to the caller;
    with "skip" it is reported on stderr and collected in `errors`.
    """
    paths = discover(
        root,
        recursive=recursive,
        extensions=extensions,
        min_size=spec.min_size,
        max_size=spec.max_size,
        name_contains=spec.name,
        name_not_contains=spec.name_not,
    )

    inv = Inventory(root=root, scanned=len(paths))
    total = len(paths)
    for i, p in enumerate(paths, start=1):
        if not quiet:
            print(f"[vidscout] probing {i}/{total}: {p.name}", flush=True)
        try:
            inv.records.append(extract(p, prober))
        except ProbeError as e:
            if on_error != "skip":
                raise
            print(f"[vidscout] warning: skipped {e}", file=sys.stderr)
            inv.errors.append(e)

    return inv
