from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Callable, List, Optional

from .config import ON_ERROR_POLICIES, TOOL_KINDS, load_config
from .errors import ConfigError, MarkerError, ProbeError, ToolNotFoundError
from .filters import apply_filters, describe_filters
from .inventory import build_inventory
from .model import FilterSpec
from .present import export_records, render_table, sort_records, validate_columns
from .probe import SubprocessTool, make_prober, resolve_tool
from .toolstate import read_marker, write_marker
from .transfer import copy_records
from .utils import as_path, parse_bitrate, parse_size


def _arg(fn: Callable[[str], int]) -> Callable[[str], int]:
    def convert(text: str) -> int:
        try:
            return fn(text)
        except ConfigError as e:
            raise argparse.ArgumentTypeError(str(e)) from e

    convert.__name__ = fn.__name__
    return convert


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="vidscout",
        description="Probe video files with mediainfo/ffprobe, filter and list them, and optionally copy the matches.",
    )
    p.add_argument("root", nargs="?", help="Folder to scan for video files.")
    p.add_argument(
        "--config",
        default=None,
        help="Path to config TOML (default: ./vidscout.toml when present).",
    )

    tool = p.add_argument_group("probe tool")
    tool.add_argument("--tool", choices=sorted(TOOL_KINDS), default=None)
    tool.add_argument("--tool-path", default=None, help="Explicit tool executable.")
    tool.add_argument("--timeout", type=float, default=None, help="Seconds per file.")
    tool.add_argument(
        "--tool-info",
        action="store_true",
        help="Print the resolved tool and its version, update the version marker, and exit.",
    )
    tool.add_argument(
        "--on-error",
        choices=sorted(ON_ERROR_POLICIES),
        default=None,
        help="fail: abort on the first unreadable file; skip: warn and continue.",
    )

    scan = p.add_argument_group("scan")
    scan.add_argument(
        "-r",
        "--recursive",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Search subfolders (default from config; --no-recursive overrides it).",
    )
    scan.add_argument(
        "--ext",
        action="append",
        default=None,
        help="Video extension to include (repeatable, replaces the default set).",
    )

    f = p.add_argument_group("filters")
    f.add_argument("--codec", help="Video codec equals (case-insensitive).")
    f.add_argument("--codec-not", help="Video codec does not equal.")
    f.add_argument("--container", help="Container format equals.")
    f.add_argument("--container-not", help="Container format does not equal.")
    for name, what in (("bitrate", "total bitrate"), ("video-bitrate", "video bitrate")):
        f.add_argument(f"--min-{name}", type=_arg(parse_bitrate), help=f"Minimum {what} (e.g. 8M, 800k).")
        f.add_argument(f"--max-{name}", type=_arg(parse_bitrate), help=f"Maximum {what}.")
    f.add_argument("--bitrate", type=_arg(parse_bitrate), help="Exact total bitrate.")
    f.add_argument("--min-size", type=_arg(parse_size), help="Minimum file size (e.g. 700M, 1.5G).")
    f.add_argument("--max-size", type=_arg(parse_size), help="Maximum file size.")
    f.add_argument("--size", type=_arg(parse_size), help="Exact file size.")
    for dim in ("width", "height"):
        f.add_argument(f"--min-{dim}", type=int)
        f.add_argument(f"--max-{dim}", type=int)
        f.add_argument(f"--{dim}", type=int)
    f.add_argument("--encoder", help="Encoder tag contains.")
    f.add_argument("--encoder-not", help="Encoder tag does not contain.")
    f.add_argument("--name", help="File name contains.")
    f.add_argument("--name-not", help="File name does not contain.")
    f.add_argument("--audio-lang", help="Audio languages contain.")
    f.add_argument("--audio-lang-not", help="Audio languages do not contain.")
    f.add_argument("--audio-codec", help="Audio codecs contain.")
    f.add_argument("--audio-codec-not", help="Audio codecs do not contain.")
    f.add_argument("--hdr", help="HDR tag contains (e.g. HDR10, Dolby Vision).")

    out = p.add_argument_group("output")
    out.add_argument("--columns", default=None, help="Comma-separated display columns.")
    out.add_argument("--export", default=None, help="Write the result list to .csv or .json.")

    cp = p.add_argument_group("copy")
    cp.add_argument("--copy-to", default=None, help="Copy matches under this folder.")
    cp.add_argument(
        "--copy-related",
        action="store_true",
        help="Also copy same-named sidecar images.",
    )
    cp.add_argument("--yes", action="store_true", help="Do not ask before copying.")
    cp.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be copied without touching the filesystem.",
    )
    return p


def filter_spec_from_args(args: argparse.Namespace) -> FilterSpec:
    return FilterSpec(
        codec=args.codec,
        codec_not=args.codec_not,
        container=args.container,
        container_not=args.container_not,
        min_bitrate=args.min_bitrate,
        max_bitrate=args.max_bitrate,
        bitrate=args.bitrate,
        min_video_bitrate=args.min_video_bitrate,
        max_video_bitrate=args.max_video_bitrate,
        min_size=args.min_size,
        max_size=args.max_size,
        size=args.size,
        min_width=args.min_width,
        max_width=args.max_width,
        width=args.width,
        min_height=args.min_height,
        max_height=args.max_height,
        height=args.height,
        encoder=args.encoder,
        encoder_not=args.encoder_not,
        name=args.name,
        name_not=args.name_not,
        audio_language=args.audio_lang,
        audio_language_not=args.audio_lang_not,
        audio_codec=args.audio_codec,
        audio_codec_not=args.audio_codec_not,
        hdr=args.hdr,
    )


def confirm(prompt: str) -> bool:
    try:
        answer = input(prompt)
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def _print_tool_info(prober: SubprocessTool, version_file: Optional[Path]) -> int:
    print(f"[vidscout] tool    : {prober.kind} ({prober.bin_path})")
    try:
        version = prober.version()
    except ToolNotFoundError as e:
        print(f"[vidscout] tool error: {e}", file=sys.stderr)
        return 4
    print(f"[vidscout] version : {version or 'unknown'}")

    if version_file is None:
        return 0
    try:
        previous = read_marker(version_file)
        if previous:
            print(
                f"[vidscout] marker  : {previous['Version']} (checked {previous['LastLocalUpdate']})"
            )
        write_marker(version_file, version)
    except (MarkerError, OSError) as e:
        print(f"[vidscout] marker error: {e}", file=sys.stderr)
        return 2
    print(f"[vidscout] wrote marker: {version_file}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    try:
        cfg = load_config(as_path(args.config) if args.config else None)
        columns = validate_columns(
            [c.strip() for c in args.columns.split(",") if c.strip()]
            if args.columns
            else cfg.display.columns
        )
    except ConfigError as e:
        print(f"[vidscout] config error: {e}", file=sys.stderr)
        return 2

    kind = args.tool or cfg.tool.kind
    timeout_s = args.timeout if args.timeout is not None else cfg.tool.timeout_s
    try:
        bin_path = resolve_tool(
            kind, as_path(args.tool_path) if args.tool_path else cfg.tool.path
        )
    except ToolNotFoundError as e:
        print(f"[vidscout] tool error: {e}", file=sys.stderr)
        return 4
    prober = make_prober(kind, bin_path, timeout_s)

    if args.tool_info:
        return _print_tool_info(prober, cfg.tool.version_file)

    if not args.root:
        parser.error("the root folder is required")

    root = as_path(args.root)
    spec = filter_spec_from_args(args)
    for line in describe_filters(spec):
        print(f"[vidscout] filter: {line}")

    try:
        inv = build_inventory(
            root,
            prober,
            recursive=cfg.scan.recursive if args.recursive is None else args.recursive,
            extensions=list(args.ext) if args.ext else cfg.scan.extensions,
            spec=spec,
            on_error=args.on_error or cfg.probe.on_error,
        )
    except ConfigError as e:
        print(f"[vidscout] config error: {e}", file=sys.stderr)
        return 2
    except ProbeError as e:
        print(f"[vidscout] probe error: {e.path}: {e.message}", file=sys.stderr)
        return 3
    except OSError as e:
        print(f"[vidscout] scan error: {e}", file=sys.stderr)
        return 3

    if inv.scanned == 0:
        print(f"[vidscout] no video files found under {root}")
        return 0

    records = sort_records(apply_filters(inv.records, spec))
    print(
        f"[vidscout] inventory: {inv.scanned} files probed, {len(records)} matched (errors={len(inv.errors)})"
    )
    if not records:
        print("[vidscout] no files matched the filters")
        return 0

    render_table(records, columns)

    if args.export:
        try:
            path = export_records(records, as_path(args.export))
        except (ConfigError, OSError) as e:
            print(f"[vidscout] export error: {e}", file=sys.stderr)
            return 2
        print(f"[vidscout] wrote export: {path}")

    if not args.copy_to:
        return 0

    dest = as_path(args.copy_to)
    if dest == root:
        print(f"[vidscout] config error: copy destination is the scanned folder: {dest}", file=sys.stderr)
        return 2
    if args.dry_run:
        print("[vidscout] copy: DRY RUN (no filesystem changes)")
    elif not args.yes and not confirm(
        f"Copy {len(records)} file(s) to {dest}? [y/N] "
    ):
        print("[vidscout] copy skipped")
        return 0

    try:
        result = copy_records(
            records,
            root,
            dest,
            copy_related=bool(args.copy_related),
            sidecar_ext=cfg.copy.sidecar_extensions,
            dry_run=bool(args.dry_run),
        )
    except ConfigError as e:
        print(f"[vidscout] config error: {e}", file=sys.stderr)
        return 2
    print(
        "[vidscout] copy summary: "
        f"copied={result.copied} sidecars={result.sidecars} failed={result.failed}"
    )
    return 5 if result.failed else 0


def run() -> None:
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n[vidscout] interrupted", file=sys.stderr)
        sys.exit(130)
