from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import ConfigError
from .model import (
    DEFAULT_COLUMNS,
    DEFAULT_SIDECAR_EXTENSIONS,
    DEFAULT_VIDEO_EXTENSIONS,
    CopyConfig,
    DisplayConfig,
    ProbeConfig,
    ScanConfig,
    ToolConfig,
    VidscoutConfig,
)
from .utils import as_path

try:
    import tomllib  # py311+
except ModuleNotFoundError as exc:  # pragma: no cover
    raise SystemExit("Python 3.11+ required (missing tomllib).") from exc

DEFAULT_CONFIG_NAME = "vidscout.toml"

TOOL_KINDS = {"mediainfo", "ffprobe"}
ON_ERROR_POLICIES = {"fail", "skip"}

_MISSING = object()


def load_toml(path: Path) -> Dict[str, Any]:
    """Read a vidscout config file; every failure becomes a ConfigError."""
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
        raise ConfigError(f"Invalid config {path}: {e}") from e


def _get(root: Dict[str, Any], dotted: str) -> Any:
    """Value at "section.key" in the parsed TOML, or None when absent."""
    node: Any = root
    for key in dotted.split("."):
        node = node.get(key) if isinstance(node, dict) else None
        if node is None:
            break
    return node


def expect(
    root: Dict[str, Any],
    path: str,
    typ: Any,
    *,
    default: Any = _MISSING,
) -> Any:
    """Traverse `path` (dot-separated) and ensure the value is `typ`.

    Missing values return `default`, or raise `ConfigError` when no default
    was given. Type mismatches always raise `ConfigError`.
    """
    v = _get(root, path)
    if v is None:
        if default is not _MISSING:
            return default
        raise ConfigError(f"Missing required config value: {path}")
    name = "number" if isinstance(typ, tuple) else typ.__name__
    # bool is an int subclass; don't let `true` pass for a number
    if isinstance(v, bool) and typ is not bool:
        raise ConfigError(f"Expected {name} for '{path}', got: bool")
    if not isinstance(v, typ):
        raise ConfigError(f"Expected {name} for '{path}', got: {type(v).__name__}")
    return v


def _list_str(root: Dict[str, Any], path: str, default: List[str]) -> List[str]:
    v = expect(root, path, list, default=default)
    if not all(isinstance(x, str) for x in v):
        raise ConfigError(f"Expected list of strings for '{path}', got: {v!r}")
    return list(v)


def _norm_exts(exts: List[str]) -> List[str]:
    return [e.lower().lstrip(".") for e in exts if e.strip()]


def _optional_path(root: Dict[str, Any], path: str) -> Optional[Path]:
    v = expect(root, path, str, default="")
    return as_path(v) if v else None


def parse_config(root: Dict[str, Any]) -> VidscoutConfig:
    # ---- tool
    kind = expect(root, "tool.kind", str, default="mediainfo").lower()
    if kind not in TOOL_KINDS:
        raise ConfigError("tool.kind must be 'mediainfo' or 'ffprobe'")
    timeout_s = float(expect(root, "tool.timeout_s", (int, float), default=120.0))
    if timeout_s <= 0:
        raise ConfigError("tool.timeout_s must be positive")
    tool_cfg = ToolConfig(
        kind=kind,
        path=_optional_path(root, "tool.path"),
        timeout_s=timeout_s,
        version_file=_optional_path(root, "tool.version_file"),
    )

    # ---- scan
    extensions = _norm_exts(
        _list_str(root, "scan.extensions", DEFAULT_VIDEO_EXTENSIONS)
    )
    if not extensions:
        raise ConfigError("scan.extensions must not be empty")
    scan_cfg = ScanConfig(
        recursive=expect(root, "scan.recursive", bool, default=False),
        extensions=extensions,
    )

    # ---- probe
    on_error = expect(root, "probe.on_error", str, default="fail").lower()
    if on_error not in ON_ERROR_POLICIES:
        raise ConfigError("probe.on_error must be 'fail' or 'skip'")
    probe_cfg = ProbeConfig(on_error=on_error)

    # ---- copy
    copy_cfg = CopyConfig(
        sidecar_extensions=_norm_exts(
            _list_str(root, "copy.sidecar_extensions", DEFAULT_SIDECAR_EXTENSIONS)
        )
    )

    # ---- display
    display_cfg = DisplayConfig(
        columns=_list_str(root, "display.columns", DEFAULT_COLUMNS)
    )

    return VidscoutConfig(
        tool=tool_cfg,
        scan=scan_cfg,
        probe=probe_cfg,
        copy=copy_cfg,
        display=display_cfg,
    )


def load_config(path: Optional[Path]) -> VidscoutConfig:
    """Load `path`, or ./vidscout.toml when present, or built-in defaults."""
    if path is None:
        candidate = Path.cwd() / DEFAULT_CONFIG_NAME
        if not candidate.is_file():
            return parse_config({})
        path = candidate
    return parse_config(load_toml(path))
