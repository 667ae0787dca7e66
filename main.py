# main.py

"""
Orchestrator: read params (JSON + CLI), scan packages, print the architecture table, optionally write CSV.
"""
from __future__ import annotations
import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from archscan.arch import ERROR, UNAVAILABLE
from archscan.model import DetectionResult
from archscan.msi import select_msi_reader
from archscan.report import format_table, supports_color, write_csv
from archscan.scan import scan


def load_config(path: Path | None) -> Dict[str, Any]:
    """Load configuration from a JSON file.

    Args:
        path (Path | None): Path to the JSON configuration file.

    Returns:
        Dict[str, Any]: Configuration dictionary. Empty if no file is provided or read fails.
    """
    if not path:
        return {}
    try:
        with path.open("r", encoding="utf-8") as f:
            cfg = json.load(f)
    except (OSError, ValueError) as exc:
        print(f"[WARN] Failed to read config {path}: {exc}", file=sys.stderr)
        return {}
    if not isinstance(cfg, dict):
        print(f"[WARN] Ignoring config {path}: expected a JSON object", file=sys.stderr)
        return {}
    return cfg


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse CLI arguments.

    Returns:
        argparse.Namespace: Parsed command-line arguments.
    """
    p = argparse.ArgumentParser(
        description="Report the target CPU architecture of .exe, .msi, .appx/.msix and bundle packages."
    )
    p.add_argument("--input", type=str, help="Input file or directory (default: current directory).")
    p.add_argument("-r", "--recursive", action="store_true", help="Scan subdirectories too.")
    p.add_argument("-q", "--quiet", action="store_true", help="Do not report when no packages are found.")
    p.add_argument("--report", type=str, help="Optional path to a CSV report.")
    p.add_argument("--no-color", action="store_true", help="Disable colored output.")
    p.add_argument("--jobs", type=int, help="Files processed concurrently (default: 1).")
    p.add_argument("--config", type=str, help="Optional JSON config (flags override).")
    return p.parse_args(argv)


def _get_effective_config(args: argparse.Namespace) -> Tuple[Dict[str, Any], Path]:
    """Load CLI + JSON configuration, giving precedence to CLI flags."""
    script_dir = Path(__file__).parent
    default_config_path = script_dir / "params.json"
    config_path = Path(args.config) if args.config else default_config_path
    cfg = load_config(config_path if config_path.exists() else None)
    return cfg, config_path


_TRUE = ("true", "yes", "on", "1")
_FALSE = ("false", "no", "off", "0")


def _cfg_bool(cfg: Dict[str, Any], key: str, default: bool) -> bool:
    """Read a boolean config value, warning and falling back on bad input."""
    value = cfg.get(key, default)
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str) and value.strip().lower() in _TRUE + _FALSE:
        return value.strip().lower() in _TRUE
    print(f"[WARN] Ignoring config {key}: expected true/false, got {value!r}", file=sys.stderr)
    return default


def _cfg_int(cfg: Dict[str, Any], key: str, default: int) -> int:
    """Read an integer config value, warning and falling back on bad input."""
    value = cfg.get(key, default)
    try:
        if isinstance(value, bool):
            raise TypeError(key)
        return int(value)
    except (TypeError, ValueError):
        print(f"[WARN] Ignoring config {key}: expected an integer, got {value!r}", file=sys.stderr)
        return default


def _cfg_path(cfg: Dict[str, Any], key: str) -> Optional[Path]:
    """Read a path config value; non-strings are warned about and ignored."""
    value = cfg.get(key)
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        print(f"[WARN] Ignoring config {key}: expected a path string, got {value!r}", file=sys.stderr)
        return None
    return Path(value)


def _resolve_options(args: argparse.Namespace, cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Merge flags over config values."""
    report = Path(args.report) if args.report else _cfg_path(cfg, "report")
    input_path = Path(args.input) if args.input else _cfg_path(cfg, "input")
    jobs = args.jobs if args.jobs is not None else _cfg_int(cfg, "jobs", 1)
    return {
        "input": input_path or Path("."),
        "recursive": args.recursive or _cfg_bool(cfg, "recursive", False),
        "quiet": args.quiet or _cfg_bool(cfg, "quiet", False),
        "report": report,
        "color": not args.no_color and _cfg_bool(cfg, "color", True),
        "jobs": max(1, jobs),
    }


def _print_summary(rows: List[DetectionResult]) -> None:
    """Print summary information to stderr."""
    errors = sum(1 for r in rows if r.architecture == ERROR)
    unavailable = sum(1 for r in rows if r.architecture == UNAVAILABLE)
    print(
        f"[INFO] Done. Total: {len(rows)} | Errors: {errors} | Unavailable on this platform: {unavailable}",
        file=sys.stderr,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main orchestration function.

    Returns:
        int: Exit code.
    """
    args = parse_args(argv)
    cfg, _config_path = _get_effective_config(args)
    opts = _resolve_options(args, cfg)
    input_path: Path = opts["input"]

    msi_reader = select_msi_reader()
    color = supports_color(sys.stdout, opts["color"])

    print(f"[INFO] Scanning: {input_path}", file=sys.stderr)
    try:
        rows = scan(input_path, recursive=opts["recursive"], msi_reader=msi_reader, workers=opts["jobs"])
    except FileNotFoundError:
        print(f"[ERR] Input not found: {input_path}", file=sys.stderr)
        raise SystemExit(2)

    if not rows:
        if not opts["quiet"]:
            print(f"[INFO] No package files found in {input_path}", file=sys.stderr)
        return 0

    for line in format_table(rows, color=color):
        print(line)

    if opts["report"]:
        write_csv(opts["report"], rows)
        print(f"[INFO] Report: {opts['report'].resolve()}", file=sys.stderr)

    _print_summary(rows)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
