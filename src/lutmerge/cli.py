from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import sys

from lutmerge.config import AppConfig, load_config
from lutmerge.imaging import save_image
from lutmerge.lut import load_cube
from lutmerge.session import EditSession
from lutmerge.utils.logging_utils import configure_logging


logger = logging.getLogger(__name__)


def parse_lut_spec(value: str) -> tuple[Path, float]:
    """Split ``path[:intensity]``; a trailing part that is not a number stays in the path."""
    head, sep, tail = value.rpartition(":")
    if sep and head:
        try:
            return Path(head).expanduser(), float(tail)
        except ValueError:
            pass
    return Path(value).expanduser(), 1.0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lutmerge")
    sub = parser.add_subparsers(dest="command", required=True)

    info = sub.add_parser("info", help="Show a CUBE LUT's header and grid size")
    info.add_argument("lut", help="Path to a .cube file")
    info.add_argument("--json", action="store_true", help="Emit machine-readable JSON")
    info.add_argument("--config", default=None, help="Optional path to YAML config")

    merge = sub.add_parser("merge", help="Bake a LUT chain into one merged .cube file")
    merge.add_argument("luts", nargs="+", help="LUTs in chain order, as PATH or PATH:INTENSITY")
    merge.add_argument("--out", required=True, help="Output .cube path")
    merge.add_argument("--size", type=int, default=None, help="Merged LUT grid size (default from config, 32)")
    merge.add_argument("--title", default=None, help="TITLE written into the merged LUT")
    merge.add_argument("--config", default=None, help="Optional path to YAML config")

    apply = sub.add_parser("apply", help="Apply a LUT chain to a photo")
    apply.add_argument("photo", help="Input photo path")
    apply.add_argument("luts", nargs="+", help="LUTs in chain order, as PATH or PATH:INTENSITY")
    apply.add_argument("--out", default=None, help="Output path (default: edited_<name> beside the photo)")
    apply.add_argument("--config", default=None, help="Optional path to YAML config")

    thumb = sub.add_parser("thumbnail", help="Render a single-LUT thumbnail of a photo")
    thumb.add_argument("photo", help="Input photo path")
    thumb.add_argument("lut", help="Path to a .cube file")
    thumb.add_argument("--intensity", type=float, default=1.0, help="LUT intensity in [0, 1]")
    thumb.add_argument("--out", required=True, help="Output image path")
    thumb.add_argument("--config", default=None, help="Optional path to YAML config")

    return parser


def _load(args: argparse.Namespace) -> AppConfig:
    config = load_config(args.config)
    configure_logging(config.log_level, config.log_file)
    return config


def _session_with_chain(config: AppConfig, specs: list[str]) -> EditSession:
    session = EditSession(config)
    for spec in specs:
        path, intensity = parse_lut_spec(spec)
        entry = session.import_lut(path)
        session.add_to_chain(entry.lut_id, intensity=intensity)
    return session


def _cmd_info(args: argparse.Namespace) -> int:
    _load(args)
    path = Path(args.lut).expanduser().resolve()
    lut = load_cube(path)

    payload = {
        "path": str(path),
        "title": lut.title,
        "size": lut.size,
        "domain_min": list(lut.domain_min),
        "domain_max": list(lut.domain_max),
        "samples": lut.sample_count,
    }
    if args.json:
        print(json.dumps(payload, indent=2))
        return 0

    print(f"LUT: {payload['path']}")
    print(f"Title: {lut.title}")
    print(f"Size: {lut.size}^3 ({lut.sample_count} samples)")
    print(f"Domain: {list(lut.domain_min)} .. {list(lut.domain_max)}")
    return 0


def _cmd_merge(args: argparse.Namespace) -> int:
    config = _load(args)
    if args.title is not None:
        config.export.merged_title = args.title

    session = _session_with_chain(config, args.luts)
    out = session.export_merged_lut(Path(args.out).expanduser().resolve(), size=args.size)
    print(str(out))
    return 0


def _cmd_apply(args: argparse.Namespace) -> int:
    config = _load(args)
    session = _session_with_chain(config, args.luts)
    session.add_photos([Path(args.photo).expanduser().resolve()])

    out_path = Path(args.out).expanduser().resolve() if args.out else None
    out = session.export_image(out_path)
    print(str(out))
    return 0


def _cmd_thumbnail(args: argparse.Namespace) -> int:
    config = _load(args)
    session = EditSession(config)
    session.add_photos([Path(args.photo).expanduser().resolve()])
    entry = session.import_lut(Path(args.lut).expanduser().resolve())

    thumb = session.thumbnail(entry.lut_id, intensity=args.intensity)
    out = save_image(Path(args.out).expanduser().resolve(), thumb, jpeg_quality=config.thumbnail.jpeg_quality)
    print(str(out))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        if args.command == "info":
            return _cmd_info(args)
        if args.command == "merge":
            return _cmd_merge(args)
        if args.command == "apply":
            return _cmd_apply(args)
        if args.command == "thumbnail":
            return _cmd_thumbnail(args)

        parser.error(f"unknown command: {args.command}")
        return 2
    except Exception as exc:
        logger.exception("fatal error")
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
