from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import sys

from yupic import app_api
from yupic.config import load_config
from yupic.gui_bridge import directory_images_payload, image_payload, metadata_payload
from yupic.utils.logging_utils import configure_logging


logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="yupic")
    parser.add_argument("--config", default=None, help="Optional path to YAML config")
    parser.add_argument("--log-level", default=None, help="Override config log level")
    sub = parser.add_subparsers(dest="command", required=True)

    open_cmd = sub.add_parser("open", help="Decode an image and summarise its frames")
    open_cmd.add_argument("input", help="Image path")
    open_cmd.add_argument("--max-size", type=int, default=None, help="Optional bounding box edge in pixels")
    open_cmd.add_argument("--json", action="store_true", help="Emit the base64 transport payload")

    list_cmd = sub.add_parser("list", help="List sibling images of a path")
    list_cmd.add_argument("input", help="Image path")
    list_cmd.add_argument("--json", action="store_true", help="Emit machine-readable JSON")

    meta = sub.add_parser("metadata", help="Show EXIF entries")
    meta.add_argument("input", help="Image path")
    meta.add_argument("--json", action="store_true", help="Emit machine-readable JSON")

    sub.add_parser("capabilities", help="Show which optional decoders are enabled")

    return parser


def _cmd_open(args: argparse.Namespace) -> int:
    input_path = Path(args.input).expanduser().resolve()
    result = app_api.open_image(input_path, max_size=args.max_size)

    if args.json:
        print(json.dumps(image_payload(result)))
        return 0

    print(f"Path: {result.source_path}")
    print(f"Format: {result.detected_format}")
    print(f"Frames: {len(result.frames)}")
    for idx, frame in enumerate(result.frames):
        print(f"  #{idx:03d} {frame.width}x{frame.height} delay={frame.delay_ms}ms")
    return 0


def _cmd_list(args: argparse.Namespace) -> int:
    payload = directory_images_payload(str(Path(args.input).expanduser().resolve()))
    if args.json:
        print(json.dumps(payload, indent=2))
        return 0
    for image in payload["images"]:
        print(image)
    return 0


def _cmd_metadata(args: argparse.Namespace) -> int:
    payload = metadata_payload(str(Path(args.input).expanduser().resolve()))
    if args.json:
        print(json.dumps(payload, indent=2))
        return 0
    print(f"Path: {payload['path']}")
    for entry in payload["entries"]:
        print(f"  {entry['tag']:<28} {entry['value']}")
    return 0


def _cmd_capabilities(args: argparse.Namespace) -> int:
    for tag, enabled in sorted(app_api.capabilities().items()):
        print(f"  {tag:>8}: {'enabled' if enabled else 'disabled'}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
        configure_logging(args.log_level or config.log_level, config.log_file)
        app_api.configure(config)

        if args.command == "open":
            return _cmd_open(args)
        if args.command == "list":
            return _cmd_list(args)
        if args.command == "metadata":
            return _cmd_metadata(args)
        if args.command == "capabilities":
            return _cmd_capabilities(args)

        parser.error(f"unknown command: {args.command}")
        return 2
    except Exception as exc:
        logger.exception("fatal error")
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
