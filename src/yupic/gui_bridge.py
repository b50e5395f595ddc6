from __future__ import annotations

import argparse
import base64
import json
import sys
from typing import Any

from yupic import app_api
from yupic.decode import DecodeResult, Frame


def _read_json_stdin() -> dict[str, Any]:
    raw = sys.stdin.read()
    if not raw.strip():
        raise ValueError("expected JSON payload on stdin")
    payload = json.loads(raw)
    if not isinstance(payload, dict):
        raise ValueError("stdin JSON payload must be an object")
    return payload


def _pick(data: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    raise KeyError(keys[0])


def _optional(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return default


def _to_optional_max_size(value: Any) -> int | None:
    if value in (None, ""):
        return None
    size = int(value)
    if size < 0:
        raise ValueError(f"max_size must be >= 0, got {size}")
    return size


def frame_payload(frame: Frame) -> dict[str, object]:
    return {
        "width": frame.width,
        "height": frame.height,
        "delay_ms": frame.delay_ms,
        "data": base64.b64encode(frame.pixels).decode("ascii"),
    }


def decode_frame_payload(payload: dict[str, Any]) -> Frame:
    """Inverse of frame_payload, as a receiving UI would rebuild the buffer."""

    return Frame(
        width=int(payload["width"]),
        height=int(payload["height"]),
        delay_ms=int(payload["delay_ms"]),
        pixels=base64.b64decode(payload["data"], validate=True),
    )


def image_payload(result: DecodeResult) -> dict[str, object]:
    return {
        "path": result.source_path,
        "format": result.detected_format,
        "frames": [frame_payload(frame) for frame in result.frames],
    }


def error_payload(exc: BaseException) -> dict[str, object]:
    return {"error": str(exc), "kind": getattr(exc, "kind", "error")}


def open_image_payload(path: str, max_size: int | None = None) -> dict[str, object]:
    return image_payload(app_api.open_image(path, max_size=max_size))


def directory_images_payload(path: str) -> dict[str, object]:
    return {"images": list(app_api.get_directory_images(path).images)}


def metadata_payload(path: str) -> dict[str, object]:
    response = app_api.get_metadata(path)
    return {
        "path": response.path,
        "entries": [{"tag": entry.tag, "value": entry.value} for entry in response.entries],
    }


def capabilities_payload() -> dict[str, object]:
    return {"capabilities": app_api.capabilities()}


def invoke_payload(request: dict[str, Any]) -> dict[str, object]:
    """Dispatch one ``{"command": ..., ...}`` request from the UI shell."""

    command = str(_pick(request, "command", "cmd"))
    if command == "open_image":
        return open_image_payload(
            str(_pick(request, "path")),
            max_size=_to_optional_max_size(_optional(request, "max_size", "maxSize")),
        )
    if command == "get_directory_images":
        return directory_images_payload(str(_pick(request, "path")))
    if command == "get_metadata":
        return metadata_payload(str(_pick(request, "path")))
    if command == "capabilities":
        return capabilities_payload()
    raise ValueError(f"unknown command: {command}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="yupic-bridge")
    parser.add_argument("--config", default=None, help="Optional path to YAML config")
    sub = parser.add_subparsers(dest="command", required=True)

    open_image = sub.add_parser("open-image", help="Decode an image and emit base64 RGBA frames as JSON")
    open_image.add_argument("--path", required=True, help="Image path")
    open_image.add_argument("--max-size", type=int, default=None, help="Optional bounding box edge in pixels")

    dir_images = sub.add_parser("directory-images", help="List sibling images of a path")
    dir_images.add_argument("--path", required=True, help="Image path")

    metadata = sub.add_parser("metadata", help="Emit EXIF entries")
    metadata.add_argument("--path", required=True, help="Image path")

    sub.add_parser("capabilities", help="Emit enabled decoder capabilities")
    sub.add_parser("invoke", help="Read one JSON command request from stdin")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        if args.config:
            app_api.configure(args.config)

        if args.command == "open-image":
            print(json.dumps(open_image_payload(args.path, max_size=args.max_size)))
            return 0
        if args.command == "directory-images":
            print(json.dumps(directory_images_payload(args.path), indent=2))
            return 0
        if args.command == "metadata":
            print(json.dumps(metadata_payload(args.path), indent=2))
            return 0
        if args.command == "capabilities":
            print(json.dumps(capabilities_payload(), indent=2))
            return 0
        if args.command == "invoke":
            print(json.dumps(invoke_payload(_read_json_stdin())))
            return 0
        parser.error(f"unknown command: {args.command}")
        return 2
    except Exception as exc:
        print(json.dumps(error_payload(exc)), file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
