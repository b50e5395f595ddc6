from __future__ import annotations

import logging
from pathlib import Path
import threading
from typing import IO, Sequence

import numpy as np
from PIL import Image, UnidentifiedImageError

from .base import DecodeFailedError, FormatDetectionError, IoFailureError
from .resize import resize_if_needed
from .tonemap import unit_to_byte
from .types import Frame


logger = logging.getLogger(__name__)

_SIXTEEN_BIT_MODES = {"I;16", "I;16L", "I;16B", "I;16N"}
_WIDE_MODES = _SIXTEEN_BIT_MODES | {"I", "F"}

_BOMB_CHECK_LOCK = threading.Lock()


def open_unbounded(fh: IO[bytes], formats: Sequence[str] | None = None) -> Image.Image:
    """Image.open with Pillow's decompression-bomb ceiling lifted for this call only.

    max_dimension is the only size control for decoded images.
    """

    with _BOMB_CHECK_LOCK:
        previous = Image.MAX_IMAGE_PIXELS
        Image.MAX_IMAGE_PIXELS = None
        try:
            return Image.open(fh, formats=formats)
        finally:
            Image.MAX_IMAGE_PIXELS = previous


def _narrow_int32(values: np.ndarray) -> np.ndarray:
    lo, hi = int(values.min()), int(values.max())
    if lo >= 0 and hi <= 0xFFFF:
        # 16-bit data stored in a 32-bit container.
        return (values >> 8).astype(np.uint8)
    span = float(hi - lo) or 1.0
    return unit_to_byte((values.astype(np.float64) - lo) / span)


def to_rgba_image(img: Image.Image) -> Image.Image:
    """Convert any Pillow mode to 8-bit RGBA."""

    if img.mode == "RGBA":
        return img
    # Pillow clips wide grey modes when converting; scale down explicitly.
    if img.mode in _SIXTEEN_BIT_MODES:
        img = Image.fromarray((np.asarray(img, dtype=np.uint16) >> 8).astype(np.uint8))
    elif img.mode == "I":
        img = Image.fromarray(_narrow_int32(np.asarray(img, dtype=np.int64)))
    elif img.mode == "F":
        img = Image.fromarray(unit_to_byte(np.asarray(img, dtype=np.float32)))
    return img.convert("RGBA")


def _prepare_for_resize(img: Image.Image) -> Image.Image:
    # Palette and bilevel images only resample with nearest neighbour.
    if img.mode in ("1", "P", "PA") or img.mode in _WIDE_MODES:
        return to_rgba_image(img)
    return img


def frame_from_image(img: Image.Image, max_dimension: int | None, delay_ms: int = 0) -> Frame:
    resized = resize_if_needed(_prepare_for_resize(img), max_dimension)
    rgba = to_rgba_image(resized)
    return Frame(width=rgba.width, height=rgba.height, delay_ms=delay_ms, pixels=rgba.tobytes())


class StaticImageDecoder:
    """Single-frame raster decoder; the container is detected from content."""

    def decode(self, path: Path, max_dimension: int | None = None) -> tuple[list[Frame], str]:
        try:
            fh = path.open("rb")
        except OSError as exc:
            raise IoFailureError(f"failed to open file {path}: {exc}") from exc

        with fh:
            try:
                img = open_unbounded(fh)
            except UnidentifiedImageError as exc:
                raise FormatDetectionError(f"failed to guess format for {path}: {exc}") from exc
            except OSError as exc:
                raise IoFailureError(f"failed to read file {path}: {exc}") from exc

            fmt = (img.format or "unknown").lower()
            try:
                img.load()
                frame = frame_from_image(img, max_dimension)
            except (OSError, ValueError, SyntaxError) as exc:
                raise DecodeFailedError(f"failed to decode image {path}: {exc}") from exc

        logger.debug("decoded %s format=%s size=%sx%s", path.name, fmt, frame.width, frame.height)
        return [frame], fmt
