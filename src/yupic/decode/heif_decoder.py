from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import numpy as np
from PIL import Image

from .base import DecodeFailedError, MissingDependencyError, PlaneLayoutUnsupportedError
from .static_decoder import frame_from_image
from .types import Frame


logger = logging.getLogger(__name__)

try:
    import pillow_heif  # type: ignore
except Exception:  # pragma: no cover - dependency is optional
    pillow_heif = None

_INTERLEAVED_CHANNELS = {"RGB": 3, "RGBA": 4}


def interleaved_rgb(image: Any, path: Path) -> np.ndarray:
    """HxWx3 uint8 view of an 8-bit interleaved HEIF image buffer.

    Rows may be padded, so the buffer is sliced by ``stride``. An alpha channel
    in the buffer is dropped; the decode target is RGB.
    """

    channels = _INTERLEAVED_CHANNELS.get(getattr(image, "mode", None))
    data = getattr(image, "data", None)
    if channels is None or data is None:
        raise PlaneLayoutUnsupportedError(
            f"heif interleaved plane missing for {path} (mode={getattr(image, 'mode', None)})"
        )

    width, height = image.size
    stride = int(getattr(image, "stride", width * channels))
    buf = np.frombuffer(data, dtype=np.uint8)
    if buf.size < stride * height or stride < width * channels:
        raise PlaneLayoutUnsupportedError(f"heif plane too small for {width}x{height} in {path}")

    rows = buf[: stride * height].reshape(height, stride)
    pixels = rows[:, : width * channels].reshape(height, width, channels)
    return pixels[..., :3]


def rgb_to_rgba(rgb: np.ndarray) -> np.ndarray:
    height, width = rgb.shape[:2]
    rgba = np.empty((height, width, 4), dtype=np.uint8)
    rgba[..., :3] = rgb
    rgba[..., 3] = 255
    return rgba


class HeifDecoder:
    """HEIF/HEIC decoder using pillow-heif (libheif backend)."""

    def __init__(self) -> None:
        if pillow_heif is None:
            raise MissingDependencyError("pillow-heif is required for HEIF/HEIC decode: pip install '.[heif]'")

    def decode(self, path: Path, max_dimension: int | None = None) -> tuple[list[Frame], str]:
        try:
            heif_file = pillow_heif.open_heif(str(path), convert_hdr_to_8bit=True)
            primary = heif_file[heif_file.primary_index]
            rgb = interleaved_rgb(primary, path)
        except PlaneLayoutUnsupportedError:
            raise
        except Exception as exc:
            raise DecodeFailedError(f"failed to decode heif {path}: {exc}") from exc

        rgba = Image.fromarray(rgb_to_rgba(rgb))
        frame = frame_from_image(rgba, max_dimension)
        logger.debug("decoded heif %s size=%sx%s", path.name, frame.width, frame.height)
        return [frame], "heif"
