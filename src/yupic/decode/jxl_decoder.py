from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
from PIL import Image

from .base import (
    BufferMismatchError,
    DecodeFailedError,
    IoFailureError,
    MissingDependencyError,
    UnsupportedChannelLayoutError,
)
from .static_decoder import frame_from_image
from .tonemap import unit_float_to_rgba
from .types import Frame


logger = logging.getLogger(__name__)

try:
    import imagecodecs  # type: ignore
except Exception:  # pragma: no cover - dependency is optional
    imagecodecs = None


def samples_to_float(decoded: np.ndarray) -> tuple[np.ndarray, int, int, int]:
    """Flatten a decoded frame to float32 samples plus (width, height, channels).

    Integer samples are scaled by their dtype maximum so every path lands in
    nominal [0, 1].
    """

    arr = np.asarray(decoded)
    if arr.ndim == 4 and arr.shape[0] == 1:
        arr = arr[0]
    if arr.ndim == 2:
        arr = arr[..., np.newaxis]
    if arr.ndim != 3:
        raise UnsupportedChannelLayoutError(f"unexpected decoded jxl shape: {arr.shape}")

    height, width, channels = (int(v) for v in arr.shape)
    if np.issubdtype(arr.dtype, np.integer):
        scale = float(np.iinfo(arr.dtype).max)
        samples = arr.astype(np.float32).reshape(-1) / scale
    else:
        samples = arr.astype(np.float32).reshape(-1)
    return samples, width, height, channels


class JxlDecoder:
    """JPEG-XL decoder using imagecodecs (libjxl backend). Only the first frame is rendered."""

    def __init__(self) -> None:
        if imagecodecs is None or not hasattr(imagecodecs, "jpegxl_decode"):
            raise MissingDependencyError("imagecodecs with JPEG-XL support is required for JXL decode: pip install '.[jxl]'")

    def decode(self, path: Path, max_dimension: int | None = None) -> tuple[list[Frame], str]:
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise IoFailureError(f"failed to open jxl {path}: {exc}") from exc

        try:
            decoded = imagecodecs.jpegxl_decode(data, index=0)
        except Exception as exc:
            raise DecodeFailedError(f"failed to render jxl {path}: {exc}") from exc

        samples, width, height, channels = samples_to_float(decoded)
        try:
            rgba = unit_float_to_rgba(samples, width, height, channels)
        except (UnsupportedChannelLayoutError, BufferMismatchError) as exc:
            raise type(exc)(f"{exc} in jxl {path}") from exc

        frame = frame_from_image(Image.fromarray(rgba), max_dimension)
        logger.debug("decoded jxl %s channels=%s size=%sx%s", path.name, channels, frame.width, frame.height)
        return [frame], "jxl"
