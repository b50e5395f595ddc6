from __future__ import annotations

import math

from PIL import Image


# Above this many source pixels speed wins over filter quality.
LARGE_IMAGE_PIXELS = 8_000_000


def fit_dimensions(width: int, height: int, max_dimension: int) -> tuple[int, int]:
    """Largest size inside a max_dimension square with the source aspect ratio."""

    ratio = min(max_dimension / float(width), max_dimension / float(height))
    new_w = max(int(math.floor(width * ratio + 0.5)), 1)
    new_h = max(int(math.floor(height * ratio + 0.5)), 1)
    return new_w, new_h


def select_filter(width: int, height: int) -> Image.Resampling:
    if int(width) * int(height) > LARGE_IMAGE_PIXELS:
        return Image.Resampling.NEAREST
    return Image.Resampling.BILINEAR


def resize_if_needed(img: Image.Image, max_dimension: int | None) -> Image.Image:
    if not max_dimension:
        return img

    width, height = img.size
    if width <= max_dimension and height <= max_dimension:
        return img

    size = fit_dimensions(width, height, max_dimension)
    return img.resize(size, resample=select_filter(width, height))
