from __future__ import annotations

from fractions import Fraction
import itertools
import logging
import math
from pathlib import Path

from PIL import Image, ImageSequence

from .base import DecodeFailedError, IoFailureError
from .static_decoder import frame_from_image, open_unbounded
from .types import Frame


logger = logging.getLogger(__name__)

MAX_ANIMATION_FRAMES = 300
MIN_FRAME_DELAY_MS = 10


def delay_to_ms(numer: int, denom: int) -> int:
    """Integer milliseconds for a numer/denom ms delay, floored at MIN_FRAME_DELAY_MS."""

    if denom == 0:
        ms = int(numer)
    else:
        ms = int(math.floor(numer / float(denom) + 0.5))
    return max(ms, MIN_FRAME_DELAY_MS)


def _frame_delay(frame: Image.Image) -> Fraction:
    duration = frame.info.get("duration", 0) or 0
    return Fraction(duration).limit_denominator(1000)


class GifDecoder:
    def decode(self, path: Path, max_dimension: int | None = None) -> tuple[list[Frame], str]:
        try:
            fh = path.open("rb")
        except OSError as exc:
            raise IoFailureError(f"failed to open gif {path}: {exc}") from exc

        out: list[Frame] = []
        with fh:
            try:
                img = open_unbounded(fh, formats=["GIF"])
            except OSError as exc:
                raise DecodeFailedError(f"failed to read gif {path}: {exc}") from exc

            try:
                frames = ImageSequence.Iterator(img)
                for frame in itertools.islice(frames, MAX_ANIMATION_FRAMES):
                    delay = _frame_delay(frame)
                    delay_ms = delay_to_ms(delay.numerator, delay.denominator)
                    out.append(frame_from_image(frame.convert("RGBA"), max_dimension, delay_ms=delay_ms))
            except (OSError, ValueError, EOFError) as exc:
                raise DecodeFailedError(f"failed to collect gif frames for {path}: {exc}") from exc

        logger.debug("decoded gif %s frames=%s", path.name, len(out))
        return out, "gif"
