from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path

import numpy as np
from PIL import Image

from .base import (
    BufferMismatchError,
    DecodeError,
    DecodeFailedError,
    MissingDependencyError,
    UnsupportedChannelCountError,
)
from .static_decoder import frame_from_image
from .tonemap import gamma_rgb_to_rgba, normalize_mono_to_rgba
from .types import Frame


logger = logging.getLogger(__name__)

try:
    import rawpy  # type: ignore
except Exception:  # pragma: no cover - dependency is optional
    rawpy = None


@dataclass
class SensorSamples:
    """Flat linear float samples as produced by the RAW backend, cpp values per pixel."""

    samples: np.ndarray
    width: int
    height: int
    cpp: int


def read_sensor_samples(path: Path) -> SensorSamples:
    with rawpy.imread(str(path)) as raw:
        if int(getattr(raw, "num_colors", 3)) == 1:
            # Monochrome sensors have no CFA to demosaic; hand back the visible plane.
            plane = np.asarray(raw.raw_image_visible, dtype=np.float32)
            height, width = plane.shape
            return SensorSamples(samples=plane.reshape(-1), width=int(width), height=int(height), cpp=1)

        rgb = raw.postprocess(
            gamma=(1.0, 1.0),
            no_auto_bright=True,
            use_camera_wb=True,
            output_bps=16,
        )
        linear = np.asarray(rgb, dtype=np.float32) / 65535.0
        if linear.ndim == 2:
            linear = linear[..., np.newaxis]
        height, width, cpp = linear.shape
        return SensorSamples(samples=linear.reshape(-1), width=int(width), height=int(height), cpp=int(cpp))


def tonemap_sensor(sensor: SensorSamples, workers: int | None = None) -> np.ndarray:
    if sensor.cpp == 3:
        return gamma_rgb_to_rgba(sensor.samples, sensor.width, sensor.height, workers=workers)
    if sensor.cpp == 1:
        return normalize_mono_to_rgba(sensor.samples, sensor.width, sensor.height, workers=workers)
    raise UnsupportedChannelCountError(sensor.cpp)


class RawDecoder:
    """Camera RAW decoder using rawpy (LibRaw backend)."""

    def __init__(self, workers: int | None = None) -> None:
        if rawpy is None:
            raise MissingDependencyError("rawpy is required for RAW decode: pip install '.[raw]'")
        self.workers = workers

    def decode(self, path: Path, max_dimension: int | None = None) -> tuple[list[Frame], str]:
        try:
            sensor = read_sensor_samples(path)
        except DecodeError:
            raise
        except Exception as exc:
            raise DecodeFailedError(f"failed to read raw {path}: {exc}") from exc

        logger.debug(
            "raw %s sensor=%sx%s cpp=%s samples=%s",
            path.name,
            sensor.width,
            sensor.height,
            sensor.cpp,
            sensor.samples.size,
        )

        try:
            rgba = tonemap_sensor(sensor, workers=self.workers)
        except UnsupportedChannelCountError as exc:
            raise UnsupportedChannelCountError(sensor.cpp, f"{exc}: {path}") from exc
        except BufferMismatchError as exc:
            raise BufferMismatchError(f"{exc}: {path}") from exc

        frame = frame_from_image(Image.fromarray(rgba), max_dimension)
        return [frame], "raw"
