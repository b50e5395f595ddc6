from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import numpy as np


@dataclass(frozen=True)
class Frame:
    """One decoded frame, packed 8-bit RGBA, row-major."""

    width: int
    height: int
    delay_ms: int
    pixels: bytes

    def __post_init__(self) -> None:
        expected = int(self.width) * int(self.height) * 4
        if len(self.pixels) != expected:
            raise ValueError(
                f"frame buffer holds {len(self.pixels)} bytes, expected {expected} for {self.width}x{self.height} RGBA"
            )
        if self.delay_ms < 0:
            raise ValueError(f"negative frame delay: {self.delay_ms}")

    @classmethod
    def from_rgba_array(cls, rgba: np.ndarray, delay_ms: int = 0) -> Frame:
        arr = np.ascontiguousarray(rgba, dtype=np.uint8)
        if arr.ndim != 3 or arr.shape[2] != 4:
            raise ValueError(f"expected HxWx4 RGBA array, got shape {arr.shape}")
        height, width = arr.shape[:2]
        return cls(width=int(width), height=int(height), delay_ms=int(delay_ms), pixels=arr.tobytes())

    def to_array(self) -> np.ndarray:
        return np.frombuffer(self.pixels, dtype=np.uint8).reshape(self.height, self.width, 4)


@dataclass(frozen=True)
class DecodeRequest:
    path: Path
    max_dimension: int | None = None

    def __post_init__(self) -> None:
        if self.max_dimension is not None and self.max_dimension < 0:
            raise ValueError(f"max_dimension must be positive, got {self.max_dimension}")

    @property
    def effective_max_dimension(self) -> int | None:
        # 0 and None both mean "keep the decoded size".
        return self.max_dimension or None

    def validate(self) -> None:
        from .base import NotFoundError

        if not self.path.is_file():
            raise NotFoundError(f"file not found: {self.path}")


@dataclass(frozen=True)
class DecodeResult:
    source_path: str
    detected_format: str
    frames: tuple[Frame, ...]

    def __post_init__(self) -> None:
        if not self.frames:
            from .base import EmptyDecodeError

            raise EmptyDecodeError(f"no frames decoded for {self.source_path}")
