from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
import os
from typing import Callable, Iterator

import numpy as np

from .base import BufferMismatchError, UnsupportedChannelLayoutError


GAMMA = 1.0 / 2.2

# Pixels per work item. Each item owns a disjoint slice of the output buffer.
CHUNK_PIXELS = 262_144

_F32_EPS = float(np.finfo(np.float32).eps)


def resolve_workers(workers: int | None) -> int:
    if workers is None or workers <= 0:
        return os.cpu_count() or 1
    return int(workers)


def _chunk_bounds(total: int, chunk: int | None = None) -> Iterator[tuple[int, int]]:
    chunk = chunk or CHUNK_PIXELS
    for start in range(0, total, chunk):
        yield start, min(start + chunk, total)


def run_chunked(total: int, fn: Callable[[int, int], None], workers: int | None = None) -> None:
    """Call ``fn(start, stop)`` over [0, total) in fixed-size chunks, in parallel.

    Chunks are independent and complete in any order. numpy releases the GIL
    inside the per-chunk ufuncs, so threads give real parallelism here.
    Exceptions from any chunk propagate to the caller.
    """

    bounds = list(_chunk_bounds(total))
    n_workers = min(resolve_workers(workers), len(bounds))
    if n_workers <= 1:
        for start, stop in bounds:
            fn(start, stop)
        return

    with ThreadPoolExecutor(max_workers=n_workers, thread_name_prefix="yupic-tonemap") as ex:
        futs = [ex.submit(fn, start, stop) for start, stop in bounds]
        for fut in as_completed(futs):
            fut.result()


def unit_to_byte(values: np.ndarray) -> np.ndarray:
    """Map [0, 1] floats to bytes with 0.5 rounding. NaN maps to 0."""

    clipped = np.nan_to_num(np.clip(values, 0.0, 1.0), nan=0.0)
    return np.floor(clipped * 255.0 + 0.5).astype(np.uint8)


def gamma_rgb_to_rgba(samples: np.ndarray, width: int, height: int, workers: int | None = None) -> np.ndarray:
    """Gamma-encode interleaved linear RGB samples into an HxWx4 uint8 image."""

    pixels = int(width) * int(height)
    flat = np.asarray(samples, dtype=np.float32).reshape(-1)
    if flat.size < pixels * 3:
        raise BufferMismatchError(f"raw buffer too small: {flat.size} samples for {width}x{height}x3")

    src = flat[: pixels * 3].reshape(pixels, 3)
    out = np.empty((pixels, 4), dtype=np.uint8)

    def _work(start: int, stop: int) -> None:
        block = np.power(np.maximum(src[start:stop], 0.0), GAMMA)
        out[start:stop, :3] = unit_to_byte(block)
        out[start:stop, 3] = 255

    run_chunked(pixels, _work, workers)
    return out.reshape(int(height), int(width), 4)


def sample_range(samples: np.ndarray, workers: int | None = None) -> tuple[float, float]:
    """Global (min, max) of a flat buffer by chunked parallel reduction. NaNs are ignored."""

    flat = np.asarray(samples, dtype=np.float32).reshape(-1)
    n_chunks = -(-flat.size // CHUNK_PIXELS)
    # One slot per chunk; an all-NaN chunk leaves NaN, skipped by fmin/fmax below.
    mins = np.full(n_chunks, np.nan, dtype=np.float32)
    maxs = np.full(n_chunks, np.nan, dtype=np.float32)

    def _work(start: int, stop: int) -> None:
        block = flat[start:stop]
        slot = start // CHUNK_PIXELS
        mins[slot] = np.fmin.reduce(block)
        maxs[slot] = np.fmax.reduce(block)

    run_chunked(flat.size, _work, workers)

    lo = float(np.fmin.reduce(mins, initial=np.finfo(np.float32).max))
    hi = float(np.fmax.reduce(maxs, initial=np.finfo(np.float32).min))
    return lo, hi


def normalize_mono_to_rgba(samples: np.ndarray, width: int, height: int, workers: int | None = None) -> np.ndarray:
    """Min/max-normalise single-channel sensor samples into grey HxWx4 uint8."""

    pixels = int(width) * int(height)
    flat = np.asarray(samples, dtype=np.float32).reshape(-1)
    if flat.size < pixels:
        raise BufferMismatchError(f"raw buffer too small: {flat.size} samples for {width}x{height}")

    lo, hi = sample_range(flat, workers)
    value_range = hi - lo
    if abs(value_range) < _F32_EPS:
        value_range = 1.0

    src = flat[:pixels]
    out = np.empty((pixels, 4), dtype=np.uint8)

    def _work(start: int, stop: int) -> None:
        norm = np.clip((src[start:stop] - lo) / value_range, 0.0, 1.0)
        grey = unit_to_byte(np.power(norm, GAMMA))
        out[start:stop, 0] = grey
        out[start:stop, 1] = grey
        out[start:stop, 2] = grey
        out[start:stop, 3] = 255

    run_chunked(pixels, _work, workers)
    return out.reshape(int(height), int(width), 4)


def unit_float_to_rgba(samples: np.ndarray, width: int, height: int, channels: int) -> np.ndarray:
    """Clamp display-referred float samples to bytes; no transfer curve applied.

    A 4th channel is used as alpha, otherwise alpha is opaque.
    """

    if channels < 3:
        raise UnsupportedChannelLayoutError(f"unexpected channel count: {channels}")

    pixels = int(width) * int(height)
    flat = np.asarray(samples, dtype=np.float32).reshape(-1)
    if flat.size != pixels * channels:
        raise BufferMismatchError(f"buffer write mismatch: expected {pixels * channels}, got {flat.size}")

    px = flat.reshape(pixels, channels)
    out = np.empty((pixels, 4), dtype=np.uint8)
    out[:, :3] = unit_to_byte(px[:, :3])
    out[:, 3] = unit_to_byte(px[:, 3]) if channels >= 4 else 255
    return out.reshape(int(height), int(width), 4)
