from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from yupic.decode import DecodeRequest, DecodeResult, EmptyDecodeError, Frame


def test_frame_enforces_buffer_length() -> None:
    with pytest.raises(ValueError):
        Frame(width=2, height=2, delay_ms=0, pixels=bytes(15))


def test_frame_from_rgba_array() -> None:
    arr = np.zeros((3, 5, 4), dtype=np.uint8)
    arr[2, 4] = [1, 2, 3, 4]
    frame = Frame.from_rgba_array(arr, delay_ms=40)
    assert (frame.width, frame.height, frame.delay_ms) == (5, 3, 40)
    assert frame.to_array()[2, 4].tolist() == [1, 2, 3, 4]


def test_decode_result_requires_frames() -> None:
    with pytest.raises(EmptyDecodeError):
        DecodeResult(source_path="a.png", detected_format="png", frames=())


def test_decode_request_max_dimension() -> None:
    assert DecodeRequest(Path("a.png"), 0).effective_max_dimension is None
    assert DecodeRequest(Path("a.png"), 512).effective_max_dimension == 512
    with pytest.raises(ValueError):
        DecodeRequest(Path("a.png"), -1)
