from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import numpy as np
import pytest

from yupic.decode import PlaneLayoutUnsupportedError
from yupic.decode import heif_decoder
from yupic.decode.heif_decoder import HeifDecoder, interleaved_rgb, rgb_to_rgba


def _padded_rgb_image(width: int, height: int, pad: int = 2) -> SimpleNamespace:
    stride = width * 3 + pad
    buf = bytearray(stride * height)
    for y in range(height):
        for x in range(width):
            off = y * stride + x * 3
            buf[off : off + 3] = bytes([x * 10, y * 10, 7])
    return SimpleNamespace(mode="RGB", size=(width, height), stride=stride, data=bytes(buf))


class _FakeHeifFile:
    def __init__(self, images: list[SimpleNamespace], primary_index: int) -> None:
        self._images = images
        self.primary_index = primary_index

    def __getitem__(self, index: int) -> SimpleNamespace:
        return self._images[index]


def test_interleaved_rgb_honours_stride() -> None:
    rgb = interleaved_rgb(_padded_rgb_image(3, 2), Path("x.heic"))
    assert rgb.shape == (2, 3, 3)
    assert rgb[1, 2].tolist() == [20, 10, 7]


def test_interleaved_rgb_drops_alpha() -> None:
    img = SimpleNamespace(mode="RGBA", size=(1, 1), stride=4, data=bytes([1, 2, 3, 4]))
    assert interleaved_rgb(img, Path("x.heic")).tolist() == [[[1, 2, 3]]]


def test_interleaved_rgb_rejects_planar_layouts() -> None:
    with pytest.raises(PlaneLayoutUnsupportedError):
        interleaved_rgb(SimpleNamespace(mode="L", size=(2, 2), stride=2, data=bytes(4)), Path("x.heic"))
    with pytest.raises(PlaneLayoutUnsupportedError):
        interleaved_rgb(SimpleNamespace(mode="RGB", size=(2, 2), stride=6, data=None), Path("x.heic"))


def test_rgb_to_rgba_appends_opaque_alpha() -> None:
    rgba = rgb_to_rgba(np.zeros((2, 2, 3), dtype=np.uint8))
    assert rgba.shape == (2, 2, 4)
    assert np.all(rgba[..., 3] == 255)


def test_heif_decode_uses_primary_image(monkeypatch, tmp_path: Path) -> None:
    path = tmp_path / "photo.heic"
    path.write_bytes(b"ftypheic")
    thumb = SimpleNamespace(mode="L", size=(1, 1), stride=1, data=bytes(1))
    heif_file = _FakeHeifFile([thumb, _padded_rgb_image(4, 2)], primary_index=1)
    monkeypatch.setattr(
        heif_decoder,
        "pillow_heif",
        SimpleNamespace(open_heif=lambda fp, convert_hdr_to_8bit=True: heif_file),
    )

    frames, fmt = HeifDecoder().decode(path)
    assert fmt == "heif"
    frame = frames[0]
    assert (frame.width, frame.height) == (4, 2)
    assert frame.to_array()[1, 3].tolist() == [30, 10, 7, 255]
