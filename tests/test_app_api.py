from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from yupic import app_api
from yupic.decode import CapabilityDisabledError, NotFoundError


pytestmark = pytest.mark.usefixtures("core_service")


def test_open_image_png(png_path: Path) -> None:
    result = app_api.open_image(png_path, max_size=20)
    assert result.source_path == str(png_path)
    assert result.detected_format == "png"
    assert (result.frames[0].width, result.frames[0].height) == (20, 10)


def test_open_image_async(png_path: Path) -> None:
    result = asyncio.run(app_api.open_image_async(str(png_path)))
    assert len(result.frames) == 1


def test_open_image_missing_path(tmp_path: Path) -> None:
    with pytest.raises(NotFoundError):
        app_api.open_image(tmp_path / "nope.png")


def test_open_heic_when_disabled(tmp_path: Path) -> None:
    path = tmp_path / "photo.HEIC"
    path.write_bytes(b"x")
    with pytest.raises(CapabilityDisabledError):
        app_api.open_image(path)


def test_get_directory_images_filters_and_sorts(tmp_path: Path) -> None:
    for name in ("b.JPG", "a.png", "notes.txt", "c.cr2"):
        (tmp_path / name).write_bytes(b"x")
    (tmp_path / "dir.png").mkdir()

    listing = app_api.get_directory_images(tmp_path / "a.png")
    assert listing.images == (
        str(tmp_path / "a.png"),
        str(tmp_path / "b.JPG"),
        str(tmp_path / "c.cr2"),
    )


def test_capabilities_reflect_config() -> None:
    caps = app_api.capabilities()
    assert caps["static"] is True
    assert caps["heif"] is False
