from __future__ import annotations

from pathlib import Path

from PIL import Image
import pytest


@pytest.fixture
def png_path(tmp_path: Path) -> Path:
    path = tmp_path / "red.png"
    Image.new("RGB", (40, 20), (255, 0, 0)).save(path)
    return path


@pytest.fixture
def core_service():
    from yupic import app_api
    from yupic.config import AppConfig, DecodeConfig

    service = app_api.configure(
        AppConfig(decode=DecodeConfig(enable_heif=False, enable_jxl=False, enable_raw=False))
    )
    yield service
    service.shutdown()
