from __future__ import annotations

import base64
import io
import json
from pathlib import Path

from PIL import Image
import pytest

from yupic import app_api, gui_bridge
from yupic.decode import NotFoundError


pytestmark = pytest.mark.usefixtures("core_service")


def test_image_payload_base64_transport(png_path: Path) -> None:
    payload = gui_bridge.open_image_payload(str(png_path))
    assert payload["path"] == str(png_path)
    assert payload["format"] == "png"
    frame = payload["frames"][0]
    raw = base64.b64decode(frame["data"])
    assert len(raw) == frame["width"] * frame["height"] * 4
    assert raw[:4] == bytes((255, 0, 0, 255))
    assert gui_bridge.decode_frame_payload(frame).pixels == raw


def test_invoke_payload_open_image(png_path: Path) -> None:
    payload = gui_bridge.invoke_payload({"command": "open_image", "path": str(png_path), "maxSize": 8})
    assert payload["frames"][0]["width"] == 8
    assert payload["frames"][0]["height"] == 4


def test_invoke_payload_unknown_command() -> None:
    with pytest.raises(ValueError):
        gui_bridge.invoke_payload({"command": "rotate", "path": "x"})


def test_invoke_rejects_negative_max_size(png_path: Path) -> None:
    with pytest.raises(ValueError):
        gui_bridge.invoke_payload({"command": "open_image", "path": str(png_path), "max_size": -1})


def test_error_payload_has_stable_kind(tmp_path: Path) -> None:
    with pytest.raises(NotFoundError) as excinfo:
        app_api.open_image(tmp_path / "missing.gif")
    payload = gui_bridge.error_payload(excinfo.value)
    assert payload["kind"] == "not_found"
    assert "missing.gif" in payload["error"]


def test_main_reports_errors_as_json(tmp_path: Path, capsys) -> None:
    code = gui_bridge.main(["open-image", "--path", str(tmp_path / "missing.png")])
    assert code == 1
    err = json.loads(capsys.readouterr().err)
    assert err["kind"] == "not_found"


def test_main_directory_images(tmp_path: Path, capsys) -> None:
    Image.new("RGB", (2, 2)).save(tmp_path / "one.png")
    code = gui_bridge.main(["directory-images", "--path", str(tmp_path / "one.png")])
    assert code == 0
    out = json.loads(capsys.readouterr().out)
    assert out["images"] == [str(tmp_path / "one.png")]


def test_main_invoke_reads_stdin(png_path: Path, monkeypatch, capsys) -> None:
    request = {"command": "open_image", "path": str(png_path)}
    monkeypatch.setattr("sys.stdin", io.StringIO(json.dumps(request)))
    code = gui_bridge.main(["invoke"])
    assert code == 0
    out = json.loads(capsys.readouterr().out)
    assert len(out["frames"]) == 1
