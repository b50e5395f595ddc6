from __future__ import annotations

from pathlib import Path

import pytest

from yupic.config import load_config


def test_load_config_defaults_without_file() -> None:
    cfg = load_config(None)
    assert cfg.decode.max_workers == 2
    assert cfg.decode.enable_raw is True
    assert cfg.log_file is None


def test_load_config_reads_decode_section(tmp_path: Path) -> None:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(
        """
decode:
  max_workers: 4
  raw_threads: 3
  enable_heif: false
log_level: DEBUG
log_file: ./logs/yupic.log
""",
        encoding="utf-8",
    )

    cfg = load_config(cfg_file)
    assert cfg.decode.max_workers == 4
    assert cfg.decode.raw_threads == 3
    assert cfg.decode.enable_heif is False
    assert cfg.decode.enable_jxl is True
    assert cfg.log_level == "DEBUG"
    assert cfg.log_file == (tmp_path / "logs" / "yupic.log").resolve()


def test_load_config_rejects_bad_worker_count(tmp_path: Path) -> None:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text("decode:\n  max_workers: 0\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(cfg_file)
