from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass
class DecodeConfig:
    max_workers: int = 2
    raw_threads: int = 0
    enable_heif: bool = True
    enable_jxl: bool = True
    enable_raw: bool = True


@dataclass
class AppConfig:
    decode: DecodeConfig = field(default_factory=DecodeConfig)
    log_level: str = "INFO"
    log_file: Path | None = None


def default_config() -> AppConfig:
    return AppConfig()


def _expand_path(value: str | None, base: Path) -> Path | None:
    if value in (None, ""):
        return None
    path = Path(value)
    if not path.is_absolute():
        path = (base / path).resolve()
    return path


def _validate(config: AppConfig) -> None:
    if config.decode.max_workers < 1:
        raise ValueError("decode.max_workers must be >= 1")
    if config.decode.raw_threads < 0:
        raise ValueError("decode.raw_threads must be >= 0 (0 = cpu count)")


def _as_mapping(raw: Any, key: str) -> dict[str, Any]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"config section {key} must be a mapping")
    return raw


def load_config(path: str | Path | None = None) -> AppConfig:
    if path is None:
        return default_config()

    try:
        import yaml  # type: ignore
    except Exception as exc:
        raise RuntimeError("PyYAML is required for config loading. Install with: pip install PyYAML") from exc

    cfg_path = Path(path).expanduser().resolve()
    with cfg_path.open("r", encoding="utf-8") as f:
        raw = _as_mapping(yaml.safe_load(f), "root")

    base = cfg_path.parent
    decode_raw = _as_mapping(raw.get("decode"), "decode")

    decode = DecodeConfig(
        max_workers=int(decode_raw.get("max_workers", 2)),
        raw_threads=int(decode_raw.get("raw_threads", 0)),
        enable_heif=bool(decode_raw.get("enable_heif", True)),
        enable_jxl=bool(decode_raw.get("enable_jxl", True)),
        enable_raw=bool(decode_raw.get("enable_raw", True)),
    )

    app = AppConfig(
        decode=decode,
        log_level=str(raw.get("log_level", "INFO")),
        log_file=_expand_path(raw.get("log_file"), base),
    )
    _validate(app)
    return app
