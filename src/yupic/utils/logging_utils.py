from __future__ import annotations

import logging
from pathlib import Path


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def configure_logging(level: str, log_file: Path | None = None) -> None:
    resolved_level = getattr(logging, level.upper(), logging.INFO)
    handlers: list[logging.Handler] = [logging.StreamHandler()]

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(level=resolved_level, format=LOG_FORMAT, handlers=handlers, force=True)

    # Pillow's plugin loader is chatty at DEBUG.
    logging.getLogger("PIL").setLevel(max(resolved_level, logging.INFO))
