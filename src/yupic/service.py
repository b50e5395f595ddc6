from __future__ import annotations

import asyncio
from concurrent.futures import Future, ThreadPoolExecutor
import logging
from pathlib import Path
import threading

from yupic.config import AppConfig, default_config
from yupic.decode import DecodeError, DecoderRegistry, DecodeResult, DecodeTaskError


logger = logging.getLogger(__name__)


class DecodeService:
    """Runs decode requests on a bounded worker pool.

    Callers get a future back immediately. Dropping or cancelling that future
    only stops delivery; a decode that already started runs to completion.
    """

    def __init__(self, config: AppConfig | None = None, registry: DecoderRegistry | None = None) -> None:
        self.config = config or default_config()
        self.registry = registry or DecoderRegistry.from_config(self.config.decode)
        self._executor = ThreadPoolExecutor(
            max_workers=self.config.decode.max_workers,
            thread_name_prefix="yupic-decode",
        )
        self._active_count = 0
        self._counter_lock = threading.Lock()

    def _run(self, path: Path, max_dimension: int | None) -> DecodeResult:
        with self._counter_lock:
            self._active_count += 1
        try:
            return self.registry.decode(path, max_dimension)
        except DecodeError:
            raise
        except Exception as exc:
            logger.exception("decode task crashed for %s", path)
            raise DecodeTaskError(f"Task failed: {exc}") from exc
        finally:
            with self._counter_lock:
                self._active_count -= 1

    def submit(self, path: str | Path, max_dimension: int | None = None) -> Future[DecodeResult]:
        resolved = Path(path)
        logger.debug("queue decode %s max_dimension=%s", resolved, max_dimension)
        return self._executor.submit(self._run, resolved, max_dimension)

    def decode(self, path: str | Path, max_dimension: int | None = None, timeout: float | None = None) -> DecodeResult:
        return self.submit(path, max_dimension).result(timeout=timeout)

    async def decode_async(self, path: str | Path, max_dimension: int | None = None) -> DecodeResult:
        return await asyncio.wrap_future(self.submit(path, max_dimension))

    @property
    def active_count(self) -> int:
        with self._counter_lock:
            return self._active_count

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> DecodeService:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()
