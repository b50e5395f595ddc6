from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from yupic.config import DecodeConfig

from .base import CapabilityDisabledError, Decoder, MissingDependencyError
from .gif_decoder import GifDecoder
from .heif_decoder import HeifDecoder
from .jxl_decoder import JxlDecoder
from .raw_decoder import RawDecoder
from .static_decoder import StaticImageDecoder
from .types import DecodeRequest, DecodeResult


logger = logging.getLogger(__name__)

RAW_EXTENSIONS = frozenset(
    {"dng", "cr2", "crw", "nef", "nrw", "orf", "rw2", "pef", "sr2", "arw", "raw", "raf"}
)

_ROUTES: dict[str, str] = {
    "gif": "gif",
    # AVIF goes through the generic raster path, first frame only.
    "avif": "static",
    "heic": "heif",
    "heif": "heif",
    "jxl": "jxl",
    **{ext: "raw" for ext in RAW_EXTENSIONS},
}

_DISABLED_MESSAGES = {
    "heif": "HEIF/HEIC support is not enabled in this build (install the 'heif' extra and set decode.enable_heif)",
    "jxl": "JPEG-XL support is not enabled in this build (install the 'jxl' extra and set decode.enable_jxl)",
    "raw": "RAW support is not enabled in this build (install the 'raw' extra and set decode.enable_raw)",
}


def route_for(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    return _ROUTES.get(ext, "static")


def _try_build(tag: str, enabled: bool, factory: Callable[[], Decoder]) -> Decoder | None:
    if not enabled:
        logger.info("%s decoding disabled by config", tag)
        return None
    try:
        return factory()
    except MissingDependencyError as exc:
        logger.info("%s decoding unavailable: %s", tag, exc)
        return None


class DecoderRegistry:
    """Maps a format tag to its decoder; optional tags may resolve to None."""

    def __init__(
        self,
        enable_heif: bool = True,
        enable_jxl: bool = True,
        enable_raw: bool = True,
        raw_threads: int | None = None,
        decoders: dict[str, Decoder | None] | None = None,
    ) -> None:
        if decoders is not None:
            self._decoders = dict(decoders)
        else:
            self._decoders = {
                "static": StaticImageDecoder(),
                "gif": GifDecoder(),
                "heif": _try_build("heif", enable_heif, HeifDecoder),
                "jxl": _try_build("jxl", enable_jxl, JxlDecoder),
                "raw": _try_build("raw", enable_raw, lambda: RawDecoder(workers=raw_threads)),
            }
        logger.debug("decoder capabilities: %s", self.capabilities())

    @classmethod
    def from_config(cls, config: DecodeConfig) -> DecoderRegistry:
        return cls(
            enable_heif=config.enable_heif,
            enable_jxl=config.enable_jxl,
            enable_raw=config.enable_raw,
            raw_threads=config.raw_threads or None,
        )

    def capabilities(self) -> dict[str, bool]:
        return {tag: decoder is not None for tag, decoder in self._decoders.items()}

    def decoder_for(self, path: Path) -> Decoder:
        tag = route_for(path)
        decoder = self._decoders.get(tag)
        if decoder is None:
            raise CapabilityDisabledError(_DISABLED_MESSAGES.get(tag, f"{tag} decoding is not enabled"))
        return decoder

    def decode(self, path: str | Path, max_dimension: int | None = None) -> DecodeResult:
        request = DecodeRequest(path=Path(path), max_dimension=max_dimension)
        request.validate()

        decoder = self.decoder_for(request.path)
        frames, fmt = decoder.decode(request.path, request.effective_max_dimension)
        logger.debug("decoded %s as %s frames=%s", request.path.name, fmt, len(frames))
        return DecodeResult(
            source_path=str(request.path),
            detected_format=fmt,
            frames=tuple(frames),
        )
