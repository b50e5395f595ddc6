from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
import threading

from yupic.config import AppConfig, load_config
from yupic.decode import DecodeRequest, DecodeResult
from yupic.decode.exif_metadata import MetadataEntry, read_exif_entries
from yupic.service import DecodeService
from yupic.utils.listing import list_sibling_images


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DirectoryImages:
    images: tuple[str, ...]


@dataclass(frozen=True)
class MetadataResponse:
    path: str
    entries: tuple[MetadataEntry, ...]


_SERVICE_LOCK = threading.Lock()
_SERVICE: DecodeService | None = None


def configure(config: AppConfig | str | Path | None = None) -> DecodeService:
    """Build the process decode service from a config object or YAML path, replacing any previous one."""

    global _SERVICE
    cfg = config if isinstance(config, AppConfig) else load_config(config)
    service = DecodeService(cfg)
    with _SERVICE_LOCK:
        previous, _SERVICE = _SERVICE, service
    if previous is not None:
        previous.shutdown(wait=False)
    return service


def get_service() -> DecodeService:
    global _SERVICE
    with _SERVICE_LOCK:
        if _SERVICE is None:
            _SERVICE = DecodeService()
        return _SERVICE


def _checked_request(path: str | Path, max_size: int | None) -> DecodeRequest:
    request = DecodeRequest(path=Path(path), max_dimension=max_size)
    # Fail before anything is queued for a missing file.
    request.validate()
    return request


def open_image(path: str | Path, max_size: int | None = None) -> DecodeResult:
    request = _checked_request(path, max_size)
    return get_service().decode(request.path, request.max_dimension)


async def open_image_async(path: str | Path, max_size: int | None = None) -> DecodeResult:
    request = _checked_request(path, max_size)
    return await get_service().decode_async(request.path, request.max_dimension)


def get_directory_images(path: str | Path) -> DirectoryImages:
    return DirectoryImages(images=tuple(list_sibling_images(Path(path))))


def get_metadata(path: str | Path) -> MetadataResponse:
    resolved = Path(path)
    return MetadataResponse(path=str(path), entries=tuple(read_exif_entries(resolved)))


def capabilities() -> dict[str, bool]:
    return get_service().registry.capabilities()
