from __future__ import annotations

from pathlib import Path


# Extensions offered for sibling navigation. Wider than what the decoder routes
# specially; unknown-to-Pillow entries fail at decode time, not here.
IMAGE_EXTENSIONS = frozenset(
    {
        "bmp", "jpg", "jpeg", "gif", "png", "psd", "dds", "jxr", "webp",
        "j2k", "jp2", "tga", "tiff", "tif", "pcx", "pgm", "pnm", "ppm",
        "bpg", "dng", "cr2", "crw", "nef", "nrw", "orf", "rw2", "pef",
        "sr2", "arw", "raw", "raf", "avif", "jxl", "exr", "qoi", "ico",
        "svg", "heic", "heif",
    }
)


def is_image_candidate(path: Path) -> bool:
    return path.is_file() and path.suffix.lower().lstrip(".") in IMAGE_EXTENSIONS


def list_sibling_images(path: Path) -> list[str]:
    """Image files next to ``path`` (itself included), sorted by path string."""

    directory = path.parent
    if not directory.is_dir():
        raise NotADirectoryError(f"no parent directory for {path}")

    images = [str(entry) for entry in directory.iterdir() if is_image_candidate(entry)]
    images.sort()
    return images
