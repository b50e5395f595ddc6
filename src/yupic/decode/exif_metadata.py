from __future__ import annotations

from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Any


logger = logging.getLogger(__name__)


class MetadataError(RuntimeError):
    kind = "metadata_failed"


@dataclass(frozen=True)
class MetadataEntry:
    tag: str
    value: str


def _ratio_like_to_float(value: Any) -> float | None:
    if value is None:
        return None

    # exifread often stores values as a list-like container.
    if isinstance(value, (list, tuple)) and len(value) > 0:
        value = value[0]

    if hasattr(value, "num") and hasattr(value, "den"):
        den = float(getattr(value, "den", 0) or 0)
        if den == 0.0:
            return None
        return float(getattr(value, "num", 0)) / den

    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _format_number(value: float) -> str:
    return f"{value:.1f}".rstrip("0").rstrip(".")


# APEX values (Exif 2.3 section 4.6.5), shown in EV.
_APEX_TAGS = frozenset({"ApertureValue", "ShutterSpeedValue", "BrightnessValue", "MaxApertureValue"})

_RESOLUTION_UNIT_TAGS = {
    "XResolution": "ResolutionUnit",
    "YResolution": "ResolutionUnit",
    "FocalPlaneXResolution": "FocalPlaneResolutionUnit",
    "FocalPlaneYResolution": "FocalPlaneResolutionUnit",
}

_RESOLUTION_UNITS = {2: "inch", 3: "cm"}


def _resolution_unit(tags: dict[str, Any], key: str) -> int | None:
    prefix, _, name = key.partition(" ")
    unit_name = _RESOLUTION_UNIT_TAGS.get(name)
    if unit_name is None:
        return None
    unit = tags.get(f"{prefix} {unit_name}")
    if unit is None:
        # ResolutionUnit defaults to inches when absent.
        return 2
    number = _ratio_like_to_float(getattr(unit, "values", None))
    return int(number) if number is not None else None


def _with_unit(name: str, tag: Any, resolution_unit: int | None = None) -> str:
    printable = str(getattr(tag, "printable", tag)).strip()
    values = getattr(tag, "values", None)
    number = _ratio_like_to_float(values)

    if name == "ExposureTime":
        return f"{printable} s"
    if number is None:
        return printable
    if name in ("FocalLength", "FocalLengthIn35mmFilm"):
        return f"{_format_number(number)} mm"
    if name == "FNumber":
        return f"f/{_format_number(number)}"
    if name == "ExposureBiasValue":
        return f"{number:+.2f} EV"
    if name in _APEX_TAGS:
        return f"{number:.2f} EV"
    if name in ("SubjectDistance", "GPSAltitude"):
        return f"{_format_number(number)} m"
    if name in _RESOLUTION_UNIT_TAGS:
        unit = _RESOLUTION_UNITS.get(resolution_unit or 0)
        return f"{_format_number(number)} pixels per {unit}" if unit else _format_number(number)
    return printable


def _short_tag_name(key: str) -> str:
    # exifread keys look like "EXIF ExposureTime" / "Image Make".
    return key.split(" ", 1)[1] if " " in key else key


def read_exif_entries(path: Path) -> list[MetadataEntry]:
    """Read EXIF tags and render each as a display string, with units where they apply."""

    try:
        import exifread  # type: ignore
    except Exception as exc:
        raise MetadataError("exifread is required for metadata: pip install ExifRead") from exc

    try:
        with path.open("rb") as f:
            tags = exifread.process_file(f, details=False)
    except OSError as exc:
        raise MetadataError(f"failed to open file for metadata: {exc}") from exc
    except Exception as exc:
        raise MetadataError(f"failed to read exif: {exc}") from exc

    entries: list[MetadataEntry] = []
    for key, tag in tags.items():
        if not hasattr(tag, "printable"):
            # embedded thumbnail bytes
            continue
        name = _short_tag_name(key)
        value = _with_unit(name, tag, _resolution_unit(tags, key))
        entries.append(MetadataEntry(tag=name, value=value))

    if not entries:
        raise MetadataError(f"failed to read exif: no EXIF data in {path}")

    logger.debug("read %s exif entries from %s", len(entries), path.name)
    return entries
