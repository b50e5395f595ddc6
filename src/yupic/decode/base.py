from __future__ import annotations

from pathlib import Path
from typing import Protocol

from .types import Frame


class DecodeError(RuntimeError):
    kind = "decode_error"


class NotFoundError(DecodeError):
    kind = "not_found"


class DecodeFailedError(DecodeError):
    kind = "decode_failed"


class IoFailureError(DecodeFailedError):
    kind = "io_failure"


class FormatDetectionError(DecodeFailedError):
    kind = "format_detection_failed"


class CapabilityDisabledError(DecodeError):
    kind = "capability_disabled"


class EmptyDecodeError(DecodeError):
    kind = "empty_decode"


class PlaneLayoutUnsupportedError(DecodeError):
    kind = "plane_layout_unsupported"


class UnsupportedChannelLayoutError(DecodeError):
    kind = "unsupported_channel_layout"


class UnsupportedChannelCountError(DecodeError):
    kind = "unsupported_channel_count"

    def __init__(self, count: int, message: str | None = None) -> None:
        self.count = int(count)
        super().__init__(message or f"unsupported RAW cpp={self.count} (only mono or rgb supported)")


class BufferMismatchError(DecodeError):
    kind = "buffer_mismatch"


class DecodeTaskError(DecodeError):
    kind = "task_failed"


class MissingDependencyError(DecodeError):
    kind = "missing_dependency"


class Decoder(Protocol):
    def decode(self, path: Path, max_dimension: int | None = None) -> tuple[list[Frame], str]:
        ...
