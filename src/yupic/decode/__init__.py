from .base import (
    BufferMismatchError,
    CapabilityDisabledError,
    DecodeError,
    DecodeFailedError,
    DecodeTaskError,
    EmptyDecodeError,
    FormatDetectionError,
    IoFailureError,
    MissingDependencyError,
    NotFoundError,
    PlaneLayoutUnsupportedError,
    UnsupportedChannelCountError,
    UnsupportedChannelLayoutError,
)
from .registry import DecoderRegistry, RAW_EXTENSIONS
from .types import DecodeRequest, DecodeResult, Frame

__all__ = [
    "BufferMismatchError",
    "CapabilityDisabledError",
    "DecodeError",
    "DecodeFailedError",
    "DecodeTaskError",
    "EmptyDecodeError",
    "FormatDetectionError",
    "IoFailureError",
    "MissingDependencyError",
    "NotFoundError",
    "PlaneLayoutUnsupportedError",
    "UnsupportedChannelCountError",
    "UnsupportedChannelLayoutError",
    "DecoderRegistry",
    "RAW_EXTENSIONS",
    "DecodeRequest",
    "DecodeResult",
    "Frame",
]
